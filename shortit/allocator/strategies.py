"""
Strategies for alias token generation in shortit.

Provided strategies:
- RandomStrategy: random Base62 token of length L (default 5), independent of any counter
- SHA256Strategy: deterministic SHA-256(url|attempt) -> Base62 -> truncate to L

Common helpers:
- _base62_encode: non-negative integer -> Base62 string
- _safe_len: resolve/normalize desired token length from argument/config (clamped to [4, 32])

Configuration (via shortit.config.settings):
- TOKEN_STRATEGY: "random" (default) or "sha256"
- TOKEN_LENGTH: default token length (5)

Notes:
- Both strategies draw from the same fixed 62-symbol alphabet, so generated
  tokens and custom aliases live in one namespace.
- The `attempt` argument lets the allocator ask for a different token after a
  collision. RandomStrategy ignores it; SHA256Strategy rehashes with it.
"""

import hashlib
import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Type

from shortit.config import settings

log = logging.getLogger(__name__)

ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
_BASE = len(ALPHABET)


def _base62_encode(num: int) -> str:
    """
    Convert a non-negative integer to a Base62 string using ALPHABET.
    0 -> "0", 61 -> "z", 62 -> "10"
    """
    if num < 0:
        raise ValueError("num must be non-negative")
    if num == 0:
        return ALPHABET[0]
    out = []
    while num > 0:
        num, rem = divmod(num, _BASE)
        out.append(ALPHABET[rem])
    return "".join(reversed(out))


def _safe_len(length: Optional[int]) -> int:
    """Resolve desired token length from arg or config, clamped to [4, 32]."""
    L = int(length) if length is not None else int(settings.TOKEN_LENGTH)
    return max(4, min(32, L))


class BaseStrategy(ABC):
    """Abstract base for token generation strategies."""

    @abstractmethod
    def generate(self, url: str, *, length: Optional[int] = None, attempt: int = 0) -> str:
        """
        Generate a token for the given destination URL.
        - length: desired token length
        - attempt: 0 on the first try, incremented after each collision
        """
        raise NotImplementedError

    def __call__(self, url: str, *, length: Optional[int] = None, attempt: int = 0) -> str:
        return self.generate(url, length=length, attempt=attempt)


@dataclass(frozen=True)
class RandomStrategy(BaseStrategy):
    """Random Base62 tokens; rely on storage-level uniqueness plus bounded retry."""

    def generate(self, url: str, *, length: Optional[int] = None, attempt: int = 0) -> str:
        L = _safe_len(length)
        rng = random.SystemRandom()
        return "".join(rng.choice(ALPHABET) for _ in range(L))


@dataclass(frozen=True)
class SHA256Strategy(BaseStrategy):
    """Deterministic SHA-256 -> Base62 -> truncate strategy."""

    def generate(self, url: str, *, length: Optional[int] = None, attempt: int = 0) -> str:
        L = _safe_len(length)
        payload = url if attempt == 0 else f"{url}|{attempt}"
        digest = hashlib.sha256(payload.encode("utf-8")).digest()
        num = int.from_bytes(digest, "big", signed=False)
        return _base62_encode(num)[:L]


# Strategy registry and factory
STRATEGY_REGISTRY: Dict[str, Type[BaseStrategy]] = {
    "random": RandomStrategy,
    "rand": RandomStrategy,
    "sha256": SHA256Strategy,
    "sha-256": SHA256Strategy,
    "deterministic": SHA256Strategy,
}


def get_strategy_from_config(name: Optional[str] = None) -> BaseStrategy:
    """
    Resolve the active strategy from parameter or settings.TOKEN_STRATEGY.
    Unknown names fall back to "random".
    """
    key = (name or settings.TOKEN_STRATEGY or "random").strip().lower()
    cls = STRATEGY_REGISTRY.get(key)
    if cls is None:
        log.warning("Unknown token strategy %r, falling back to random", key)
        cls = RandomStrategy
    log.debug("Using token strategy: %s -> %s", key, cls.__name__)
    return cls()
