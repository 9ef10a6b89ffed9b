"""
AliasAllocator module for Shortit.

Responsibilities:
    - Decide the alias for every (destination URL, optional custom alias) request
    - Dedupe by destination on create: a known URL gets its existing alias back
    - Keep alias and custom-alias uniqueness consistent on create and update
    - Retry generated tokens a bounded number of times on storage collisions
    - Pure reads: resolve by id, lookup by token, list

Design notes:
    - The allocator holds no shared mutable state. Uniqueness lives in storage,
      so any number of allocators may run against one backend.
    - Custom-alias pre-checks are a fast path for friendly errors. The storage
      write is what actually guarantees uniqueness under concurrent writers.
    - Update deliberately skips the destination dedup that create applies.
    - Token generation is pluggable; the default strategy comes from
      settings.TOKEN_STRATEGY.

LLM Prompt Example:
    "Explain why a check-then-insert flow for custom aliases still needs a
    unique index underneath it, and how bounded retry handles random token
    collisions without any shared in-process state."
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..config import settings
from ..errors import AliasConflict, NotFound, UniqueConstraintViolation
from ..models import AliasRecord
from ..storage.base import BaseStorage
from .strategies import get_strategy_from_config

log = logging.getLogger(__name__)

_WHITESPACE_RUN = re.compile(r"\s+")

TokenStrategy = Callable[..., str]  # (url, *, length, attempt) -> token

CREATED = "created"
ALREADY_EXISTS = "already exists"
UPDATED = "updated"
DELETED = "deleted"
FOUND = "found"


@dataclass(frozen=True)
class AllocationResult:
    """Outcome of an allocator call: a status string plus the record involved."""

    status: str
    record: AliasRecord

    @property
    def created(self) -> bool:
        return self.status == CREATED


def normalize(raw_alias: Optional[str]) -> Optional[str]:
    """
    Turn a caller-supplied alias into a token.

    Leading/trailing whitespace is dropped and every inner whitespace run
    becomes a single hyphen: "my  alias" -> "my-alias". Empty or
    whitespace-only input gives None, which means "generate one".
    Idempotent: normalize(normalize(x)) == normalize(x).
    """
    if raw_alias is None:
        return None
    token = _WHITESPACE_RUN.sub("-", raw_alias.strip())
    return token or None


class AliasAllocator:
    """
    Coordinates alias creation, edits and reads against a storage backend.
    """

    def __init__(
        self,
        storage: BaseStorage,
        token_strategy: Optional[TokenStrategy] = None,
        prefix: Optional[str] = None,
        token_length: Optional[int] = None,
        max_attempts: Optional[int] = None,
    ):
        """
        Args:
            storage (BaseStorage): Backend enforcing the uniqueness constraints.
            token_strategy (Optional[TokenStrategy]): Token generator; defaults to the configured strategy.
            prefix (Optional[str]): Fixed alias prefix; defaults to settings.ALIAS_PREFIX.
            token_length (Optional[int]): Generated token length; defaults to settings.TOKEN_LENGTH.
            max_attempts (Optional[int]): Insert attempts for generated tokens; defaults to settings.TOKEN_ATTEMPTS.
        """
        self.storage = storage
        self.token_strategy = token_strategy or get_strategy_from_config()
        self.prefix = (prefix if prefix is not None else settings.ALIAS_PREFIX).rstrip("/")
        self.token_length = token_length or settings.TOKEN_LENGTH
        self.max_attempts = max(1, max_attempts or settings.TOKEN_ATTEMPTS)

    # ---------------------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------------------
    def compose(self, token: str) -> str:
        """Build the full alias: prefix + "/" + token."""
        return f"{self.prefix}/{token}"

    def _generate(self, url: str, attempt: int) -> str:
        return self.token_strategy(url, length=self.token_length, attempt=attempt)

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    def create(self, destination_url: str, raw_custom_alias: Optional[str] = None) -> AllocationResult:
        """
        Create (or reuse) the alias for a destination URL.

        Rules:
            - Destination already stored -> return that record untouched,
              even when a different custom alias was requested.
            - Custom alias supplied and already claimed -> AliasConflict.
            - Otherwise insert with the custom token or a generated one.
              Generated tokens are retried up to `max_attempts` times when
              storage reports an alias collision.

        Raises:
            AliasConflict: custom alias already claimed.
            UniqueConstraintViolation: storage rejected the write (lost race,
                or generated tokens kept colliding).
        """
        existing = self.storage.find_by_destination(destination_url)
        if existing is not None:
            log.info("Destination already shortened: %s -> %s", destination_url, existing.alias)
            return AllocationResult(ALREADY_EXISTS, existing)

        token = normalize(raw_custom_alias)
        if token is not None:
            if self.storage.find_by_custom_alias(token) is not None:
                log.info("Custom alias %r already in use", token)
                raise AliasConflict(f"Custom alias {token!r} already in use")
            record = self.storage.insert(destination_url, self.compose(token), custom_alias=token)
            log.info("Created custom alias %s -> %s", record.alias, destination_url)
            return AllocationResult(CREATED, record)

        last_error: Optional[UniqueConstraintViolation] = None
        for attempt in range(self.max_attempts):
            alias = self.compose(self._generate(destination_url, attempt))
            try:
                record = self.storage.insert(destination_url, alias, custom_alias=None)
            except UniqueConstraintViolation as exc:
                if exc.field != "alias":
                    raise
                log.warning("Generated alias %s collided (attempt %d/%d)", alias, attempt + 1, self.max_attempts)
                last_error = exc
                continue
            log.info("Created alias %s -> %s", record.alias, destination_url)
            return AllocationResult(CREATED, record)

        log.error("Gave up generating an alias for %s after %d attempts", destination_url, self.max_attempts)
        raise last_error or UniqueConstraintViolation("alias")

    def update(
        self,
        record_id: str,
        new_destination_url: Optional[str] = None,
        new_raw_custom_alias: Optional[str] = None,
    ) -> AllocationResult:
        """
        Edit a record's destination and/or custom alias in one atomic write.

        No destination dedup happens here: an update may point two records at
        the same URL. A rejected request leaves the stored record untouched.

        Raises:
            NotFound: unknown id.
            AliasConflict: another record already owns the custom alias.
        """
        if self.storage.find_by_id(record_id) is None:
            raise NotFound(f"No record with id {record_id!r}")

        patch = {}
        if new_destination_url:
            patch["destination_url"] = new_destination_url

        token = normalize(new_raw_custom_alias)
        if token is not None:
            if self.storage.find_by_custom_alias(token, exclude_id=record_id) is not None:
                log.info("Custom alias %r already in use; update of %s rejected", token, record_id)
                raise AliasConflict(f"Custom alias {token!r} already in use")
            patch["custom_alias"] = token
            patch["alias"] = self.compose(token)

        record = self.storage.update(record_id, patch)
        log.info("Updated %s: %s", record_id, sorted(patch))
        return AllocationResult(UPDATED, record)

    def delete(self, record_id: str) -> AllocationResult:
        """Remove a record; the result carries a snapshot of what was deleted."""
        record = self.storage.delete(record_id)
        log.info("Deleted %s (%s)", record_id, record.alias)
        return AllocationResult(DELETED, record)

    def resolve(self, record_id: str) -> AllocationResult:
        record = self.storage.find_by_id(record_id)
        if record is None:
            raise NotFound(f"No record with id {record_id!r}")
        return AllocationResult(FOUND, record)

    def lookup(self, token: str) -> AllocationResult:
        """Find the record behind a short token (the part after the prefix)."""
        record = self.storage.find_by_alias(self.compose(token))
        if record is None:
            raise NotFound(f"No alias {token!r}")
        return AllocationResult(FOUND, record)

    def list(self) -> List[AliasRecord]:
        return self.storage.list_all()
