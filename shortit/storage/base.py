"""
Base storage interface for Shortit.

Purpose:
    Define a small, stable contract that multiple storage backends
    (in-memory, PostgreSQL, a document store) can implement without requiring
    changes to the allocator.

Contract:
    - Lookups are exact-match on the stated field; no partial or fuzzy matching.
    - `insert` and `update` must enforce alias uniqueness (I1) and custom-alias
      uniqueness (I2) atomically at write time, raising
      `UniqueConstraintViolation`. The allocator's own pre-checks are only a
      fast path for friendly errors; this is the real guard.
    - `update` and `delete` raise `NotFound` for unknown ids. `find_by_id`
      returns None for unknown or malformed ids.
    - A backend that cannot be reached raises `StorageUnavailable`.

Testing & Coverage:
    These are abstract methods and are not executed directly in tests.
    We annotate them with `# pragma: no cover` so coverage tools don't
    penalize the project for un-runnable abstract declarations.

LLM Prompt Example:
    "Show how a narrow storage interface with write-time uniqueness lets
    several stateless allocators share one backend safely."
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..models import AliasRecord

# Fields a patch passed to `update` may touch.
PATCHABLE_FIELDS = frozenset({"destination_url", "alias", "custom_alias"})


class BaseStorage(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod  # pragma: no cover
    def find_by_destination(self, url: str) -> Optional[AliasRecord]:
        """Return the record whose destination_url equals `url`, if any."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def find_by_custom_alias(self, token: str, exclude_id: Optional[str] = None) -> Optional[AliasRecord]:
        """
        Return a record whose custom_alias equals `token`.

        When `exclude_id` is given, the record with that id is ignored, so an
        update can keep its own custom alias.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def find_by_alias(self, alias: str) -> Optional[AliasRecord]:
        """Return the record carrying the full `alias` (prefix included)."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def find_by_id(self, record_id: str) -> Optional[AliasRecord]:
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def insert(self, destination_url: str, alias: str, custom_alias: Optional[str] = None) -> AliasRecord:
        """
        Persist a new record and return it with its storage-assigned id.

        Raises:
            UniqueConstraintViolation: alias or custom_alias already taken.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def update(self, record_id: str, patch: Dict[str, Any]) -> AliasRecord:
        """
        Apply `patch` (subset of PATCHABLE_FIELDS) as one atomic write.

        Raises:
            NotFound: unknown id.
            UniqueConstraintViolation: the patch would break I1/I2.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def delete(self, record_id: str) -> AliasRecord:
        """Remove a record and return its final state. Raises NotFound."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def list_all(self) -> List[AliasRecord]:
        raise NotImplementedError


def check_patch(patch: Dict[str, Any]) -> None:
    """Reject patch keys outside PATCHABLE_FIELDS."""
    unknown = set(patch) - PATCHABLE_FIELDS
    if unknown:
        raise ValueError(f"Unsupported patch fields: {sorted(unknown)}")
