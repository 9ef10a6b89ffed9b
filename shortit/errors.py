"""
Error taxonomy for Shortit.

Every failure the allocator or a storage backend can report is a subclass of
`ShortitError`. Errors carry a stable `code` so the HTTP layer can pick a
status without the core knowing anything about transport.

    ValidationError            malformed/missing input, rejected before allocation
    NotFound                   identifier does not resolve to a record
    AliasConflict              custom alias already claimed by another record
    UniqueConstraintViolation  storage-level uniqueness backstop fired (an AliasConflict)
    StorageUnavailable         backend cannot be reached; not retried
"""

from typing import Optional


class ShortitError(Exception):
    """Base class for all Shortit errors."""

    code = "error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class ValidationError(ShortitError, ValueError):
    code = "validation_error"


class NotFound(ShortitError):
    code = "not_found"


class AliasConflict(ShortitError):
    code = "alias_conflict"


class UniqueConstraintViolation(AliasConflict):
    """Raised by storage when an insert/update would break I1 or I2.

    `field` names the violated uniqueness domain ("alias" or "custom_alias").
    Callers treat this exactly like AliasConflict.
    """

    code = "unique_constraint_violation"

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"Duplicate value for {field}")
        self.field = field


class StorageUnavailable(ShortitError):
    code = "storage_unavailable"
