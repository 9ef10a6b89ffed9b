"""
AliasRecord: the sole entity of Shortit.

Storage backends hand these out as immutable snapshots; mutation happens only
through `BaseStorage.update`, which returns a fresh record.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AliasRecord:
    id: str
    destination_url: str
    alias: str
    custom_alias: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)

    def with_changes(self, **changes: Any) -> "AliasRecord":
        """Return a copy with `changes` applied; `id` and `created_at` never change."""
        changes.pop("id", None)
        changes.pop("created_at", None)
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON view used by the HTTP layer.

        Keys keep the wire names clients already know:
        originalUrl, shortUrl, customName, createdAt.
        """
        return {
            "id": self.id,
            "originalUrl": self.destination_url,
            "shortUrl": self.alias,
            "customName": self.custom_alias,
            "createdAt": self.created_at.isoformat(),
        }
