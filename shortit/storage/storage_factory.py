"""
Storage factory – switch storage backend from config
====================================================

Centralizes selection of the storage backend (in-memory vs PostgreSQL) so the
rest of the app can stay ignorant of where data lives.

- Reads environment **at call time** to avoid stale values in tests.
- Imports the DB backend **only if** the selected backend is "postgres".

Environment variables
---------------------
- SHORTIT_STORAGE_BACKEND: "memory" (default) or "postgres"
- SHORTIT_DB_DSN:          DSN string if backend=="postgres"
"""

import logging
import os
from typing import Optional

from shortit.storage.base import BaseStorage
from shortit.storage.storage import Storage

log = logging.getLogger(__name__)


def get_storage(backend: Optional[str] = None, **kwargs) -> BaseStorage:
    """
    Return a storage backend based on configuration.

    Parameters
    ----------
    backend : str, optional
        "memory" (default) or "postgres". If omitted, reads SHORTIT_STORAGE_BACKEND.
    kwargs : dict
        Extra args for the backend. For postgres: dsn="...", ensure_schema=True/False.
    """
    be = (backend or os.getenv("SHORTIT_STORAGE_BACKEND", "memory")).strip().lower()
    log.info("Selected storage backend: %r", be)

    if be == "memory":
        return Storage()

    if be == "postgres":
        dsn = kwargs.get("dsn") or os.getenv("SHORTIT_DB_DSN", "")
        if not dsn:
            raise ValueError("DB_DSN is required for postgres backend (env SHORTIT_DB_DSN)")
        from shortit.storage.db_storage import DBStorage

        storage = DBStorage(dsn=dsn)
        if kwargs.get("ensure_schema", False):
            storage.ensure_schema()
        return storage

    raise ValueError(f"Unknown storage backend: {be!r}")
