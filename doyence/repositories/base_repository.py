"""
Base Repository.

Provides shared infrastructure for all repositories:
- DatabaseManager reference (Supabase)
- Logger reference
- Recognition of PostgREST's "no rows" error
"""

from __future__ import annotations

from typing import Any

from supabase import Client as SupabaseClient

from doyence.database import DatabaseManager
from doyence.logger import StructuredLogger

# PostgREST error code returned by ``.single()`` when the filter matched
# nothing.  It means "absent", not "failed".
NO_ROWS_CODE: str = "PGRST116"


class BaseRepository:
    """Base class for all repositories. Receives dependencies via __init__."""

    TABLE: str = ""

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        self._db = db
        self._logger = logger

    @property
    def supabase(self) -> SupabaseClient:
        """Returns the Supabase client (raises if unconfigured)."""
        return self._db.supabase

    @staticmethod
    def _is_no_rows(exc: Exception) -> bool:
        code = getattr(exc, "code", None)
        return code == NO_ROWS_CODE or NO_ROWS_CODE in str(exc)

    @staticmethod
    def _data_of(response: Any) -> Any:
        """Return ``response.data``, tolerating a ``None`` response.

        ``maybe_single()`` yields ``None`` instead of a response object
        when no row matched.
        """
        if response is None:
            return None
        return response.data
