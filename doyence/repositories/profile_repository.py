"""
Profile Repository.

Data access for the ``profiles`` table and the role RPCs.  Rows are
validated into ``Profile`` here so nothing above this layer sees a raw
dict.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from doyence.database import DatabaseManager
from doyence.logger import StructuredLogger
from doyence.models.profile import Profile
from doyence.repositories.base_repository import BaseRepository


class ProfileRepository(BaseRepository):
    """Reads and updates ``profiles`` rows keyed by the auth user id."""

    TABLE = "profiles"

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        super().__init__(db, logger)

    def get_by_id(self, user_id: str) -> Optional[Profile]:
        """Fetch exactly one profile row.

        Returns ``None`` when no row exists.

        Raises
        ------
        ProfileDataError
            If the row is malformed.
        """
        response = (
            self.supabase.table(self.TABLE)
            .select("*")
            .eq("id", user_id)
            .maybe_single()
            .execute()
        )
        row = self._data_of(response)
        if not row:
            return None
        return Profile.from_row(row)

    def update(self, user_id: str, values: dict[str, Any]) -> None:
        """Write *values* to the user's row, stamping ``updated_at``."""
        payload = dict(values)
        payload["updated_at"] = datetime.now(timezone.utc).isoformat()
        self.supabase.table(self.TABLE).update(payload).eq("id", user_id).execute()
        self._logger.info(
            "Profile updated.",
            extra={"event": "PROFILE_UPDATED", "user_id": user_id},
        )

    def get_company_id(self, user_id: str) -> Optional[str]:
        """Return the company the user belongs to, or ``None``."""
        try:
            response = (
                self.supabase.table(self.TABLE)
                .select("company_id")
                .eq("id", user_id)
                .single()
                .execute()
            )
        except Exception as exc:
            if self._is_no_rows(exc):
                return None
            raise
        row = self._data_of(response) or {}
        return row.get("company_id") or None

    def is_admin(self) -> bool:
        """Ask the backend whether the signed-in user is an admin."""
        return bool(self._data_of(self.supabase.rpc("is_admin").execute()))

    def is_superuser(self) -> bool:
        return bool(self._data_of(self.supabase.rpc("is_superuser").execute()))
