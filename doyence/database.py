"""
Backend Connection Layer.

Owns the single Supabase client for the process.  The client carries both
the identity provider (``client.auth``) and the data store
(``client.table(...)`` / ``client.rpc(...)``).

Data access goes through repositories and ``IdentityProvider``; this
module only manages the connection.

Usage (dependency injection at app startup)::

    from doyence.database import DatabaseManager
    from doyence.logger import StructuredLogger

    db = DatabaseManager(
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        logger=StructuredLogger(name="database"),
    )
"""

from __future__ import annotations

from typing import Optional

from supabase import Client as SupabaseClient
from supabase import create_client

from doyence.logger import StructuredLogger


class BackendUnavailableError(RuntimeError):
    """Raised when the Supabase client could not be created."""


class DatabaseManager:
    """Holds the Supabase client, configured at construction time.

    When ``supabase_url`` or ``supabase_key`` is empty the client is
    **not** created; every access through :pyattr:`supabase` then raises
    :class:`BackendUnavailableError`, which the auth and profile layers
    report as a transport failure.

    Parameters
    ----------
    supabase_url:
        The Supabase project URL (e.g. ``https://xyz.supabase.co``).
    supabase_key:
        The project's anonymous key.
    logger:
        A ``StructuredLogger`` instance for structured JSON log output.
    """

    def __init__(
        self,
        supabase_url: str,
        supabase_key: str,
        logger: StructuredLogger,
    ) -> None:
        self._logger: StructuredLogger = logger
        self._supabase: Optional[SupabaseClient] = None

        if supabase_url and supabase_key:
            try:
                self._supabase = create_client(supabase_url, supabase_key)
                self._logger.info("Supabase client initialized.")
            except (ValueError, TypeError) as exc:
                self._logger.warning(
                    "Supabase credential format error: %s.", exc,
                )
            except Exception as exc:
                self._logger.error(
                    "Unexpected Supabase initialization failure: %s.",
                    exc,
                    exc_info=True,
                )
        else:
            self._logger.warning("Supabase credentials not configured.")

    @property
    def supabase(self) -> SupabaseClient:
        """Return the initialised Supabase client.

        Raises
        ------
        BackendUnavailableError
            If the client was not initialised.
        """
        if self._supabase is None:
            raise BackendUnavailableError(
                "Supabase client is not initialised. "
                "Check SUPABASE_URL and SUPABASE_ANON_KEY."
            )
        return self._supabase

    @property
    def is_configured(self) -> bool:
        """``True`` when the Supabase client is available."""
        return self._supabase is not None
