"""
Profile Loader.

Keeps ``SessionStore.profile`` in step with the signed-in user.  Whenever
the store's user id changes the loader fetches that user's ``profiles``
row in the background and writes the normalised result back.

Results that arrive after the user changed again, or after the loader
was stopped, are dropped.
"""

from __future__ import annotations

from typing import Callable, Optional

from doyence.logger import StructuredLogger
from doyence.models.profile import Profile, ProfileDataError
from doyence.notifications import Notifier
from doyence.repositories.profile_repository import ProfileRepository
from doyence.scheduler import Scheduler
from doyence.services.base_service import BaseService
from doyence.session_store import SessionStore, StoreSnapshot


class ProfileLoader(BaseService):
    """Loads the profile for the current user into the session store.

    Parameters
    ----------
    repo:
        Profile repository (``profiles`` table and role RPCs).
    store:
        Session store observed for user changes and written with results.
    scheduler:
        Runs fetches off the UI thread.
    notifier:
        Toast channel for "Failed to load profile".
    logger:
        Structured logger.
    """

    def __init__(
        self,
        repo: ProfileRepository,
        store: SessionStore,
        scheduler: Scheduler,
        notifier: Notifier,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger, notifier)
        self._repo = repo
        self._store = store
        self._scheduler = scheduler
        self._active = False
        self._last_user_id: Optional[str] = None
        # Bumped on every load; a result is applied only if it still matches.
        self._generation = 0
        self._unsubscribe: Optional[Callable[[], None]] = None

    def start(self) -> None:
        if self._active:
            return
        self._active = True
        self._unsubscribe = self._store.subscribe(self._on_store_change)
        self._on_store_change(self._store.snapshot())

    def stop(self) -> None:
        self._active = False
        self._generation += 1
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # ------------------------------------------------------------------
    # Store observer
    # ------------------------------------------------------------------

    def _on_store_change(self, snap: StoreSnapshot) -> None:
        if not self._active:
            return
        user_id = snap.user_id
        if user_id == self._last_user_id:
            return
        self._last_user_id = user_id

        if user_id is None:
            # Signed out: anything still in flight belongs to the old user.
            self._generation += 1
            return
        self.load(user_id)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, user_id: str) -> None:
        """Fetch *user_id*'s profile and write it to the store.

        Raises
        ------
        ValueError
            If *user_id* is not a non-empty string.
        """
        if not isinstance(user_id, str) or not user_id.strip():
            raise ValueError("user_id must be a non-empty string")

        self._generation += 1
        generation = self._generation
        self._store.set_loading(True)
        self._logger.debug("Loading profile for %s", user_id)

        self._scheduler.run_in_background(
            lambda: self._repo.get_by_id(user_id),
            lambda profile: self._apply_profile(generation, user_id, profile),
            lambda exc: self._apply_error(generation, user_id, exc),
        )

    def refresh(self) -> None:
        """Re-fetch the profile of the user currently in the store."""
        user_id = self._store.snapshot().user_id
        if user_id is None:
            self._logger.debug("Profile refresh skipped: nobody is signed in.")
            return
        self.load(user_id)

    def _is_stale(self, generation: int) -> bool:
        return not self._active or generation != self._generation

    def _apply_profile(
        self, generation: int, user_id: str, profile: Optional[Profile]
    ) -> None:
        if self._is_stale(generation):
            self._logger.debug("Dropping stale profile result for %s", user_id)
            return

        if profile is None:
            self._logger.info(
                "No profile row for user.",
                extra={"event": "PROFILE_MISSING", "user_id": user_id},
            )
        self._store.set_profile(profile)
        self._store.set_loading(False)
        self._load_role_flags(generation, user_id)

    def _apply_error(self, generation: int, user_id: str, exc: Exception) -> None:
        if self._is_stale(generation):
            self._logger.debug("Dropping stale profile error for %s", user_id)
            return

        if isinstance(exc, ProfileDataError):
            self._logger.error(
                "Malformed profile row: %s", exc,
                extra={"event": "PROFILE_INVALID", "user_id": user_id},
            )
        else:
            self._logger.error(
                "Error fetching profile: %s", exc,
                extra={"event": "PROFILE_FETCH_FAILED", "user_id": user_id},
            )
        self._notifier.error("Failed to load profile", str(exc) or None)
        self._store.set_loading(False)

    # ------------------------------------------------------------------
    # Role flags
    # ------------------------------------------------------------------

    def _load_role_flags(self, generation: int, user_id: str) -> None:
        def _fetch() -> tuple[bool, bool]:
            return self._repo.is_admin(), self._repo.is_superuser()

        def _apply(flags: tuple[bool, bool]) -> None:
            if self._is_stale(generation):
                return
            self._store.set_role_flags(*flags)

        def _failed(exc: Exception) -> None:
            self._logger.warning(
                "Could not fetch role flags: %s", exc,
                extra={"event": "ROLE_FLAGS_FAILED", "user_id": user_id},
            )

        self._scheduler.run_in_background(_fetch, _apply, _failed)
