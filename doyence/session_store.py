"""
Session Store.

Provides an injectable ``SessionStore`` that holds the current session,
the user derived from it, the loaded profile and the loading flags for
the lifetime of one application mount.

Writers are the auth event listener (session) and the profile loader
(profile, role flags, loading); everything else reads snapshots.

Usage::

    store = SessionStore()
    unsubscribe = store.subscribe(lambda snap: print(snap.user_id))
    store.set_session(session)
    store.snapshot().has_session
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

from pydantic import BaseModel

from doyence.models.auth_models import AuthUser, SessionInfo
from doyence.models.profile import Profile


class StoreSnapshot(BaseModel):
    """Immutable view of the store at one point in time."""

    session: Optional[SessionInfo] = None
    user: Optional[AuthUser] = None
    profile: Optional[Profile] = None
    is_loading: bool = True
    initialized: bool = False
    is_admin: bool = False
    is_superuser: bool = False

    model_config = {"frozen": True}

    @property
    def has_session(self) -> bool:
        return self.session is not None

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user is not None else None


StoreListener = Callable[[StoreSnapshot], None]


class SessionStore:
    """In-memory holder of {session, user, profile, loading}.

    Each instance keeps its own state, so tests and multiple windows can
    each own a store.  Listeners are called after every change with the
    new snapshot, outside the internal lock.
    """

    def __init__(self) -> None:
        self._lock: threading.RLock = threading.RLock()
        self._session: Optional[SessionInfo] = None
        self._user: Optional[AuthUser] = None
        self._profile: Optional[Profile] = None
        self._is_loading: bool = True
        self._initialized: bool = False
        self._is_admin: bool = False
        self._is_superuser: bool = False
        self._listeners: list[StoreListener] = []

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def set_session(self, session: Optional[SessionInfo]) -> None:
        """Replace the session wholesale and derive the user from it.

        When the user changes (sign-out, or a different account signing
        in) the profile and role flags are cleared in the same step.  A
        new signed-in user also raises the loading flag, so no routing
        decision is taken until that user's profile has been resolved.
        """
        with self._lock:
            previous_id = self._user.id if self._user is not None else None
            self._session = session
            self._user = session.user if session is not None else None
            current_id = self._user.id if self._user is not None else None
            if current_id != previous_id:
                self._profile = None
                self._is_admin = False
                self._is_superuser = False
                if current_id is not None:
                    self._is_loading = True
        self._emit()

    def set_profile(self, profile: Optional[Profile]) -> None:
        with self._lock:
            self._profile = profile
        self._emit()

    def set_role_flags(self, is_admin: bool, is_superuser: bool) -> None:
        with self._lock:
            self._is_admin = is_admin
            self._is_superuser = is_superuser
        self._emit()

    def set_loading(self, loading: bool) -> None:
        """Gate routing until the pending session/profile check resolves."""
        with self._lock:
            if self._is_loading == loading:
                return
            self._is_loading = loading
        self._emit()

    def mark_initialized(self) -> None:
        """Record that the first session check has resolved."""
        with self._lock:
            if self._initialized:
                return
            self._initialized = True
        self._emit()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            return StoreSnapshot(
                session=self._session,
                user=self._user,
                profile=self._profile,
                is_loading=self._is_loading,
                initialized=self._initialized,
                is_admin=self._is_admin,
                is_superuser=self._is_superuser,
            )

    @property
    def session(self) -> Optional[SessionInfo]:
        with self._lock:
            return self._session

    @property
    def user(self) -> Optional[AuthUser]:
        with self._lock:
            return self._user

    @property
    def profile(self) -> Optional[Profile]:
        with self._lock:
            return self._profile

    @property
    def is_loading(self) -> bool:
        with self._lock:
            return self._is_loading

    @property
    def is_authenticated(self) -> bool:
        """``True`` while a session is held."""
        with self._lock:
            return self._session is not None

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def dispose(self) -> None:
        """Drop every listener.  The held state is left as is."""
        with self._lock:
            self._listeners.clear()

    def _emit(self) -> None:
        snap = self.snapshot()
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(snap)
