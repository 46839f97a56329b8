"""
Navigation.

Maps the session/profile state to the route the visitor belongs on.

- :func:`decide` is the pure transition function over
  ``(has_session, profile)``.
- :class:`Router` holds the current location and history and offers
  push/replace.
- :class:`NavigationDecider` watches the store and the router and issues
  ``replace`` redirects whenever the computed state differs from the
  state the current route implies.  It also owns the one-shot exchange
  of a magic-link fragment (``#access_token=...``) for a session.
"""

from __future__ import annotations

from typing import Callable, Final, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel

from doyence.auth_events import AuthEventListener
from doyence.logger import StructuredLogger
from doyence.models.auth_models import AuthResult
from doyence.models.enums import NavState
from doyence.models.profile import Profile
from doyence.notifications import Notifier
from doyence.scheduler import Scheduler
from doyence.services.auth_service import AuthService
from doyence.session_store import SessionStore, StoreSnapshot


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

ROOT_PATH: Final[str] = "/"
LOGIN_PATH: Final[str] = "/login"
PROFILE_SETUP_PATH: Final[str] = "/profile-setup"
DASHBOARD_PATH: Final[str] = "/dashboard"

AUTH_ROUTES: Final[frozenset[str]] = frozenset({"/login", "/register", "/signup"})
ONBOARDING_ROUTES: Final[frozenset[str]] = frozenset({PROFILE_SETUP_PATH})
APP_ROUTES: Final[frozenset[str]] = frozenset({
    DASHBOARD_PATH,
    "/settings",
    "/customers",
    "/estimates",
    "/admin",
})
PUBLIC_ROUTES: Final[frozenset[str]] = frozenset({ROOT_PATH, "/verify"})

CANONICAL_ROUTE: Final[dict[NavState, str]] = {
    NavState.NEEDS_LOGIN: LOGIN_PATH,
    NavState.NEEDS_PROFILE_SETUP: PROFILE_SETUP_PATH,
    NavState.DASHBOARD: DASHBOARD_PATH,
}


def decide(has_session: bool, profile: Optional[Profile]) -> NavState:
    """Return where a visitor belongs, by priority:

    1. no session: needs-login
    2. no profile, or neither first nor last name filled in:
       needs-profile-setup (even when ``profile_completed`` is set)
    3. ``profile_completed``: dashboard
    4. otherwise: needs-profile-setup
    """
    if not has_session:
        return NavState.NEEDS_LOGIN
    if profile is None or not profile.has_name:
        return NavState.NEEDS_PROFILE_SETUP
    if profile.profile_completed is True:
        return NavState.DASHBOARD
    return NavState.NEEDS_PROFILE_SETUP


def implied_state(path: str) -> Optional[NavState]:
    """State a guarded route implies; ``None`` for public or unknown paths."""
    if path in AUTH_ROUTES:
        return NavState.NEEDS_LOGIN
    if path in ONBOARDING_ROUTES:
        return NavState.NEEDS_PROFILE_SETUP
    if path in APP_ROUTES:
        return NavState.DASHBOARD
    return None


def is_known_route(path: str) -> bool:
    return path in PUBLIC_ROUTES or implied_state(path) is not None


def target_route(path: str, state: NavState) -> Optional[str]:
    """Route to redirect to from *path* in *state*, or ``None`` to stay."""
    if path in PUBLIC_ROUTES:
        return None
    implied = implied_state(path)
    if implied is None:
        return ROOT_PATH
    if implied == state:
        return None
    return CANONICAL_ROUTE[state]


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------

class Location(BaseModel):
    """Path, query and fragment of the current in-app URL."""

    path: str = ROOT_PATH
    query: str = ""
    fragment: str = ""

    model_config = {"frozen": True}

    @classmethod
    def parse(cls, url: str) -> "Location":
        parts = urlsplit(url)
        return cls(path=parts.path or ROOT_PATH, query=parts.query, fragment=parts.fragment)

    @property
    def url(self) -> str:
        url = self.path
        if self.query:
            url += f"?{self.query}"
        if self.fragment:
            url += f"#{self.fragment}"
        return url


LocationListener = Callable[[Location], None]


class Router:
    """In-app location with push/replace history.

    Lives on the UI thread only.
    """

    def __init__(self, initial_url: str = ROOT_PATH) -> None:
        self._history: list[Location] = [Location.parse(initial_url)]
        self._listeners: list[LocationListener] = []

    @property
    def location(self) -> Location:
        return self._history[-1]

    @property
    def history(self) -> list[Location]:
        return list(self._history)

    def push(self, url: str) -> None:
        self._history.append(Location.parse(url))
        self._emit()

    def replace(self, url: str) -> None:
        """Swap the current entry without growing history."""
        self._history[-1] = Location.parse(url)
        self._emit()

    def subscribe(self, listener: LocationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self) -> None:
        location = self.location
        for listener in list(self._listeners):
            listener(location)


# ---------------------------------------------------------------------------
# Decider
# ---------------------------------------------------------------------------

class NavigationDecider:
    """Keeps the router on the route the session/profile state calls for.

    Parameters
    ----------
    store:
        Session store (read only).
    router:
        Router to inspect and redirect.
    auth_service:
        Performs the magic-link fragment exchange.
    listener:
        Receives the exchanged session via ``adopt_session``.
    scheduler:
        Runs the exchange off the UI thread.
    notifier:
        Toast channel for unexpected exchange failures.
    logger:
        Structured logger.
    """

    def __init__(
        self,
        store: SessionStore,
        router: Router,
        auth_service: AuthService,
        listener: AuthEventListener,
        scheduler: Scheduler,
        notifier: Notifier,
        logger: StructuredLogger,
    ) -> None:
        self._store = store
        self._router = router
        self._auth_service = auth_service
        self._listener = listener
        self._scheduler = scheduler
        self._notifier = notifier
        self._logger = logger

        self._active = False
        self._evaluating = False
        self._dirty = False
        self._exchanging = False
        self._post_exchange = False
        self._unsubscribers: list[Callable[[], None]] = []

    @property
    def exchanging(self) -> bool:
        """``True`` while a magic-link fragment is being exchanged."""
        return self._exchanging

    def start(self) -> None:
        if self._active:
            return
        self._active = True
        self._unsubscribers = [
            self._store.subscribe(self._on_store_change),
            self._router.subscribe(self._on_location_change),
        ]
        self.evaluate()

    def stop(self) -> None:
        self._active = False
        self._post_exchange = False
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def _on_store_change(self, _snap: StoreSnapshot) -> None:
        self.evaluate()

    def _on_location_change(self, _location: Location) -> None:
        self.evaluate()

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(self) -> None:
        """Re-run the routing rules against the latest store state.

        Redirects issued here notify the router's listeners, this one
        included; those nested calls are folded into another pass of the
        outer loop instead of recursing.
        """
        if not self._active:
            return
        if self._evaluating:
            self._dirty = True
            return

        self._evaluating = True
        try:
            self._dirty = True
            while self._dirty and self._active:
                self._dirty = False
                self._evaluate_once()
        finally:
            self._evaluating = False

    def _evaluate_once(self) -> None:
        # Always read the store afresh; a notification may carry an
        # outdated snapshot when writes happen inside other listeners.
        snap = self._store.snapshot()
        if not snap.initialized or self._exchanging:
            return

        location = self._router.location
        if AuthService.fragment_has_tokens(location.fragment):
            self._begin_exchange(location)
            return

        if snap.is_loading:
            return

        state = decide(snap.has_session, snap.profile)
        if self._post_exchange and location.path in PUBLIC_ROUTES:
            # A magic link landed on a public page; send the user on.
            target: Optional[str] = CANONICAL_ROUTE[state]
        else:
            target = target_route(location.path, state)
        self._post_exchange = False
        if target is None or target == location.path:
            return

        self._logger.info(
            "Redirect %s -> %s (%s)", location.path, target, state,
            extra={"event": "NAVIGATE", "state": str(state)},
        )
        self._router.replace(target)

    # ------------------------------------------------------------------
    # Magic-link fragment
    # ------------------------------------------------------------------

    def _begin_exchange(self, location: Location) -> None:
        fragment = location.fragment
        self._exchanging = True
        self._logger.info(
            "Magic-link fragment detected on %s", location.path,
            extra={"event": "FRAGMENT_DETECTED"},
        )

        # Clear the fragment first so it can never be picked up again.
        cleared = Location(path=location.path, query=location.query)
        self._router.replace(cleared.url)

        self._scheduler.run_in_background(
            lambda: self._auth_service.exchange_session_fragment(fragment),
            self._on_exchanged,
            self._on_exchange_error,
        )

    def _on_exchanged(self, result: AuthResult) -> None:
        if not self._active:
            return
        self._exchanging = False
        if result.success and result.session is not None:
            self._post_exchange = True
            self._listener.adopt_session(result.session)
        self.evaluate()

    def _on_exchange_error(self, exc: Exception) -> None:
        if not self._active:
            return
        self._exchanging = False
        self._logger.error(
            "Magic-link exchange crashed: %s", exc,
            extra={"event": "FRAGMENT_EXCHANGE_FAILED"},
        )
        self._notifier.error("Sign-in link failed", str(exc) or None)
        self.evaluate()
