"""
Auth Event Listener.

Bridges the identity provider's auth-state notifications into the
``SessionStore``.

On :meth:`AuthEventListener.start` the listener first subscribes to the
provider's event stream and then performs the one-shot session check, so
no event emitted in between is lost.  Every provider callback is handed
to :meth:`AuthEventListener._defer_event`, which re-dispatches it on the
next scheduler tick: nothing touches the store, and no further auth call
is made, from inside the provider's own callback.
"""

from __future__ import annotations

import threading
from typing import Callable, Optional, Protocol

from doyence.identity import IdentityProvider, ProviderSubscription
from doyence.logger import StructuredLogger
from doyence.models.auth_models import SessionInfo
from doyence.models.enums import AuthEvent
from doyence.notifications import Notifier
from doyence.scheduler import Scheduler
from doyence.session_store import SessionStore

EventObserver = Callable[[str, Optional[SessionInfo]], None]

LOGIN_PATH: str = "/login"


class Redirector(Protocol):
    def replace(self, url: str) -> None:
        ...


class Subscription:
    """Handle returned by :meth:`AuthEventStream.subscribe`.

    ``unsubscribe()`` may be called any number of times.  Once it has
    returned, the observer receives no further events.
    """

    def __init__(self, provider_subscription: ProviderSubscription) -> None:
        self._provider_subscription = provider_subscription
        self._lock = threading.Lock()
        self._active = True

    @property
    def active(self) -> bool:
        with self._lock:
            return self._active

    def unsubscribe(self) -> None:
        with self._lock:
            if not self._active:
                return
            self._active = False
        self._provider_subscription.unsubscribe()


class AuthEventStream:
    """The provider's ``on_auth_state_change`` as an explicit stream."""

    def __init__(self, provider: IdentityProvider) -> None:
        self._provider = provider

    def subscribe(self, observer: EventObserver) -> Subscription:
        subscription: Optional[Subscription] = None

        def _guarded(event: str, session: Optional[SessionInfo]) -> None:
            # The provider may emit before ``subscription`` is assigned.
            if subscription is not None and not subscription.active:
                return
            observer(event, session)

        subscription = Subscription(self._provider.on_auth_state_change(_guarded))
        return subscription


class AuthEventListener:
    """Feeds provider auth events into the session store.

    Parameters
    ----------
    provider:
        Identity provider adapter.
    store:
        Session store written by this listener.
    scheduler:
        Event-loop capability used for deferral and the session check.
    notifier:
        Toast channel for the "Error fetching session" failure.
    router:
        Anything with ``replace(url)``; used to send signed-out users to
        the login route.
    logger:
        Structured logger.
    """

    def __init__(
        self,
        provider: IdentityProvider,
        store: SessionStore,
        scheduler: Scheduler,
        notifier: Notifier,
        router: Redirector,
        logger: StructuredLogger,
    ) -> None:
        self._provider = provider
        self._store = store
        self._scheduler = scheduler
        self._notifier = notifier
        self._router = router
        self._logger = logger
        self._stream = AuthEventStream(provider)
        self._subscription: Optional[Subscription] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Subscribe to provider events, then resolve the initial session."""
        if self._running:
            return
        self._running = True
        self._subscription = self._stream.subscribe(self._defer_event)
        self._scheduler.run_in_background(
            self._provider.get_session,
            self._on_initial_session,
            self._on_initial_session_error,
        )

    def stop(self) -> None:
        """Unsubscribe; events already deferred are dropped."""
        self._running = False
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    # ------------------------------------------------------------------
    # Initial session check
    # ------------------------------------------------------------------

    def _on_initial_session(self, session: Optional[SessionInfo]) -> None:
        if not self._running:
            return
        self._logger.info(
            "Initial session check: %s",
            "session found" if session is not None else "no session",
            extra={"event": "SESSION_CHECK"},
        )
        self._finish_initial_check(session)

    def _on_initial_session_error(self, exc: Exception) -> None:
        if not self._running:
            return
        self._logger.error(
            "Error fetching session: %s", exc,
            extra={"event": "SESSION_CHECK_FAILED"},
        )
        self._notifier.error("Error fetching session", str(exc) or None)
        self._finish_initial_check(None)

    def _finish_initial_check(self, session: Optional[SessionInfo]) -> None:
        self._store.set_session(session)
        self._store.mark_initialized()
        # With a session the profile loader owns the loading flag.
        if session is None:
            self._store.set_loading(False)

    # ------------------------------------------------------------------
    # Provider events
    # ------------------------------------------------------------------

    def _defer_event(self, event: str, session: Optional[SessionInfo]) -> None:
        """Provider callback: re-dispatch on the next scheduler tick."""
        if not self._running:
            return
        self._scheduler.call_soon(self._dispatch, event, session)

    def _dispatch(self, event: str, session: Optional[SessionInfo]) -> None:
        if not self._running:
            return

        try:
            kind = AuthEvent(event)
        except ValueError:
            self._logger.warning(
                "Ignoring unknown auth event %s", event,
                extra={"event": "AUTH_EVENT_UNKNOWN"},
            )
            return

        self._logger.info(
            "Auth event: %s", kind,
            extra={
                "event": "AUTH_EVENT",
                "kind": str(kind),
                "user_id": session.user_id if session is not None else "",
            },
        )

        if kind == AuthEvent.SIGNED_OUT:
            self._store.set_session(None)
            self._store.set_loading(False)
            self._router.replace(LOGIN_PATH)
            return

        self._store.set_session(session)

    def adopt_session(self, session: Optional[SessionInfo]) -> None:
        """Feed a session obtained outside the event stream to the store."""
        if session is None:
            return
        self._logger.info(
            "Adopting exchanged session.",
            extra={"event": "SESSION_ADOPTED", "user_id": session.user_id},
        )
        self._store.set_session(session)
