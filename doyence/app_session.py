"""
Application Session Context.

``AppSession`` owns every session-lifecycle component for one mount of
the application window:

    AuthEventListener -> SessionStore -> ProfileLoader -> NavigationDecider

with the ``InactivityMonitor`` running alongside and signing out through
``AuthService``.  Nothing here is a module-level global; the host shell
creates one ``AppSession`` on mount (:meth:`AppSession.init`) and
disposes it on unmount (:meth:`AppSession.dispose`).
"""

from __future__ import annotations

import time
from typing import Callable, Optional

from doyence.auth_events import AuthEventListener
from doyence.config import AppConfig
from doyence.database import DatabaseManager
from doyence.identity import IdentityProvider
from doyence.inactivity import ActivitySource, InactivityMonitor
from doyence.logger import StructuredLogger, get_logger
from doyence.navigation import NavigationDecider, Router
from doyence.notifications import Notifier
from doyence.repositories.company_repository import CompanyRepository
from doyence.repositories.profile_repository import ProfileRepository
from doyence.scheduler import Scheduler
from doyence.services import ServiceContainer, create_services
from doyence.services.auth_service import AuthService
from doyence.services.profile_loader import ProfileLoader
from doyence.services.profile_setup import ProfileSetupService
from doyence.session_store import SessionStore


class AppSession:
    """Session lifecycle context with explicit init/dispose.

    Parameters
    ----------
    config:
        Application configuration (inactivity timeout, redirect origin).
    provider:
        Identity provider adapter.
    profile_repo, company_repo:
        Data-store repositories.
    scheduler:
        Event-loop capability shared by every component.
    logger:
        Structured logger shared by every component.
    router:
        Router to drive; a fresh one at ``/`` by default.
    clock:
        Monotonic clock for the inactivity monitor.
    """

    def __init__(
        self,
        config: AppConfig,
        provider: IdentityProvider,
        profile_repo: ProfileRepository,
        company_repo: CompanyRepository,
        scheduler: Scheduler,
        logger: StructuredLogger,
        router: Optional[Router] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._logger = logger
        self._scheduler = scheduler

        self.store = SessionStore()
        self.router = router or Router()
        self.notifier = Notifier(logger)

        self.services: ServiceContainer = create_services(
            config=config,
            provider=provider,
            profile_repo=profile_repo,
            company_repo=company_repo,
            store=self.store,
            scheduler=scheduler,
            notifier=self.notifier,
            logger=logger,
        )

        self.listener = AuthEventListener(
            provider=provider,
            store=self.store,
            scheduler=scheduler,
            notifier=self.notifier,
            router=self.router,
            logger=logger,
        )
        self.decider = NavigationDecider(
            store=self.store,
            router=self.router,
            auth_service=self.auth_service,
            listener=self.listener,
            scheduler=scheduler,
            notifier=self.notifier,
            logger=logger,
        )
        self.monitor = InactivityMonitor(
            timeout_s=config.INACTIVITY_TIMEOUT_S,
            scheduler=scheduler,
            sign_out=self._idle_sign_out,
            logger=logger,
            clock=clock,
        )

        self._initialized = False
        self._disposed = False

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def auth_service(self) -> AuthService:
        return self.services["auth_service"]

    @property
    def profile_loader(self) -> ProfileLoader:
        return self.services["profile_loader"]

    @property
    def profile_setup_service(self) -> ProfileSetupService:
        return self.services["profile_setup_service"]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init(self, activity_source: Optional[ActivitySource] = None) -> None:
        """Start every component.  Repeated calls are no-ops.

        The listener subscribes and starts the session check before the
        decider is allowed to route.
        """
        if self._initialized or self._disposed:
            return
        self._initialized = True

        self.listener.start()
        self.profile_loader.start()
        self.decider.start()
        if activity_source is not None:
            self.monitor.install(activity_source)

        self._logger.info("Session context initialised.", extra={"event": "APP_MOUNT"})

    def dispose(self) -> None:
        """Stop every component and drop all listeners.  Idempotent."""
        if self._disposed:
            return
        self._disposed = True

        self.monitor.teardown()
        self.decider.stop()
        self.profile_loader.stop()
        self.listener.stop()
        self.store.dispose()

        self._logger.info("Session context disposed.", extra={"event": "APP_UNMOUNT"})

    # ------------------------------------------------------------------
    # Inactivity
    # ------------------------------------------------------------------

    def _idle_sign_out(self) -> None:
        if not self.store.is_authenticated:
            return
        self._scheduler.run_in_background(
            lambda: self.auth_service.sign_out(reason="inactivity"),
            lambda _result: None,
            self._on_idle_sign_out_error,
        )

    def _on_idle_sign_out_error(self, exc: Exception) -> None:
        self._logger.error(
            "Idle sign-out failed: %s", exc,
            extra={"event": "IDLE_LOGOUT_FAILED"},
        )


def create_app_session(
    config: AppConfig,
    db: DatabaseManager,
    scheduler: Scheduler,
    initial_url: str = "/",
) -> AppSession:
    """Build an ``AppSession`` backed by the real Supabase client."""
    logger = get_logger("session")
    return AppSession(
        config=config,
        provider=IdentityProvider(db=db, logger=logger),
        profile_repo=ProfileRepository(db=db, logger=logger),
        company_repo=CompanyRepository(db=db, logger=logger),
        scheduler=scheduler,
        logger=logger,
        router=Router(initial_url),
    )
