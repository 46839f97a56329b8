"""Application Host Shell.

The top-level ``CTk`` window.  It owns one ``AppSession`` for its
lifetime: ``init()`` on mount, ``dispose()`` when the window closes.

The shell contains no business logic.  It renders the view matching the
router's current path and re-renders when the path changes; which path
that is, is decided by the ``NavigationDecider``.
"""

from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from doyence import __version__ as _APP_VERSION
from doyence.app_session import AppSession
from doyence.logger import StructuredLogger
from doyence.navigation import APP_ROUTES, Location
from doyence.session_store import StoreSnapshot
from doyence.ui.components.toast_banner import ToastBanner
from doyence.ui.theme import (
    CONTENT_BG,
    FONT_BODY,
    MAIN_WINDOW_HEIGHT,
    MAIN_WINDOW_WIDTH,
    MIN_WINDOW_HEIGHT,
    MIN_WINDOW_WIDTH,
    TEXT_SECONDARY,
)
from doyence.ui.tk_scheduler import TkActivitySource, TkScheduler
from doyence.ui.views.dashboard_view import DashboardView
from doyence.ui.views.landing_view import LandingView
from doyence.ui.views.login_view import LoginView
from doyence.ui.views.profile_setup_view import ProfileSetupView
from doyence.ui.views.register_view import RegisterView
from doyence.ui.views.verify_view import VerifyView


class AppShell(ctk.CTk):
    """Host Shell: the main application window.

    Parameters
    ----------
    session_factory:
        Builds the ``AppSession`` for this window from its scheduler.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        session_factory: Callable[[TkScheduler], AppSession],
        logger: StructuredLogger,
    ) -> None:
        super().__init__()

        self._logger = logger
        self._scheduler = TkScheduler(self, logger)
        self._session: AppSession = session_factory(self._scheduler)

        self._current_view: Optional[ctk.CTkFrame] = None
        self._current_path: Optional[str] = None
        self._unsubscribers: list[Callable[[], None]] = []

        # Window defaults
        self.title(f"Doyence Estimating {_APP_VERSION}")
        ctk.set_appearance_mode("light")
        ctk.set_default_color_theme("blue")
        self.geometry(f"{MAIN_WINDOW_WIDTH}x{MAIN_WINDOW_HEIGHT}")
        self.minsize(MIN_WINDOW_WIDTH, MIN_WINDOW_HEIGHT)
        self.configure(fg_color=CONTENT_BG)

        # Graceful shutdown on window close
        self.protocol("WM_DELETE_WINDOW", self._on_close)

        self._toast_banner = ToastBanner(self, self._session.notifier, logger)

        self._unsubscribers = [
            self._session.router.subscribe(self._on_location_change),
            self._session.store.subscribe(self._on_store_change),
        ]
        self._show_loading()
        self._session.init(TkActivitySource(self))

    # ==================================================================
    # Rendering
    # ==================================================================

    def _on_location_change(self, location: Location) -> None:
        if location.path != self._current_path:
            self._render(location.path)

    def _on_store_change(self, snap: StoreSnapshot) -> None:
        if self._current_path is None:
            if snap.initialized and not snap.is_loading:
                self._render(self._session.router.location.path)
            return
        if isinstance(self._current_view, DashboardView):
            self._current_view.refresh(snap)

    def _show_loading(self) -> None:
        self._swap_view(ctk.CTkFrame(self, fg_color=CONTENT_BG))
        ctk.CTkLabel(
            self._current_view,
            text="Loading…",
            font=FONT_BODY,
            text_color=TEXT_SECONDARY,
        ).place(relx=0.5, rely=0.5, anchor="center")

    def _render(self, path: str) -> None:
        """Build and show the view for *path*."""
        self._current_path = path
        session = self._session
        auth_service = session.auth_service

        view: ctk.CTkFrame
        if path == "/login":
            view = LoginView(self, auth_service, session.router, self._scheduler, self._logger)
        elif path in ("/register", "/signup"):
            view = RegisterView(self, auth_service, session.router, self._scheduler, self._logger)
        elif path == "/verify":
            view = VerifyView(self, auth_service, session.router, self._scheduler, self._logger)
        elif path == "/profile-setup":
            view = ProfileSetupView(
                self, session.profile_setup_service, self._scheduler, self._logger,
            )
        elif path in APP_ROUTES:
            view = DashboardView(
                self,
                path,
                session.store.snapshot(),
                session.router,
                auth_service,
                self._scheduler,
                self._logger,
            )
        else:
            view = LandingView(self, session.router)

        self._swap_view(view)
        self._logger.debug("Rendered %s", path)

    def _swap_view(self, view: ctk.CTkFrame) -> None:
        if self._current_view is not None:
            self._current_view.destroy()
        self._current_view = view
        view.pack(fill="both", expand=True)
        self._toast_banner.lift()

    # ==================================================================
    # Window close
    # ==================================================================

    def _on_close(self) -> None:
        """Dispose the session context before destroying the window."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._session.dispose()
        self.destroy()
