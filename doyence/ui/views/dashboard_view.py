"""Dashboard View.

Landing screen for users with a completed profile.  Shows who is signed
in and for which company, section links for the app routes, and the
sign-out action.  The sections themselves (customers, estimates,
settings, admin) are placeholders here.

**Thin UI Rule**: reads the store snapshot; delegates sign-out to
``AuthService``.
"""

from __future__ import annotations

from typing import Final

import customtkinter as ctk

from doyence.logger import StructuredLogger
from doyence.models.auth_models import AuthResult
from doyence.navigation import Router
from doyence.scheduler import Scheduler
from doyence.services.auth_service import AuthService
from doyence.session_store import StoreSnapshot
from doyence.ui.theme import (
    ACCENT_PRIMARY,
    CONTENT_BG,
    FONT_BODY,
    FONT_BUTTON,
    FONT_HEADING,
    FONT_SMALL,
    HEADER_BG,
    HEADER_HEIGHT,
    HEADER_TEXT,
    LINK_HOVER,
    LOGOUT_HOVER,
    LOGOUT_PRIMARY,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)

_SECTIONS: Final[tuple[tuple[str, str], ...]] = (
    ("/dashboard", "Dashboard"),
    ("/customers", "Customers"),
    ("/estimates", "Estimates"),
    ("/settings", "Settings"),
)


class DashboardView(ctk.CTkFrame):
    """Main application frame.

    Parameters
    ----------
    parent:
        The root window.
    path:
        App route being shown (``/dashboard``, ``/customers``, ...).
    snapshot:
        Store state at construction; updated through :meth:`refresh`.
    router:
        Used by the section links.
    auth_service:
        Sign-out.
    scheduler:
        Runs sign-out off the UI thread.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        parent: ctk.CTk,
        path: str,
        snapshot: StoreSnapshot,
        router: Router,
        auth_service: AuthService,
        scheduler: Scheduler,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)

        self._path = path
        self._router = router
        self._auth_service = auth_service
        self._scheduler = scheduler
        self._logger = logger

        # --- Header ---
        header = ctk.CTkFrame(self, height=HEADER_HEIGHT, fg_color=HEADER_BG, corner_radius=0)
        header.pack(side="top", fill="x")
        header.pack_propagate(False)

        ctk.CTkLabel(
            header, text="Doyence Estimating", font=FONT_BUTTON, text_color=HEADER_TEXT,
        ).pack(side="left", padx=PADDING_MD)

        self._logout_button = ctk.CTkButton(
            header,
            text="Sign out",
            font=FONT_SMALL,
            fg_color=LOGOUT_PRIMARY,
            hover_color=LOGOUT_HOVER,
            text_color=TEXT_LIGHT,
            width=90,
            command=self._handle_logout,
        )
        self._logout_button.pack(side="right", padx=PADDING_MD)

        self._user_label = ctk.CTkLabel(header, text="", font=FONT_SMALL, text_color=HEADER_TEXT)
        self._user_label.pack(side="right", padx=PADDING_SM)

        # --- Section links ---
        self._nav = ctk.CTkFrame(self, fg_color="transparent")
        self._nav.pack(side="top", fill="x", padx=PADDING_LG, pady=(PADDING_MD, 0))
        for section_path, label in _SECTIONS:
            self._add_section_link(section_path, label)
        self._admin_link = self._add_section_link("/admin", "Admin")

        # --- Content ---
        self._title_label = ctk.CTkLabel(
            self, text="", font=FONT_HEADING, text_color=TEXT_PRIMARY, anchor="w",
        )
        self._title_label.pack(fill="x", padx=PADDING_LG, pady=(PADDING_LG, PADDING_SM))

        self._company_label = ctk.CTkLabel(
            self, text="", font=FONT_BODY, text_color=TEXT_SECONDARY, anchor="w",
        )
        self._company_label.pack(fill="x", padx=PADDING_LG)

        self.refresh(snapshot)

    def _add_section_link(self, path: str, label: str) -> ctk.CTkButton:
        button = ctk.CTkButton(
            self._nav,
            text=label,
            font=FONT_BUTTON if path == self._path else FONT_BODY,
            fg_color="transparent",
            hover_color=LINK_HOVER,
            text_color=ACCENT_PRIMARY,
            width=100,
            command=lambda: self._router.push(path),
        )
        button.pack(side="left", padx=(0, PADDING_SM))
        return button

    def refresh(self, snapshot: StoreSnapshot) -> None:
        """Re-render the labels from a store snapshot."""
        profile = snapshot.profile
        name = profile.full_name if profile is not None else ""
        email = snapshot.user.email if snapshot.user is not None else ""

        self._user_label.configure(text=name or email or "")
        self._title_label.configure(
            text=f"Welcome, {profile.first_name}" if profile and profile.first_name else "Welcome",
        )
        company = profile.company_name if profile is not None else None
        self._company_label.configure(text=company or "No company linked yet.")

        if snapshot.is_admin or snapshot.is_superuser:
            self._admin_link.pack(side="left", padx=(0, PADDING_SM))
        else:
            self._admin_link.pack_forget()

    def _handle_logout(self) -> None:
        self._logout_button.configure(state="disabled")
        self._scheduler.run_in_background(
            self._auth_service.sign_out,
            self._on_logout_result,
            self._on_logout_error,
        )

    def _on_logout_result(self, result: AuthResult) -> None:
        if self.winfo_exists() and not result.success:
            self._logout_button.configure(state="normal")

    def _on_logout_error(self, exc: Exception) -> None:
        self._logger.error("Sign-out crashed: %s", exc)
        if self.winfo_exists():
            self._logout_button.configure(state="normal")
