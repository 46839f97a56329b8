"""Login View: Sign-in Screen.

Presents the email/password form and authenticates via ``AuthService``.

**Thin UI Rule**: This module contains ZERO business logic.  It gathers
inputs, delegates to ``AuthService`` on a worker, and displays results.
Routing after a successful sign-in is left to the navigation decider,
which reacts once the session and profile reach the store.
"""

from __future__ import annotations

import tkinter as tk
from typing import Optional

import customtkinter as ctk

from doyence.logger import StructuredLogger
from doyence.models.auth_models import AuthResult
from doyence.navigation import Router
from doyence.scheduler import Scheduler
from doyence.services.auth_service import AuthService
from doyence.ui.components.form_card import FormCard


class LoginView(FormCard):
    """Sign-in form.

    Parameters
    ----------
    parent:
        The root ``CTk`` window this frame belongs to.
    auth_service:
        Authentication service.
    router:
        Used for the "create an account" link.
    scheduler:
        Runs the sign-in call off the UI thread.
    logger:
        Structured JSON logger.
    """

    def __init__(
        self,
        parent: ctk.CTk,
        auth_service: AuthService,
        router: Router,
        scheduler: Scheduler,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, "Doyence Estimating", "Sign in to your account")

        self._auth_service = auth_service
        self._router = router
        self._scheduler = scheduler
        self._logger = logger

        self._email_entry = self.add_entry("Email address", "you@company.com")
        self._password_entry = self.add_entry("Password", secret=True)
        self._login_button: Optional[ctk.CTkButton] = self.add_button(
            "Sign In  →", self._handle_login,
        )
        self.add_link("Don't have an account? Sign up", lambda: self._router.push("/register"))

        self._email_entry.bind("<Return>", self._on_enter_key)
        self._password_entry.bind("<Return>", self._on_enter_key)

    def _on_enter_key(self, _event: tk.Event) -> None:
        self._handle_login()

    def _handle_login(self) -> None:
        email = self._email_entry.get()
        password = self._password_entry.get()

        self.show_error(None)
        self._set_busy(True)
        self._scheduler.run_in_background(
            lambda: self._auth_service.sign_in(email, password),
            self._on_login_result,
            self._on_login_error,
        )

    def _on_login_result(self, result: AuthResult) -> None:
        if not self.winfo_exists():
            return
        self._set_busy(False)
        if not result.success:
            self.show_error(result.error_message)
            self._password_entry.delete(0, "end")

    def _on_login_error(self, exc: Exception) -> None:
        self._logger.error("Sign-in crashed: %s", exc)
        if self.winfo_exists():
            self._set_busy(False)
            self.show_error("An unexpected error occurred. Please try again.")

    def _set_busy(self, busy: bool) -> None:
        if self._login_button is not None:
            self._login_button.configure(
                state="disabled" if busy else "normal",
                text="Signing in…" if busy else "Sign In  →",
            )
