"""Register View: Sign-up Screen.

Collects name, email and password, registers through ``AuthService`` and
moves to the verification screen with the email carried in the query.

**Thin UI Rule**: No business logic.
"""

from __future__ import annotations

from urllib.parse import urlencode

import customtkinter as ctk

from doyence.logger import StructuredLogger
from doyence.models.auth_models import AuthResult
from doyence.navigation import Router
from doyence.scheduler import Scheduler
from doyence.services.auth_service import AuthService
from doyence.ui.components.form_card import FormCard


class RegisterView(FormCard):
    """Account creation form."""

    def __init__(
        self,
        parent: ctk.CTk,
        auth_service: AuthService,
        router: Router,
        scheduler: Scheduler,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, "Create an account", "Start estimating with Doyence")

        self._auth_service = auth_service
        self._router = router
        self._scheduler = scheduler
        self._logger = logger

        self._first_name_entry = self.add_entry("First name")
        self._last_name_entry = self.add_entry("Last name")
        self._email_entry = self.add_entry("Email address", "you@company.com")
        self._password_entry = self.add_entry("Password", "At least 8 characters", secret=True)
        self._confirm_entry = self.add_entry("Confirm password", secret=True)
        self._submit_button = self.add_button("Create account", self._handle_register)
        self.add_link("Already have an account? Sign in", lambda: self._router.push("/login"))

    def _handle_register(self) -> None:
        first_name = self._first_name_entry.get()
        last_name = self._last_name_entry.get()
        email = self._email_entry.get()
        password = self._password_entry.get()
        confirm = self._confirm_entry.get()

        self.show_error(None)
        self._submit_button.configure(state="disabled")
        self._scheduler.run_in_background(
            lambda: self._auth_service.sign_up(
                email, password, first_name, last_name, confirm_password=confirm,
            ),
            self._on_result,
            self._on_error,
        )

    def _on_result(self, result: AuthResult) -> None:
        if not self.winfo_exists():
            return
        self._submit_button.configure(state="normal")
        if not result.success:
            self.show_error(result.error_message)
            return
        self._router.replace(f"/verify?{urlencode({'email': result.email or ''})}")

    def _on_error(self, exc: Exception) -> None:
        self._logger.error("Sign-up crashed: %s", exc)
        if self.winfo_exists():
            self._submit_button.configure(state="normal")
            self.show_error("An unexpected error occurred. Please try again.")
