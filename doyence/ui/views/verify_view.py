"""Verify View: One-time Code Entry.

Public route (``/verify``).  Reads the email from the query string,
accepts the 6-digit code from the confirmation email, and offers to
resend it.

**Thin UI Rule**: No business logic.
"""

from __future__ import annotations

from urllib.parse import parse_qs

import customtkinter as ctk

from doyence.logger import StructuredLogger
from doyence.models.auth_models import AuthResult
from doyence.navigation import PROFILE_SETUP_PATH, Router
from doyence.scheduler import Scheduler
from doyence.services.auth_service import AuthService
from doyence.ui.components.form_card import FormCard


class VerifyView(FormCard):
    """Email verification form."""

    def __init__(
        self,
        parent: ctk.CTk,
        auth_service: AuthService,
        router: Router,
        scheduler: Scheduler,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(
            parent,
            "Verify your email",
            "Enter the 6-digit code we sent to your inbox.",
        )

        self._auth_service = auth_service
        self._router = router
        self._scheduler = scheduler
        self._logger = logger

        query = parse_qs(router.location.query)
        initial_email = (query.get("email") or [""])[0]

        self._email_entry = self.add_entry("Email address", initial=initial_email)
        self._code_entry = self.add_entry("Verification code", "123456")
        self._verify_button = self.add_button("Verify", self._handle_verify)
        self.add_link("Resend code", self._handle_resend)
        self.add_link("Back to sign in", lambda: self._router.replace("/login"))

    def _handle_verify(self) -> None:
        email = self._email_entry.get()
        code = self._code_entry.get()
        self.show_error(None)
        self._verify_button.configure(state="disabled")
        self._scheduler.run_in_background(
            lambda: self._auth_service.verify_otp(email, code),
            self._on_verified,
            self._on_error,
        )

    def _on_verified(self, result: AuthResult) -> None:
        if not self.winfo_exists():
            return
        self._verify_button.configure(state="normal")
        if not result.success:
            self.show_error(result.error_message)
            return
        self._router.replace(PROFILE_SETUP_PATH)

    def _handle_resend(self) -> None:
        email = self._email_entry.get()
        self.show_error(None)
        self._scheduler.run_in_background(
            lambda: self._auth_service.resend_otp(email),
            self._on_resent,
            self._on_error,
        )

    def _on_resent(self, result: AuthResult) -> None:
        if self.winfo_exists() and not result.success:
            self.show_error(result.error_message)

    def _on_error(self, exc: Exception) -> None:
        self._logger.error("Verification request crashed: %s", exc)
        if self.winfo_exists():
            self._verify_button.configure(state="normal")
            self.show_error("An unexpected error occurred. Please try again.")
