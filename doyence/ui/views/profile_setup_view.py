"""Profile Setup View: Onboarding Form.

Shown on ``/profile-setup`` until the profile is complete.  Pre-filled
from the stored profile and the sign-up metadata.  An invitation token
joins an existing company instead of creating one.  On success the
profile loader refreshes and the navigation decider moves the user on.

**Thin UI Rule**: No business logic.
"""

from __future__ import annotations

import customtkinter as ctk

from doyence.logger import StructuredLogger
from doyence.models.auth_models import AuthResult
from doyence.models.profile import ProfileSetupForm
from doyence.scheduler import Scheduler
from doyence.services.profile_setup import ProfileSetupService
from doyence.ui.components.form_card import FormCard
from doyence.ui.theme import FONT_BODY, PADDING_SM, TEXT_PRIMARY


class ProfileSetupView(FormCard):
    """Onboarding form for name, contact details and company."""

    def __init__(
        self,
        parent: ctk.CTk,
        setup_service: ProfileSetupService,
        scheduler: Scheduler,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, "Complete your profile", "Tell us about you and your company.")

        self._setup_service = setup_service
        self._scheduler = scheduler
        self._logger = logger

        initial = setup_service.initial_form()

        self._first_name_entry = self.add_entry("First name", initial=initial.first_name)
        self._last_name_entry = self.add_entry("Last name", initial=initial.last_name)
        self._phone_entry = self.add_entry("Phone number", initial=initial.phone_number)
        self._role_entry = self.add_entry("Your role", "Estimator", initial=initial.company_role)

        self._create_company_var = ctk.BooleanVar(value=initial.create_new_company)
        ctk.CTkCheckBox(
            self.body,
            text="Create a new company",
            font=FONT_BODY,
            text_color=TEXT_PRIMARY,
            variable=self._create_company_var,
        ).pack(anchor="w", pady=(PADDING_SM * 2, 0))

        self._company_entry = self.add_entry("Company name", initial=initial.company_name)
        self._website_entry = self.add_entry("Website", "https://", initial=initial.website)
        self._address_entry = self.add_entry("Address", initial=initial.address)

        self._profile_photo_url = initial.profile_photo_url
        self._logo_url = initial.logo_url

        self._submit_button = self.add_button("Complete setup", self._handle_submit)

        self._invite_entry = self.add_entry("Invitation token", "Paste the token from your invite")
        self._join_link = self.add_link("Join company with invitation", self._handle_join)

    def _handle_submit(self) -> None:
        form = ProfileSetupForm(
            first_name=self._first_name_entry.get(),
            last_name=self._last_name_entry.get(),
            phone_number=self._phone_entry.get(),
            company_role=self._role_entry.get(),
            profile_photo_url=self._profile_photo_url,
            create_new_company=self._create_company_var.get(),
            company_name=self._company_entry.get(),
            website=self._website_entry.get(),
            address=self._address_entry.get(),
            logo_url=self._logo_url,
        )

        self.show_error(None)
        self._submit_button.configure(state="disabled", text="Saving…")
        self._scheduler.run_in_background(
            lambda: self._setup_service.complete_profile(form),
            self._on_result,
            self._on_error,
        )

    def _handle_join(self) -> None:
        token = self._invite_entry.get()
        self.show_error(None)
        self._join_link.configure(state="disabled", text="Joining…")
        self._scheduler.run_in_background(
            lambda: self._setup_service.join_company(token),
            self._on_joined,
            self._on_error,
        )

    def _on_joined(self, result: AuthResult) -> None:
        if not self.winfo_exists():
            return
        self._join_link.configure(state="normal", text="Join company with invitation")
        if not result.success:
            self.show_error(result.error_message)
            return
        self._invite_entry.delete(0, "end")

    def _on_result(self, result: AuthResult) -> None:
        if not self.winfo_exists():
            return
        self._submit_button.configure(state="normal", text="Complete setup")
        if not result.success:
            self.show_error(result.error_message)

    def _on_error(self, exc: Exception) -> None:
        self._logger.error("Profile setup crashed: %s", exc)
        if self.winfo_exists():
            self._submit_button.configure(state="normal", text="Complete setup")
            self._join_link.configure(state="normal", text="Join company with invitation")
            self.show_error("An unexpected error occurred. Please try again.")
