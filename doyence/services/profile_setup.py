"""
Profile Setup Service.

Completes onboarding for a signed-in user: optionally creates a company
with the user as its ``admin`` member, writes the form to the user's
``profiles`` row with ``profile_completed`` set, and asks the
``ProfileLoader`` to refresh so navigation moves on to the dashboard.

A user holding an invitation token joins an existing company instead,
as a ``member``.
"""

from __future__ import annotations

from typing import Optional

from doyence.logger import StructuredLogger
from doyence.models.auth_models import AuthErrorCode, AuthResult
from doyence.models.enums import MemberRole
from doyence.models.profile import ProfileSetupForm
from doyence.notifications import Notifier
from doyence.repositories.company_repository import CompanyRepository
from doyence.repositories.profile_repository import ProfileRepository
from doyence.scheduler import Scheduler
from doyence.services.auth_service import AuthService
from doyence.services.base_service import BaseService
from doyence.services.profile_loader import ProfileLoader
from doyence.session_store import SessionStore


class ProfileSetupService(BaseService):
    """Onboarding orchestrator used by the profile-setup view."""

    def __init__(
        self,
        profile_repo: ProfileRepository,
        company_repo: CompanyRepository,
        store: SessionStore,
        loader: ProfileLoader,
        scheduler: Scheduler,
        notifier: Notifier,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger, notifier)
        self._profile_repo = profile_repo
        self._company_repo = company_repo
        self._store = store
        self._loader = loader
        self._scheduler = scheduler

    def initial_form(self) -> ProfileSetupForm:
        """Pre-fill the form from the stored profile and sign-up metadata."""
        snap = self._store.snapshot()
        first, last = snap.user.metadata_name() if snap.user is not None else ("", "")
        profile = snap.profile
        if profile is None:
            return ProfileSetupForm(first_name=first, last_name=last)
        return ProfileSetupForm(
            first_name=profile.first_name or first,
            last_name=profile.last_name or last,
            phone_number=profile.phone_number or "",
            company_role=profile.company_role or "",
            profile_photo_url=profile.profile_photo_url,
            company_name=profile.company_name or "",
            website=profile.website or "",
            address=profile.company_address or "",
            logo_url=profile.logo_url,
        )

    def complete_profile(self, form: ProfileSetupForm) -> AuthResult:
        """Persist the onboarding form for the signed-in user.

        Blocking; call it off the UI thread.  The profile refresh is
        scheduled back onto the UI loop.
        """
        user = self._store.snapshot().user
        if user is None:
            return self._failure(
                "Authentication error",
                AuthErrorCode.NOT_AUTHENTICATED,
                "You must be logged in to complete your profile.",
            )

        for check in (
            AuthService.validate_name(form.first_name, "First name"),
            AuthService.validate_name(form.last_name, "Last name"),
        ):
            if not check.is_valid:
                return self._failure(
                    "Profile setup failed", AuthErrorCode.VALIDATION_ERROR, check.error_message,
                )

        if form.create_new_company and not form.company_name.strip():
            return self._failure(
                "Profile setup failed", AuthErrorCode.VALIDATION_ERROR, "Company name is required.",
            )

        try:
            # Without a new company, keep whatever company the user already joined.
            company_id: Optional[str] = None
            if not form.create_new_company:
                company_id = self._profile_repo.get_company_id(user.id)
            else:
                company = self._company_repo.create(
                    name=form.company_name.strip(),
                    email=user.email,
                    website=form.website.strip() or None,
                    address=form.address.strip() or None,
                    logo_url=form.logo_url,
                )
                company_id = company.id
                self._company_repo.add_member(company_id, user.id, MemberRole.ADMIN)

            values = form.profile_update(company_id)
            if company_id and values["company_name"] is None:
                del values["company_name"]
            self._profile_repo.update(user.id, values)
        except Exception as exc:
            self._logger.error(
                "Profile setup failed: %s", exc,
                extra={"event": "PROFILE_SETUP_FAILED", "user_id": user.id},
            )
            return self._failure(
                "Profile setup failed",
                AuthErrorCode.UNKNOWN_ERROR,
                str(exc) or "An error occurred. Please try again.",
                user_id=user.id,
            )

        self._logger.info(
            "Profile setup complete.",
            extra={
                "event": "PROFILE_SETUP",
                "user_id": user.id,
                "company_id": company_id or "",
            },
        )
        self._notifier.notify("Profile setup complete", "Your account is ready to use.")
        self._scheduler.call_soon(self._loader.refresh)
        return AuthResult(success=True, user_id=user.id, email=user.email)

    def join_company(self, token: str) -> AuthResult:
        """Join the company behind a pending invitation *token*.

        Adds the user as a ``member`` unless they already belong to the
        company, marks the invitation accepted and links the profile.
        Blocking; call it off the UI thread.
        """
        title = "Error joining company"
        user = self._store.snapshot().user
        if user is None:
            return self._failure(
                "Authentication error",
                AuthErrorCode.NOT_AUTHENTICATED,
                "You must be logged in to join a company.",
            )

        token = token.strip()
        if not token:
            return self._failure(
                title, AuthErrorCode.VALIDATION_ERROR, "Invitation token is required.",
            )

        try:
            invitation = self._company_repo.get_pending_invitation(token)
            if invitation is None:
                return self._failure(
                    title, AuthErrorCode.VALIDATION_ERROR,
                    "Invalid or expired invitation token", user_id=user.id,
                )
            if not self._company_repo.is_member(invitation.company_id, user.id):
                self._company_repo.add_member(invitation.company_id, user.id, MemberRole.MEMBER)
            self._company_repo.accept_invitation(invitation.id)
            self._profile_repo.update(user.id, {
                "company_id": invitation.company_id,
                "company_name": invitation.company_name,
            })
        except Exception as exc:
            self._logger.error(
                "Joining company failed: %s", exc,
                extra={"event": "COMPANY_JOIN_FAILED", "user_id": user.id},
            )
            return self._failure(
                title,
                AuthErrorCode.UNKNOWN_ERROR,
                str(exc) or "An error occurred. Please try again.",
                user_id=user.id,
            )

        self._logger.info(
            "Joined company %s", invitation.company_id,
            extra={
                "event": "COMPANY_JOINED",
                "user_id": user.id,
                "company_id": invitation.company_id,
            },
        )
        self._notifier.notify(
            "Joined company", f"You've joined {invitation.company_name or 'the company'}",
        )
        self._scheduler.call_soon(self._loader.refresh)
        return AuthResult(success=True, user_id=user.id, email=user.email)
