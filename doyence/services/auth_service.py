"""
Authentication Service.

Single orchestrator for every credential flow of the client: sign-in,
registration, email verification by one-time code, resending the code,
sign-out, and the magic-link fragment exchange.

Sits between the views and the identity provider so that the views stay
thin form handlers.  Every method returns a typed ``AuthResult`` or
``ValidationResult``; the views never inspect raw provider exceptions.
Success and failure are also announced through the toast ``Notifier``.

Session state itself is *not* written here: the provider emits an auth
event for each change, and the ``AuthEventListener`` feeds it to the
``SessionStore``.
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import parse_qs

from doyence.config import AppConfig
from doyence.database import BackendUnavailableError
from doyence.identity import IdentityProvider
from doyence.logger import StructuredLogger
from doyence.models.auth_models import (
    PROVIDER_ERROR_MAP,
    AuthErrorCode,
    AuthResult,
    ValidationResult,
)
from doyence.models.enums import OtpType
from doyence.notifications import Notifier
from doyence.services.base_service import BaseService


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_EMAIL_RE: re.Pattern[str] = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)

_OTP_RE: re.Pattern[str] = re.compile(r"^\d{6}$")

_MIN_PASSWORD_LENGTH: int = 8

# Matches C0 controls (U+0000-U+001F), DEL (U+007F), and C1 controls (U+0080-U+009F).
_CONTROL_CHAR_RE: re.Pattern[str] = re.compile(r"[\x00-\x1f\x7f-\x9f]")

_NETWORK_MESSAGE: str = "Cannot reach the server. Check your internet connection."
_UNKNOWN_MESSAGE: str = "An unexpected error occurred. Please try again later."


class AuthService(BaseService):
    """Centralised authentication service.

    Parameters
    ----------
    provider:
        Identity provider adapter.
    notifier:
        Toast channel.
    config:
        Application configuration (email redirect origin).
    logger:
        Structured JSON logger for audit-grade logging.
    """

    def __init__(
        self,
        provider: IdentityProvider,
        notifier: Notifier,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger, notifier)
        self._provider: IdentityProvider = provider
        self._config: AppConfig = config

    # ==================================================================
    # Validation helpers
    # ==================================================================

    @staticmethod
    def validate_email(email: str) -> ValidationResult:
        """Validate an email address against a simplified RFC 5322 regex."""
        if not email or not email.strip():
            return ValidationResult(
                is_valid=False,
                error_message="Email address is required.",
            )
        if not _EMAIL_RE.match(email.strip()):
            return ValidationResult(
                is_valid=False,
                error_message="Please enter a valid email address.",
            )
        return ValidationResult(is_valid=True)

    @staticmethod
    def validate_password(password: str) -> ValidationResult:
        """Enforce the password policy: at least 8 characters."""
        if len(password or "") < _MIN_PASSWORD_LENGTH:
            return ValidationResult(
                is_valid=False,
                error_message=(
                    f"Password must be at least {_MIN_PASSWORD_LENGTH} characters."
                ),
            )
        return ValidationResult(is_valid=True)

    @staticmethod
    def validate_password_confirmation(password: str, confirmation: str) -> ValidationResult:
        if password != confirmation:
            return ValidationResult(
                is_valid=False,
                error_message="Passwords do not match.",
            )
        return ValidationResult(is_valid=True)

    @staticmethod
    def validate_name(name: str, field_label: str) -> ValidationResult:
        """Validate a name field (first name or last name).

        Rejects control characters, including newlines and tabs, to
        prevent log injection and display corruption.

        Parameters
        ----------
        name:
            The raw name string.
        field_label:
            Human label for the error message (e.g. ``"First name"``).
        """
        stripped = (name or "").strip()
        if not stripped:
            return ValidationResult(
                is_valid=False,
                error_message=f"{field_label} is required.",
            )
        if _CONTROL_CHAR_RE.search(stripped):
            return ValidationResult(
                is_valid=False,
                error_message=(
                    f"{field_label} contains invalid characters. "
                    "Only printable characters are allowed."
                ),
            )
        return ValidationResult(is_valid=True)

    @staticmethod
    def validate_otp(token: str) -> ValidationResult:
        if not _OTP_RE.match((token or "").strip()):
            return ValidationResult(
                is_valid=False,
                error_message="Enter the 6-digit code from your email.",
            )
        return ValidationResult(is_valid=True)

    @staticmethod
    def normalize_email(email: str) -> str:
        """Normalise an email address: strip whitespace and lowercase."""
        return email.strip().lower()

    def _invalid(self, title: str, check: ValidationResult) -> AuthResult:
        return self._failure(title, AuthErrorCode.VALIDATION_ERROR, check.error_message)

    # ==================================================================
    # Sign-in
    # ==================================================================

    def sign_in(self, email: str, password: str) -> AuthResult:
        """Authenticate with email and password.

        On success the provider emits ``SIGNED_IN``; the session reaches
        the store through the auth event listener.
        """
        for check in (self.validate_email(email), self.validate_password(password)):
            if not check.is_valid:
                return self._invalid("Login failed", check)

        email = self.normalize_email(email)

        try:
            session = self._provider.sign_in_with_password(email, password)
        except Exception as exc:
            return self._classify_error(exc, "Login failed", "LOGIN_FAILED", email)

        self._logger.info(
            "User authenticated: %s", email,
            extra={
                "event": "LOGIN",
                "email": email,
                "user_id": session.user_id if session is not None else "",
            },
        )
        self._notifier.notify("Login successful", "Welcome back!")
        return AuthResult(
            success=True,
            user_id=session.user_id if session is not None else None,
            email=email,
            session=session,
        )

    # ==================================================================
    # Registration
    # ==================================================================

    def sign_up(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        confirm_password: Optional[str] = None,
    ) -> AuthResult:
        """Register a new account.

        The first/last name travel as user metadata so the profile row
        can be pre-filled; the confirmation email links back to
        ``<SITE_URL>/verify``.
        """
        checks = [
            self.validate_name(first_name, "First name"),
            self.validate_name(last_name, "Last name"),
            self.validate_email(email),
            self.validate_password(password),
        ]
        if confirm_password is not None:
            checks.append(self.validate_password_confirmation(password, confirm_password))
        for check in checks:
            if not check.is_valid:
                return self._invalid("Registration failed", check)

        email = self.normalize_email(email)
        metadata = {
            "first_name": first_name.strip(),
            "last_name": last_name.strip(),
        }

        try:
            user = self._provider.sign_up(
                email,
                password,
                metadata=metadata,
                redirect_to=self._config.verify_redirect_url,
            )
        except Exception as exc:
            return self._classify_error(
                exc, "Registration failed", "REGISTER_FAILED", email,
            )

        self._logger.info(
            "User registered: %s", email,
            extra={
                "event": "REGISTER",
                "email": email,
                "user_id": user.id if user is not None else "",
            },
        )
        self._notifier.notify(
            "Registration successful",
            "Please check your email for verification.",
        )
        return AuthResult(
            success=True,
            user_id=user.id if user is not None else None,
            email=email,
        )

    # ==================================================================
    # One-time codes
    # ==================================================================

    def verify_otp(self, email: str, token: str) -> AuthResult:
        """Confirm a sign-up with the 6-digit code from the email."""
        for check in (self.validate_email(email), self.validate_otp(token)):
            if not check.is_valid:
                return self._invalid("Verification failed", check)

        email = self.normalize_email(email)

        try:
            session = self._provider.verify_otp(email, token.strip(), OtpType.SIGNUP)
        except Exception as exc:
            return self._classify_error(
                exc, "Verification failed", "VERIFY_FAILED", email,
            )

        self._logger.info(
            "Email verified: %s", email,
            extra={"event": "EMAIL_VERIFIED", "email": email},
        )
        self._notifier.notify(
            "Email verified",
            "Your email has been successfully verified.",
        )
        return AuthResult(
            success=True,
            user_id=session.user_id if session is not None else None,
            email=email,
            session=session,
        )

    def resend_otp(self, email: str) -> AuthResult:
        check = self.validate_email(email)
        if not check.is_valid:
            return self._invalid("Failed to resend verification email", check)

        email = self.normalize_email(email)

        try:
            self._provider.resend(
                email,
                redirect_to=self._config.verify_redirect_url,
                otp_type=OtpType.SIGNUP,
            )
        except Exception as exc:
            return self._classify_error(
                exc, "Failed to resend verification email", "RESEND_FAILED", email,
            )

        self._logger.info(
            "Verification email resent: %s", email,
            extra={"event": "OTP_RESENT", "email": email},
        )
        self._notifier.notify(
            "Verification email resent",
            "Please check your email for the verification link.",
        )
        return AuthResult(success=True, email=email)

    # ==================================================================
    # Sign-out
    # ==================================================================

    def sign_out(self, reason: str = "user") -> AuthResult:
        """End the session.

        The provider's ``SIGNED_OUT`` event clears the store and sends
        the user to the login route.

        Parameters
        ----------
        reason:
            Recorded in the audit log (``"user"`` or ``"inactivity"``).
        """
        try:
            self._provider.sign_out()
        except Exception as exc:
            self._logger.error(
                "Sign out error: %s", exc,
                extra={"event": "LOGOUT_FAILED", "reason": reason},
            )
            return self._failure(
                "Error signing out", self._code_for(exc), str(exc) or "Please try again.",
            )

        self._logger.info(
            "User logged out.",
            extra={"event": "LOGOUT", "reason": reason},
        )
        self._notifier.notify("Logged out", "You have been successfully logged out.")
        return AuthResult(success=True)

    # ==================================================================
    # Magic-link fragment
    # ==================================================================

    @staticmethod
    def fragment_has_tokens(fragment: str) -> bool:
        """``True`` when a URL fragment carries an ``access_token``."""
        return "access_token" in parse_qs(fragment.lstrip("#"))

    def exchange_session_fragment(self, fragment: str) -> AuthResult:
        """Trade a magic-link fragment for a provider session.

        The fragment has the form
        ``access_token=...&refresh_token=...&type=signup``.  A provider
        error (``error_description=...``) or missing tokens fail the
        exchange.
        """
        params = parse_qs(fragment.lstrip("#"))
        access_token = (params.get("access_token") or [""])[0]
        refresh_token = (params.get("refresh_token") or [""])[0]

        if "error" in params or "error_description" in params:
            message = (params.get("error_description") or params.get("error") or [""])[0]
            return self._fragment_failed(message or "The sign-in link is invalid.")
        if not access_token or not refresh_token:
            return self._fragment_failed("The sign-in link is incomplete.")

        try:
            session = self._provider.set_session(access_token, refresh_token)
        except Exception as exc:
            self._logger.warning(
                "Magic-link exchange failed: %s", exc,
                extra={"event": "FRAGMENT_EXCHANGE_FAILED"},
            )
            return self._fragment_failed(self._message_for(exc))

        if session is None:
            return self._fragment_failed("The sign-in link did not produce a session.")

        self._logger.info(
            "Magic-link session established.",
            extra={
                "event": "FRAGMENT_EXCHANGED",
                "user_id": session.user_id,
                "link_type": (params.get("type") or [""])[0],
            },
        )
        return AuthResult(
            success=True,
            user_id=session.user_id,
            email=session.user.email,
            session=session,
        )

    def _fragment_failed(self, message: str) -> AuthResult:
        return self._failure("Sign-in link failed", AuthErrorCode.INVALID_OTP, message)

    # ==================================================================
    # Error classification
    # ==================================================================

    @staticmethod
    def _is_network_error(exc: Exception) -> bool:
        return isinstance(exc, (ConnectionError, TimeoutError, BackendUnavailableError))

    def _code_for(self, exc: Exception) -> AuthErrorCode:
        if self._is_network_error(exc):
            return AuthErrorCode.NETWORK_ERROR
        error_str = str(exc).lower()
        for code_key, (error_code, _message) in PROVIDER_ERROR_MAP.items():
            if code_key in error_str:
                return error_code
        return AuthErrorCode.UNKNOWN_ERROR

    def _message_for(self, exc: Exception) -> str:
        if self._is_network_error(exc):
            return _NETWORK_MESSAGE
        error_str = str(exc).lower()
        for code_key, (_code, human_message) in PROVIDER_ERROR_MAP.items():
            if code_key in error_str:
                return human_message
        return _UNKNOWN_MESSAGE

    def _classify_error(
        self, exc: Exception, title: str, event: str, email: str
    ) -> AuthResult:
        """Map a provider or network exception to an ``AuthResult``.

        Parameters
        ----------
        exc:
            The exception raised by the provider.
        title:
            Toast title for the failed operation.
        event:
            Audit event name for the log line.
        email:
            Normalised email address the operation was for.
        """
        error_code = self._code_for(exc)
        message = self._message_for(exc)

        if error_code == AuthErrorCode.NETWORK_ERROR:
            self._logger.warning(
                "Network error: %s", exc,
                extra={"event": event, "email": email, "error_code": str(error_code)},
            )
        elif error_code == AuthErrorCode.UNKNOWN_ERROR:
            self._logger.error(
                "Unknown auth error: %s", exc,
                extra={"event": event, "email": email, "error_code": str(error_code)},
            )
        else:
            self._logger.warning(
                "Auth error (%s): %s", error_code, exc,
                extra={"event": event, "email": email, "error_code": str(error_code)},
            )

        return self._failure(title, error_code, message, email=email)
