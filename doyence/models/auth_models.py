"""
Authentication Models.

Pydantic models for everything crossing the identity-provider boundary:
the session bundle, the provider's user record, and the typed result
returned by every ``AuthService`` operation.  Views never inspect raw
provider exceptions.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import StrEnum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------

class AuthErrorCode(StrEnum):
    """Exhaustive enumeration of authentication error categories."""

    INVALID_CREDENTIALS = "invalid_credentials"
    EMAIL_NOT_CONFIRMED = "email_not_confirmed"
    EMAIL_ALREADY_EXISTS = "email_already_exists"
    INVALID_OTP = "invalid_otp"
    WEAK_PASSWORD = "weak_password"
    RATE_LIMITED = "rate_limited"
    NETWORK_ERROR = "network_error"
    VALIDATION_ERROR = "validation_error"
    NOT_AUTHENTICATED = "not_authenticated"
    UNKNOWN_ERROR = "unknown_error"


# Lower-cased fragments of provider error messages / codes mapped to the
# category and the message shown in the toast.
PROVIDER_ERROR_MAP: dict[str, tuple[AuthErrorCode, str]] = {
    "invalid login credentials": (
        AuthErrorCode.INVALID_CREDENTIALS,
        "Incorrect email or password.",
    ),
    "invalid_credentials": (
        AuthErrorCode.INVALID_CREDENTIALS,
        "Incorrect email or password.",
    ),
    "email not confirmed": (
        AuthErrorCode.EMAIL_NOT_CONFIRMED,
        "Please verify your email before signing in.",
    ),
    "user already registered": (
        AuthErrorCode.EMAIL_ALREADY_EXISTS,
        "An account with this email already exists. Try signing in.",
    ),
    "user_already_exists": (
        AuthErrorCode.EMAIL_ALREADY_EXISTS,
        "An account with this email already exists. Try signing in.",
    ),
    "token has expired or is invalid": (
        AuthErrorCode.INVALID_OTP,
        "The verification code is invalid or has expired.",
    ),
    "otp_expired": (
        AuthErrorCode.INVALID_OTP,
        "The verification code is invalid or has expired.",
    ),
    "password should be": (
        AuthErrorCode.WEAK_PASSWORD,
        "Password does not meet the minimum requirements.",
    ),
    "rate limit": (
        AuthErrorCode.RATE_LIMITED,
        "Too many attempts. Please wait a moment and try again.",
    ),
    "for security purposes": (
        AuthErrorCode.RATE_LIMITED,
        "Too many attempts. Please wait a moment and try again.",
    ),
}


# ---------------------------------------------------------------------------
# Validation result
# ---------------------------------------------------------------------------

class ValidationResult(BaseModel):
    """Result of a single client-side field validation check."""

    is_valid: bool
    error_message: Optional[str] = None

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Provider records
# ---------------------------------------------------------------------------

class AuthUser(BaseModel):
    """The identity provider's user record.

    Immutable from the application's side; ``user_metadata`` carries the
    free-form first/last name hints captured at sign-up.
    """

    id: str = Field(min_length=1)
    email: Optional[str] = None
    user_metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = {"from_attributes": True, "frozen": True}

    @field_validator("user_metadata", mode="before")
    @classmethod
    def _metadata_default(cls, value: Any) -> Any:
        return value or {}

    def metadata_name(self) -> tuple[str, str]:
        """Return the ``(first_name, last_name)`` hints, empty when absent."""
        first = self.user_metadata.get("first_name") or ""
        last = self.user_metadata.get("last_name") or ""
        return str(first), str(last)


class SessionInfo(BaseModel):
    """Opaque token bundle issued by the identity provider.

    Attributes
    ----------
    access_token:
        Short-lived JWT.
    refresh_token:
        Long-lived token used by the provider to renew the session.
    user:
        The subject of the session.
    expires_at:
        UTC expiry, ``None`` when the provider did not report one.
    issued_at:
        UTC issue time derived from ``expires_at - expires_in``.
    """

    access_token: str
    refresh_token: str = ""
    user: AuthUser
    expires_at: Optional[datetime] = None
    issued_at: Optional[datetime] = None

    model_config = {"from_attributes": True, "frozen": True}

    @property
    def user_id(self) -> str:
        return self.user.id

    @property
    def is_expired(self) -> bool:
        """``True`` once ``expires_at`` has passed."""
        if self.expires_at is None:
            return False
        return datetime.now(timezone.utc) >= self.expires_at

    @classmethod
    def from_provider(cls, raw: Any) -> Optional["SessionInfo"]:
        """Build a ``SessionInfo`` from a Supabase ``Session`` object.

        Returns ``None`` when *raw* is ``None``.  ``expires_at`` arrives as
        a unix timestamp and ``expires_in`` as seconds.
        """
        if raw is None:
            return None

        raw_user = getattr(raw, "user", None)
        if raw_user is None:
            raise ValueError("Provider session carries no user")

        expires_at: Optional[datetime] = None
        issued_at: Optional[datetime] = None
        raw_expires_at = getattr(raw, "expires_at", None)
        if raw_expires_at is not None:
            expires_at = datetime.fromtimestamp(int(raw_expires_at), tz=timezone.utc)
            expires_in = getattr(raw, "expires_in", None)
            if expires_in is not None:
                issued_at = expires_at - timedelta(seconds=int(expires_in))

        return cls(
            access_token=raw.access_token,
            refresh_token=getattr(raw, "refresh_token", None) or "",
            user=AuthUser(
                id=raw_user.id,
                email=getattr(raw_user, "email", None),
                user_metadata=getattr(raw_user, "user_metadata", None) or {},
            ),
            expires_at=expires_at,
            issued_at=issued_at,
        )


# ---------------------------------------------------------------------------
# Unified auth response
# ---------------------------------------------------------------------------

class AuthResult(BaseModel):
    """Unified response for every ``AuthService`` operation.

    Views inspect ``success`` for the happy path and ``error_code`` to
    decide on extra affordances (e.g. offering "resend code").
    """

    success: bool
    error_code: Optional[AuthErrorCode] = None
    error_message: Optional[str] = None
    user_id: Optional[str] = None
    email: Optional[str] = None
    session: Optional[SessionInfo] = None

    model_config = {"from_attributes": True}
