"""
Shared Enumerations.

All string enumerations used across the session lifecycle.  ``StrEnum``
values compare equal to their string equivalents, so provider payloads
such as ``"SIGNED_IN"`` match without conversion.
"""

from __future__ import annotations

from enum import StrEnum


class AuthEvent(StrEnum):
    """Auth state-change kinds emitted by the identity provider."""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    USER_UPDATED = "USER_UPDATED"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"


class NavState(StrEnum):
    """Where the visitor belongs given their session and profile."""

    NEEDS_LOGIN = "needs-login"
    NEEDS_PROFILE_SETUP = "needs-profile-setup"
    DASHBOARD = "dashboard"


class ToastVariant(StrEnum):
    """Visual weight of a toast notification."""

    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


class ActivityKind(StrEnum):
    """Window events watched by the inactivity monitor."""

    MOUSE_DOWN = "mousedown"
    KEY_DOWN = "keydown"
    TOUCH_START = "touchstart"
    SCROLL = "scroll"
    FOCUS_IN = "focus"
    FOCUS_OUT = "blur"


class OtpType(StrEnum):
    """One-time code flavours accepted by ``verify_otp`` / ``resend``."""

    SIGNUP = "signup"
    EMAIL = "email"
    RECOVERY = "recovery"


class MemberRole(StrEnum):
    """Roles inside ``company_members``."""

    ADMIN = "admin"
    MEMBER = "member"
