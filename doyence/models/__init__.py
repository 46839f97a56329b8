"""
Data Models Package.

Re-exports the Pydantic models and enumerations::

    from doyence.models import Profile, SessionInfo, NavState
"""

from __future__ import annotations

from doyence.models.auth_models import (
    AuthErrorCode,
    AuthResult,
    AuthUser,
    SessionInfo,
    ValidationResult,
)
from doyence.models.company import Company, CompanyInvitation
from doyence.models.enums import (
    ActivityKind,
    AuthEvent,
    MemberRole,
    NavState,
    OtpType,
    ToastVariant,
)
from doyence.models.profile import Profile, ProfileDataError, ProfileSetupForm

__all__ = [
    "ActivityKind",
    "AuthErrorCode",
    "AuthEvent",
    "AuthResult",
    "AuthUser",
    "Company",
    "CompanyInvitation",
    "MemberRole",
    "NavState",
    "OtpType",
    "Profile",
    "ProfileDataError",
    "ProfileSetupForm",
    "SessionInfo",
    "ToastVariant",
    "ValidationResult",
]
