"""
Profile Models.

``Profile`` is the first-party record keyed 1:1 by the provider's user
id.  Rows from the ``profiles`` table are validated here, at the
data-store boundary: every optional field is always present and
explicitly ``None`` when the row lacks it, and malformed rows raise
``ProfileDataError`` instead of leaking half-typed data to the views.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator


class ProfileDataError(ValueError):
    """A ``profiles`` row does not match the expected shape."""

    def __init__(self, message: str, row_id: Optional[str] = None) -> None:
        self.row_id: Optional[str] = row_id
        super().__init__(message)


_TEXT_FIELDS: tuple[str, ...] = (
    "first_name",
    "last_name",
    "phone_number",
    "profile_photo_url",
    "company_role",
    "role",
    "company_id",
    "company_name",
    "company_email",
    "company_address",
    "logo_url",
    "website",
)


def _blank_to_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"expected text, got {type(value).__name__}")
    return value if value.strip() else None


class Profile(BaseModel):
    """Normalised profile record.

    ``email`` mirrors ``company_email`` and ``user_id`` mirrors ``id``;
    both are kept so consumers can rely on either key being present.
    """

    id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    profile_photo_url: Optional[str] = None
    company_role: Optional[str] = None
    role: Optional[str] = None
    profile_completed: bool = False
    company_id: Optional[str] = None
    company_name: Optional[str] = None
    company_email: Optional[str] = None
    company_address: Optional[str] = None
    logo_url: Optional[str] = None
    website: Optional[str] = None
    status: str = "active"

    model_config = {"from_attributes": True, "frozen": True}

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def _require_text_id(cls, value: Any) -> Any:
        if not isinstance(value, str):
            raise ValueError("profile id must be a string")
        return value

    @field_validator(
        "email",
        *_TEXT_FIELDS,
        mode="before",
    )
    @classmethod
    def _normalise_text(cls, value: Any) -> Optional[str]:
        return _blank_to_none(value)

    @field_validator("profile_completed", mode="before")
    @classmethod
    def _strict_completed(cls, value: Any) -> bool:
        if value is None:
            return False
        if not isinstance(value, bool):
            raise ValueError("profile_completed must be a boolean")
        return value

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value: Any) -> str:
        return _blank_to_none(value) or "active"

    @property
    def has_name(self) -> bool:
        """``True`` when at least one of first/last name is filled in."""
        return bool(self.first_name or self.last_name)

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Profile":
        """Validate a raw ``profiles`` row into a ``Profile``.

        Raises
        ------
        ProfileDataError
            If the row is not a mapping, lacks an id, or carries values
            of the wrong type.
        """
        if not isinstance(row, Mapping):
            raise ProfileDataError(
                f"profiles row must be a mapping, got {type(row).__name__}"
            )

        row_id = row.get("id")
        payload: dict[str, Any] = {name: row.get(name) for name in _TEXT_FIELDS}
        payload.update(
            id=row_id,
            user_id=row_id,
            email=row.get("company_email"),
            profile_completed=row.get("profile_completed"),
            status=row.get("status"),
        )

        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise ProfileDataError(
                f"Malformed profiles row {row_id!r}: {exc.error_count()} invalid field(s)",
                row_id=row_id if isinstance(row_id, str) else None,
            ) from exc


class ProfileSetupForm(BaseModel):
    """Onboarding form submitted from the profile-setup view."""

    first_name: str
    last_name: str
    phone_number: str = ""
    company_role: str = ""
    profile_photo_url: Optional[str] = None
    create_new_company: bool = False
    company_name: str = ""
    website: str = ""
    address: str = ""
    logo_url: Optional[str] = None

    def profile_update(self, company_id: Optional[str]) -> dict[str, Any]:
        """Column values written to the user's ``profiles`` row."""
        return {
            "first_name": self.first_name.strip(),
            "last_name": self.last_name.strip(),
            "company_role": self.company_role.strip() or None,
            "phone_number": self.phone_number.strip() or None,
            "profile_photo_url": self.profile_photo_url,
            "logo_url": self.logo_url,
            "company_id": company_id,
            "company_name": self.company_name.strip() or None,
            "company_address": self.address.strip() or None,
            "website": self.website.strip() or None,
            "profile_completed": True,
        }
