"""
Company Model.

A company row created during onboarding when the user chooses to start a
new company, and the invitation used to join an existing one instead.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class Company(BaseModel):
    """Represents a ``companies`` row."""

    id: str = Field(min_length=1)
    name: str
    email: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    logo_url: Optional[str] = None

    model_config = {"from_attributes": True, "extra": "ignore"}


class CompanyInvitation(BaseModel):
    """A ``company_invitations`` row, with the invited company's name."""

    id: str = Field(min_length=1)
    company_id: str = Field(min_length=1)
    token: str
    status: str = "pending"
    company_name: Optional[str] = None

    model_config = {"from_attributes": True, "extra": "ignore", "frozen": True}

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "CompanyInvitation":
        """Build from a row selected with its embedded ``companies`` record."""
        company = row.get("companies") or {}
        return cls.model_validate({**row, "company_name": company.get("name")})
