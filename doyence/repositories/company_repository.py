"""
Company Repository.

Handles ``companies`` and ``company_members`` rows created during
onboarding, the ``company_invitations`` used to join an existing company,
and the membership check used by company-scoped views.
"""

from __future__ import annotations

from typing import Optional

from doyence.database import DatabaseManager
from doyence.logger import StructuredLogger
from doyence.models.company import Company, CompanyInvitation
from doyence.models.enums import MemberRole
from doyence.repositories.base_repository import BaseRepository


class CompanyRepository(BaseRepository):
    """Data access layer for companies and their members."""

    TABLE = "companies"
    MEMBERS_TABLE = "company_members"
    INVITATIONS_TABLE = "company_invitations"

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        super().__init__(db, logger)

    def create(
        self,
        name: str,
        email: Optional[str] = None,
        website: Optional[str] = None,
        address: Optional[str] = None,
        logo_url: Optional[str] = None,
    ) -> Company:
        """Insert a company and return the stored row.

        Raises
        ------
        RuntimeError
            If the insert returned no row.
        """
        response = (
            self.supabase.table(self.TABLE)
            .insert({
                "name": name,
                "email": email,
                "website": website,
                "address": address,
                "logo_url": logo_url,
            })
            .execute()
        )
        rows = self._data_of(response) or []
        if not rows:
            raise RuntimeError(f"Company insert for {name!r} returned no row")
        company = Company.model_validate(rows[0])
        self._logger.info(
            "Company created: %s", company.name,
            extra={"event": "COMPANY_CREATED", "company_id": company.id},
        )
        return company

    def add_member(
        self, company_id: str, user_id: str, role: MemberRole = MemberRole.MEMBER
    ) -> None:
        self.supabase.table(self.MEMBERS_TABLE).insert({
            "company_id": company_id,
            "user_id": user_id,
            "role": str(role),
        }).execute()

    def is_member(self, company_id: str, user_id: str) -> bool:
        """``True`` when *user_id* has a membership row in *company_id*."""
        try:
            response = (
                self.supabase.table(self.MEMBERS_TABLE)
                .select("id")
                .eq("company_id", company_id)
                .eq("user_id", user_id)
                .single()
                .execute()
            )
        except Exception as exc:
            if self._is_no_rows(exc):
                return False
            raise
        return bool(self._data_of(response))

    def get_pending_invitation(self, token: str) -> Optional[CompanyInvitation]:
        """Look up a still-pending invitation by its token.

        Returns ``None`` when the token is unknown or already used.
        """
        response = (
            self.supabase.table(self.INVITATIONS_TABLE)
            .select("*, companies(name)")
            .eq("token", token)
            .eq("status", "pending")
            .maybe_single()
            .execute()
        )
        row = self._data_of(response)
        if not row:
            return None
        return CompanyInvitation.from_row(row)

    def accept_invitation(self, invitation_id: str) -> None:
        self.supabase.table(self.INVITATIONS_TABLE).update(
            {"status": "accepted"}
        ).eq("id", invitation_id).execute()
        self._logger.info(
            "Invitation accepted.",
            extra={"event": "INVITATION_ACCEPTED", "invitation_id": invitation_id},
        )
