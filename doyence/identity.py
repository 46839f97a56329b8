"""
Identity Provider Adapter.

Thin wrapper around ``supabase.Client.auth`` that converts the provider's
session objects into :class:`~doyence.models.auth_models.SessionInfo`.
Everything else in the codebase talks to this class, never to
``client.auth`` directly, so tests can swap in a fake provider.

Provider exceptions propagate unchanged; ``AuthService`` classifies them.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol

from doyence.database import DatabaseManager
from doyence.logger import StructuredLogger
from doyence.models.auth_models import AuthUser, SessionInfo
from doyence.models.enums import OtpType

ProviderCallback = Callable[[str, Optional[SessionInfo]], None]


class ProviderSubscription(Protocol):
    def unsubscribe(self) -> None:
        ...


class IdentityProvider:
    """Supabase Auth behind a small typed surface.

    Parameters
    ----------
    db:
        Database manager owning the Supabase client.
    logger:
        Structured logger.
    """

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        self._db: DatabaseManager = db
        self._logger: StructuredLogger = logger

    @property
    def _auth(self) -> Any:
        return self._db.supabase.auth

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def get_session(self) -> Optional[SessionInfo]:
        """Return the session persisted by the client, if any."""
        return SessionInfo.from_provider(self._auth.get_session())

    def on_auth_state_change(self, callback: ProviderCallback) -> ProviderSubscription:
        """Register *callback* for provider auth events.

        The callback receives the event name and the converted session.
        """

        def _relay(event: Any, raw_session: Any) -> None:
            callback(str(event), SessionInfo.from_provider(raw_session))

        return self._auth.on_auth_state_change(_relay)

    def set_session(self, access_token: str, refresh_token: str) -> Optional[SessionInfo]:
        """Install tokens obtained out of band (magic-link fragment)."""
        response = self._auth.set_session(access_token, refresh_token)
        return SessionInfo.from_provider(response.session)

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def sign_in_with_password(self, email: str, password: str) -> Optional[SessionInfo]:
        response = self._auth.sign_in_with_password({
            "email": email,
            "password": password,
        })
        return SessionInfo.from_provider(response.session)

    def sign_up(
        self,
        email: str,
        password: str,
        metadata: dict[str, str],
        redirect_to: str,
    ) -> Optional[AuthUser]:
        """Create an account; the provider emails a confirmation code.

        Returns the new user, or ``None`` when the provider withholds it.
        """
        response = self._auth.sign_up({
            "email": email,
            "password": password,
            "options": {
                "data": metadata,
                "email_redirect_to": redirect_to,
            },
        })
        raw_user = response.user
        if raw_user is None:
            return None
        return AuthUser(
            id=raw_user.id,
            email=getattr(raw_user, "email", None),
            user_metadata=getattr(raw_user, "user_metadata", None) or {},
        )

    def sign_out(self) -> None:
        self._auth.sign_out()

    def verify_otp(
        self, email: str, token: str, otp_type: OtpType = OtpType.SIGNUP
    ) -> Optional[SessionInfo]:
        response = self._auth.verify_otp({
            "email": email,
            "token": token,
            "type": str(otp_type),
        })
        return SessionInfo.from_provider(response.session)

    def resend(
        self, email: str, redirect_to: str, otp_type: OtpType = OtpType.SIGNUP
    ) -> None:
        self._auth.resend({
            "type": str(otp_type),
            "email": email,
            "options": {"email_redirect_to": redirect_to},
        })
