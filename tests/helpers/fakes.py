from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from doyence.models.auth_models import AuthUser, SessionInfo
from doyence.models.company import Company, CompanyInvitation
from doyence.models.enums import ActivityKind, MemberRole, OtpType
from doyence.models.profile import Profile


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self._t = float(start)

    def monotonic(self) -> float:
        return self._t

    def advance(self, seconds: float) -> None:
        self._t += float(seconds)


class DummyLogger:
    def __init__(self):
        self.records: List[Tuple[str, str, Dict[str, Any]]] = []

    def _log(self, level: str, msg: str, *args: Any, **kwargs: Any) -> None:
        text = msg % args if args else msg
        self.records.append((level, text, dict(kwargs.get("extra") or {})))

    def debug(self, msg, *args, **kwargs):  # noqa: ANN001
        self._log("debug", msg, *args, **kwargs)

    def info(self, msg, *args, **kwargs):  # noqa: ANN001
        self._log("info", msg, *args, **kwargs)

    def warning(self, msg, *args, **kwargs):  # noqa: ANN001
        self._log("warning", msg, *args, **kwargs)

    def error(self, msg, *args, **kwargs):  # noqa: ANN001
        self._log("error", msg, *args, **kwargs)

    def critical(self, msg, *args, **kwargs):  # noqa: ANN001
        self._log("critical", msg, *args, **kwargs)

    def events(self) -> List[str]:
        return [extra.get("event", "") for _level, _msg, extra in self.records]


# ---------------------------------------------------------------------------
# Scheduler
# ---------------------------------------------------------------------------


class FakeTimer:
    def __init__(self, when: float, callback: Callable[..., Any], args: tuple):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Deterministic stand-in for the Tk scheduler.

    Background work runs immediately on submit; its outcome is queued with
    call_soon like the real scheduler does, so it is only delivered by
    run_pending().
    """

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self._ready: deque = deque()
        self.timers: List[FakeTimer] = []
        self.background_calls = 0

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> None:
        self._ready.append((callback, args))

    def call_later(self, delay_s: float, callback: Callable[..., Any], *args: Any) -> FakeTimer:
        timer = FakeTimer(self.clock.monotonic() + delay_s, callback, args)
        self.timers.append(timer)
        return timer

    def run_in_background(self, func, on_result, on_error) -> None:  # noqa: ANN001
        self.background_calls += 1
        try:
            result = func()
        except Exception as exc:  # noqa: BLE001
            self.call_soon(on_error, exc)
            return
        self.call_soon(on_result, result)

    @property
    def pending(self) -> int:
        return len(self._ready)

    def active_timers(self) -> List[FakeTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def run_pending(self, limit: int = 1_000) -> int:
        ran = 0
        while self._ready:
            ran += 1
            if ran > limit:
                raise AssertionError("scheduler did not settle (redirect loop?)")
            callback, args = self._ready.popleft()
            callback(*args)
        return ran

    def advance(self, seconds: float) -> None:
        self.clock.advance(seconds)
        now = self.clock.monotonic()
        while True:
            due = [t for t in self.active_timers() if t.when <= now]
            if not due:
                break
            timer = min(due, key=lambda t: t.when)
            timer.fired = True
            timer.callback(*timer.args)
            self.run_pending()
        self.run_pending()


# ---------------------------------------------------------------------------
# Identity provider
# ---------------------------------------------------------------------------


def make_session(
    user_id: str = "user-1",
    email: Optional[str] = "user@example.com",
    metadata: Optional[Dict[str, Any]] = None,
    access_token: str = "access-token",
) -> SessionInfo:
    return SessionInfo(
        access_token=access_token,
        refresh_token="refresh-token",
        user=AuthUser(id=user_id, email=email, user_metadata=metadata or {}),
    )


class FakeProviderSubscription:
    def __init__(self, provider: "FakeIdentityProvider", callback):  # noqa: ANN001
        self._provider = provider
        self._callback = callback
        self.unsubscribe_calls = 0

    def unsubscribe(self) -> None:
        self.unsubscribe_calls += 1
        if self._callback in self._provider.callbacks:
            self._provider.callbacks.remove(self._callback)


@dataclass
class FakeIdentityProvider:
    session: Optional[SessionInfo] = None
    get_session_error: Optional[Exception] = None
    sign_in_error: Optional[Exception] = None
    sign_up_error: Optional[Exception] = None
    sign_out_error: Optional[Exception] = None
    verify_error: Optional[Exception] = None
    resend_error: Optional[Exception] = None
    set_session_error: Optional[Exception] = None
    exchanged_user_id: str = "magic-user"

    callbacks: List[Callable] = field(default_factory=list)
    subscriptions: List[FakeProviderSubscription] = field(default_factory=list)
    calls: List[Tuple[str, tuple]] = field(default_factory=list)

    def call_names(self) -> List[str]:
        return [name for name, _args in self.calls]

    def emit(self, event: str, session: Optional[SessionInfo]) -> None:
        for callback in list(self.callbacks):
            callback(event, session)

    def get_session(self) -> Optional[SessionInfo]:
        self.calls.append(("get_session", ()))
        if self.get_session_error is not None:
            raise self.get_session_error
        return self.session

    def on_auth_state_change(self, callback) -> FakeProviderSubscription:  # noqa: ANN001
        self.calls.append(("on_auth_state_change", ()))
        self.callbacks.append(callback)
        subscription = FakeProviderSubscription(self, callback)
        self.subscriptions.append(subscription)
        return subscription

    def set_session(self, access_token: str, refresh_token: str) -> Optional[SessionInfo]:
        self.calls.append(("set_session", (access_token, refresh_token)))
        if self.set_session_error is not None:
            raise self.set_session_error
        self.session = make_session(user_id=self.exchanged_user_id, access_token=access_token)
        self.emit("SIGNED_IN", self.session)
        return self.session

    def sign_in_with_password(self, email: str, password: str) -> Optional[SessionInfo]:
        self.calls.append(("sign_in_with_password", (email, password)))
        if self.sign_in_error is not None:
            raise self.sign_in_error
        self.session = make_session(email=email)
        self.emit("SIGNED_IN", self.session)
        return self.session

    def sign_up(self, email: str, password: str, metadata: Dict[str, str], redirect_to: str):  # noqa: ANN201
        self.calls.append(("sign_up", (email, password, metadata, redirect_to)))
        if self.sign_up_error is not None:
            raise self.sign_up_error
        return AuthUser(id="new-user", email=email, user_metadata=metadata)

    def sign_out(self) -> None:
        self.calls.append(("sign_out", ()))
        if self.sign_out_error is not None:
            raise self.sign_out_error
        self.session = None
        self.emit("SIGNED_OUT", None)

    def verify_otp(self, email: str, token: str, otp_type: OtpType = OtpType.SIGNUP):  # noqa: ANN201
        self.calls.append(("verify_otp", (email, token, otp_type)))
        if self.verify_error is not None:
            raise self.verify_error
        self.session = make_session(email=email)
        self.emit("SIGNED_IN", self.session)
        return self.session

    def resend(self, email: str, redirect_to: str, otp_type: OtpType = OtpType.SIGNUP) -> None:
        self.calls.append(("resend", (email, redirect_to, otp_type)))
        if self.resend_error is not None:
            raise self.resend_error


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


class FakeProfileRepository:
    def __init__(self):
        self.rows: Dict[str, Dict[str, Any]] = {}
        self.errors: Dict[str, Exception] = {}
        self.update_error: Optional[Exception] = None
        self.role_error: Optional[Exception] = None
        self.admin = False
        self.superuser = False
        self.fetches: List[str] = []
        self.updates: List[Tuple[str, Dict[str, Any]]] = []

    def get_by_id(self, user_id: str) -> Optional[Profile]:
        self.fetches.append(user_id)
        if user_id in self.errors:
            raise self.errors[user_id]
        row = self.rows.get(user_id)
        return Profile.from_row(row) if row else None

    def update(self, user_id: str, values: Dict[str, Any]) -> None:
        if self.update_error is not None:
            raise self.update_error
        self.updates.append((user_id, dict(values)))
        row = self.rows.setdefault(user_id, {"id": user_id})
        row.update(values)

    def get_company_id(self, user_id: str) -> Optional[str]:
        return (self.rows.get(user_id) or {}).get("company_id")

    def is_admin(self) -> bool:
        if self.role_error is not None:
            raise self.role_error
        return self.admin

    def is_superuser(self) -> bool:
        if self.role_error is not None:
            raise self.role_error
        return self.superuser


class FakeCompanyRepository:
    def __init__(self):
        self.companies: List[Company] = []
        self.members: List[Tuple[str, str, MemberRole]] = []
        self.create_error: Optional[Exception] = None
        self.invitations: Dict[str, CompanyInvitation] = {}
        self.accepted: List[str] = []
        self.invitation_error: Optional[Exception] = None

    def create(self, name, email=None, website=None, address=None, logo_url=None) -> Company:  # noqa: ANN001
        if self.create_error is not None:
            raise self.create_error
        company = Company(
            id=f"company-{len(self.companies) + 1}",
            name=name,
            email=email,
            website=website,
            address=address,
            logo_url=logo_url,
        )
        self.companies.append(company)
        return company

    def add_member(self, company_id: str, user_id: str, role: MemberRole = MemberRole.MEMBER) -> None:
        self.members.append((company_id, user_id, role))

    def is_member(self, company_id: str, user_id: str) -> bool:
        return any(c == company_id and u == user_id for c, u, _r in self.members)

    def get_pending_invitation(self, token: str) -> Optional[CompanyInvitation]:
        if self.invitation_error is not None:
            raise self.invitation_error
        invitation = self.invitations.get(token)
        if invitation is None or invitation.status != "pending":
            return None
        return invitation

    def accept_invitation(self, invitation_id: str) -> None:
        self.accepted.append(invitation_id)
        for token, invitation in self.invitations.items():
            if invitation.id == invitation_id:
                self.invitations[token] = invitation.model_copy(update={"status": "accepted"})


# ---------------------------------------------------------------------------
# Activity source
# ---------------------------------------------------------------------------


class FakeActivitySource:
    def __init__(self):
        self.handler: Optional[Callable[[ActivityKind], None]] = None
        self.bind_calls = 0
        self.unbind_calls = 0

    def bind(self, handler) -> None:  # noqa: ANN001
        self.bind_calls += 1
        self.handler = handler

    def unbind(self) -> None:
        self.unbind_calls += 1
        self.handler = None

    def fire(self, kind: ActivityKind) -> None:
        if self.handler is not None:
            self.handler(kind)


def completed_row(user_id: str = "user-1", **overrides: Any) -> Dict[str, Any]:
    row: Dict[str, Any] = {
        "id": user_id,
        "first_name": "Ada",
        "last_name": "Lovelace",
        "profile_completed": True,
        "company_name": "Lovelace Painting",
        "company_email": "office@lovelace.test",
        "status": "active",
    }
    row.update(overrides)
    return row
