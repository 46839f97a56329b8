from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from doyence.database import BackendUnavailableError, DatabaseManager
from doyence.identity import IdentityProvider
from doyence.models.enums import MemberRole, OtpType
from doyence.models.profile import ProfileDataError
from doyence.repositories.company_repository import CompanyRepository
from doyence.repositories.profile_repository import ProfileRepository
from tests.helpers.fakes import completed_row


class _NoRows(Exception):
    code = "PGRST116"


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def db(client):
    return SimpleNamespace(supabase=client)


def _query(client) -> MagicMock:  # noqa: ANN001
    """The chained query builder returned by ``client.table(...)``."""
    return client.table.return_value


# ---------------------------------------------------------------------------
# ProfileRepository
# ---------------------------------------------------------------------------


def test_get_by_id_validates_row(client, db, logger):
    q = _query(client)
    q.select.return_value.eq.return_value.maybe_single.return_value.execute.return_value = (
        SimpleNamespace(data=completed_row("u-1"))
    )

    profile = ProfileRepository(db, logger).get_by_id("u-1")

    client.table.assert_called_with("profiles")
    q.select.return_value.eq.assert_called_with("id", "u-1")
    assert profile.first_name == "Ada"


def test_get_by_id_without_row_returns_none(client, db, logger):
    q = _query(client)
    q.select.return_value.eq.return_value.maybe_single.return_value.execute.return_value = None

    assert ProfileRepository(db, logger).get_by_id("u-1") is None


def test_get_by_id_rejects_malformed_row(client, db, logger):
    q = _query(client)
    q.select.return_value.eq.return_value.maybe_single.return_value.execute.return_value = (
        SimpleNamespace(data={"id": "u-1", "profile_completed": "true"})
    )

    with pytest.raises(ProfileDataError):
        ProfileRepository(db, logger).get_by_id("u-1")


def test_update_stamps_updated_at(client, db, logger):
    ProfileRepository(db, logger).update("u-1", {"first_name": "Ada"})

    payload = _query(client).update.call_args.args[0]
    assert payload["first_name"] == "Ada"
    assert "updated_at" in payload
    _query(client).update.return_value.eq.assert_called_with("id", "u-1")


def test_get_company_id_treats_no_rows_as_none(client, db, logger):
    q = _query(client)
    q.select.return_value.eq.return_value.single.return_value.execute.side_effect = _NoRows()

    assert ProfileRepository(db, logger).get_company_id("u-1") is None


def test_get_company_id_propagates_other_errors(client, db, logger):
    q = _query(client)
    q.select.return_value.eq.return_value.single.return_value.execute.side_effect = ConnectionError()

    with pytest.raises(ConnectionError):
        ProfileRepository(db, logger).get_company_id("u-1")


def test_role_rpcs(client, db, logger):
    client.rpc.return_value.execute.return_value = SimpleNamespace(data=True)
    repo = ProfileRepository(db, logger)

    assert repo.is_admin() is True
    assert repo.is_superuser() is True
    assert [c.args[0] for c in client.rpc.call_args_list] == ["is_admin", "is_superuser"]


def test_unconfigured_backend_raises(logger):
    db = DatabaseManager(supabase_url="", supabase_key="", logger=logger)

    with pytest.raises(BackendUnavailableError):
        ProfileRepository(db, logger).get_by_id("u-1")
    assert db.is_configured is False


# ---------------------------------------------------------------------------
# CompanyRepository
# ---------------------------------------------------------------------------


def test_create_company_returns_stored_row(client, db, logger):
    _query(client).insert.return_value.execute.return_value = SimpleNamespace(
        data=[{"id": "c-1", "name": "Hopper Coatings", "created_at": "2026-01-01"}]
    )

    company = CompanyRepository(db, logger).create("Hopper Coatings", email="g@h.test")

    assert company.id == "c-1"
    assert _query(client).insert.call_args.args[0]["email"] == "g@h.test"


def test_create_company_without_row_raises(client, db, logger):
    _query(client).insert.return_value.execute.return_value = SimpleNamespace(data=[])

    with pytest.raises(RuntimeError):
        CompanyRepository(db, logger).create("Hopper Coatings")


def test_add_member_writes_role(client, db, logger):
    CompanyRepository(db, logger).add_member("c-1", "u-1", MemberRole.ADMIN)

    client.table.assert_called_with("company_members")
    assert _query(client).insert.call_args.args[0] == {
        "company_id": "c-1",
        "user_id": "u-1",
        "role": "admin",
    }


def test_is_member_no_rows_is_false(client, db, logger):
    q = _query(client)
    q.select.return_value.eq.return_value.eq.return_value.single.return_value.execute.side_effect = (
        _NoRows("JSON object requested, multiple (or no) rows returned")
    )

    assert CompanyRepository(db, logger).is_member("c-1", "u-1") is False


def test_pending_invitation_carries_company_name(client, db, logger):
    q = _query(client)
    q.select.return_value.eq.return_value.eq.return_value.maybe_single.return_value.execute.return_value = (
        SimpleNamespace(data={
            "id": "inv-1",
            "company_id": "c-1",
            "token": "tok",
            "status": "pending",
            "companies": {"name": "Hopper Coatings"},
        })
    )

    invitation = CompanyRepository(db, logger).get_pending_invitation("tok")

    client.table.assert_called_with("company_invitations")
    q.select.assert_called_with("*, companies(name)")
    q.select.return_value.eq.return_value.eq.assert_called_with("status", "pending")
    assert invitation.company_id == "c-1"
    assert invitation.company_name == "Hopper Coatings"


def test_unknown_invitation_is_none(client, db, logger):
    q = _query(client)
    q.select.return_value.eq.return_value.eq.return_value.maybe_single.return_value.execute.return_value = None

    assert CompanyRepository(db, logger).get_pending_invitation("tok") is None


def test_accept_invitation_marks_it_accepted(client, db, logger):
    CompanyRepository(db, logger).accept_invitation("inv-1")

    q = _query(client)
    q.update.assert_called_with({"status": "accepted"})
    q.update.return_value.eq.assert_called_with("id", "inv-1")


# ---------------------------------------------------------------------------
# IdentityProvider
# ---------------------------------------------------------------------------


def _raw_session(user_id: str = "u-1"):  # noqa: ANN202
    return SimpleNamespace(
        access_token="at",
        refresh_token="rt",
        expires_at=1_900_000_000,
        expires_in=3600,
        user=SimpleNamespace(id=user_id, email="ada@example.com", user_metadata={"first_name": "Ada"}),
    )


def test_get_session_converts_provider_session(client, db, logger):
    client.auth.get_session.return_value = _raw_session()

    session = IdentityProvider(db, logger).get_session()

    assert session.user_id == "u-1"
    assert session.user.metadata_name() == ("Ada", "")
    assert (session.expires_at - session.issued_at).total_seconds() == 3600


def test_get_session_none(client, db, logger):
    client.auth.get_session.return_value = None
    assert IdentityProvider(db, logger).get_session() is None


def test_auth_events_are_relayed_as_session_info(client, db, logger):
    seen = []
    IdentityProvider(db, logger).on_auth_state_change(lambda e, s: seen.append((e, s)))
    relay = client.auth.on_auth_state_change.call_args.args[0]

    relay("SIGNED_IN", _raw_session("u-7"))
    relay("SIGNED_OUT", None)

    assert seen[0][0] == "SIGNED_IN"
    assert seen[0][1].user_id == "u-7"
    assert seen[1] == ("SIGNED_OUT", None)


def test_sign_up_passes_metadata_and_redirect(client, db, logger):
    client.auth.sign_up.return_value = SimpleNamespace(
        user=SimpleNamespace(id="u-2", email="g@h.test", user_metadata=None),
    )

    user = IdentityProvider(db, logger).sign_up(
        "g@h.test", "password123", {"first_name": "Grace"}, "https://app.test/verify",
    )

    credentials = client.auth.sign_up.call_args.args[0]
    assert credentials["options"] == {
        "data": {"first_name": "Grace"},
        "email_redirect_to": "https://app.test/verify",
    }
    assert user.id == "u-2"
    assert user.user_metadata == {}


def test_verify_otp_sends_type(client, db, logger):
    client.auth.verify_otp.return_value = SimpleNamespace(session=_raw_session())

    IdentityProvider(db, logger).verify_otp("g@h.test", "123456", OtpType.SIGNUP)

    assert client.auth.verify_otp.call_args.args[0] == {
        "email": "g@h.test",
        "token": "123456",
        "type": "signup",
    }
