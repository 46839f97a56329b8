from __future__ import annotations

import pytest
from pydantic import ValidationError

from doyence.models.profile import Profile
from doyence.session_store import SessionStore
from tests.helpers.fakes import completed_row, make_session


def test_new_store_is_loading_and_uninitialised():
    snap = SessionStore().snapshot()
    assert snap.is_loading is True
    assert snap.initialized is False
    assert snap.has_session is False
    assert snap.user_id is None


def test_set_session_derives_user():
    store = SessionStore()
    store.set_session(make_session(user_id="u-1", email="a@b.test"))
    assert store.is_authenticated
    assert store.user.id == "u-1"
    assert store.snapshot().user_id == "u-1"


def test_clearing_session_clears_profile_and_role_flags():
    store = SessionStore()
    store.set_session(make_session(user_id="u-1"))
    store.set_profile(Profile.from_row(completed_row("u-1")))
    store.set_role_flags(True, True)

    store.set_session(None)

    snap = store.snapshot()
    assert snap.user is None
    assert snap.profile is None
    assert snap.is_admin is False
    assert snap.is_superuser is False


def test_switching_user_drops_previous_profile_and_raises_loading():
    store = SessionStore()
    store.set_session(make_session(user_id="u-1"))
    store.set_profile(Profile.from_row(completed_row("u-1")))
    store.set_loading(False)

    store.set_session(make_session(user_id="u-2"))

    assert store.profile is None
    assert store.is_loading is True


def test_token_refresh_for_same_user_keeps_profile():
    store = SessionStore()
    store.set_session(make_session(user_id="u-1", access_token="one"))
    profile = Profile.from_row(completed_row("u-1"))
    store.set_profile(profile)
    store.set_loading(False)

    store.set_session(make_session(user_id="u-1", access_token="two"))

    assert store.profile == profile
    assert store.is_loading is False
    assert store.session.access_token == "two"


def test_listeners_receive_snapshots_until_unsubscribed():
    store = SessionStore()
    seen = []
    unsubscribe = store.subscribe(seen.append)

    store.set_session(make_session())
    unsubscribe()
    store.set_session(None)

    assert len(seen) == 1
    assert seen[0].has_session


def test_set_loading_only_notifies_on_change():
    store = SessionStore()
    seen = []
    store.subscribe(seen.append)

    store.set_loading(True)
    store.set_loading(False)
    store.set_loading(False)

    assert [snap.is_loading for snap in seen] == [False]


def test_mark_initialized_fires_once():
    store = SessionStore()
    seen = []
    store.subscribe(seen.append)

    store.mark_initialized()
    store.mark_initialized()

    assert len(seen) == 1
    assert store.snapshot().initialized


def test_listener_can_read_store_reentrantly():
    store = SessionStore()
    reads = []
    store.subscribe(lambda _snap: reads.append(store.snapshot().user_id))

    store.set_session(make_session(user_id="u-9"))

    assert reads == ["u-9"]


def test_dispose_drops_listeners_but_keeps_state():
    store = SessionStore()
    seen = []
    store.subscribe(seen.append)
    store.set_session(make_session())

    store.dispose()
    store.set_loading(False)

    assert len(seen) == 1
    assert store.is_authenticated


def test_snapshot_is_immutable():
    snap = SessionStore().snapshot()
    with pytest.raises(ValidationError):
        snap.is_loading = False  # type: ignore[misc]
