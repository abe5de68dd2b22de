from __future__ import annotations

from epixodo.adapters.session_store import AUTH_STORAGE_KEY, SessionStore
from epixodo.tests.fakes import make_session


def test_empty_store_has_no_user_and_logout_is_safe() -> None:
    store = SessionStore({})
    assert store.current_user() is None
    assert store.is_valid is False
    store.logout()
    store.logout()


def test_save_and_restore_session() -> None:
    storage: dict = {}
    store = SessionStore(storage)
    session = make_session()

    store.save(session)

    assert AUTH_STORAGE_KEY in storage
    restored = SessionStore(storage).current_user()
    assert restored == session
    assert store.is_valid is True

    store.logout()
    assert storage == {}
    assert store.current_user() is None


def test_expired_session_is_not_valid() -> None:
    storage: dict = {}
    store = SessionStore(storage, clock=lambda: 2_000.0)
    store.save(make_session(exp=1_000))
    assert store.current_user() is not None
    assert store.is_valid is False


def test_malformed_payload_is_discarded() -> None:
    storage = {AUTH_STORAGE_KEY: {"token": "abc"}}
    store = SessionStore(storage)
    assert store.current_user() is None
    assert AUTH_STORAGE_KEY not in storage
