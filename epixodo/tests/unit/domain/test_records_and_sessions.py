from __future__ import annotations

import pytest

from epixodo.domain.entities import Record, RecordPage, Session, UserIdentity
from epixodo.domain.reconcile import find_record, remove_record, upsert_record
from epixodo.tests.fakes import make_record, make_session, make_token


def test_session_from_auth_payload_accepts_record_or_model() -> None:
    token = make_token(exp=2_000_000_000)
    for key in ("record", "model"):
        session = Session.from_auth_payload(
            {"token": token, key: {"id": "u1", "email": "a@b.c", "name": ""}}
        )
        assert session.user.id == "u1"
        assert session.user.display_name == "a@b.c"
        assert session.to_auth_payload()["model"]["id"] == "u1"


def test_session_requires_token_and_user() -> None:
    with pytest.raises(ValueError):
        Session.from_auth_payload({"token": "abc"})
    with pytest.raises(ValueError):
        Session.from_auth_payload({"token": "", "record": {"id": "u1"}})
    with pytest.raises(ValueError):
        UserIdentity(id=" ")


def test_session_validity_follows_jwt_exp() -> None:
    session = make_session(exp=1_000)
    assert session.expires_at() == 1_000
    assert session.is_valid(now=999) is True
    assert session.is_valid(now=1_000) is False


def test_opaque_token_has_no_expiry() -> None:
    session = Session(token="opaque-token", user=UserIdentity(id="u1"))
    assert session.expires_at() is None
    assert session.is_valid(now=10**12) is True


def test_record_from_payload_keeps_fields_without_id() -> None:
    record = Record.from_payload(
        {
            "id": "n1",
            "collectionName": "notes",
            "title": "Groceries",
            "expand": {"matter": {"id": "m1", "title": "Home"}},
        }
    )
    assert record.collection == "notes"
    assert "id" not in record.fields
    assert record.title == "Groceries"
    assert record.expanded("matter") == {"id": "m1", "title": "Home"}
    assert record.expanded("activity") is None
    assert record.to_payload()["id"] == "n1"


def test_record_page_reports_truncation() -> None:
    items = [make_record(f"t{i}") for i in range(3)]
    assert RecordPage(items=items, total_items=5).is_truncated is True
    assert RecordPage(items=items, total_items=3).is_truncated is False


def test_later_page_counts_earlier_pages_as_seen() -> None:
    items = [make_record(f"t{i}") for i in range(2)]
    assert RecordPage(items=items, page=2, per_page=3, total_items=5).is_truncated is False
    assert RecordPage(items=items, page=2, per_page=2, total_items=5).is_truncated is True


def test_upsert_replaces_in_place_and_appends_new() -> None:
    first, second = make_record("a", title="A"), make_record("b", title="B")
    edited = make_record("a", title="A2")

    replaced = upsert_record([first, second], edited)
    assert [r.id for r in replaced] == ["a", "b"]
    assert replaced[0].title == "A2"

    appended = upsert_record(replaced, make_record("c", title="C"))
    assert [r.id for r in appended] == ["a", "b", "c"]


def test_remove_and_find_record() -> None:
    records = [make_record("a"), make_record("b")]
    assert [r.id for r in remove_record(records, "a")] == ["b"]
    assert remove_record(records, "zzz") == records
    assert find_record(records, "b") is records[1]
    assert find_record(records, "zzz") is None
