"""
Tests for the document store adapter.
"""
from datetime import datetime, timedelta, timezone

import pytest

from app.core.errors import ConflictError
from scripts.purge_expired_shares import purge_expired_shares

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def document_values(user_id="alice", company="Acme", status="Draft", minutes=0):
    ts = NOW + timedelta(minutes=minutes)
    return {
        "user_id": user_id,
        "company_name": company,
        "status": status,
        "created_at": ts,
        "updated_at": ts,
    }


async def test_create_assigns_id_and_get_returns_dict(store):
    created = await store.create("documents", document_values())

    assert isinstance(created["id"], str) and len(created["id"]) == 32
    fetched = await store.get("documents", created["id"])
    assert fetched["company_name"] == "Acme"
    assert fetched["created_at"] == NOW
    assert fetched["created_at"].tzinfo is not None


async def test_get_missing_returns_none(store):
    assert await store.get("documents", "missing") is None


async def test_create_with_explicit_key(store):
    values = {
        "document_id": "doc",
        "created_by": "alice",
        "created_at": NOW,
        "updated_at": NOW,
        "expires_at": NOW + timedelta(days=30),
    }
    created = await store.create("shares", values, key="abc123")
    assert created["token"] == "abc123"


async def test_query_filters_and_ordering(store):
    await store.create("documents", document_values(company="A", minutes=0))
    await store.create("documents", document_values(company="B", status="Applied", minutes=5))
    await store.create("documents", document_values(company="C", minutes=10))
    await store.create("documents", document_values(user_id="bob", company="D", minutes=15))

    newest_first = await store.query(
        "documents", [("user_id", "==", "alice")], order_by="created_at", descending=True
    )
    assert [d["company_name"] for d in newest_first] == ["C", "B", "A"]

    drafts = await store.query("documents", [("user_id", "==", "alice"), ("status", "==", "Draft")])
    assert {d["company_name"] for d in drafts} == {"A", "C"}

    recent = await store.query("documents", [("created_at", ">=", NOW + timedelta(minutes=5))])
    assert {d["company_name"] for d in recent} == {"B", "C", "D"}

    limited = await store.query("documents", order_by="created_at", limit=2)
    assert [d["company_name"] for d in limited] == ["A", "B"]

    assert await store.count("documents", [("user_id", "!=", "alice")]) == 1


async def test_unknown_field_or_operator_is_rejected(store):
    with pytest.raises(ValueError):
        await store.query("documents", [("nope", "==", 1)])
    with pytest.raises(ValueError):
        await store.query("documents", [("user_id", "~", "alice")])
    with pytest.raises(ValueError):
        await store.query("users", [])


async def test_update_and_conditional_update(store):
    created = await store.create("documents", document_values())

    updated = await store.update("documents", created["id"], {"notes": "hello"})
    assert updated["notes"] == "hello"

    with pytest.raises(ConflictError):
        await store.update("documents", created["id"], {"notes": "stolen"}, expected={"user_id": "bob"})
    assert (await store.get("documents", created["id"]))["notes"] == "hello"

    assert await store.update("documents", "missing", {"notes": "x"}) is None


async def test_delete(store):
    created = await store.create("documents", document_values())

    assert await store.delete("documents", created["id"]) is True
    assert await store.delete("documents", created["id"]) is False
    assert await store.get("documents", created["id"]) is None


async def test_ping(store):
    assert await store.ping() is True


async def test_purge_expired_shares(store):
    """Test the maintenance script removes only expired shares."""
    for token, expires_in in (("expired", -1), ("live", 1)):
        await store.create(
            "shares",
            {
                "document_id": "doc",
                "created_by": "alice",
                "created_at": NOW,
                "updated_at": NOW,
                "expires_at": datetime.now(timezone.utc) + timedelta(days=expires_in),
            },
            key=token,
        )

    assert await purge_expired_shares(store, dry_run=True) == 1
    assert await store.get("shares", "expired") is not None

    assert await purge_expired_shares(store) == 1
    assert await store.get("shares", "expired") is None
    assert await store.get("shares", "live") is not None
