"""
Unit tests for the share service.
Tests upsert, expiry, visibility projection, edit gating and the rate limit.
"""
import itertools
from datetime import timedelta

import pytest

from app.core.errors import (
    ForbiddenError,
    GoneError,
    InvalidInputError,
    NotFoundError,
    RateLimitedError,
)
from app.services import document_service
from app.services.share_service import project_view


@pytest.fixture
async def document(store):
    """A document owned by alice with every content field filled in."""
    return await document_service.create_document(
        store,
        "alice",
        {
            "company_name": "Acme",
            "position_name": "Engineer",
            "resume_markdown": "# Alice\n\nEngineer",
            "cover_letter_markdown": "Dear Acme,",
            "notes": "private notes",
        },
    )


async def test_create_share_generates_token_and_expiry(share_manager, document, clock):
    """Test a first share creates a 256-bit token valid for 30 days."""
    result = await share_manager.create_or_update(document["id"], "alice", show_resume=True)

    assert result.created is True
    assert len(result.token) == 64
    int(result.token, 16)  # hex encoded
    assert result.share_url == f"https://app.example.com/share/{result.token}"
    assert result.expires_at == clock.now + timedelta(days=30)


async def test_create_share_is_upsert_per_document_and_user(share_manager, store, document, clock):
    """Test sharing twice keeps one record with the latest config and a fresh expiry."""
    first = await share_manager.create_or_update(document["id"], "alice", show_resume=True)

    clock.advance(days=3)
    second = await share_manager.create_or_update(
        document["id"], "alice", show_resume=False, show_notes=True, editable=True
    )

    assert second.created is False
    assert second.token == first.token
    assert second.expires_at == clock.now + timedelta(days=30)

    records = await store.query("shares", [("document_id", "==", document["id"])])
    assert len(records) == 1
    assert records[0]["show_resume"] is False
    assert records[0]["show_notes"] is True
    assert records[0]["editable"] is True


async def test_create_share_requires_owner(share_manager, document):
    """Test a non-owner cannot share someone else's document."""
    with pytest.raises(ForbiddenError):
        await share_manager.create_or_update(document["id"], "bob", show_resume=True)


async def test_create_share_missing_document(share_manager):
    with pytest.raises(NotFoundError):
        await share_manager.create_or_update("does-not-exist", "alice", show_resume=True)


@pytest.mark.parametrize("bad_value", ["yes", 1, 0, [], {}])
async def test_create_share_rejects_non_boolean_flags(share_manager, document, bad_value):
    """Test visibility flags must be real booleans."""
    with pytest.raises(InvalidInputError):
        await share_manager.create_or_update(document["id"], "alice", show_notes=bad_value)


async def test_absent_flags_default_to_false(share_manager, store, document):
    result = await share_manager.create_or_update(document["id"], "alice")
    share = await store.get("shares", result.token)
    assert share["show_resume"] is False
    assert share["show_cover_letter"] is False
    assert share["show_notes"] is False
    assert share["editable"] is False


async def test_rate_limit_blocks_eleventh_new_share(share_manager, store, clock):
    """Test 10 new shares per hour succeed and the 11th is rejected without a write."""
    documents = [
        await document_service.create_document(store, "alice", {"company_name": f"Co {i}"})
        for i in range(11)
    ]

    for doc in documents[:10]:
        result = await share_manager.create_or_update(doc["id"], "alice", show_resume=True)
        assert result.created is True
        clock.advance(minutes=1)

    with pytest.raises(RateLimitedError):
        await share_manager.create_or_update(documents[10]["id"], "alice", show_resume=True)

    assert await store.count("shares", [("created_by", "==", "alice")]) == 10


async def test_rate_limit_ignores_updates_to_existing_shares(share_manager, store):
    """Test refreshing an existing share does not count against the cap."""
    documents = [
        await document_service.create_document(store, "alice", {"company_name": f"Co {i}"})
        for i in range(10)
    ]
    for doc in documents:
        await share_manager.create_or_update(doc["id"], "alice", show_resume=True)

    # Cap reached for new shares, but updates still go through
    result = await share_manager.create_or_update(documents[0]["id"], "alice", show_notes=True)
    assert result.created is False


async def test_rate_limit_window_rolls(share_manager, store, clock):
    """Test the cap frees up once older creations leave the 60-minute window."""
    documents = [
        await document_service.create_document(store, "alice", {"company_name": f"Co {i}"})
        for i in range(11)
    ]
    for doc in documents[:10]:
        await share_manager.create_or_update(doc["id"], "alice", show_resume=True)

    clock.advance(minutes=61)
    result = await share_manager.create_or_update(documents[10]["id"], "alice", show_resume=True)
    assert result.created is True


@pytest.mark.parametrize("flags", list(itertools.product([False, True], repeat=3)))
async def test_expired_share_is_gone_for_any_visibility(share_manager, document, clock, flags):
    """Test resolving after expiry always fails, whatever the share exposes."""
    show_resume, show_cover_letter, show_notes = flags
    result = await share_manager.create_or_update(
        document["id"],
        "alice",
        show_resume=show_resume,
        show_cover_letter=show_cover_letter,
        show_notes=show_notes,
    )

    clock.advance(days=30, seconds=1)
    with pytest.raises(GoneError):
        await share_manager.resolve_view(result.token)


@pytest.mark.parametrize("flags", list(itertools.product([False, True], repeat=3)))
async def test_view_never_contains_hidden_fields(share_manager, document, flags):
    """Test every visibility combination exposes exactly the flagged fields."""
    show_resume, show_cover_letter, show_notes = flags
    result = await share_manager.create_or_update(
        document["id"],
        "alice",
        show_resume=show_resume,
        show_cover_letter=show_cover_letter,
        show_notes=show_notes,
    )

    view = await share_manager.resolve_view(result.token)

    assert view["company_name"] == "Acme"
    assert view["position_name"] == "Engineer"
    assert view["editable"] is False
    assert ("resume_markdown" in view) is show_resume
    assert ("cover_letter_markdown" in view) is show_cover_letter
    assert ("notes" in view) is show_notes


async def test_resolve_unknown_token(share_manager):
    with pytest.raises(NotFoundError):
        await share_manager.resolve_view("0" * 64)


async def test_resolve_after_document_deleted(share_manager, store, document):
    """Test a share outliving its document resolves to NotFound."""
    result = await share_manager.create_or_update(document["id"], "alice", show_resume=True)
    await document_service.delete_document(store, document["id"], "alice")

    with pytest.raises(NotFoundError):
        await share_manager.resolve_view(result.token)


async def test_update_through_read_only_share_is_forbidden(share_manager, store, document):
    """Test a non-editable share refuses writes and leaves the document untouched."""
    result = await share_manager.create_or_update(document["id"], "alice", show_resume=True, editable=False)

    with pytest.raises(ForbiddenError):
        await share_manager.update_shared_document(result.token, {"resume_markdown": "hacked"})

    stored = await store.get("documents", document["id"])
    assert stored["resume_markdown"] == "# Alice\n\nEngineer"
    assert stored["updated_at"] == document["updated_at"]


async def test_update_ignores_hidden_fields(share_manager, store, document, clock):
    """Test an editable share writes visible fields and drops hidden ones."""
    result = await share_manager.create_or_update(
        document["id"], "alice", show_resume=True, show_notes=False, editable=True
    )

    applied = await share_manager.update_shared_document(
        result.token,
        {"resume_markdown": "# Alice v2", "notes": "overwritten?"},
    )

    assert applied == ["resume_markdown"]
    stored = await store.get("documents", document["id"])
    assert stored["resume_markdown"] == "# Alice v2"
    assert stored["notes"] == "private notes"
    assert stored["updated_at"] == clock.now


async def test_update_through_expired_share_is_gone(share_manager, document, clock):
    result = await share_manager.create_or_update(document["id"], "alice", show_resume=True, editable=True)
    clock.advance(days=31)

    with pytest.raises(GoneError):
        await share_manager.update_shared_document(result.token, {"resume_markdown": "late"})


async def test_list_and_latest_require_owner(share_manager, document):
    await share_manager.create_or_update(document["id"], "alice", show_resume=True)

    with pytest.raises(ForbiddenError):
        await share_manager.list_shares(document["id"], "bob")
    with pytest.raises(ForbiddenError):
        await share_manager.get_latest(document["id"], "bob")

    shares = await share_manager.list_shares(document["id"], "alice")
    assert len(shares) == 1
    latest = await share_manager.get_latest(document["id"], "alice")
    assert latest["token"] == shares[0]["token"]
    assert latest["expired"] is False


async def test_latest_share_not_found(share_manager, document):
    with pytest.raises(NotFoundError):
        await share_manager.get_latest(document["id"], "alice")


async def test_delete_share_checks_creator_and_document(share_manager, store, document):
    """Test only the creator can delete, and only under the right document."""
    result = await share_manager.create_or_update(document["id"], "alice", show_resume=True)
    other = await document_service.create_document(store, "alice", {"company_name": "Other"})

    with pytest.raises(ForbiddenError):
        await share_manager.delete_share(document["id"], result.token, "bob")
    with pytest.raises(ForbiddenError):
        await share_manager.delete_share(other["id"], result.token, "alice")
    with pytest.raises(NotFoundError):
        await share_manager.delete_share(document["id"], "f" * 64, "alice")

    await share_manager.delete_share(document["id"], result.token, "alice")
    assert await store.get("shares", result.token) is None


def test_project_view_copies_only_flagged_fields():
    share = {"show_resume": False, "show_cover_letter": True, "show_notes": False, "editable": True}
    document = {
        "company_name": "Acme",
        "position_name": "Engineer",
        "resume_markdown": "resume",
        "cover_letter_markdown": "letter",
        "notes": "notes",
    }

    view = project_view(share, document)

    assert view == {
        "company_name": "Acme",
        "position_name": "Engineer",
        "editable": True,
        "visibility": {"resume": False, "cover_letter": True, "notes": False},
        "cover_letter_markdown": "letter",
    }
