"""
Document service.

CRUD over the ``documents`` collection with ownership enforcement. Every
function takes the store first, following the rest of the service layer.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.core.errors import ConflictError, ForbiddenError, InvalidInputError, NotFoundError
from app.db.models.document import DocumentStatus
from app.db.store import DocumentStore

logger = logging.getLogger(__name__)

COLLECTION = "documents"

# Fields an owner may write directly
EDITABLE_FIELDS = (
    "company_name",
    "position_name",
    "resume_markdown",
    "cover_letter_markdown",
    "status",
    "notes",
)

STATUSES = [s.value for s in DocumentStatus]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _validate_status(value: Optional[str]) -> None:
    if value is not None and value not in STATUSES:
        raise InvalidInputError(f"Invalid status. Must be one of: {', '.join(STATUSES)}")


async def get_owned_document(store: DocumentStore, document_id: str, user_id: str) -> Dict[str, Any]:
    """
    Fetch a document and verify ``user_id`` owns it.

    Raises:
        NotFoundError: If the document does not exist
        ForbiddenError: If it belongs to someone else
    """
    document = await store.get(COLLECTION, document_id)
    if document is None:
        raise NotFoundError("Document not found.")
    if document["user_id"] != user_id:
        logger.warning(f"Ownership check failed: document_id={document_id}, user_id={user_id}")
        raise ForbiddenError("Forbidden: You do not own this document.")
    return document


async def list_documents(
    store: DocumentStore,
    user_id: str,
    status: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """List the user's documents, newest first, optionally filtered by status."""
    _validate_status(status)
    filters = [("user_id", "==", user_id)]
    if status:
        filters.append(("status", "==", status))
    documents = await store.query(COLLECTION, filters, order_by="created_at", descending=True)
    logger.debug(f"Documents listed: user_id={user_id}, total={len(documents)}, status={status}")
    return documents


async def create_document(
    store: DocumentStore,
    user_id: str,
    data: Dict[str, Any],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Create a document owned by ``user_id``. Status defaults to Draft."""
    now = now or utcnow()
    values = {field: data.get(field) for field in EDITABLE_FIELDS}
    values["status"] = values["status"] or DocumentStatus.DRAFT.value
    _validate_status(values["status"])
    values.update(user_id=user_id, created_at=now, updated_at=now)

    document = await store.create(COLLECTION, values)
    logger.info(f"Document created: document_id={document['id']}, user_id={user_id}")
    return document


async def update_document(
    store: DocumentStore,
    document_id: str,
    user_id: str,
    data: Dict[str, Any],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Partially update a document. Only whitelisted fields are applied;
    anything else in ``data`` (owner id, timestamps, id) is dropped.
    """
    await get_owned_document(store, document_id, user_id)

    values = {field: value for field, value in data.items() if field in EDITABLE_FIELDS}
    if "status" in values:
        if values["status"] is None:
            raise InvalidInputError("Status cannot be empty.")
        _validate_status(values["status"])
    values["updated_at"] = now or utcnow()

    # Owner may not change between the check and the write
    try:
        document = await store.update(COLLECTION, document_id, values, expected={"user_id": user_id})
    except ConflictError:
        logger.warning(f"Document owner changed during update: document_id={document_id}, user_id={user_id}")
        raise ForbiddenError("Forbidden: You do not own this document.")
    if document is None:
        raise NotFoundError("Document not found.")

    logger.info(f"Document updated: document_id={document_id}, user_id={user_id}, fields={sorted(values)}")
    return document


async def update_status(
    store: DocumentStore,
    document_id: str,
    user_id: str,
    status: str,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    if not status:
        raise InvalidInputError("Status is required.")
    _validate_status(status)
    return await update_document(store, document_id, user_id, {"status": status}, now=now)


async def delete_document(store: DocumentStore, document_id: str, user_id: str) -> None:
    await get_owned_document(store, document_id, user_id)
    await store.delete(COLLECTION, document_id)
    logger.info(f"Document deleted: document_id={document_id}, user_id={user_id}")
