"""
Document endpoints.

Owner-only CRUD for resume/cover-letter documents.
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_store
from app.core.auth_dependency import get_current_user_id
from app.core.errors import InternalError, ServiceError
from app.db.store import DocumentStore
from app.services import document_service
from app.schemas.document import (
    DocumentCreate,
    DocumentUpdate,
    DocumentResponse,
    MessageResponse,
    StatusUpdate,
    project_fields,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["Documents"])


@router.get("", status_code=status.HTTP_200_OK, response_model=List[dict])
async def list_documents(
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by lifecycle status"),
    fields: Optional[str] = Query(None, description="Comma-separated camelCase fields to return"),
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    """
    List documents for the authenticated user, newest first.

    ``fields`` trims each item to the named fields (``id`` is always kept).
    """
    try:
        documents = await document_service.list_documents(store, user_id, status=status_filter)
        return [project_fields(DocumentResponse.model_validate(doc), fields) for doc in documents]
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Failed to list documents: {e}", exc_info=True)
        raise InternalError("Error fetching documents")


@router.get("/{document_id}", status_code=status.HTTP_200_OK, response_model=DocumentResponse)
async def get_document(
    document_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    """Get a single document. 404 if missing, 403 if owned by someone else."""
    document = await document_service.get_owned_document(store, document_id, user_id)
    return DocumentResponse.model_validate(document)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=DocumentResponse)
async def create_document(
    document_data: DocumentCreate,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    """
    Create a new document.

    Requires authentication. Document will be owned by the authenticated user.
    """
    try:
        document = await document_service.create_document(
            store, user_id, document_data.model_dump(exclude_unset=True)
        )
        return DocumentResponse.model_validate(document)
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Failed to create document: {e}", exc_info=True)
        raise InternalError("Error creating document")


@router.put("/{document_id}", status_code=status.HTTP_200_OK, response_model=DocumentResponse)
async def update_document(
    document_id: str,
    document_data: DocumentUpdate,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    """
    Update an existing document.

    Only provided fields are updated, and only company, position, resume,
    cover letter, status and notes can be written.
    """
    try:
        document = await document_service.update_document(
            store, document_id, user_id, document_data.model_dump(exclude_unset=True)
        )
        return DocumentResponse.model_validate(document)
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Failed to update document: {e}", exc_info=True)
        raise InternalError("Error updating document.")


@router.put("/{document_id}/status", status_code=status.HTTP_200_OK, response_model=DocumentResponse)
async def update_document_status(
    document_id: str,
    status_data: StatusUpdate,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    """Move a document to another lifecycle status."""
    document = await document_service.update_status(store, document_id, user_id, status_data.status)
    return DocumentResponse.model_validate(document)


@router.delete("/{document_id}", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def delete_document(
    document_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    """Delete a document permanently."""
    try:
        await document_service.delete_document(store, document_id, user_id)
        return MessageResponse(message="Document deleted successfully.")
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Failed to delete document: {e}", exc_info=True)
        raise InternalError("Error deleting document.")
