"""
Share endpoints.

Owner routes manage share links for a document. Public routes take only the
token: whoever holds it gets exactly the access the share grants.
"""
import logging
from typing import List
from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import StreamingResponse
from pydantic.alias_generators import to_camel

from app.api.deps import get_pdf_service, get_share_manager
from app.core.auth_dependency import get_current_user_id
from app.services.pdf_export_service import PdfExportService, content_disposition
from app.services.share_service import ShareManager
from app.schemas.document import MessageResponse
from app.schemas.share import (
    ShareCreate,
    ShareResponse,
    ShareSummary,
    SharedDocumentUpdate,
    SharedDocumentUpdateResponse,
    SharedDocumentView,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["Sharing"])


# ============================================
# PUBLIC (TOKEN) ROUTES
# ============================================

@router.get(
    "/share/{token}",
    response_model=SharedDocumentView,
    response_model_exclude_unset=True,
)
async def get_shared_document(
    token: str,
    shares: ShareManager = Depends(get_share_manager),
):
    """
    Resolve a share link.

    Returns company, position, the editable flag and only the content
    sections the share exposes. 404 if unknown, 410 if expired.
    """
    view = await shares.resolve_view(token)
    return SharedDocumentView(**view)


@router.put("/share/{token}", response_model=SharedDocumentUpdateResponse)
async def update_shared_document(
    token: str,
    content: SharedDocumentUpdate,
    shares: ShareManager = Depends(get_share_manager),
):
    """
    Edit a document through an editable share.

    Sections the share hides are ignored even when supplied.
    """
    applied = await shares.update_shared_document(token, content.model_dump(exclude_unset=True))
    return SharedDocumentUpdateResponse(
        message="Document updated successfully.",
        updated_fields=[to_camel(field) for field in applied],
    )


@router.get("/share/{token}/download")
async def download_shared_document(
    token: str,
    resume: bool = Query(False, description="Include the resume"),
    cover_letter: bool = Query(False, description="Include the cover letter"),
    pdf_service: PdfExportService = Depends(get_pdf_service),
):
    """Render the selected shared sections to PDF and stream it."""
    export = await pdf_service.export_shared(token, resume, cover_letter)
    return StreamingResponse(
        export.chunks,
        media_type="application/pdf",
        headers={"Content-Disposition": content_disposition(export.filename)},
    )


# ============================================
# OWNER ROUTES
# ============================================

@router.post("/{document_id}/share", response_model=ShareResponse)
async def create_share(
    document_id: str,
    share_data: ShareCreate,
    response: Response,
    user_id: str = Depends(get_current_user_id),
    shares: ShareManager = Depends(get_share_manager),
):
    """
    Create a share link, or refresh the caller's existing one for this document.

    201 when a new link is created, 200 when the existing link is updated.
    Either way the link is valid for 30 days from now.
    """
    result = await shares.create_or_update(
        document_id,
        user_id,
        show_resume=share_data.resume,
        show_cover_letter=share_data.cover_letter,
        show_notes=share_data.notes,
        editable=share_data.editable,
    )
    response.status_code = status.HTTP_201_CREATED if result.created else status.HTTP_200_OK
    return ShareResponse(share_url=result.share_url, token=result.token, expires_at=result.expires_at)


@router.get("/{document_id}/share", response_model=ShareSummary)
async def get_latest_share(
    document_id: str,
    user_id: str = Depends(get_current_user_id),
    shares: ShareManager = Depends(get_share_manager),
):
    """Most recent share the caller created for this document."""
    return ShareSummary(**await shares.get_latest(document_id, user_id))


@router.get("/{document_id}/shares", response_model=List[ShareSummary])
async def list_shares(
    document_id: str,
    user_id: str = Depends(get_current_user_id),
    shares: ShareManager = Depends(get_share_manager),
):
    """All shares the caller created for this document, newest first."""
    return [ShareSummary(**share) for share in await shares.list_shares(document_id, user_id)]


@router.delete("/{document_id}/shares/{token}", response_model=MessageResponse)
async def delete_share(
    document_id: str,
    token: str,
    user_id: str = Depends(get_current_user_id),
    shares: ShareManager = Depends(get_share_manager),
):
    """Revoke a share link."""
    await shares.delete_share(document_id, token, user_id)
    return MessageResponse(message="Share deleted successfully.")
