"""
PDF generation endpoint.
"""
import logging
from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from app.api.deps import get_pdf_service
from app.core.auth_dependency import get_current_user_id
from app.services.pdf_export_service import PdfExportService, content_disposition, sanitize_filename
from app.schemas.pdf import PdfRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["PDF"])


@router.post("/generate-pdf")
async def generate_pdf(
    pdf_request: PdfRequest,
    user_id: str = Depends(get_current_user_id),
    pdf_service: PdfExportService = Depends(get_pdf_service),
):
    """
    Render Markdown to an A4 PDF download.

    400 if ``markdownContent`` is missing or blank.
    """
    filename = sanitize_filename(pdf_request.filename)
    chunks = await pdf_service.stream_markdown_to_pdf(pdf_request.markdown_content)
    logger.info(f"PDF generated: user_id={user_id}, filename={filename}")
    return StreamingResponse(
        chunks,
        media_type="application/pdf",
        headers={"Content-Disposition": content_disposition(filename)},
    )
