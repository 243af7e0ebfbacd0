"""
PDF Export Service.

Markdown -> HTML -> styled document -> PDF, for both owner exports and
downloads through a share link.
"""
import logging
import re
from collections.abc import AsyncIterator
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from app.core import config
from app.core.errors import ForbiddenError, InternalError, InvalidInputError, RenderError
from app.core.logging_config import mask_token
from app.pdf.renderer import Renderer
from app.services.markdown_formatter import render_markdown
from app.services.share_service import ShareManager

logger = logging.getLogger(__name__)

SECTION_SEPARATOR = "\n\n---\n\n"

DOCUMENT_TEMPLATE = (
    '<!DOCTYPE html><html><head><meta charset="utf-8"><style>{styles}</style></head>'
    '<body><div class="resume-preview">{body}</div></body></html>'
)


def load_stylesheet(path: str = None) -> str:
    """Read the PDF style sheet. A missing file yields an empty sheet."""
    path = Path(path or config.PDF_STYLES_PATH)
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        logger.warning(f"PDF style sheet not readable at {path}: {e}")
        return ""


def compose_html(markdown_text: str, stylesheet: str) -> str:
    """Wrap formatted Markdown in the fixed print template."""
    # "</style" inside the sheet would end the style element early
    safe_styles = re.sub(r"</(style)", r"<\\/\1", stylesheet, flags=re.IGNORECASE)
    return DOCUMENT_TEMPLATE.format(styles=safe_styles, body=render_markdown(markdown_text))


def sanitize_filename(filename: Optional[str], default: str = "document.pdf") -> str:
    """Strip path parts and header-unsafe characters; ensure a .pdf suffix."""
    name = (filename or "").strip().replace("\\", "/").split("/")[-1]
    name = re.sub(r"[^A-Za-z0-9._ -]", "", name).strip(" .")
    if not name:
        return default
    if not name.lower().endswith(".pdf"):
        name = f"{name}.pdf"
    return name


def slugify(value: Optional[str], default: str = "document") -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (value or "").lower()).strip("-")
    return slug or default


def shared_filename(company_name: Optional[str], include_resume: bool, include_cover_letter: bool) -> str:
    if include_resume and include_cover_letter:
        suffix = "application"
    elif include_resume:
        suffix = "resume"
    else:
        suffix = "cover-letter"
    return f"{slugify(company_name)}-{suffix}.pdf"


@dataclass
class PdfExport:
    filename: str
    chunks: AsyncIterator[bytes]


class PdfExportService:
    """Owns the renderer handle and the style sheet."""

    def __init__(self, renderer: Renderer, stylesheet: Optional[str] = None, share_manager: ShareManager = None):
        self.renderer = renderer
        self.stylesheet = load_stylesheet() if stylesheet is None else stylesheet
        self.share_manager = share_manager

    @staticmethod
    def _require_content(markdown_text: Optional[str]) -> None:
        if markdown_text is None or not markdown_text.strip():
            raise InvalidInputError("Markdown content is required.")

    async def render_markdown_to_pdf(self, markdown_text: str, stylesheet: Optional[str] = None) -> bytes:
        """
        Render Markdown to PDF bytes.

        Raises:
            InvalidInputError: If there is no content (checked before rendering)
            InternalError: If the renderer fails
        """
        self._require_content(markdown_text)
        document = compose_html(markdown_text, self.stylesheet if stylesheet is None else stylesheet)
        try:
            return await self.renderer.render(document)
        except RenderError as e:
            logger.error(f"PDF render failed: renderer={self.renderer.name}, error={e}")
            raise InternalError("Error generating PDF.")

    async def stream_markdown_to_pdf(self, markdown_text: str, stylesheet: Optional[str] = None) -> AsyncIterator[bytes]:
        """
        Like render_markdown_to_pdf but yields chunks.

        The first chunk is produced before this returns, so converter start-up
        failures surface as InternalError while a clean 500 is still possible.
        """
        self._require_content(markdown_text)
        document = compose_html(markdown_text, self.stylesheet if stylesheet is None else stylesheet)
        chunks = self.renderer.stream(document)
        try:
            first = await chunks.__anext__()
        except StopAsyncIteration:
            logger.error(f"PDF render produced no output: renderer={self.renderer.name}")
            raise InternalError("Error generating PDF.")
        except RenderError as e:
            logger.error(f"PDF render failed: renderer={self.renderer.name}, error={e}")
            raise InternalError("Error generating PDF.")

        async def body():
            yield first
            try:
                async for chunk in chunks:
                    yield chunk
            except RenderError as e:
                # Headers are already sent; the client sees a truncated download
                logger.error(f"PDF stream aborted: renderer={self.renderer.name}, error={e}")
                raise

        return body()

    async def export_shared(self, token: str, include_resume: bool, include_cover_letter: bool) -> PdfExport:
        """
        Render the sections of a shared document the caller selected.

        Raises:
            NotFoundError / GoneError: From share resolution
            ForbiddenError: If a requested section is hidden by the share
            InvalidInputError: If nothing was selected or selected sections are empty
        """
        share, document = await self.share_manager.resolve(token)

        if include_resume and not share["show_resume"]:
            raise ForbiddenError("The resume is not shared through this link.")
        if include_cover_letter and not share["show_cover_letter"]:
            raise ForbiddenError("The cover letter is not shared through this link.")
        if not include_resume and not include_cover_letter:
            raise InvalidInputError("Select the resume, the cover letter, or both.")

        sections = []
        if include_resume:
            sections.append(document.get("resume_markdown") or "")
        if include_cover_letter:
            sections.append(document.get("cover_letter_markdown") or "")
        if not all(section.strip() for section in sections):
            raise InvalidInputError("The selected content is empty.")

        markdown_text = SECTION_SEPARATOR.join(sections)
        filename = shared_filename(document.get("company_name"), include_resume, include_cover_letter)
        logger.info(
            f"Shared PDF export: document_id={share['document_id']}, token={mask_token(token)}, "
            f"filename={filename}"
        )
        return PdfExport(filename=filename, chunks=await self.stream_markdown_to_pdf(markdown_text))


def content_disposition(filename: str) -> str:
    return f'attachment; filename="{filename}"'
