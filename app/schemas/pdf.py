"""
Pydantic schemas for PDF generation.
"""
from typing import Optional
from pydantic import Field

from app.schemas.document import CamelModel


class PdfRequest(CamelModel):
    markdown_content: Optional[str] = Field(None, description="Markdown to render")
    filename: Optional[str] = Field(None, description="Download filename, defaults to document.pdf")
