"""
Pydantic schemas for share endpoints.
"""
from typing import List, Optional
from datetime import datetime
from pydantic import Field, StrictBool

from app.schemas.document import CamelModel


class ShareCreate(CamelModel):
    """Visibility flags and edit permission. Absent flags mean false."""
    resume: Optional[StrictBool] = Field(None, description="Expose the resume")
    cover_letter: Optional[StrictBool] = Field(None, description="Expose the cover letter")
    notes: Optional[StrictBool] = Field(None, description="Expose the notes")
    editable: Optional[StrictBool] = Field(None, description="Allow edits to visible fields")


class ShareResponse(CamelModel):
    share_url: str = Field(..., description="Public link embedding the token")
    token: str = Field(..., description="Share token")
    expires_at: datetime = Field(..., description="When the link stops working")


class ShareSummary(CamelModel):
    token: str
    share_url: str
    document_id: str
    resume: bool
    cover_letter: bool
    notes: bool
    editable: bool
    created_at: datetime
    updated_at: datetime
    expires_at: datetime
    expired: bool


class ShareVisibility(CamelModel):
    resume: bool
    cover_letter: bool
    notes: bool


class SharedDocumentView(CamelModel):
    """Content fields are omitted entirely when the share hides them."""
    company_name: Optional[str] = None
    position_name: Optional[str] = None
    editable: bool
    visibility: ShareVisibility
    resume_markdown: Optional[str] = None
    cover_letter_markdown: Optional[str] = None
    notes: Optional[str] = None


class SharedDocumentUpdate(CamelModel):
    """Content edits through a share. Fields the share hides are ignored."""
    resume_markdown: Optional[str] = None
    cover_letter_markdown: Optional[str] = None
    notes: Optional[str] = None


class SharedDocumentUpdateResponse(CamelModel):
    message: str
    updated_fields: List[str]
