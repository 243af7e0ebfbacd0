"""
Pydantic schemas for document endpoints.

Bodies and responses use camelCase on the wire; snake_case is accepted on input.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

STATUS_PATTERN = "^(Draft|Applied|Interviewing|Offer|Rejected)$"


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class DocumentBase(CamelModel):
    """Base document schema with common fields."""
    company_name: Optional[str] = Field(None, description="Company applied to", max_length=255)
    position_name: Optional[str] = Field(None, description="Position applied for", max_length=255)
    resume_markdown: Optional[str] = Field(None, description="Resume content (Markdown)")
    cover_letter_markdown: Optional[str] = Field(None, description="Cover letter content (Markdown)")
    notes: Optional[str] = Field(None, description="Free-text notes")


class DocumentCreate(DocumentBase):
    """Schema for creating a new document."""
    status: Optional[str] = Field(None, description="Lifecycle status, defaults to Draft", pattern=STATUS_PATTERN)


class DocumentUpdate(DocumentBase):
    """Schema for updating an existing document. Unknown fields are ignored."""
    status: Optional[str] = Field(None, description="Lifecycle status", pattern=STATUS_PATTERN)


class StatusUpdate(CamelModel):
    """Schema for the status-only update."""
    status: str = Field(..., description="Lifecycle status", pattern=STATUS_PATTERN)


class DocumentResponse(DocumentBase):
    """Schema for document response."""
    id: str = Field(..., description="Document ID")
    user_id: str = Field(..., description="User ID who owns this document")
    status: str = Field(..., description="Lifecycle status")
    created_at: datetime = Field(..., description="Document creation timestamp")
    updated_at: datetime = Field(..., description="Document last update timestamp")

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "id": "6f1c2b0e9d7a4f0c8a3e5b1d2c4f6a8e",
                "userId": "firebase-uid-123",
                "companyName": "Acme",
                "positionName": "Engineer",
                "resumeMarkdown": "# Jane Doe\n\nSoftware Engineer...",
                "coverLetterMarkdown": "Dear Hiring Manager,...",
                "status": "Draft",
                "notes": "Referred by Sam",
                "createdAt": "2026-01-15T10:30:00Z",
                "updatedAt": "2026-01-15T10:30:00Z"
            }
        }


class MessageResponse(BaseModel):
    message: str


def project_fields(document: DocumentResponse, fields: Optional[str]) -> dict:
    """
    Serialize ``document`` keeping only the requested camelCase fields.

    ``id`` is always kept. Unknown names are ignored.
    """
    data = document.model_dump(by_alias=True, mode="json")
    if not fields:
        return data
    wanted = {name.strip() for name in fields.split(",") if name.strip()}
    wanted.add("id")
    return {key: value for key, value in data.items() if key in wanted}
