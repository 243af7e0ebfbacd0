"""
Document model - one resume/cover-letter bundle for a single application.
"""
import enum
import uuid

from sqlalchemy import Column, String, Text, DateTime, Index
from app.db.base import Base


class DocumentStatus(str, enum.Enum):
    DRAFT = "Draft"
    APPLIED = "Applied"
    INTERVIEWING = "Interviewing"
    OFFER = "Offer"
    REJECTED = "Rejected"


class Document(Base):
    """
    Resume and cover letter for one company/position, owned by one user.

    Content fields hold Markdown text.
    """
    __tablename__ = "documents"

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    user_id = Column(String(128), nullable=False, index=True)

    company_name = Column(String(255), nullable=True)
    position_name = Column(String(255), nullable=True)

    # Content
    resume_markdown = Column(Text, nullable=True)
    cover_letter_markdown = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    status = Column(String(32), nullable=False, default=DocumentStatus.DRAFT.value, index=True)

    # Timestamps are set by the services so they follow the injected clock
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index('idx_documents_user_status_created', 'user_id', 'status', 'created_at'),
    )

    def __repr__(self):
        return f"<Document(id={self.id}, company='{self.company_name}', status='{self.status}')>"
