"""
Share model - a capability token granting scoped access to one document.
"""
from sqlalchemy import Boolean, Column, DateTime, Index, String
from app.db.base import Base


class Share(Base):
    """
    The token is the primary key and the only credential needed to use it.

    One record per (document_id, created_by); re-sharing refreshes the record.
    """
    __tablename__ = "shares"

    token = Column(String(64), primary_key=True)
    document_id = Column(String(32), nullable=False, index=True)
    created_by = Column(String(128), nullable=False, index=True)

    # Visibility configuration
    show_resume = Column(Boolean, nullable=False, default=False)
    show_cover_letter = Column(Boolean, nullable=False, default=False)
    show_notes = Column(Boolean, nullable=False, default=False)
    editable = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index('idx_shares_document_creator', 'document_id', 'created_by'),
        Index('idx_shares_creator_created', 'created_by', 'created_at'),
    )

    def __repr__(self):
        return f"<Share(document_id={self.document_id}, created_by={self.created_by}, editable={self.editable})>"
