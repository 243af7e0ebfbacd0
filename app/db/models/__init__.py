"""
Database models module.

This module imports all database models to ensure they are registered with SQLAlchemy's Base.metadata
before table creation.
"""
from app.db.models.document import Document, DocumentStatus
from app.db.models.share import Share

# Explicitly export all models for clarity
__all__ = [
    "Document",
    "DocumentStatus",
    "Share",
]
