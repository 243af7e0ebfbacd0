"""
Request-scoped access to the resources created in the application lifespan.
"""
from fastapi import Request

from app.db.store import DocumentStore
from app.services.pdf_export_service import PdfExportService
from app.services.share_service import ShareManager


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_share_manager(request: Request) -> ShareManager:
    return request.app.state.share_manager


def get_pdf_service(request: Request) -> PdfExportService:
    return request.app.state.pdf_service
