"""
Share service.

Owns the share-link lifecycle: token generation, upsert per
(document, creator), 30-day expiry, per-field visibility, edit permission
and the creation rate limit.

Possession of a token is the only credential for the public share routes,
so every public path re-checks expiry and the editable/visibility flags.
"""
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple

from app.core import config
from app.core.errors import ForbiddenError, GoneError, InvalidInputError, NotFoundError
from app.core.logging_config import mask_token
from app.core.rate_limit import check_creation_rate_limit
from app.db.store import DocumentStore
from app.services import document_service
from app.services.document_service import utcnow

logger = logging.getLogger(__name__)

COLLECTION = "shares"
TOKEN_BYTES = 32  # 256 bits

# (content field on the document, visibility flag on the share)
SHARED_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("resume_markdown", "show_resume"),
    ("cover_letter_markdown", "show_cover_letter"),
    ("notes", "show_notes"),
)


def generate_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


def _flag(name: str, value: Any) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise InvalidInputError(f"'{name}' must be a boolean.")
    return value


@dataclass
class ShareResult:
    token: str
    share_url: str
    expires_at: datetime
    created: bool


class ShareManager:
    """Share-link lifecycle on top of the document store."""

    def __init__(
        self,
        store: DocumentStore,
        frontend_url: str = config.FRONTEND_URL,
        ttl_days: int = config.SHARE_TTL_DAYS,
        rate_limit: int = config.SHARE_RATE_LIMIT,
        rate_window_minutes: int = config.SHARE_RATE_WINDOW_MINUTES,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.frontend_url = frontend_url.rstrip("/")
        self.ttl = timedelta(days=ttl_days)
        self.rate_limit = rate_limit
        self.rate_window_minutes = rate_window_minutes
        self.clock = clock

    def share_url(self, token: str) -> str:
        return f"{self.frontend_url}/share/{token}"

    # ------------------------------------------------------------------
    # owner operations
    # ------------------------------------------------------------------

    async def create_or_update(
        self,
        document_id: str,
        requester_id: str,
        show_resume: Any = None,
        show_cover_letter: Any = None,
        show_notes: Any = None,
        editable: Any = None,
    ) -> ShareResult:
        """
        Share ``document_id`` or refresh the requester's existing share of it.

        Raises:
            InvalidInputError: If a flag is not a boolean
            NotFoundError: If the document does not exist
            ForbiddenError: If the requester does not own the document
            RateLimitedError: If creating a new share would exceed the hourly cap
        """
        values = {
            "show_resume": _flag("resume", show_resume),
            "show_cover_letter": _flag("coverLetter", show_cover_letter),
            "show_notes": _flag("notes", show_notes),
            "editable": _flag("editable", editable),
        }
        await document_service.get_owned_document(self.store, document_id, requester_id)

        now = self.clock()
        values["updated_at"] = now
        values["expires_at"] = now + self.ttl

        existing = await self._find_existing(document_id, requester_id)
        if existing is not None:
            share = await self.store.update(COLLECTION, existing["token"], values)
            if share is not None:
                logger.info(
                    f"Share refreshed: document_id={document_id}, user_id={requester_id}, "
                    f"token={mask_token(existing['token'])}"
                )
                return ShareResult(share["token"], self.share_url(share["token"]), share["expires_at"], False)
            # Deleted between lookup and update; fall through to create

        await check_creation_rate_limit(
            self.store,
            COLLECTION,
            "created_by",
            requester_id,
            now,
            max_requests=self.rate_limit,
            window_minutes=self.rate_window_minutes,
        )

        token = generate_token()
        values.update(document_id=document_id, created_by=requester_id, created_at=now)
        share = await self.store.create(COLLECTION, values, key=token)
        logger.info(
            f"Share created: document_id={document_id}, user_id={requester_id}, token={mask_token(token)}"
        )
        return ShareResult(token, self.share_url(token), share["expires_at"], True)

    async def _find_existing(self, document_id: str, requester_id: str) -> Optional[Dict[str, Any]]:
        shares = await self.store.query(
            COLLECTION,
            [("document_id", "==", document_id), ("created_by", "==", requester_id)],
            order_by="updated_at",
            descending=True,
            limit=1,
        )
        return shares[0] if shares else None

    async def get_latest(self, document_id: str, requester_id: str) -> Dict[str, Any]:
        await document_service.get_owned_document(self.store, document_id, requester_id)
        share = await self._find_existing(document_id, requester_id)
        if share is None:
            raise NotFoundError("No share exists for this document.")
        return self.summarize(share)

    async def list_shares(self, document_id: str, requester_id: str) -> List[Dict[str, Any]]:
        await document_service.get_owned_document(self.store, document_id, requester_id)
        shares = await self.store.query(
            COLLECTION,
            [("document_id", "==", document_id), ("created_by", "==", requester_id)],
            order_by="created_at",
            descending=True,
        )
        return [self.summarize(share) for share in shares]

    async def delete_share(self, document_id: str, token: str, requester_id: str) -> None:
        """
        Raises:
            NotFoundError: If the token does not exist
            ForbiddenError: If the requester did not create it or it belongs to another document
        """
        share = await self.store.get(COLLECTION, token)
        if share is None:
            raise NotFoundError("Share not found.")
        if share["created_by"] != requester_id or share["document_id"] != document_id:
            logger.warning(
                f"Share delete refused: document_id={document_id}, user_id={requester_id}, "
                f"token={mask_token(token)}"
            )
            raise ForbiddenError("Forbidden: You cannot delete this share.")
        await self.store.delete(COLLECTION, token)
        logger.info(f"Share deleted: document_id={document_id}, user_id={requester_id}, token={mask_token(token)}")

    def summarize(self, share: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "token": share["token"],
            "share_url": self.share_url(share["token"]),
            "document_id": share["document_id"],
            "resume": share["show_resume"],
            "cover_letter": share["show_cover_letter"],
            "notes": share["show_notes"],
            "editable": share["editable"],
            "created_at": share["created_at"],
            "updated_at": share["updated_at"],
            "expires_at": share["expires_at"],
            "expired": share["expires_at"] < self.clock(),
        }

    # ------------------------------------------------------------------
    # public (token holder) operations
    # ------------------------------------------------------------------

    async def _active_share(self, token: str) -> Dict[str, Any]:
        share = await self.store.get(COLLECTION, token)
        if share is None:
            raise NotFoundError("Share link not found.")
        if share["expires_at"] < self.clock():
            logger.info(f"Expired share accessed: token={mask_token(token)}")
            raise GoneError("This share link has expired.")
        return share

    async def resolve(self, token: str) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """
        Return ``(share, document)`` for a live token.

        Raises:
            NotFoundError: If the token or its document does not exist
            GoneError: If the share has expired
        """
        share = await self._active_share(token)
        document = await self.store.get(document_service.COLLECTION, share["document_id"])
        if document is None:
            # Document deleted after the share was created
            raise NotFoundError("Shared document no longer exists.")
        return share, document

    async def resolve_view(self, token: str) -> Dict[str, Any]:
        """Project the shared document through the share's visibility flags."""
        share, document = await self.resolve(token)
        return project_view(share, document)

    async def update_shared_document(self, token: str, content: Dict[str, Any]) -> List[str]:
        """
        Write content through an editable share.

        Only fields the share makes visible are applied; the rest are ignored.

        Returns:
            Names of the fields that were written

        Raises:
            ForbiddenError: If the share is not editable
        """
        share = await self._active_share(token)
        if not share["editable"]:
            logger.warning(f"Write refused on read-only share: token={mask_token(token)}")
            raise ForbiddenError("This share link does not allow editing.")

        values = {
            field: content[field]
            for field, flag in SHARED_FIELDS
            if share[flag] and field in content
        }
        ignored = sorted(set(content) - set(values))
        values["updated_at"] = self.clock()

        document = await self.store.update(document_service.COLLECTION, share["document_id"], values)
        if document is None:
            raise NotFoundError("Shared document no longer exists.")

        applied = sorted(field for field in values if field != "updated_at")
        logger.info(
            f"Shared document updated: document_id={share['document_id']}, token={mask_token(token)}, "
            f"applied={applied}, ignored={ignored}"
        )
        return applied


def project_view(share: Dict[str, Any], document: Dict[str, Any]) -> Dict[str, Any]:
    """
    Company, position and the editable flag are always present. Each content
    field is present only when its flag is set.
    """
    view = {
        "company_name": document.get("company_name"),
        "position_name": document.get("position_name"),
        "editable": share["editable"],
        "visibility": {
            "resume": share["show_resume"],
            "cover_letter": share["show_cover_letter"],
            "notes": share["show_notes"],
        },
    }
    for field, flag in SHARED_FIELDS:
        if share[flag]:
            view[field] = document.get(field)
    return view
