"""
Delete share links whose expiry has passed.

Expired links already stop working at read time; this only reclaims rows.
Run: python -m scripts.purge_expired_shares [--dry-run]
"""
import argparse
import asyncio
import logging
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.db.session import build_engine
from app.db.store import DocumentStore
from app.services.document_service import utcnow

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def purge_expired_shares(store: DocumentStore, dry_run: bool = False) -> int:
    """Delete (or with dry_run, count) shares that expired before now."""
    filters = [("expires_at", "<", utcnow())]
    if dry_run:
        count = await store.count("shares", filters)
        logger.info(f"{count} expired shares would be deleted")
        return count
    deleted = await store.delete_where("shares", filters)
    logger.info(f"Deleted {deleted} expired shares")
    return deleted


async def main(dry_run: bool) -> None:
    store = DocumentStore(build_engine())
    try:
        await purge_expired_shares(store, dry_run=dry_run)
    finally:
        await store.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--dry-run", action="store_true", help="Only count expired shares")
    args = parser.parse_args()
    asyncio.run(main(args.dry_run))
