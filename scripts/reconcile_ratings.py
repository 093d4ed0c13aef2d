#!/usr/bin/env python3
"""
Rating Reconciliation Script

Repairs derived data:
1. Deletes reviews whose book no longer exists
2. Recalculates every book's average_rating and review_count

Run it after data imports, manual database edits, or to correct the rare
summary left stale by two concurrent review changes on the same book.

Usage:
    # From project root with venv activated:
    python scripts/reconcile_ratings.py

    # Options:
    python scripts/reconcile_ratings.py --skip-orphans   # Only recalculate ratings
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from bookreviews.database import SessionLocal
from bookreviews.services.ratings import recalculate_all_book_ratings
from bookreviews.services.reviews import purge_orphaned_reviews

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def reconcile(skip_orphans: bool = False) -> tuple[int, int]:
    """
    Run the reconciliation sweeps.

    Returns:
        (orphaned reviews deleted, book summaries corrected)
    """
    db = SessionLocal()
    try:
        purged = 0 if skip_orphans else purge_orphaned_reviews(db)
        corrected = recalculate_all_book_ratings(db)
    except Exception:
        db.rollback()
        logger.exception("Reconciliation failed; nothing after the last commit was saved")
        raise
    finally:
        db.close()

    return purged, corrected


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Purge orphaned reviews and recalculate book ratings"
    )
    parser.add_argument(
        "--skip-orphans",
        action="store_true",
        help="Do not delete reviews of missing books",
    )

    args = parser.parse_args()

    purged, corrected = reconcile(skip_orphans=args.skip_orphans)
    logger.info(f"Done: {purged} orphaned reviews deleted, {corrected} ratings corrected")


if __name__ == "__main__":
    main()
