"""Remove old audio files from the local uploads directory.

Environment: ``UPLOADS_DIR`` (default ``./uploads``), ``MAX_FILE_AGE_DAYS``
(default 30) and ``DRY_RUN=true`` to only report what would be deleted.
"""

import logging
import os
import sys

# Add project root to path so we can import app
sys.path.append(os.getcwd())

from app.services.storage import purge_expired_uploads

logger = logging.getLogger("scripts.clean_uploads")


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    uploads_dir = os.environ.get("UPLOADS_DIR", "./uploads")
    max_age_days = int(os.environ.get("MAX_FILE_AGE_DAYS", "30"))
    dry_run = os.environ.get("DRY_RUN") == "true"

    logger.info("Cleaning uploads in %s (max age %d days, dry run: %s)", uploads_dir, max_age_days, dry_run)

    try:
        report = purge_expired_uploads(uploads_dir, max_age_days=max_age_days, dry_run=dry_run)
    except OSError as exc:
        logger.error("Error cleaning uploads: %s", exc)
        return 1

    total_mb = round(report.total_bytes / (1024 * 1024), 2)
    if report.deleted_count == 0:
        logger.info("No old files to clean")
    elif dry_run:
        logger.info("Would delete %d files (%sMB)", report.deleted_count, total_mb)
        logger.info("Run without DRY_RUN=true to actually delete files")
    else:
        logger.info("Deleted %d files (%sMB)", report.deleted_count, total_mb)
    return 0


if __name__ == "__main__":
    sys.exit(main())
