"""
Repair userChallenges that were verified but never marked as completed.

Runs once against the configured document store. The on_user_challenge_written
Cloud Function keeps new records consistent; this script fixes older ones.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.dependencies import get_document_store
from backend.repositories.user_challenges import UserChallengeRepository


logger = logging.getLogger(__name__)


def fix_verified_challenges(repo: UserChallengeRepository, *, dry_run: bool) -> dict:
    pending = repo.list_verified_not_completed()
    fixed = 0
    errors = 0
    for user_challenge in pending:
        if dry_run:
            logger.info(
                "Would fix %s (status=%s, challenge=%s)",
                user_challenge.id,
                user_challenge.status,
                user_challenge.challenge_id,
            )
            continue
        try:
            if repo.repair_verified(user_challenge):
                fixed += 1
                logger.info(
                    "Fixed %s: status %s -> completed",
                    user_challenge.id,
                    user_challenge.status,
                )
        except Exception as e:
            errors += 1
            logger.error("Error fixing %s: %s", user_challenge.id, e)
    return {"found": len(pending), "fixed": fixed, "errors": errors}


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Mark verified userChallenges as completed"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List the records that would be fixed without saving",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")
    repo = UserChallengeRepository(get_document_store())
    summary = fix_verified_challenges(repo, dry_run=args.dry_run)

    logger.info(
        "Verified but not completed: %d, fixed: %d, errors: %d",
        summary["found"],
        summary["fixed"],
        summary["errors"],
    )
    return 1 if summary["errors"] else 0


if __name__ == "__main__":
    sys.exit(main())
