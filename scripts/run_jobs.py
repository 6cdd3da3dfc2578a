"""Run the scheduled maintenance jobs without going through HTTP.

Usage:
    python scripts/run_jobs.py auto-exit
    python scripts/run_jobs.py expire-memberships
    python scripts/run_jobs.py all
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.gym_system.gym_system.container import build_container

logger = logging.getLogger("gym_system.jobs")

JOBS = ("auto-exit", "expire-memberships")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Gym maintenance jobs")
    parser.add_argument("job", choices=JOBS + ("all",))
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(
        level=getattr(logging, str(getattr(settings, "LOG_LEVEL", "INFO")).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    container = build_container(db_config=dict(settings.DB_CONFIG))

    if args.job in ("auto-exit", "all"):
        result = container.attendance_service.auto_checkout()
        logger.info("%s (processed=%d)", result.message, result.processed)
    if args.job in ("expire-memberships", "all"):
        count = container.member_service.expire_memberships()
        logger.info("Membership expiry check completed (expired=%d)", count)
    return 0


if __name__ == "__main__":
    sys.exit(main())
