#!/usr/bin/env python3
"""Run one overdue-task sweep and print a summary.

Usage:
    cd backend
    python -m scripts.run_overdue_sweep [--date YYYY-MM-DD]
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import date
from pathlib import Path

BACKEND_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(BACKEND_DIR))

# Ensure CWD is backend/ so sqlite:///data/taskhub.db resolves correctly
os.chdir(BACKEND_DIR)

from taskhub.db.database import create_db_and_tables, engine  # noqa: E402
from taskhub.services.overdue import sweep_overdue_tasks  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")
logger = logging.getLogger(__name__)


def summarize(found: int) -> str:
    if found == 0:
        return "No overdue tasks found."
    return f"Processed {found} overdue task(s)"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Log every overdue, unfinished task")
    parser.add_argument("--date", type=date.fromisoformat, default=None, help="Treat this day as today")
    args = parser.parse_args(argv)

    create_db_and_tables()
    report = sweep_overdue_tasks(engine, today=args.date)
    print(summarize(report.found))
    if report.failed:
        logger.error("%d overdue entries could not be written", report.failed)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
