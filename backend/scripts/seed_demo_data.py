#!/usr/bin/env python3
"""Seed demo principals, tasks and audit history into an empty database.

Usage:
    cd backend
    python -m scripts.seed_demo_data
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(BACKEND_DIR))

os.chdir(BACKEND_DIR)

from taskhub.config import settings  # noqa: E402
from taskhub.db.database import create_db_and_tables, engine  # noqa: E402
from taskhub.db.seed import DEMO_PASSWORD, DEMO_USERS, seed_demo_data  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")


if __name__ == "__main__":
    print("Seeding demo data...")
    create_db_and_tables()
    if seed_demo_data(engine, bcrypt_rounds=settings.bcrypt_rounds):
        for spec in DEMO_USERS:
            state = "active" if spec["status"] else "inactive"
            print(f"  CREATED: {spec['email']}  [{spec['role']}, {state}]")
        print(f"All accounts use the password {DEMO_PASSWORD!r}.")
    else:
        print("  SKIP: users already exist")
    print("Done.")
