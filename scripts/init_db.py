#!/usr/bin/env python3
"""
Create the video generation ledger table.

Usage:
    uv run scripts/init_db.py
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from loguru import logger

from app.generation.services.ledger import VideoLedgerService
from reelsmith_core.logging import setup_logging


def main():
    setup_logging()
    VideoLedgerService().ensure_table()
    logger.info("Database initialized")


if __name__ == "__main__":
    main()
