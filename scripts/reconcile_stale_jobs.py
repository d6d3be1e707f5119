#!/usr/bin/env python3
"""
CLI utility to fail generation jobs abandoned in a non-terminal status.

Usage:
    uv run scripts/reconcile_stale_jobs.py --max-age-minutes 30
"""

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.generation.services.reconcile import reconcile_stale_jobs
from reelsmith_core.logging import setup_logging


def main():
    parser = argparse.ArgumentParser(description="Fail stale video generation jobs")
    parser.add_argument(
        "--max-age-minutes",
        type=int,
        default=None,
        help="Override age in minutes (defaults to settings.STALE_JOB_MAX_AGE_MINUTES)",
    )
    args = parser.parse_args()

    setup_logging()
    result = reconcile_stale_jobs(max_age_minutes=args.max_age_minutes)
    print(json.dumps(result, indent=2, default=str))


if __name__ == "__main__":
    main()
