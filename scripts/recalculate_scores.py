#!/usr/bin/env python3
"""
Recalculate lead scores from the command line.

Use after an outage, or whenever scores may have missed a background update.

Examples (from the project root):
  .venv/bin/python scripts/recalculate_scores.py --webinar-id 42
  .venv/bin/python scripts/recalculate_scores.py --sweep --lookback-minutes 1440

DATABASE_URL must be set (or present in .env).
"""
import argparse
import sys
from pathlib import Path

# project root on sys.path so src.webinar_scoring is importable
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from src.webinar_scoring.database import SessionLocal
from src.webinar_scoring.errors import ScoringError
from src.webinar_scoring.services.lead_scoring import recalculate_for_webinar
from src.webinar_scoring.services.scheduler import run_recalculation_sweep


def main():
    parser = argparse.ArgumentParser(description="Recalculate webinar lead scores")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--webinar-id", type=int, help="Recalculate every registrant of this webinar")
    group.add_argument("--sweep", action="store_true", help="Recalculate all recently active webinars")
    parser.add_argument(
        "--lookback-minutes",
        type=int,
        default=None,
        help="Activity window for --sweep (defaults to RECALC_SWEEP_LOOKBACK_MINUTES)",
    )
    args = parser.parse_args()

    if args.sweep:
        result = run_recalculation_sweep(lookback_minutes=args.lookback_minutes)
        print(
            f"Done: {result['registrants']} registrants across {result['webinars']} webinars "
            f"({result['failed_webinars']} webinars failed)"
        )
        sys.exit(1 if result["failed_webinars"] else 0)

    db = SessionLocal()
    try:
        count = recalculate_for_webinar(db, args.webinar_id)
        print(f"Done: recalculated {count} registrants for webinar {args.webinar_id}")
    except ScoringError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
