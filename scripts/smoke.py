# scripts/smoke.py
"""
Smoke test script for the termsnap engine.

Builds a one-year calendar and a synthetic pupil population in memory, then
walks the operator workflow at a pinned instant: status, coverage, accurate
repair, forced repair, validation and cleanup.

Usage
-----
1. Defaults (500 pupils, as of 2025-12-20):
    $ python scripts/smoke.py

2. Custom population and instant:
    $ python scripts/smoke.py --pupils 50 --at 2025-12-08
"""

import argparse
import logging
import sys
from datetime import datetime

from dotenv import load_dotenv

from termsnap.core.calendar.resolver import period_message
from termsnap.core.clock import fixed_clock
from termsnap.core.contracts.calendar import EntityRef, Period, YearContainer
from termsnap.core.facade import SnapshotFacade
from termsnap.core.lifecycle.manager import SnapshotLifecycleManager
from termsnap.core.lifecycle.providers import live_from_mapping
from termsnap.core.store.memory import InMemorySnapshotStore

# --------------------------------------------------------------------------- #
# Environment Setup
# --------------------------------------------------------------------------- #
load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

# --------------------------------------------------------------------------- #
# Test Data
# --------------------------------------------------------------------------- #
TERMS = [
    ("2025-T1", "Term 1", "2025-01-06", "2025-04-04"),
    ("2025-T2", "Term 2", "2025-04-22", "2025-08-01"),
    ("2025-T3", "Term 3", "2025-09-01", "2025-12-05"),
]


def _calendar() -> list[YearContainer]:
    return [
        YearContainer(
            id="2025",
            name="2025",
            start="2025-01-01",
            end="2026-01-01",
            periods=[
                Period(id=pid, container_id="2025", name=name, start=start, end=end)
                for pid, name, start, end in TERMS
            ],
        )
    ]


def main() -> None:
    """Execute the smoke test workflow."""
    parser = argparse.ArgumentParser(description="Run termsnap smoke test")
    parser.add_argument("--pupils", "-n", type=int, default=500, help="Population size")
    parser.add_argument("--at", type=str, default="2025-12-20", help="Reference date (UTC)")
    args = parser.parse_args()

    at = datetime.fromisoformat(args.at)
    calendar = _calendar()
    pupils = [EntityRef(id=f"pupil-{i:04d}") for i in range(args.pupils)]
    live = live_from_mapping({p.id: {"class_id": "P5", "section": "Day"} for p in pupils})

    manager = SnapshotLifecycleManager(
        InMemorySnapshotStore(), live, calendar=lambda: calendar, clock=fixed_clock(at)
    )
    facade = SnapshotFacade(manager, calendar=lambda: calendar, entities=lambda: pupils)

    print(f"\n🚀 termsnap smoke test: {len(pupils)} pupils as of {at.date()}")
    print("-" * 50)

    try:
        print(f"Status:    {period_message(facade.period_status())}")
        coverage = facade.coverage()
        print(f"Coverage:  {coverage.existing}/{coverage.expected} ({coverage.coverage_percent}%)")

        accurate = facade.repair()
        print(f"Repair:    created={accurate.created} errors={len(accurate.errors)}")

        forced = facade.repair(force=True)
        print(f"Force:     created={forced.snapshots_created}")

        report = facade.validate()
        print(f"Validate:  {'PASS' if report.passed else 'FAIL'}")
        print(f"Cleanup:   deleted={facade.cleanup().deleted}")
    except Exception as e:
        print(f"\n❌ CRITICAL FAILURE: {e}")
        sys.exit(1)

    print("-" * 50)
    print("✅ Smoke test completed.")


if __name__ == "__main__":
    main()
