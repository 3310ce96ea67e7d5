#!/usr/bin/env python3
"""Open the embedded store's snapshot and show tables and row counts."""
import sqlite3
import sys
from pathlib import Path

BACKEND_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_ROOT / "src"))

from hourlog.core.config import get_settings  # noqa: E402
from hourlog.core.storage import SnapshotStore  # noqa: E402


def main() -> int:
    settings = get_settings()
    store = SnapshotStore(settings.data_dir)
    snapshot = store.read(settings.snapshot_slot)
    if snapshot is None:
        print(f"ERROR: no snapshot at {store.path_for(settings.snapshot_slot)}")
        return 1

    print(f"Opening snapshot: {store.path_for(settings.snapshot_slot)} ({len(snapshot)} bytes)")
    print("=" * 60)

    conn = sqlite3.connect(":memory:")
    conn.deserialize(snapshot)
    cursor = conn.cursor()

    cursor.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name")
    tables = [row[0] for row in cursor.fetchall()]
    print(f"\nTotal tables: {len(tables)}")
    for table in tables:
        cursor.execute(f'SELECT COUNT(*) FROM "{table}"')
        print(f"  - {table}: {cursor.fetchone()[0]} rows")

    if "daily_records" in tables:
        print("\n" + "=" * 60)
        print("Latest days:")
        cursor.execute(
            "SELECT date, hours, workout_done FROM daily_records ORDER BY date DESC LIMIT 7"
        )
        for day, hours, workout in cursor.fetchall():
            print(f"  {day}  {hours:6.2f}h  workout={'yes' if workout else 'no'}")

    conn.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
