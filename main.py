import argparse
from datetime import datetime, timezone
from pathlib import Path

from replenishment.logger import setup_logger
from replenishment.pipeline import InventoryHealthPipeline


def main():
    parser = argparse.ArgumentParser(description="Project inventory health from the latest snapshot.")
    parser.add_argument("--snapshot", type=Path, help="Snapshot JSON (defaults to INPUT_DIR/SNAPSHOT_FILENAME)")
    parser.add_argument("--settings", type=Path, help="Lead-time settings JSON")
    parser.add_argument("--test", action="store_true", help="Skip the webhook post")
    args = parser.parse_args()

    # Setup root logger so module loggers propagate to it
    setup_logger()

    # The clock is read once here; everything downstream receives it explicitly.
    now = datetime.now(timezone.utc)

    pipeline = InventoryHealthPipeline(
        now=now,
        snapshot_path=args.snapshot,
        settings_path=args.settings,
        test_mode=args.test,
    )
    pipeline.run()


if __name__ == "__main__":
    main()
