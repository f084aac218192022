import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from replenishment import data_handler, settings, utils
from replenishment.data_handler import SnapshotLoadError
from replenishment.engine import build_inventory_report
from replenishment.schemas import InventoryReport, InventorySnapshot, LeadTimeSettings

logger = logging.getLogger(__name__)


class DataPipeline(ABC):
    """
    Abstract base class for report pipelines.
    Follows an Extract -> Transform -> Load (ETL) pattern.
    """

    def __init__(self, report_type: str, test_mode: bool = False):
        self.report_type = report_type
        self.test_mode = test_mode

    def run(self) -> Optional[Any]:
        """
        Orchestrates the pipeline execution.
        """
        logger.info(f"🚀 STEP: {self.report_type.upper()} REPORT")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        raw_data = self.extract()
        if raw_data is None:
            logger.warning(f"⚠️ No data extracted for {self.report_type}. Nothing to report.")
            return None

        # --- 2. TRANSFORM ---
        result = self.transform(raw_data)
        if result is None:
            logger.error(f"❌ Transformation failed for {self.report_type}.")
            return None

        # --- 3. LOAD ---
        self.load(result)

        logger.info(f"✅ {self.report_type.capitalize()} Pipeline Finished.\n")
        logger.info("=" * 60)
        return result

    @abstractmethod
    def extract(self) -> Optional[Any]:
        """Responsible for reading and validating the inputs."""
        pass

    @abstractmethod
    def transform(self, raw_data: Any) -> Optional[Any]:
        """Responsible for the computation. Returns None on failure."""
        pass

    @abstractmethod
    def load(self, result: Any) -> None:
        """Responsible for saving and publishing the result."""
        pass


class InventoryHealthPipeline(DataPipeline):
    """
    Reads the latest snapshot and lead-time settings, runs the replenishment
    engine and exports the computed view.
    """

    def __init__(
        self,
        now: datetime,
        snapshot_path: Optional[Path] = None,
        settings_path: Optional[Path] = None,
        test_mode: bool = False,
    ):
        super().__init__("inventory health", test_mode=test_mode)
        self.now = utils.as_utc(now)
        self.snapshot_path = snapshot_path or settings.INPUT_DIR / settings.SNAPSHOT_FILENAME
        self.settings_path = (
            settings_path or settings.INPUT_DIR / settings.LEAD_TIME_SETTINGS_FILENAME
        )

    def extract(self) -> Optional[tuple[InventorySnapshot, LeadTimeSettings]]:
        logger.info("--- Loading Snapshot & Settings ---")
        try:
            snapshot = data_handler.load_snapshot(self.snapshot_path)
            lead_time_settings = data_handler.load_settings(self.settings_path)
        except FileNotFoundError:
            logger.error(f"  > ERROR: Snapshot not found at {self.snapshot_path}")
            return None
        except SnapshotLoadError as e:
            logger.error("❌ Data validation failed!")
            logger.error(e)
            if e.__cause__ is not None:
                logger.error(e.__cause__)
            return None

        logger.info(f"  > Snapshot captured at {snapshot.captured_at.isoformat()}")
        for channel, synced_at in snapshot.sources.last_sync_per_channel.items():
            logger.info(f"  > Last {channel} sync: {synced_at.isoformat()}")
        return snapshot, lead_time_settings

    def transform(
        self, raw_data: tuple[InventorySnapshot, LeadTimeSettings]
    ) -> Optional[InventoryReport]:
        snapshot, lead_time_settings = raw_data
        logger.info("\n--- Computing Inventory Health ---")
        report = build_inventory_report(snapshot, lead_time_settings, self.now)

        summary = report.summary
        logger.info(
            f"Projected {summary.sku_count} SKUs forward {report.days_elapsed} day(s) "
            f"from {report.effective_data_date.date().isoformat()}"
        )
        logger.info(
            f"  > Critical: {summary.critical} | Low: {summary.low} | "
            f"Healthy: {summary.healthy} | Overstock: {summary.overstock}"
        )
        logger.info(f"  > ABC: {summary.abc_counts}")
        if summary.alert_count:
            logger.warning(f"  > ⚠️  {summary.alert_count} SKU(s) hit a custom stock alert:")
            for item in report.items:
                if item.alert.triggered:
                    logger.warning(f"    - {item.sku}: {'; '.join(item.alert.reasons)}")
        return report

    def load(self, result: InventoryReport) -> None:
        # 1. Save outputs (CSV/JSON)
        if result.items:
            data_handler.save_outputs(result, self.now)
        else:
            logger.warning("No data to save to disk.")

        # 2. Post to Webhook
        if not self.test_mode:
            data_handler.post_to_webhook(result)
        else:
            logger.info("🧪 Test Mode: Skipping webhook post.")
