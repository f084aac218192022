import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd
import requests
from pydantic import ValidationError

from . import settings
from . import utils
from .schemas import ComputedItem, InventoryReport, InventorySnapshot, LeadTimeSettings

logger = logging.getLogger(__name__)


class SnapshotLoadError(Exception):
    """Raised when a snapshot or settings file cannot be read or does not validate."""


def _read_json(path: Path) -> dict:
    try:
        with open(path, encoding="utf-8-sig") as f:
            return json.load(f)
    except FileNotFoundError:
        raise
    except (OSError, json.JSONDecodeError) as e:
        raise SnapshotLoadError(f"Could not read {path.name}: {e}") from e


def load_snapshot(path: Path) -> InventorySnapshot:
    """Loads the snapshot handed over by the sync subsystem."""
    raw = _read_json(path)
    try:
        snapshot = InventorySnapshot.model_validate(raw)
    except ValidationError as e:
        raise SnapshotLoadError(f"Snapshot {path.name} does not match the schema") from e
    logger.info(f"  > Loaded {len(snapshot.items)} records from {path.name}")
    return snapshot


def load_settings(path: Path) -> LeadTimeSettings:
    """Loads lead-time settings; a missing file means library defaults."""
    try:
        raw = _read_json(path)
    except FileNotFoundError:
        logger.warning(f"⚠️ Settings file {path.name} not found. Using default lead times.")
        return LeadTimeSettings()
    try:
        return LeadTimeSettings.model_validate(raw)
    except ValidationError as e:
        raise SnapshotLoadError(f"Settings {path.name} do not match the schema") from e


def items_to_frame(items: list[ComputedItem]) -> pd.DataFrame:
    """Flattens computed items into the spreadsheet layout (friendly column names)."""
    df = pd.DataFrame(
        [item.model_dump(mode="json", exclude={"lead_time", "thresholds", "alert"}) for item in items]
    )
    if df.empty:
        return pd.DataFrame(columns=list(settings.EXPORT_COLUMNS.values()))

    df["total_value"] = df["total_value"].round(2)
    for col in ["amz_weekly_vel", "shop_weekly_vel", "weekly_vel", "turnover_rate"]:
        df[col] = df[col].round(1)
    df = df.reindex(columns=list(settings.EXPORT_COLUMNS.keys()))
    return df.rename(columns=settings.EXPORT_COLUMNS)


def save_outputs(report: InventoryReport, generated_at: datetime) -> Optional[Path]:
    """Saves the computed view to CSV and conditionally the full report to JSON, with dated filenames."""
    settings.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    date_suffix = utils.get_date_suffix_for_filename(generated_at)

    csv_path = settings.OUTPUT_DIR / f"{settings.REPORT_FILENAME_BASE}_{date_suffix}.csv"
    json_path = settings.OUTPUT_DIR / f"{settings.REPORT_FILENAME_BASE}_{date_suffix}.json"

    items_to_frame(report.items).to_csv(csv_path, index=False)
    logger.info(f"✅ Inventory health report saved to: {csv_path}")

    if settings.SAVE_JSON_OUTPUT:
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(report.model_dump(mode="json", by_alias=True), f, indent=2)
        logger.info(f"✅ JSON output saved to: {json_path}")
    else:
        logger.info("INFO: Skipping JSON file save as per configuration.")

    return csv_path


def post_to_webhook(report: InventoryReport) -> bool:
    """
    Posts the computed items AND the summary to the webhook.
    Returns True when the webhook accepted the payload.
    """
    if not settings.WEBHOOK_URL:
        logger.warning("⚠️ WEBHOOK_URL not set. Skipping webhook post.")
        return False

    logger.info(f"🚀 Posting inventory health to webhook: {settings.WEBHOOK_URL}")

    payload = {
        "reportData": [item.model_dump(mode="json", by_alias=True) for item in report.items],
        "summary": report.summary.model_dump(mode="json", by_alias=True),
        "effectiveDataDate": report.effective_data_date.isoformat(),
        "daysElapsed": report.days_elapsed,
    }

    try:
        response = requests.post(settings.WEBHOOK_URL, json=payload, timeout=15)
        response.raise_for_status()
        logger.info("✅ Inventory health successfully posted to webhook.")
        return True
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Error posting to webhook: {e}")
        return False
