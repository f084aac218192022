import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
# Use Path objects for robust, OS-agnostic path handling.
INPUT_DIR = BASE_DIR / os.getenv("INPUT_DIR", "input")
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")

# --- Filename Configuration ---
SNAPSHOT_FILENAME = os.getenv("SNAPSHOT_FILENAME", "inventory_snapshot.json")
LEAD_TIME_SETTINGS_FILENAME = os.getenv(
    "LEAD_TIME_SETTINGS_FILENAME", "lead_time_settings.json"
)
REPORT_FILENAME_BASE = os.getenv("REPORT_FILENAME_BASE", "inventory_health")
SAVE_JSON_OUTPUT = os.getenv("SAVE_JSON_OUTPUT", "true").lower() in ("1", "true", "yes")

# --- Webhook ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL")

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- SKU Canonicalization ---
# Shopify listings carry a store-specific suffix on top of the Amazon SKU.
CHANNEL_VARIANT_SUFFIX = "Shop"

# --- Lead-Time Defaults (used when no SKU, category or global value is set) ---
DEFAULT_LEAD_TIME_DAYS = 14
DEFAULT_REORDER_TRIGGER_DAYS = 60
DEFAULT_MIN_ORDER_WEEKS = 22
DEFAULT_REORDER_BUFFER_DAYS = 7

# --- Channel Rule Defaults ---
DEFAULT_AMAZON_MIN_DAYS_OF_SUPPLY = 60
DEFAULT_THREEPL_QTY_THRESHOLD = 50

# --- Shared Business Logic ---
# Sentinel for "no sales signal, supply is unbounded".
UNBOUNDED_DAYS = 999

# Health thresholds floors (days).
CRITICAL_FLOOR_DAYS = 14
LOW_FLOOR_DAYS = 30
LOW_LEAD_TIME_MARGIN_DAYS = 14
OVERSTOCK_FLOOR_DAYS = 90
MUST_ORDER_CRITICAL_DAYS = 7
MUST_ORDER_LOW_DAYS = 14

# Inventory policy constants.
CARRYING_COST_RATE = 0.25
ORDER_FIXED_COST = 150
WEEKS_PER_YEAR = 52
WEEKS_PER_MONTH = 4.33

# ABC cumulative revenue cut-offs (percent).
ABC_A_CUTOFF = 80
ABC_B_CUTOFF = 95

# Stockout risk: (days-of-supply / lead-time ratio upper bound, score).
STOCKOUT_RISK_BANDS = [
    (0.5, 95),
    (1.0, 80),
    (1.5, 50),
    (2.5, 25),
]
STOCKOUT_RISK_FLOOR = 5
STOCKOUT_RISK_CV_WEIGHT = 15

# Display order used when sorting by health.
HEALTH_ORDER = [
    "critical",
    "low",
    "healthy",
    "overstock",
    "unknown",
]

# Column order for the exported spreadsheet.
EXPORT_COLUMNS = {
    "name": "Product",
    "sku": "SKU",
    "abc_class": "ABC",
    "amazon_qty": "Amazon",
    "threepl_qty": "3PL",
    "awd_qty": "AWD",
    "inbound_qty": "Inbound",
    "total_qty": "Total Units",
    "total_value": "Value",
    "amz_weekly_vel": "AMZ Velocity",
    "shop_weekly_vel": "Shop Velocity",
    "weekly_vel": "Total Velocity",
    "days_of_supply": "Days of Supply",
    "turnover_rate": "Turnover",
    "stockout_date": "Stockout Date",
    "reorder_by_date": "Order By",
    "health": "Status",
}
