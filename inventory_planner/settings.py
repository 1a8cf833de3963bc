import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
INPUT_DIR = BASE_DIR / os.getenv("INPUT_DIR", "input")
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Snapshot Filename Configuration ---
# Snapshots are expected as <prefix>YYYY-MM-DD.<ext>; the latest date wins.
SKUS_FILENAME_PREFIX = os.getenv("SKUS_FILENAME_PREFIX", "skus_")
PURCHASE_ORDERS_FILENAME_PREFIX = os.getenv(
    "PURCHASE_ORDERS_FILENAME_PREFIX", "purchase_orders_"
)
SALES_FILENAME_PREFIX = os.getenv("SALES_FILENAME_PREFIX", "sales_")
PRODUCTS_FILENAME_PREFIX = os.getenv("PRODUCTS_FILENAME_PREFIX", "products_")
STOCK_FILENAME_PREFIX = os.getenv("STOCK_FILENAME_PREFIX", "stock_")

# --- Output ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL")
SAVE_JSON_OUTPUT = os.getenv("SAVE_JSON_OUTPUT", "true").lower() in ("1", "true", "yes")

# --- Forecast Window ---
PROJECTION_MONTHS = 5

# Abbreviated Spanish month labels shown as column headers.
MONTH_LABELS = [
    "ENE",
    "FEB",
    "MAR",
    "ABR",
    "MAY",
    "JUN",
    "JUL",
    "AGO",
    "SEPT",
    "OCT",
    "NOV",
    "DIC",
]

# --- Risk Thresholds ---
# Days of stock today below these values are flagged critical / warning.
STOCK_CRITICAL_DAYS = 15
STOCK_WARNING_DAYS = 30

# Percentage of a month covered by stock.
COVERAGE_CRITICAL_PCT = 50
COVERAGE_WARNING_PCT = 85

# An item with fewer days of stock than this adds one point to its supplier's risk score.
SUPPLIER_RISK_DAYS = 30

# --- Shared Business Logic ---
GROUP_BY_OPTIONS = ["sku", "brand", "category", "owner"]
SUPPLIER_SORT_OPTIONS = ["total_amount", "total_items", "risk_score"]
PO_STATUS_DONE = "DONE"
PO_STATUS_PENDING = "PENDING"
