"""Runtime configuration — read once from the environment."""

import os

DATA_DIR = os.environ.get("BLOODBANK_DATA_DIR", "")
SEED_DEMO = os.environ.get("BLOODBANK_SEED_DEMO", "1").lower() not in ("0", "false", "no")
HOST = os.environ.get("BLOODBANK_HOST", "0.0.0.0")
PORT = int(os.environ.get("BLOODBANK_PORT", "8000"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# ---------------------------------------------------------------------------
# Domain constants
# ---------------------------------------------------------------------------

DONATION_INTERVAL_MONTHS = 3
MIN_DONOR_AGE = 18
CRITICAL_STOCK_LEVEL = 5
LOW_STOCK_LEVEL = 10
