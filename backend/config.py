"""
config.py
---------
Central configuration for the Tour Planner backend.
Every tunable is read from environment variables — nothing is hard-coded
outside the defaults below.

A .env file next to this module is loaded first so local overrides work
without exporting variables in the shell.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Won't override vars already set in the shell.
_env_path = Path(__file__).parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path, override=False)


def _flag(name: str, default: str) -> str:
    return os.getenv(name, default).strip().lower()


# ── Service ──────────────────────────────────────────────────────────────────
SERVICE_NAME: str = os.getenv("SERVICE_NAME", "tour-planner-backend")
API_HOST: str     = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int     = int(os.getenv("API_PORT", "8000"))

# logs/ directory lives alongside backend/main.py unless overridden
LOGS_DIR: Path = Path(os.getenv("LOGS_DIR", str(Path(__file__).resolve().parent / "logs")))
STRUCTURED_LOGGING: bool = _flag("STRUCTURED_LOGGING", "true") in ("1", "true", "yes")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# ── Day budget (all time values in minutes) ──────────────────────────────────
# First/last day can still host POIs when forced travel stays under this ceiling.
MAX_TRAVEL_MINUTES_FOR_ACTIVITIES: int = int(os.getenv("MAX_TRAVEL_MINUTES_FOR_ACTIVITIES", "240"))
# Flat home <-> stay travel estimate used for forced travel segments.
DEFAULT_TRAVEL_MINUTES: int = int(os.getenv("DEFAULT_TRAVEL_MINUTES", "180"))
# "flat" | "distance"
TRAVEL_ESTIMATE_MODE: str = _flag("TRAVEL_ESTIMATE_MODE", "flat")

# ── Packing ──────────────────────────────────────────────────────────────────
HOURS_PER_DAY: float            = float(os.getenv("HOURS_PER_DAY", "8.0"))
FULL_DAY_THRESHOLD_HOURS: float = float(os.getenv("FULL_DAY_THRESHOLD_HOURS", "6.0"))
CLUSTER_RADIUS_KM: float        = float(os.getenv("CLUSTER_RADIUS_KM", "20.0"))

# ── Local travel ─────────────────────────────────────────────────────────────
LOCAL_TRAVEL_MINUTES: int = int(os.getenv("LOCAL_TRAVEL_MINUTES", "60"))
# "flat" | "walking"
LOCAL_TRAVEL_MODE: str = _flag("LOCAL_TRAVEL_MODE", "flat")

# ── Distance estimates (km/h and straight-line → route multipliers) ──────────
WALKING_SPEED_KMH: float    = float(os.getenv("WALKING_SPEED_KMH", "4.5"))
DRIVING_SPEED_KMH: float    = float(os.getenv("DRIVING_SPEED_KMH", "70.0"))
WALKING_ROUTE_FACTOR: float = float(os.getenv("WALKING_ROUTE_FACTOR", "1.2"))
DRIVING_ROUTE_FACTOR: float = float(os.getenv("DRIVING_ROUTE_FACTOR", "1.3"))
