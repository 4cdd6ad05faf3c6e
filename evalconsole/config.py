"""
Centralised configuration constants and environment helpers.
"""

import os
import sys

from dotenv import load_dotenv

load_dotenv()

# ── Remote evaluation API ────────────────────────────────────────────
API_BASE_URL = os.getenv("EVAL_API_BASE_URL", "http://localhost:8080/api/v1").rstrip("/")
REQUEST_TIMEOUT_SECONDS = float(os.getenv("EVAL_API_TIMEOUT", "15"))

# ── Persisted credentials ────────────────────────────────────────────
STATE_DB_URI = os.getenv("EVAL_STATE_DB_URI", "sqlite:///.evalconsole.db")

# ── Local console server ─────────────────────────────────────────────
CONSOLE_SECRET_KEY = os.getenv("CONSOLE_SECRET_KEY", "dev-secret-key-change-in-production")

# ── Routes ───────────────────────────────────────────────────────────
ROUTE_LOGIN = "/login"
ROUTE_DASHBOARD = "/dashboard"
ROUTE_MY_EVALUATIONS = "/my-evaluations"
ROUTE_EMPLOYEES = "/employees"
ROUTE_EVALUATIONS = "/evaluations"
ROUTE_ORG_CONFIG = "/organizational-config"

# ── Dashboard defaults ───────────────────────────────────────────────
DEFAULT_STATUS_FILTER = "all"
DEFAULT_SORT_COLUMN = "id"
MAX_TABLE_ROWS = 50

# Display text / colour per canonical status.
STATUS_DISPLAY = {
    "pending": {"label": "Pendiente", "color": "#f59e0b"},
    "in_progress": {"label": "En progreso", "color": "#3b82f6"},
    "completed": {"label": "Realizada", "color": "#10b981"},
    "overdue": {"label": "Atrasada", "color": "#ef4444"},
}


def get_env(name: str) -> str:
    """Return an environment variable or exit with an error message."""
    value = os.getenv(name)
    if not value:
        print(f"ERROR: env var {name} is not set", file=sys.stderr)
        sys.exit(1)
    return value
