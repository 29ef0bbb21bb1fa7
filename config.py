"""Application configuration — environment variables and derived constants.

Loads the bot token, endpoint overrides, long-poll and webhook settings
from the environment via ``python-dotenv``.  All values are resolved at
import time so other modules can ``from config import …`` without repeated
lookups.  Invalid numeric values fall back to their defaults with a
warning.
"""

# ── stdlib ───────────────────────────────────────────────────────────────────
import os

# ── third-party ──────────────────────────────────────────────────────────────
from dotenv import load_dotenv

# ── project ──────────────────────────────────────────────────────────────────
from botapi.client import DEFAULT_API_URL, DEFAULT_FILE_URL
from core.logger import BotLogger

# ── Environment bootstrap ────────────────────────────────────────────────────
load_dotenv()

# ── Logger (used for startup diagnostics at the bottom of this module) ───────
logger = BotLogger.get_logger()


# ── Helper functions (private) ───────────────────────────────────────────────


def _env_int(name: str, default: int) -> int:
    """Read a non-negative integer; invalid or negative values yield *default*."""
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid integer in environment, using default", extra={"variable": name, "default": default})
        return default
    if value < 0:
        logger.warning("Negative value in environment, using default", extra={"variable": name, "default": default})
        return default
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid number in environment, using default", extra={"variable": name, "default": default})
        return default


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


# ── Public constants ─────────────────────────────────────────────────────────

BOT_TOKEN: str | None = os.environ.get("BOT_TOKEN")
API_URL: str = os.environ.get("API_URL") or DEFAULT_API_URL
FILE_URL: str = os.environ.get("FILE_URL") or DEFAULT_FILE_URL
HTTP_TIMEOUT: float = _env_float("HTTP_TIMEOUT", 60.0)
LOG_LEVEL: str = (os.environ.get("LOG_LEVEL") or "INFO").upper()

# Long polling
POLL_LIMIT: int = _env_int("POLL_LIMIT", 100)
POLL_TIMEOUT: int = _env_int("POLL_TIMEOUT", 30)

# Webhook (enabled when WEBHOOK_URL is set)
WEBHOOK_URL: str = os.environ.get("WEBHOOK_URL", "")
WEBHOOK_LISTEN: str = os.environ.get("WEBHOOK_LISTEN") or "0.0.0.0:8443"
WEBHOOK_PATH: str = os.environ.get("WEBHOOK_PATH", "")
WEBHOOK_CERT: str = os.environ.get("WEBHOOK_CERT", "")
WEBHOOK_KEY: str = os.environ.get("WEBHOOK_KEY", "")
WEBHOOK_SECRET: str = os.environ.get("WEBHOOK_SECRET", "")
WEBHOOK_IP: str = os.environ.get("WEBHOOK_IP", "")
WEBHOOK_MAX_CONNECTIONS: int = _env_int("WEBHOOK_MAX_CONNECTIONS", 0)
WEBHOOK_DROP_PENDING: bool = _env_bool("WEBHOOK_DROP_PENDING")


# ── Startup diagnostics ─────────────────────────────────────────────────────

if BOT_TOKEN:
    logger.info("Config loaded — BOT_TOKEN is set", extra={"api_url": API_URL})
else:
    logger.warning("Config loaded — BOT_TOKEN is NOT set")

if WEBHOOK_URL:
    logger.info("Webhook mode configured", extra={"listen": WEBHOOK_LISTEN, "path": WEBHOOK_PATH or "(from url)"})
else:
    logger.info("Long-poll mode configured", extra={"poll_limit": POLL_LIMIT, "poll_timeout": POLL_TIMEOUT})
