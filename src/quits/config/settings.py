import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env once, globally
load_dotenv()

# Project root (independent of current working directory).
PROJECT_ROOT = Path(__file__).resolve().parents[3]

DEFAULT_GMAIL_QUERY = 'subject:(subscription OR "renewal notice" OR "payment receipt" OR "invoice")'


def resolve_dir(env_key: str, default: str) -> Path:
    """
    Resolve a directory path from ENV.
    Relative paths are resolved against PROJECT_ROOT.
    """
    value = os.getenv(env_key, default)
    path = Path(value)

    if not path.is_absolute():
        path = PROJECT_ROOT / path

    path.mkdir(parents=True, exist_ok=True)
    return path


def env_number(env_key: str, default: float) -> float:
    raw = os.getenv(env_key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{env_key} must be a number, got {raw!r}") from exc


SECRETS_DIR = resolve_dir("QUITS_SECRETS_DIR", "secrets")
STATE_DIR   = resolve_dir("QUITS_STATE_DIR", ".state")
LOGS_DIR    = resolve_dir("QUITS_LOGS_DIR", "logs")

STORE_PATH = STATE_DIR / "subscriptions.json"

PRICE_CHANGE_THRESHOLD = env_number("QUITS_PRICE_CHANGE_THRESHOLD", 5.0)
RENEWAL_REMINDER_DAYS  = int(env_number("QUITS_RENEWAL_REMINDER_DAYS", 7))
GMAIL_QUERY            = os.getenv("QUITS_GMAIL_QUERY") or DEFAULT_GMAIL_QUERY
GMAIL_BATCH_SIZE       = int(env_number("QUITS_GMAIL_BATCH_SIZE", 10))
