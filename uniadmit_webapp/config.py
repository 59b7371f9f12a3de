from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = BASE_DIR.parent

load_dotenv(PROJECT_ROOT / ".env")


def _read_int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    try:
        return int(raw)
    except ValueError:
        return default


def _read_float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    try:
        return float(raw)
    except ValueError:
        return default


def _read_list_env(name: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(part.strip() for part in raw.split(",") if part.strip())


APP_NAME = os.getenv("APP_NAME", "大學校系查詢").strip() or "大學校系查詢"

DATABASE_URL = os.getenv("DATABASE_URL", "").strip() or f"sqlite:///{(BASE_DIR / 'app.db').as_posix()}"
DB_ECHO = os.getenv("DB_ECHO", "").strip().lower() in {"1", "true", "yes"}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip() or "INFO"

METADATA_CACHE_TTL_SEC = max(0.0, _read_float_env("METADATA_CACHE_TTL_SEC", 300.0))

# 學年度 (民國年) and 入學管道 used when the query omits them
DEFAULT_YEAR = os.getenv("DEFAULT_YEAR", "114").strip() or "114"
DEFAULT_METHOD = os.getenv("DEFAULT_METHOD", "personal_application").strip() or "personal_application"

DEFAULT_PAGE_LIMIT = max(1, _read_int_env("DEFAULT_PAGE_LIMIT", 12))
MAX_PAGE_LIMIT = max(DEFAULT_PAGE_LIMIT, _read_int_env("MAX_PAGE_LIMIT", 200))

# Years whose distribution admission results are only listed when the pass outcome is known.
PRIOR_OUTCOME_YEARS = _read_list_env("PRIOR_OUTCOME_YEARS", "114")

SEED_FILE = PROJECT_ROOT / os.getenv("SEED_FILE", "JSON/TEST1.json")

# When score filters are active, departments that declare no exam thresholds are excluded unless this is set.
THRESHOLDLESS_DEPARTMENTS_PASS = os.getenv("THRESHOLDLESS_DEPARTMENTS_PASS", "").strip().lower() in {"1", "true", "yes"}
