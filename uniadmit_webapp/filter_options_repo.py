from __future__ import annotations

import threading
from copy import deepcopy
from time import monotonic
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

try:
    from .config import METADATA_CACHE_TTL_SEC
    from .db import Campus, Department
except ImportError:
    from config import METADATA_CACHE_TTL_SEC
    from db import Campus, Department


# 七大區域
REGION_MAPPING: dict[str, tuple[str, ...]] = {
    "北北基": ("臺北市", "新北市", "基隆市"),
    "桃竹苗": ("桃園市", "新竹縣", "新竹市", "苗栗縣"),
    "中彰投": ("臺中市", "彰化縣", "南投縣"),
    "雲嘉南": ("雲林縣", "嘉義縣", "嘉義市", "臺南市"),
    "高屏": ("高雄市", "屏東縣"),
    "宜花東": ("宜蘭縣", "花蓮縣", "臺東縣"),
    "離島": ("澎湖縣", "金門縣", "連江縣"),
}
OTHER_REGION = "其他"

_CACHE_LOCK = threading.Lock()
_METADATA_CACHE: dict[str, tuple[float, dict[str, list[str]]]] = {}


def get_region(city: str) -> str:
    for region, cities in REGION_MAPPING.items():
        if city in cities:
            return region
    return OTHER_REGION


def cities_for_region(region: str) -> tuple[str, ...]:
    """Cities covered by a region name; any other value is taken as a single city."""
    return REGION_MAPPING.get(region, (region,))


def _cache_get(cache: dict[Any, tuple[float, Any]], key: Any) -> Any | None:
    if METADATA_CACHE_TTL_SEC <= 0:
        return None
    now = monotonic()
    with _CACHE_LOCK:
        item = cache.get(key)
        if item is None:
            return None
        expires_at, value = item
        if expires_at <= now:
            cache.pop(key, None)
            return None
        return deepcopy(value)


def _cache_put(cache: dict[Any, tuple[float, Any]], key: Any, value: Any) -> None:
    if METADATA_CACHE_TTL_SEC <= 0:
        return
    expires_at = monotonic() + METADATA_CACHE_TTL_SEC
    with _CACHE_LOCK:
        cache[key] = (expires_at, deepcopy(value))


def clear_filter_options_cache() -> None:
    with _CACHE_LOCK:
        _METADATA_CACHE.clear()


def _distinct_values(db: Session, column) -> list[str]:
    rows = db.execute(select(column).distinct()).scalars().all()
    return sorted(str(v) for v in rows if v is not None)


def fetch_school_metadata(db: Session) -> dict[str, list[str]]:
    cached = _cache_get(_METADATA_CACHE, "all")
    if cached is not None:
        return cached

    academic_groups = _distinct_values(db, Department.academic_group)
    colleges = _distinct_values(db, Department.college)
    cities = _distinct_values(db, Campus.city)
    regions = sorted({get_region(city) for city in cities})

    result = {
        "academic_groups": academic_groups,
        "colleges": colleges,
        "regions": regions,
        "cities": cities,
    }
    _cache_put(_METADATA_CACHE, "all", result)
    return result
