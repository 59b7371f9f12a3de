from __future__ import annotations

import logging
from typing import Any, Mapping

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

try:
    from .config import DEFAULT_METHOD, DEFAULT_PAGE_LIMIT, DEFAULT_YEAR
    from .db import get_db
    from .filter_options_repo import fetch_school_metadata
    from .levels import SCORE_PARAMS
    from .search_repo import SchoolSearchFilters, build_pagination, search_schools
    from .seed_repo import SeedFormatError, normalize_seed_payload, replace_all_schools
except ImportError:
    from config import DEFAULT_METHOD, DEFAULT_PAGE_LIMIT, DEFAULT_YEAR
    from db import get_db
    from filter_options_repo import fetch_school_metadata
    from levels import SCORE_PARAMS
    from search_repo import SchoolSearchFilters, build_pagination, search_schools
    from seed_repo import SeedFormatError, normalize_seed_payload, replace_all_schools

logger = logging.getLogger(__name__)

router = APIRouter()


def _error_response(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse({"status": "error", "message": message}, status_code=status_code)


def _param(params: Mapping[str, str], name: str) -> str | None:
    value = str(params.get(name, "") or "").strip()
    return value or None


def _positive_int(raw: Any, default: int) -> int:
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    return value if value > 0 else default


def parse_school_query(params: Mapping[str, str]) -> tuple[SchoolSearchFilters, int, int, bool]:
    page = _positive_int(params.get("page", ""), 1)
    limit = _positive_int(params.get("limit", ""), DEFAULT_PAGE_LIMIT)
    detail = str(params.get("detail", "")).strip().lower() == "true"

    scores = tuple((key, str(params.get(key, ""))) for key in SCORE_PARAMS if key in params)

    filters = SchoolSearchFilters(
        region=_param(params, "region"),
        school_id=_param(params, "school_id"),
        school_type=_param(params, "type"),
        year=_param(params, "year") or DEFAULT_YEAR,
        method=_param(params, "method") or DEFAULT_METHOD,
        group=_param(params, "group"),
        listening=_param(params, "listening"),
        scores=scores,
    )
    return filters, page, limit, detail


@router.get("/schools")
def list_schools(request: Request, db: Session = Depends(get_db)):
    try:
        filters, page, limit, detail = parse_school_query(request.query_params)
        schools, total = search_schools(db, filters, page=page, per_page=limit, detail=detail)
        metadata = fetch_school_metadata(db)
        payload: dict[str, Any] = {
            "metadata": metadata,
            "schools": schools,
            "pagination": build_pagination(page, limit, total),
        }
        return JSONResponse(payload)
    except Exception as exc:
        logger.exception("GET /schools failed")
        return _error_response(str(exc))


@router.post("/seed")
async def seed_schools(request: Request, db: Session = Depends(get_db)):
    try:
        body = await request.json()
        documents = normalize_seed_payload(body)
        count = replace_all_schools(db, documents)
        return JSONResponse({"count": count, "status": "success"})
    except SeedFormatError as exc:
        return _error_response(str(exc), status_code=400)
    except Exception as exc:
        logger.exception("POST /seed failed")
        return _error_response(str(exc))
