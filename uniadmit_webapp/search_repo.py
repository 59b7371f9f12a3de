from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Any

from sqlalchemy import and_, select
from sqlalchemy.orm import Session, selectinload

try:
    from .config import (
        DEFAULT_METHOD,
        DEFAULT_YEAR,
        MAX_PAGE_LIMIT,
        PRIOR_OUTCOME_YEARS,
        THRESHOLDLESS_DEPARTMENTS_PASS,
    )
    from .db import Campus, Department, School
    from .eligibility import EligibilityCriteria, filter_departments
    from .filter_options_repo import cities_for_region
    from .levels import user_levels_from_scores, user_listening_level
except ImportError:
    from config import (
        DEFAULT_METHOD,
        DEFAULT_YEAR,
        MAX_PAGE_LIMIT,
        PRIOR_OUTCOME_YEARS,
        THRESHOLDLESS_DEPARTMENTS_PASS,
    )
    from db import Campus, Department, School
    from eligibility import EligibilityCriteria, filter_departments
    from filter_options_repo import cities_for_region
    from levels import user_levels_from_scores, user_listening_level


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchoolSearchFilters:
    region: str | None = None
    school_id: str | None = None
    school_type: str | None = None
    year: str = DEFAULT_YEAR
    method: str = DEFAULT_METHOD
    group: str | None = None
    listening: str | None = None
    # (param, raw value) for every score parameter present in the query
    scores: tuple[tuple[str, str], ...] = ()

    @property
    def has_scores(self) -> bool:
        return bool(self.scores)


def build_criteria(filters: SchoolSearchFilters) -> EligibilityCriteria:
    return EligibilityCriteria(
        year=str(filters.year),
        method=filters.method,
        listening_level=user_listening_level(filters.listening) if filters.listening else None,
        user_levels=user_levels_from_scores(dict(filters.scores)) if filters.has_scores else None,
        require_prior_outcome=(
            filters.method == "distribution_admission" and str(filters.year) in PRIOR_OUTCOME_YEARS
        ),
        thresholdless_passes=THRESHOLDLESS_DEPARTMENTS_PASS,
    )


def _build_school_conditions(filters: SchoolSearchFilters) -> list[Any]:
    clauses: list[Any] = []
    if filters.school_id:
        clauses.append(School.school_id == filters.school_id)
    if filters.school_type:
        clauses.append(School.school_type == filters.school_type)
    if filters.region:
        clauses.append(
            School.campuses.any(
                and_(Campus.is_main.is_(True), Campus.city.in_(cities_for_region(filters.region)))
            )
        )
    return clauses


def _page_bounds(page: int, per_page: int) -> tuple[int, int]:
    safe_page = max(1, int(page))
    safe_per_page = max(1, min(int(per_page), MAX_PAGE_LIMIT))
    return safe_page, safe_per_page


def build_pagination(page: int, per_page: int, total: int) -> dict[str, Any]:
    safe_page, safe_per_page = _page_bounds(page, per_page)
    return {
        "page": safe_page,
        "limit": safe_per_page,
        "total": total,
        "totalPages": math.ceil(total / safe_per_page),
        "hasMore": safe_page * safe_per_page < total,
    }


def campus_to_dict(campus: Campus) -> dict[str, Any]:
    return {
        "campus_id": campus.campus_id,
        "campus_name": campus.campus_name,
        "is_main": bool(campus.is_main),
        "location": {
            "city": campus.city,
            "district": campus.district,
            "address": campus.address,
            "google_map_url": campus.google_map_url,
        },
    }


def department_to_dict(dept: Department, *, detail: bool = False) -> dict[str, Any]:
    row = {
        "department_id": dept.department_id,
        "department_name": dept.department_name,
        "college": dept.college,
        "academic_group": dept.academic_group,
        "campus_ids": list(dept.campus_ids or []),
    }
    if detail:
        row["department_description"] = dept.department_description
        row["years_of_study"] = dept.years_of_study
        row["admission_data"] = dept.admission_data or {}
    return row


def school_to_dict(school: School, departments: list[Department], *, detail: bool = False) -> dict[str, Any]:
    return {
        "school_id": school.school_id,
        "school_name": school.school_name,
        "school_type": school.school_type,
        "school_url": school.school_url,
        "school_images": list(school.school_images or []),
        "campuses": [campus_to_dict(c) for c in school.campuses],
        "departments": [department_to_dict(d, detail=detail) for d in departments],
    }


def search_schools(
    db: Session,
    filters: SchoolSearchFilters,
    *,
    page: int = 1,
    per_page: int = 12,
    detail: bool = False,
) -> tuple[list[dict[str, Any]], int]:
    """
    Schools with at least one department that has a plan for the requested year and method
    and passes every active filter. Departments without that plan are dropped, and so are
    schools left with no departments.
    """
    where = _build_school_conditions(filters)
    criteria = build_criteria(filters)
    safe_page, safe_per_page = _page_bounds(page, per_page)

    school_ids = select(School.id).where(*where)
    dept_query = select(Department).where(Department.school_pk.in_(school_ids))
    if filters.group:
        dept_query = dept_query.where(Department.academic_group == filters.group)
    departments = db.execute(dept_query.order_by(Department.school_pk, Department.position)).scalars().all()

    rows = [
        {"pk": dept.id, "school_pk": dept.school_pk, "admission_data": dept.admission_data}
        for dept in departments
    ]
    passed = {row["pk"] for row in filter_departments(rows, criteria)}

    by_school: dict[int, list[Department]] = defaultdict(list)
    for dept in departments:
        if dept.id in passed:
            by_school[dept.school_pk].append(dept)

    logger.debug(
        "eligibility: %s of %s departments passed, %s schools (year=%s method=%s)",
        len(passed),
        len(departments),
        len(by_school),
        criteria.year,
        criteria.method,
    )

    total = len(by_school)
    if not by_school:
        return [], 0

    schools = (
        db.execute(
            select(School)
            .where(School.id.in_(list(by_school)))
            .options(selectinload(School.campuses))
            .order_by(School.school_id)
            .offset((safe_page - 1) * safe_per_page)
            .limit(safe_per_page)
        )
        .scalars()
        .all()
    )
    return [school_to_dict(s, by_school[s.id], detail=detail) for s in schools], total
