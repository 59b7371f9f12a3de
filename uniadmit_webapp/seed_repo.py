from __future__ import annotations

import logging
from copy import deepcopy
from typing import Any

from sqlalchemy import delete
from sqlalchemy.orm import Session

try:
    from .db import Campus, Department, School
    from .filter_options_repo import clear_filter_options_cache
    from .schemas import SchoolDocument
except ImportError:
    from db import Campus, Department, School
    from filter_options_repo import clear_filter_options_cache
    from schemas import SchoolDocument


logger = logging.getLogger(__name__)


class SeedFormatError(ValueError):
    pass


def normalize_seed_payload(body: Any) -> list[dict[str, Any]]:
    """A seed body is an array of schools or one school object."""
    if isinstance(body, list):
        return body
    if isinstance(body, dict) and body.get("school_id"):
        return [body]
    raise SeedFormatError("Invalid data format. Expected array or single object.")


def _previous_year(year_key: str) -> str | None:
    try:
        return str(int(year_key) - 1)
    except ValueError:
        return None


def flatten_prior_year_outcomes(admission_data: dict[str, Any]) -> int:
    """
    Copy every plan's last_year_pass_data onto the same-method plan of the year it describes,
    as that plan's prior_year_outcome. Returns the number of plans updated.
    """
    updated = 0
    for year_key, entry in admission_data.items():
        plans = (entry or {}).get("plans") or {}
        for method, plan in plans.items():
            if not isinstance(plan, dict):
                continue
            pass_data = plan.get("last_year_pass_data")
            if not pass_data:
                continue
            described = pass_data.get("academic_year")
            target_year = str(described) if described is not None else _previous_year(str(year_key))
            if target_year is None or target_year == str(year_key):
                continue
            target_entry = admission_data.get(target_year) or {}
            target = (target_entry.get("plans") or {}).get(method)
            if isinstance(target, dict) and target.get("prior_year_outcome") is None:
                target["prior_year_outcome"] = deepcopy(pass_data)
                updated += 1
    return updated


def build_school(doc: SchoolDocument) -> School:
    school = School(
        school_id=doc.school_id,
        school_name=doc.school_name,
        school_type=doc.school_type,
        school_url=doc.school_url,
        school_images=list(doc.school_images),
    )
    for idx, campus in enumerate(doc.campuses):
        school.campuses.append(
            Campus(
                position=idx,
                campus_id=campus.campus_id,
                campus_name=campus.campus_name,
                is_main=campus.is_main,
                city=campus.location.city,
                district=campus.location.district,
                address=campus.location.address,
                google_map_url=campus.location.google_map_url,
            )
        )
    for idx, dept in enumerate(doc.departments):
        admission_data = {
            year: entry.model_dump(mode="json", exclude_unset=True)
            for year, entry in dept.admission_data.items()
        }
        flatten_prior_year_outcomes(admission_data)
        school.departments.append(
            Department(
                position=idx,
                department_id=dept.department_id,
                department_name=dept.department_name,
                college=dept.college,
                academic_group=dept.academic_group,
                campus_ids=list(dept.campus_ids),
                department_description=dept.department_description,
                years_of_study=dept.years_of_study,
                admission_data=admission_data,
            )
        )
    return school


def delete_all_schools(db: Session) -> None:
    db.execute(delete(Department))
    db.execute(delete(Campus))
    db.execute(delete(School))


def replace_all_schools(db: Session, documents: list[dict[str, Any]]) -> int:
    """Delete every school, then insert the given documents. Nothing is merged."""
    parsed = [SchoolDocument.model_validate(doc) for doc in documents]
    try:
        delete_all_schools(db)
        db.add_all([build_school(doc) for doc in parsed])
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        clear_filter_options_cache()

    logger.info("seed: replaced school collection with %s schools", len(parsed))
    return len(parsed)
