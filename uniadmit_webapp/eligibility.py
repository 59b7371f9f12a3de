"""
Per-department eligibility checks used by the school search.

A department row passes when its admission plan for the requested year and
method exists and satisfies the listening and exam-threshold filters:

- listening: the plan's 英聽 grade ordinal must not exceed the user's grade;
- exam thresholds: thresholds sharing a ``group`` id are alternatives (OR),
  every group must be satisfied (AND). Thresholds without a group id are
  each required on their own.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

try:
    from .levels import listening_level, threshold_level
except ImportError:
    from levels import listening_level, threshold_level


@dataclass(frozen=True)
class EligibilityCriteria:
    year: str
    method: str
    listening_level: int | None = None
    # None means no score filter; an empty dict still filters (every level is 0)
    user_levels: dict[str, int] | None = None
    require_prior_outcome: bool = False
    thresholdless_passes: bool = False


def extract_plan(admission_data: Any, year: str, method: str) -> dict[str, Any] | None:
    if not isinstance(admission_data, dict):
        return None
    entry = admission_data.get(str(year))
    if not isinstance(entry, dict):
        return None
    plans = entry.get("plans")
    if not isinstance(plans, dict):
        return None
    plan = plans.get(method)
    return plan if isinstance(plan, dict) else None


def has_prior_outcome(plan: dict[str, Any]) -> bool:
    return plan.get("prior_year_outcome") is not None


def meets_listening(plan: dict[str, Any], user_level: int) -> bool:
    return listening_level(plan.get("english_listening_threshold")) <= user_level


def group_thresholds(thresholds: Iterable[dict[str, Any]]) -> dict[Any, list[dict[str, Any]]]:
    groups: dict[Any, list[dict[str, Any]]] = {}
    for idx, th in enumerate(thresholds):
        key = th.get("group")
        if key is None or key == "":
            key = ("ungrouped", idx)
        else:
            key = str(key)
        groups.setdefault(key, []).append(th)
    return groups


def threshold_met(th: dict[str, Any], user_levels: dict[str, int]) -> bool:
    return user_levels.get(str(th.get("subject", "")), 0) >= threshold_level(th.get("threshold"))


def meets_exam_thresholds(
    plan: dict[str, Any],
    user_levels: dict[str, int],
    *,
    thresholdless_passes: bool = False,
) -> bool:
    thresholds = [th for th in (plan.get("exam_thresholds") or []) if isinstance(th, dict)]
    if not thresholds:
        return thresholdless_passes
    return all(
        any(threshold_met(th, user_levels) for th in members)
        for members in group_thresholds(thresholds).values()
    )


def eligible_plan(department: dict[str, Any], criteria: EligibilityCriteria) -> dict[str, Any] | None:
    """Return the department's target plan when the department passes every active filter."""
    plan = extract_plan(department.get("admission_data"), criteria.year, criteria.method)
    if plan is None:
        return None
    if criteria.require_prior_outcome and not has_prior_outcome(plan):
        return None
    if criteria.listening_level is not None and not meets_listening(plan, criteria.listening_level):
        return None
    if criteria.user_levels is not None and not meets_exam_thresholds(
        plan,
        criteria.user_levels,
        thresholdless_passes=criteria.thresholdless_passes,
    ):
        return None
    return plan


def filter_departments(
    departments: Iterable[dict[str, Any]],
    criteria: EligibilityCriteria,
) -> list[dict[str, Any]]:
    return [d for d in departments if eligible_plan(d, criteria) is not None]
