from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict


class _Document(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


OptionalFloat = Annotated[float | None, BeforeValidator(_blank_to_none)]
OptionalInt = Annotated[int | None, BeforeValidator(_blank_to_none)]
OptionalNumber = Annotated[int | float | None, BeforeValidator(_blank_to_none)]


class ExamThreshold(_Document):
    subject: str
    exam_type: str
    threshold: str
    # thresholds sharing a group are alternatives
    group: int | str | None = None


class SelectionMultiplier(_Document):
    subject: str
    multiplier: OptionalFloat = None
    order: OptionalInt = None


class ScoringWeight(_Document):
    subject: str
    source_type: str
    multiplier: float
    order: int | None = None


class PassingItem(_Document):
    subject: str | None = None
    grade: float | None = None
    note: str | None = None


class PassData(_Document):
    academic_year: int | None = None
    passing_sequence: list[PassingItem] = []


class RankingCriterion(_Document):
    item: str | None = None
    percentile: float | None = None


class AdmissionPlan(_Document):
    quota: OptionalNumber = None
    exam_thresholds: list[ExamThreshold] = []
    selection_multipliers: list[SelectionMultiplier] = []
    scoring_weights: list[ScoringWeight] = []
    tie_breakers: list[str] = []
    english_listening_threshold: str | None = None
    art_test_category: str | None = None
    last_year_pass_data: PassData | None = None
    ranking_criteria: list[RankingCriterion] = []
    prior_year_outcome: PassData | None = None


class AdmissionPlans(_Document):
    personal_application: AdmissionPlan | None = None
    distribution_admission: AdmissionPlan | None = None
    star_plan: AdmissionPlan | None = None


class ScoreStandard(_Document):
    top: float | None = None
    front: float | None = None
    average: float | None = None
    back: float | None = None
    bottom: float | None = None


class AcademicAbilityTest(_Document):
    description: str | None = None
    score_standards: dict[str, ScoreStandard] = {}


class EnglishListening(_Document):
    description: str | None = None
    levels: list[str] = []


class AssessmentStandards(_Document):
    academic_ability_test: AcademicAbilityTest | None = None
    english_listening: EnglishListening | None = None


class AdmissionYear(_Document):
    plans: AdmissionPlans
    assessment_standards: AssessmentStandards | None = None


class DepartmentDocument(_Document):
    department_id: str
    department_name: str
    college: str
    academic_group: str
    campus_ids: list[str] = []
    department_description: str | None = None
    years_of_study: int | None = None
    admission_data: dict[str, AdmissionYear] = {}


class Location(_Document):
    city: str
    district: str
    address: str
    google_map_url: str | None = None


class CampusDocument(_Document):
    campus_id: str
    campus_name: str
    is_main: bool = False
    location: Location


class SchoolDocument(_Document):
    school_id: str
    school_name: str
    school_type: str
    school_url: str | None = None
    school_images: list[str] = []
    campuses: list[CampusDocument] = []
    departments: list[DepartmentDocument] = []
