"""Tests for seed normalisation and the delete-all + insert-all replace."""

import pytest
from pydantic import ValidationError

from uniadmit_webapp.db import Campus, Department, School
from uniadmit_webapp.seed_repo import (
    SeedFormatError,
    flatten_prior_year_outcomes,
    normalize_seed_payload,
    replace_all_schools,
)

from conftest import make_department, make_plan, make_school, personal_application


class TestNormalizeSeedPayload:
    def test_array_is_kept(self):
        assert normalize_seed_payload([]) == []
        assert normalize_seed_payload([{"school_id": "1"}]) == [{"school_id": "1"}]

    def test_single_object_becomes_list(self):
        assert normalize_seed_payload({"school_id": "1"}) == [{"school_id": "1"}]

    @pytest.mark.parametrize("body", [{"school_name": "x"}, "text", 3, None])
    def test_invalid_format(self, body):
        with pytest.raises(SeedFormatError):
            normalize_seed_payload(body)


class TestFlattenPriorYearOutcomes:
    def test_outcome_moves_to_described_year(self):
        outcome = {"academic_year": 114, "passing_sequence": [{"subject": "國文", "grade": 14.0}]}
        data = {
            "114": {"plans": {"distribution_admission": {"quota": 3}}},
            "115": {"plans": {"distribution_admission": {"quota": 4, "last_year_pass_data": outcome}}},
        }
        assert flatten_prior_year_outcomes(data) == 1
        assert data["114"]["plans"]["distribution_admission"]["prior_year_outcome"] == outcome
        assert "prior_year_outcome" not in data["115"]["plans"]["distribution_admission"]

    def test_previous_year_used_without_academic_year(self):
        data = {
            "113": {"plans": {"star_plan": {}}},
            "114": {"plans": {"star_plan": {"last_year_pass_data": {"passing_sequence": []}}}},
        }
        assert flatten_prior_year_outcomes(data) == 1
        assert data["113"]["plans"]["star_plan"]["prior_year_outcome"] == {"passing_sequence": []}

    def test_missing_target_plan_is_skipped(self):
        data = {
            "114": {"plans": {"star_plan": {}}},
            "115": {"plans": {"distribution_admission": {"last_year_pass_data": {"academic_year": 114}}}},
        }
        assert flatten_prior_year_outcomes(data) == 0
        assert "prior_year_outcome" not in data["114"]["plans"]["star_plan"]


class TestReplaceAllSchools:
    def test_replace_deletes_previous_rows(self, db):
        replace_all_schools(db, [make_school("001", departments=[make_department("A")])])
        replace_all_schools(db, [make_school("002")])
        assert [s.school_id for s in db.query(School).all()] == ["002"]
        assert db.query(Department).count() == 0
        assert db.query(Campus).count() == 1

    def test_keeps_document_order_and_types(self, db):
        dept = make_department("7", admission_data={"114": {"plans": {"star_plan": make_plan(quota="")}}})
        dept["department_id"] = 7
        replace_all_schools(db, [make_school("001", departments=[make_department("B"), dept])])
        departments = db.query(Department).order_by(Department.position).all()
        assert [d.department_id for d in departments] == ["B", "7"]
        assert departments[1].admission_data["114"]["plans"]["star_plan"]["quota"] is None

    def test_admission_data_keeps_explicit_nulls_and_omits_absent_keys(self, db):
        plan = make_plan(selection_multipliers=[{"subject": "國文", "multiplier": None, "order": 1}])
        dept = make_department("A", admission_data=personal_application(plan))
        replace_all_schools(db, [make_school("001", departments=[dept])])

        stored = db.query(Department).one().admission_data["114"]["plans"]
        assert stored["personal_application"]["selection_multipliers"] == [{"subject": "國文", "multiplier": None, "order": 1}]
        assert "english_listening_threshold" not in stored["personal_application"]
        assert set(stored) == {"personal_application"}

    def test_invalid_document_leaves_collection_untouched(self, db):
        replace_all_schools(db, [make_school("001")])
        bad = make_school("002")
        bad["campuses"][0]["location"].pop("city")
        with pytest.raises(ValidationError):
            replace_all_schools(db, [bad])
        assert db.query(School).count() == 1

    def test_year_entry_requires_plans(self, db):
        dept = make_department("A", admission_data={"114": {"assessment_standards": {}}})
        with pytest.raises(ValidationError):
            replace_all_schools(db, [make_school("001", departments=[dept])])
