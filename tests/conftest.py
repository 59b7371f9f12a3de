"""
Test configuration and fixtures.

The app runs against an in-memory SQLite database; tables are recreated for every test.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["METADATA_CACHE_TTL_SEC"] = "300"

import pytest
from fastapi.testclient import TestClient

from uniadmit_webapp.db import Base, SessionLocal, engine
from uniadmit_webapp.filter_options_repo import clear_filter_options_cache
from uniadmit_webapp.seed_repo import replace_all_schools


# =============================================================================
# Sample documents
# =============================================================================

def make_threshold(subject, threshold, group=1, exam_type="學測"):
    return {"subject": subject, "exam_type": exam_type, "threshold": threshold, "group": group}


def make_plan(thresholds=None, listening=None, **extra):
    plan = {"quota": 10, "exam_thresholds": thresholds or []}
    if listening is not None:
        plan["english_listening_threshold"] = listening
    plan.update(extra)
    return plan


def make_department(department_id, *, group="資訊學群", college="工學院", admission_data=None, name=None):
    return {
        "department_id": department_id,
        "department_name": name or f"系所{department_id}",
        "college": college,
        "academic_group": group,
        "campus_ids": ["C1"],
        "years_of_study": 4,
        "admission_data": admission_data if admission_data is not None else {},
    }


def make_school(school_id, *, city="臺北市", school_type="公立", departments=None, main=True, extra_campuses=()):
    campuses = [
        {
            "campus_id": "C1",
            "campus_name": "主校區",
            "is_main": main,
            "location": {"city": city, "district": "某區", "address": "某路1號"},
        }
    ]
    campuses.extend(extra_campuses)
    return {
        "school_id": school_id,
        "school_name": f"學校{school_id}",
        "school_type": school_type,
        "school_url": f"https://example.edu.tw/{school_id}",
        "school_images": [],
        "campuses": campuses,
        "departments": departments or [],
    }


def personal_application(plan, year="114"):
    return {year: {"plans": {"personal_application": plan}}}


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    clear_filter_options_cache()
    yield
    clear_filter_options_cache()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seed(db):
    """Replace the collection with the given school documents."""
    def _seed(*schools):
        return replace_all_schools(db, list(schools))
    return _seed


@pytest.fixture
def app():
    from uniadmit_webapp.main import app
    return app


@pytest.fixture
def client(app):
    return TestClient(app)
