"""Request/response tests for GET /schools and POST /seed."""

from fastapi.testclient import TestClient

from uniadmit_webapp import routes
from uniadmit_webapp.db import School

from conftest import make_department, make_plan, make_school, make_threshold, personal_application


def _department(dept_id, threshold="均標"):
    plan = make_plan([make_threshold("國文", threshold, 1)], listening="C")
    return make_department(dept_id, group="文史哲學群", college="文學院", admission_data=personal_application(plan))


class TestSchoolsEndpoint:
    def test_default_listing_shape(self, client: TestClient, seed):
        seed(make_school("001", departments=[_department("A")]), make_school("002", city="花蓮縣", departments=[_department("B")]))
        response = client.get("/schools")
        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"metadata", "schools", "pagination"}
        assert [s["school_id"] for s in data["schools"]] == ["001", "002"]
        assert data["pagination"] == {"page": 1, "limit": 12, "total": 2, "totalPages": 1, "hasMore": False}
        assert data["metadata"]["regions"] == ["北北基", "宜花東"]
        assert data["metadata"]["academic_groups"] == ["文史哲學群"]

    def test_page_two_of_fifteen(self, client: TestClient, seed):
        seed(*[make_school(f"{i:03d}", departments=[_department("A")]) for i in range(1, 16)])
        response = client.get("/schools", params={"page": 2, "limit": 12, "chinese": 12})
        data = response.json()
        assert len(data["schools"]) == 3
        assert data["pagination"]["total"] == 15
        assert data["pagination"]["hasMore"] is False

    def test_score_filter_projects_levels(self, client: TestClient, seed):
        seed(make_school("001", departments=[_department("A", "均標"), _department("B", "頂標")]))
        data = client.get("/schools", params={"chinese": "12"}).json()
        assert [d["department_id"] for d in data["schools"][0]["departments"]] == ["A"]

        data = client.get("/schools", params={"chinese": "13"}).json()
        assert [d["department_id"] for d in data["schools"][0]["departments"]] == ["A", "B"]

    def test_listening_and_region(self, client: TestClient, seed):
        seed(make_school("001", departments=[_department("A")]), make_school("002", city="臺南市", departments=[_department("B")]))
        data = client.get("/schools", params={"listening": "F"}).json()
        assert data["schools"] == []
        data = client.get("/schools", params={"listening": "B", "region": "雲嘉南"}).json()
        assert [s["school_id"] for s in data["schools"]] == ["002"]

    def test_detail_returns_admission_data(self, client: TestClient, seed):
        seed(make_school("001", departments=[_department("A")]))
        data = client.get("/schools", params={"school_id": "001", "detail": "true"}).json()
        dept = data["schools"][0]["departments"][0]
        assert "114" in dept["admission_data"]

    def test_region_only_query_still_requires_target_plan(self, client: TestClient, seed):
        old_only = make_department("B", admission_data=personal_application(make_plan(), year="113"))
        seed(
            make_school("001", departments=[_department("A"), old_only]),
            make_school("002", departments=[old_only]),
        )
        data = client.get("/schools", params={"region": "臺北市"}).json()
        assert [(s["school_id"], [d["department_id"] for d in s["departments"]]) for s in data["schools"]] == [
            ("001", ["A"])
        ]
        assert data["pagination"]["total"] == 1

    def test_invalid_paging_values_fall_back(self, client: TestClient, seed):
        seed(make_school("001"))
        data = client.get("/schools", params={"page": "abc", "limit": "-1"}).json()
        assert data["pagination"]["page"] == 1
        assert data["pagination"]["limit"] == 12

    def test_non_ascii_digits_in_paging_fall_back(self, client: TestClient, seed):
        seed(make_school("001", departments=[_department("A")]))
        response = client.get("/schools", params={"page": "²", "limit": "³"})
        assert response.status_code == 200
        assert response.json()["pagination"]["page"] == 1
        assert response.json()["pagination"]["limit"] == 12

    def test_errors_return_500(self, client: TestClient, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("connection refused")

        monkeypatch.setattr(routes, "search_schools", boom)
        response = client.get("/schools")
        assert response.status_code == 500
        assert response.json() == {"status": "error", "message": "connection refused"}

    def test_metadata_failure_fails_request(self, client: TestClient, monkeypatch):
        def boom(db):
            raise RuntimeError("metadata unavailable")

        monkeypatch.setattr(routes, "fetch_school_metadata", boom)
        response = client.get("/schools")
        assert response.status_code == 500
        assert response.json()["status"] == "error"


class TestSeedEndpoint:
    def test_seed_array_replaces_collection(self, client: TestClient, db):
        assert client.post("/seed", json=[make_school("001"), make_school("002")]).json() == {
            "count": 2,
            "status": "success",
        }
        response = client.post("/seed", json=[make_school("003")])
        assert response.json()["count"] == 1
        assert [s.school_id for s in db.query(School).all()] == ["003"]

    def test_seed_empty_array_clears_collection(self, client: TestClient, seed, db):
        seed(make_school("001"))
        response = client.post("/seed", json=[])
        assert response.status_code == 200
        assert response.json() == {"count": 0, "status": "success"}
        assert db.query(School).count() == 0

    def test_seed_single_object(self, client: TestClient, db):
        response = client.post("/seed", json=make_school("001", departments=[_department("A")]))
        assert response.json() == {"count": 1, "status": "success"}
        data = client.get("/schools").json()
        assert data["schools"][0]["departments"][0]["department_id"] == "A"

    def test_seed_rejects_object_without_school_id(self, client: TestClient):
        response = client.post("/seed", json={"school_name": "x"})
        assert response.status_code == 400
        assert response.json()["status"] == "error"

    def test_seed_invalid_document_returns_500(self, client: TestClient, seed, db):
        seed(make_school("001"))
        bad = make_school("002")
        del bad["school_type"]
        response = client.post("/seed", json=[bad])
        assert response.status_code == 500
        assert response.json()["status"] == "error"
        assert db.query(School).count() == 1

    def test_seed_refreshes_metadata(self, client: TestClient):
        client.post("/seed", json=[make_school("001", city="澎湖縣")])
        assert client.get("/schools").json()["metadata"]["regions"] == ["離島"]
        client.post("/seed", json=[make_school("001", city="臺東縣")])
        assert client.get("/schools").json()["metadata"]["regions"] == ["宜花東"]
