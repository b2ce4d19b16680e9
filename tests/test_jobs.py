"""
Test suite for the jobs REST endpoints.

Tests cover:
- Job creation and duplicate job numbers
- Listing order, status filter and the 200 cap
- Job detail with activities
- Partial updates (status, in-hands date)
"""

from datetime import date, datetime, timedelta

from jobtracker.crud import activity as activity_crud
from jobtracker.models.job import Job, JobStatus


def _add_jobs(db_session, count, status=JobStatus.INTAKE):
    start = datetime(2026, 1, 1, 9, 0, 0)
    for i in range(count):
        db_session.add(Job(
            job_no=f"J{30000 + i}",
            title=f"Job {i}",
            status=status,
            created_at=start + timedelta(minutes=i),
        ))
    db_session.commit()


class TestJobCreation:
    """Tests for job creation endpoint"""

    def test_create_job_success(self, client, api_headers, sample_job_data):
        response = client.post("/jobs", json=sample_job_data, headers=api_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["id"] > 0
        assert data["job_no"] == "J20481"
        assert data["title"] == "Spring Gala Banners"
        assert data["status"] == "intake"
        assert data["in_hands_date"] == "2026-11-14"
        assert data["created_at"] is not None

    def test_create_job_defaults_to_intake(self, client, api_headers):
        response = client.post("/jobs", json={"job_no": "J1", "title": "Stickers"}, headers=api_headers)

        assert response.status_code == 201
        assert response.json()["status"] == "intake"

    def test_create_job_missing_title(self, client, db_session, api_headers):
        """Missing title is a 400 and nothing is stored"""
        response = client.post("/jobs", json={"job_no": "J1"}, headers=api_headers)

        assert response.status_code == 400
        assert "error" in response.json()
        assert db_session.query(Job).count() == 0

    def test_create_job_blank_title(self, client, db_session, api_headers):
        response = client.post("/jobs", json={"job_no": "J1", "title": "   "}, headers=api_headers)

        assert response.status_code == 400
        assert response.json() == {"error": "job_no and title required"}
        assert db_session.query(Job).count() == 0

    def test_create_job_invalid_status(self, client, api_headers):
        response = client.post(
            "/jobs",
            json={"job_no": "J1", "title": "Stickers", "status": "shipped"},
            headers=api_headers
        )

        assert response.status_code == 400

    def test_create_duplicate_job_no(self, client, api_headers, sample_job_data):
        client.post("/jobs", json=sample_job_data, headers=api_headers)
        response = client.post("/jobs", json=sample_job_data, headers=api_headers)

        assert response.status_code == 409
        assert "J20481" in response.json()["error"]


class TestJobListing:
    """Tests for GET /jobs"""

    def test_list_empty(self, client, api_headers):
        response = client.get("/jobs", headers=api_headers)

        assert response.status_code == 200
        assert response.json() == []

    def test_list_newest_first(self, client, db_session, api_headers):
        _add_jobs(db_session, 3)

        response = client.get("/jobs", headers=api_headers)

        assert [job["job_no"] for job in response.json()] == ["J30002", "J30001", "J30000"]

    def test_list_is_capped_at_200(self, client, db_session, api_headers):
        _add_jobs(db_session, 205)

        response = client.get("/jobs", headers=api_headers)

        data = response.json()
        assert len(data) == 200
        assert data[0]["job_no"] == "J30204"

    def test_list_filters_by_status(self, client, db_session, api_headers):
        _add_jobs(db_session, 2)
        db_session.add(Job(job_no="J9", title="Proof me", status=JobStatus.PROOF))
        db_session.commit()

        response = client.get("/jobs", params={"status": "proof"}, headers=api_headers)

        data = response.json()
        assert len(data) == 1
        assert data[0]["job_no"] == "J9"
        assert data[0]["status"] == "proof"

    def test_list_unknown_status(self, client, api_headers):
        response = client.get("/jobs", params={"status": "shipped"}, headers=api_headers)

        assert response.status_code == 400


class TestJobDetail:
    """Tests for GET /jobs/{id}"""

    def test_get_job_with_activities(self, client, db_session, api_headers):
        job = Job(job_no="J5", title="Banners", status=JobStatus.DESIGN)
        db_session.add(job)
        db_session.commit()
        activity_crud.create(db_session, job_id=job.id, snippet="first")
        activity_crud.create(db_session, job_id=job.id, snippet="second", source="manual")

        response = client.get(f"/jobs/{job.id}", headers=api_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["job_no"] == "J5"
        assert [a["snippet"] for a in data["activities"]] == ["first", "second"]
        assert data["activities"][1]["source"] == "manual"

    def test_get_nonexistent_job(self, client, api_headers):
        response = client.get("/jobs/99999", headers=api_headers)

        assert response.status_code == 404
        assert "not found" in response.json()["error"].lower()


class TestJobPatch:
    """Tests for PATCH /jobs/{id}"""

    def _create(self, client, api_headers, sample_job_data):
        return client.post("/jobs", json=sample_job_data, headers=api_headers).json()["id"]

    def test_patch_status_only_keeps_date(self, client, api_headers, sample_job_data):
        job_id = self._create(client, api_headers, sample_job_data)

        response = client.patch(f"/jobs/{job_id}", json={"status": "proof"}, headers=api_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "proof"
        assert data["in_hands_date"] == "2026-11-14"

    def test_patch_null_date_clears_it(self, client, api_headers, sample_job_data):
        job_id = self._create(client, api_headers, sample_job_data)

        response = client.patch(f"/jobs/{job_id}", json={"in_hands_date": None}, headers=api_headers)

        assert response.status_code == 200
        assert response.json()["in_hands_date"] is None
        assert response.json()["status"] == "intake"

    def test_patch_sets_date(self, client, db_session, api_headers, sample_job_data):
        job_id = self._create(client, api_headers, sample_job_data)

        client.patch(f"/jobs/{job_id}", json={"in_hands_date": "2026-12-01"}, headers=api_headers)

        db_session.expire_all()
        assert db_session.get(Job, job_id).in_hands_date == date(2026, 12, 1)

    def test_patch_ignores_other_fields(self, client, api_headers, sample_job_data):
        job_id = self._create(client, api_headers, sample_job_data)

        response = client.patch(f"/jobs/{job_id}", json={"title": "Renamed"}, headers=api_headers)

        assert response.status_code == 400
        assert response.json() == {"error": "no changes"}

    def test_patch_empty_body(self, client, api_headers, sample_job_data):
        job_id = self._create(client, api_headers, sample_job_data)

        response = client.patch(f"/jobs/{job_id}", json={}, headers=api_headers)

        assert response.status_code == 400
        assert response.json() == {"error": "no changes"}

    def test_patch_unknown_job(self, client, api_headers):
        response = client.patch("/jobs/4242", json={"status": "complete"}, headers=api_headers)

        assert response.status_code == 404

    def test_patch_invalid_status(self, client, api_headers, sample_job_data):
        job_id = self._create(client, api_headers, sample_job_data)

        response = client.patch(f"/jobs/{job_id}", json={"status": "shipped"}, headers=api_headers)

        assert response.status_code == 400
