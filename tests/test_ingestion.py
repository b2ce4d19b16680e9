"""
Test suite for email activity ingestion.

Tests cover:
- POST /activities/ingest creating jobs on first sight
- Title rules for repeat ingestions
- Validation and missing-job errors
- Concurrent first-time ingestion of the same job number
"""

import threading

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from jobtracker.core.database import Base
from jobtracker.core.exceptions import NotFoundError, ValidationError
from jobtracker.crud import activity as activity_crud
from jobtracker.crud import job as job_crud
from jobtracker.models.activity import Activity
from jobtracker.models.job import Job, JobStatus
from jobtracker.schemas.activity import ActivityIngestRequest
from jobtracker.services.ingestion import ingest_activity


class TestIngestEndpoint:
    """Tests for POST /activities/ingest"""

    def test_ingest_creates_job_and_activity(self, client, db_session, api_headers):
        response = client.post("/activities/ingest", json={
            "job_no": "J12345",
            "subject": "Re: [J:12345] Proof for banners",
            "snippet": "Looks good, ship it",
            "gmail_link": "https://mail.google.com/mail/u/0/#inbox/abc123",
        }, headers=api_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["activity"]["source"] == "email"
        assert data["activity"]["snippet"] == "Looks good, ship it"

        job = db_session.query(Job).filter(Job.job_no == "J12345").one()
        assert job.title == "Re: Proof for banners"
        assert job.status == JobStatus.INTAKE
        assert data["activity"]["job_id"] == job.id

    def test_ingest_without_subject_is_untitled(self, client, db_session, api_headers):
        client.post("/activities/ingest", json={"job_no": "J1"}, headers=api_headers)

        assert db_session.query(Job).one().title == "Untitled"

    def test_ingest_custom_source(self, client, api_headers):
        response = client.post(
            "/activities/ingest",
            json={"job_no": "J1", "source": "slack"},
            headers=api_headers
        )

        assert response.json()["activity"]["source"] == "slack"

    def test_ingest_missing_job_no(self, client, db_session, api_headers):
        response = client.post(
            "/activities/ingest",
            json={"subject": "hello"},
            headers=api_headers
        )

        assert response.status_code == 400
        assert response.json() == {"error": "job_no required"}
        assert db_session.query(Job).count() == 0
        assert db_session.query(Activity).count() == 0

    def test_ingest_blank_job_no(self, client, api_headers):
        response = client.post("/activities/ingest", json={"job_no": "  "}, headers=api_headers)

        assert response.status_code == 400

    def test_repeat_ingest_appends_to_same_job(self, client, db_session, api_headers):
        for snippet in ("one", "two", "three"):
            client.post(
                "/activities/ingest",
                json={"job_no": "J77", "subject": "[J:77] Hats", "snippet": snippet},
                headers=api_headers
            )

        job = db_session.query(Job).one()
        assert [a.snippet for a in job.activities] == ["one", "two", "three"]


class TestUpsertTitles:
    """Title handling when a job number is seen again"""

    def _ingest(self, db_session, job_no, subject):
        return ingest_activity(db_session, ActivityIngestRequest(job_no=job_no, subject=subject))

    def test_existing_title_is_kept(self, db_session):
        self._ingest(db_session, "J1", "[J:1] Original title")
        self._ingest(db_session, "J1", "[J:1] Different subject")

        db_session.expire_all()
        assert job_crud.get_by_job_no(db_session, "J1").title == "Original title"

    def test_untitled_is_upgraded(self, db_session):
        self._ingest(db_session, "J1", None)
        self._ingest(db_session, "J1", "[J:1] Finally a subject")

        db_session.expire_all()
        assert job_crud.get_by_job_no(db_session, "J1").title == "Finally a subject"

    def test_status_is_not_touched(self, db_session):
        self._ingest(db_session, "J1", "Shirts")
        job = job_crud.get_by_job_no(db_session, "J1")
        job_crud.patch(db_session, job.id, {"status": JobStatus.PRODUCTION})

        self._ingest(db_session, "J1", "Shirts again")

        db_session.expire_all()
        assert job_crud.get_by_job_no(db_session, "J1").status == JobStatus.PRODUCTION

    def test_upsert_returns_same_id(self, db_session):
        first = job_crud.upsert_by_job_no(db_session, "J8", "Mugs")
        second = job_crud.upsert_by_job_no(db_session, "J8", "Mugs")
        db_session.commit()

        assert first == second
        assert db_session.query(Job).count() == 1

    def test_upsert_requires_job_no(self, db_session):
        with pytest.raises(ValidationError):
            job_crud.upsert_by_job_no(db_session, "", "Mugs")


class TestActivityCreate:

    def test_unknown_job_id(self, db_session):
        with pytest.raises(NotFoundError):
            activity_crud.create(db_session, job_id=999, snippet="orphan")

        assert db_session.query(Activity).count() == 0

    def test_empty_source_defaults_to_email(self, db_session):
        job_id = job_crud.upsert_by_job_no(db_session, "J3", "Pens")
        db_session.commit()

        activity = activity_crud.create(db_session, job_id=job_id, source="")

        assert activity.source == "email"
        assert activity.id is not None
        assert activity.created_at is not None


class TestConcurrentIngestion:
    """Two first-time ingestions for one job_no must not create two jobs"""

    def test_parallel_first_ingest(self, tmp_path):
        engine = create_engine(
            f"sqlite:///{tmp_path / 'ingest.db'}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        Base.metadata.create_all(bind=engine)
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        barrier = threading.Barrier(2)
        errors = []

        def worker(snippet):
            db = SessionLocal()
            try:
                barrier.wait()
                ingest_activity(db, ActivityIngestRequest(job_no="J555", subject="[J:555] Race", snippet=snippet))
            except Exception as e:  # collected and asserted below
                errors.append(e)
            finally:
                db.close()

        threads = [threading.Thread(target=worker, args=(name,)) for name in ("a", "b")]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        db = SessionLocal()
        try:
            assert errors == []
            jobs = db.query(Job).all()
            assert len(jobs) == 1
            assert sorted(a.snippet for a in jobs[0].activities) == ["a", "b"]
        finally:
            db.close()
            engine.dispose()
