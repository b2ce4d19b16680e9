"""
Jobs shown when the API cannot be reached, so the board still renders.
"""

from datetime import date, datetime, timedelta, timezone
from typing import List

from jobtracker.models.job import JobStatus
from jobtracker.schemas.job import JobResponse

_SAMPLE_ROWS = [
    ("J10001", "Company picnic tees", JobStatus.INTAKE, 21, "High"),
    ("J10002", "Trade show banner", JobStatus.DESIGN, 14, "Normal"),
    ("J10003", "Embroidered polos", JobStatus.PROOF, 10, "Normal"),
    ("J10004", "Branded water bottles", JobStatus.PRODUCTION, 5, "Rush"),
    ("J10005", "Conference lanyards", JobStatus.COMPLETE, -3, "Normal"),
]


def sample_jobs(today: date = None) -> List[JobResponse]:
    """Fresh copies every call; the board mutates jobs in place."""
    today = today or date.today()
    created = datetime.now(timezone.utc)
    jobs = []
    for index, (job_no, title, status, days_out, priority) in enumerate(_SAMPLE_ROWS):
        jobs.append(JobResponse(
            id=-(index + 1),
            job_no=job_no,
            title=title,
            status=status,
            in_hands_date=today + timedelta(days=days_out),
            owner=None,
            priority=priority,
            created_at=created - timedelta(minutes=index),
        ))
    return jobs
