"""
Kanban and calendar state for the dashboard.

Everything here works on jobs already fetched from the API: bucketing,
date grouping and the "mine / all" filter never trigger another request.
Moving a card is optimistic: local state changes first, the PATCH follows,
and a failed PATCH leaves the card where the user dropped it with a warning.
"""

import calendar
import logging
from collections import OrderedDict
from datetime import date
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence

from jobtracker.models.job import JobStatus
from jobtracker.schemas.job import JobResponse
from jobtracker.services.jobs_client import JobsApiClient, JobsApiError
from jobtracker.dashboard.sample_data import sample_jobs

logger = logging.getLogger(__name__)

STATUS_COLUMNS = [
    (JobStatus.INTAKE, "Intake"),
    (JobStatus.DESIGN, "Design"),
    (JobStatus.PROOF, "Proof"),
    (JobStatus.PRODUCTION, "Production"),
    (JobStatus.COMPLETE, "Complete"),
]
STATUS_LABELS = dict(STATUS_COLUMNS)


class CalendarDay(NamedTuple):
    day: date
    in_month: bool
    jobs: List[JobResponse]


def bucket_by_status(jobs: Iterable[JobResponse]) -> "OrderedDict[JobStatus, List[JobResponse]]":
    """Every job lands in exactly one column; unknown statuses go to intake."""
    buckets = OrderedDict((status, []) for status, _ in STATUS_COLUMNS)
    for job in jobs:
        status = job.status if job.status in buckets else JobStatus.INTAKE
        buckets[status].append(job)
    return buckets


def owned_by(job: JobResponse, identities: Sequence[str]) -> bool:
    if not job.owner:
        return False
    owner = job.owner.strip().lower()
    return any(owner == identity.strip().lower() for identity in identities if identity)


def filter_jobs(jobs: Iterable[JobResponse], identities: Sequence[str], mine_only: bool) -> List[JobResponse]:
    jobs = list(jobs)
    if not mine_only:
        return jobs
    return [job for job in jobs if owned_by(job, identities)]


def group_by_in_hands_date(jobs: Iterable[JobResponse]) -> Dict[date, List[JobResponse]]:
    grouped: Dict[date, List[JobResponse]] = {}
    for job in jobs:
        if job.in_hands_date is None:
            continue
        grouped.setdefault(job.in_hands_date, []).append(job)
    return grouped


def month_grid(year: int, month: int, jobs: Iterable[JobResponse]) -> List[List[CalendarDay]]:
    """Weeks (Sunday first) covering the month, each day with its due jobs."""
    grouped = group_by_in_hands_date(jobs)
    weeks = calendar.Calendar(firstweekday=calendar.SUNDAY).monthdatescalendar(year, month)
    return [
        [CalendarDay(day, day.month == month, grouped.get(day, [])) for day in week]
        for week in weeks
    ]


class DashboardState:
    """
    Jobs for one dashboard view plus the warnings to show above it.

    Args:
        client: API client used for loading and status updates
        identities: Strings that identify the signed-in user as an owner
        mine_only: Start with the "my jobs" filter on
    """

    def __init__(self, client: JobsApiClient, identities: Sequence[str] = (), mine_only: bool = False):
        self.client = client
        self.identities = list(identities)
        self.mine_only = mine_only
        self.jobs: List[JobResponse] = []
        self.warnings: List[str] = []
        self.using_sample_data = False

    async def load(self) -> None:
        try:
            self.jobs = await self.client.list_jobs()
            self.using_sample_data = False
        except JobsApiError as e:
            logger.warning(f"Falling back to sample jobs: {e}")
            self.jobs = sample_jobs()
            self.using_sample_data = True
            self.warnings.append(f"Live data is unavailable ({e}). Showing sample jobs.")

    def toggle_mine(self) -> bool:
        self.mine_only = not self.mine_only
        return self.mine_only

    def visible_jobs(self) -> List[JobResponse]:
        return filter_jobs(self.jobs, self.identities, self.mine_only)

    def columns(self) -> "OrderedDict[JobStatus, List[JobResponse]]":
        return bucket_by_status(self.visible_jobs())

    def find(self, job_id: int) -> Optional[JobResponse]:
        return next((job for job in self.jobs if job.id == job_id), None)

    async def move(self, job_id: int, status: JobStatus) -> Optional[JobResponse]:
        """
        Drop a card into another column.

        Returns the job as the board now shows it. A job that was not loaded
        (e.g. past the list cap) is only patched; None means it could not
        be updated at all.
        """
        status = JobStatus(status)
        job = self.find(job_id)
        if job is not None:
            job.status = status

        try:
            updated = await self.client.patch_job(job_id, {"status": status})
        except JobsApiError as e:
            # TODO: decide with product whether a failed sync should roll the card back
            label = job.job_no if job is not None else f"job {job_id}"
            logger.warning(f"Status sync failed for {label}: {e}")
            self.warnings.append(
                f"Moved {label} to {STATUS_LABELS[status]}, but the change was not saved ({e})."
            )
            return job

        return job if job is not None else updated
