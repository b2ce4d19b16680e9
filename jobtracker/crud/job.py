"""
CRUD operations for Job model.

Implements the Repository pattern to encapsulate all database operations
for jobs, including the atomic upsert used by email ingestion.
"""

import logging
from typing import List, Optional
from sqlalchemy import case
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from jobtracker.core.exceptions import ConflictError, InternalError, NotFoundError, ValidationError
from jobtracker.models.job import Job, JobStatus
from jobtracker.schemas.job import JobCreateRequest
from jobtracker.services.title_normalizer import UNTITLED, normalize_title

logger = logging.getLogger(__name__)

MAX_LIST_LIMIT = 200


def _dialect_insert(db: Session):
    """Pick the insert construct that supports ON CONFLICT for this backend."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise InternalError(f"Upsert is not supported on {dialect}")


def create(db: Session, job_data: JobCreateRequest) -> Job:
    """
    Create a new job in the database.

    Args:
        db: Database session
        job_data: Validated job creation data

    Returns:
        Created Job instance with id

    Raises:
        ValidationError: job_no or title is blank
        ConflictError: a job with this job_no already exists
    """
    job_no = (job_data.job_no or "").strip()
    title = (job_data.title or "").strip()
    if not job_no or not title:
        raise ValidationError("job_no and title required")

    db_job = Job(
        job_no=job_no,
        title=title,
        status=job_data.status or JobStatus.INTAKE,
        in_hands_date=job_data.in_hands_date,
        owner=job_data.owner or None,
        priority=job_data.priority or None,
        est_so_no=job_data.est_so_no or None,
    )

    db.add(db_job)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Job {job_no} already exists")
    db.refresh(db_job)

    return db_job


def get_by_id(db: Session, job_id: int, with_activities: bool = False) -> Optional[Job]:
    """
    Retrieve a job by its ID, optionally loading its activities eagerly.
    """
    query = db.query(Job)
    if with_activities:
        query = query.options(selectinload(Job.activities))
    return query.filter(Job.id == job_id).first()


def get_by_job_no(db: Session, job_no: str) -> Optional[Job]:
    return db.query(Job).filter(Job.job_no == job_no).first()


def get_multi(
    db: Session,
    status: Optional[JobStatus] = None,
    limit: int = MAX_LIST_LIMIT
) -> List[Job]:
    """
    Retrieve jobs newest first, optionally filtered by status.

    Args:
        db: Database session
        status: Optional status filter
        limit: Maximum number of records to return (never above 200)

    Returns:
        List of Job instances
    """
    query = db.query(Job)

    if status:
        query = query.filter(Job.status == status)

    limit = max(0, min(limit, MAX_LIST_LIMIT))
    return query.order_by(Job.created_at.desc(), Job.id.desc()).limit(limit).all()


def patch(db: Session, job_id: int, changes: dict) -> Job:
    """
    Apply a partial update.

    Only keys present in `changes` are written, so {"in_hands_date": None}
    clears the date while an absent key leaves it alone.

    Raises:
        ValidationError: nothing to change
        NotFoundError: no job with this id
    """
    allowed = {key: value for key, value in changes.items() if key in ("status", "in_hands_date")}
    if not allowed:
        raise ValidationError("no changes")

    job = get_by_id(db, job_id)
    if not job:
        raise NotFoundError(f"Job {job_id} not found")

    for field, value in allowed.items():
        setattr(job, field, value)

    db.commit()
    db.refresh(job)

    return job


def upsert_by_job_no(db: Session, job_no: str, subject: Optional[str] = None) -> int:
    """
    Find or create the job for `job_no` in one statement and return its id.

    Runs INSERT ... ON CONFLICT (job_no) DO UPDATE so two first-time
    ingestions for the same job_no cannot both insert. An existing title
    is kept unless it is still the "Untitled" placeholder.

    Does not commit; the caller owns the transaction.

    Raises:
        ValidationError: job_no is missing or blank
    """
    job_no = (job_no or "").strip()
    if not job_no:
        raise ValidationError("job_no required")

    title = normalize_title(subject)
    insert = _dialect_insert(db)

    stmt = insert(Job).values(job_no=job_no, title=title, status=JobStatus.INTAKE)
    stmt = stmt.on_conflict_do_update(
        index_elements=[Job.job_no],
        set_={
            "title": case(
                (Job.title == UNTITLED, stmt.excluded.title),
                else_=Job.title,
            )
        },
    ).returning(Job.id)

    job_id = db.execute(stmt).scalar_one()
    logger.debug(f"Upserted job {job_no} -> id {job_id}")
    return job_id
