"""
CRUD operations for Activity model.

Activities are append-only: there is no update or delete here.
"""

from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobtracker.core.exceptions import NotFoundError
from jobtracker.models.activity import Activity

DEFAULT_SOURCE = "email"


def create(
    db: Session,
    job_id: int,
    source: Optional[str] = DEFAULT_SOURCE,
    snippet: Optional[str] = None,
    gmail_link: Optional[str] = None,
    commit: bool = True
) -> Activity:
    """
    Append an activity to a job.

    Args:
        db: Database session
        job_id: Owning job id
        source: Origin tag, "email" when not given
        snippet: Optional free text
        gmail_link: Optional link back to the message
        commit: Commit immediately; pass False to keep the caller's transaction open

    Returns:
        The stored Activity with id and created_at populated

    Raises:
        NotFoundError: job_id does not reference an existing job
    """
    activity = Activity(
        job_id=job_id,
        source=source or DEFAULT_SOURCE,
        snippet=snippet or None,
        gmail_link=gmail_link or None,
    )
    db.add(activity)

    try:
        if commit:
            db.commit()
        else:
            db.flush()
    except IntegrityError:
        # Only the job_id foreign key can fail here
        db.rollback()
        raise NotFoundError(f"Job {job_id} not found")

    db.refresh(activity)
    return activity


def get_for_job(db: Session, job_id: int) -> List[Activity]:
    return (
        db.query(Activity)
        .filter(Activity.job_id == job_id)
        .order_by(Activity.created_at, Activity.id)
        .all()
    )
