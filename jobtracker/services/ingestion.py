"""
Email ingestion: make sure the job exists, then record the activity.

Both writes share one transaction, so a failed activity insert never leaves
a freshly created job behind.
"""

import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobtracker.core.exceptions import AppError, InternalError
from jobtracker.crud import activity as activity_crud
from jobtracker.crud import job as job_crud
from jobtracker.models.activity import Activity
from jobtracker.schemas.activity import ActivityIngestRequest

logger = logging.getLogger(__name__)


def ingest_activity(db: Session, request: ActivityIngestRequest) -> Activity:
    """
    Upsert the job named by `request.job_no` and append an activity to it.

    Raises:
        ValidationError: job_no missing or blank
        NotFoundError: the job vanished between upsert and insert
        InternalError: any other store failure (transaction rolled back)
    """
    try:
        job_id = job_crud.upsert_by_job_no(db, request.job_no, request.subject)
        activity = activity_crud.create(
            db,
            job_id=job_id,
            source=request.source,
            snippet=request.snippet,
            gmail_link=request.gmail_link,
            commit=False,
        )
        db.commit()
    except AppError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Ingestion failed for job {request.job_no}: {e}")
        raise InternalError(str(e))

    logger.info(f"Ingested activity {activity.id} for job {request.job_no} (id {job_id})")
    return activity
