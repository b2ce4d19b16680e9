import logging
from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobtracker.core.database import get_db
from jobtracker.core.deps import require_api_key
from jobtracker.core.exceptions import InternalError, NotFoundError
from jobtracker.crud import job as job_crud
from jobtracker.models.job import JobStatus
from jobtracker.schemas.job import JobCreateRequest, JobDetailResponse, JobPatchRequest, JobResponse

router = APIRouter(prefix="/jobs", tags=["Jobs"], dependencies=[Depends(require_api_key)])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[JobResponse])
def list_jobs(
    status: Optional[JobStatus] = None,
    db: Session = Depends(get_db)
):
    """
    List jobs newest first, at most 200.

    Args:
        status: Optional filter (intake, design, proof, production, complete)
    """
    try:
        return job_crud.get_multi(db, status=status)
    except SQLAlchemyError as e:
        logger.error(f"Error listing jobs: {e}")
        raise InternalError(str(e))


@router.post("", status_code=201, response_model=JobResponse)
def create_job(
    request: JobCreateRequest,
    db: Session = Depends(get_db)
):
    """
    Create a job explicitly. Ingestion creates jobs implicitly as well.
    """
    try:
        new_job = job_crud.create(db, request)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating job {request.job_no}: {e}")
        raise InternalError(str(e))

    logger.info(f"Created job {new_job.id}: {new_job.job_no} {new_job.title}")
    return new_job


@router.get("/{job_id}", response_model=JobDetailResponse)
def get_job(job_id: int, db: Session = Depends(get_db)):
    """
    Retrieve a job with its activity history.
    """
    job = job_crud.get_by_id(db, job_id, with_activities=True)

    if not job:
        raise NotFoundError(f"Job {job_id} not found")

    return job


@router.patch("/{job_id}", response_model=JobResponse)
def patch_job(
    job_id: int,
    request: JobPatchRequest,
    db: Session = Depends(get_db)
):
    """
    Update status and/or in-hands date.

    Only the keys present in the body are applied; `"in_hands_date": null`
    clears the date.
    """
    try:
        job = job_crud.patch(db, job_id, request.changes())
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating job {job_id}: {e}")
        raise InternalError(str(e))

    logger.info(f"Updated job {job_id}: {sorted(request.changes())}")
    return job
