"""
Inbound activity webhook.

An email integration posts here whenever a message tagged with a job number
arrives; the job is created on first sight and the message recorded.
"""

import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from jobtracker.core.database import get_db
from jobtracker.core.deps import require_api_key
from jobtracker.schemas.activity import ActivityIngestRequest, ActivityIngestResponse, ActivityResponse
from jobtracker.services.ingestion import ingest_activity

router = APIRouter(prefix="/activities", tags=["Activities"], dependencies=[Depends(require_api_key)])
logger = logging.getLogger(__name__)


@router.post("/ingest", response_model=ActivityIngestResponse)
def ingest(
    request: ActivityIngestRequest,
    db: Session = Depends(get_db)
):
    """
    Upsert the job by job_no and append an activity.

    The job title comes from the subject with any [J:<digits>] tag removed.
    An existing job keeps its title unless it is still "Untitled".
    """
    activity = ingest_activity(db, request)
    return ActivityIngestResponse(ok=True, activity=ActivityResponse.model_validate(activity))
