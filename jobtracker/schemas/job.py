from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime

from jobtracker.models.job import JobStatus
from jobtracker.schemas.activity import ActivityResponse


class JobCreateRequest(BaseModel):
    """Schema for creating a new job"""
    job_no: str = Field(..., min_length=1, max_length=64)
    title: str = Field(..., min_length=1, max_length=300)
    status: JobStatus = JobStatus.INTAKE
    in_hands_date: Optional[date] = None
    owner: Optional[str] = None
    priority: Optional[str] = None
    est_so_no: Optional[str] = None


class JobPatchRequest(BaseModel):
    """
    Partial update for a job.

    Only fields present in the request body are applied. Sending
    `"in_hands_date": null` clears the date; leaving the key out keeps it.
    """
    status: Optional[JobStatus] = None
    in_hands_date: Optional[date] = None

    def changes(self) -> dict:
        """Fields the caller explicitly supplied, minus a null status."""
        supplied = self.model_dump(include=self.model_fields_set)
        if supplied.get("status") is None:
            supplied.pop("status", None)
        return supplied


class JobResponse(BaseModel):
    """Schema for job response"""
    id: int
    job_no: str
    title: str
    status: JobStatus
    in_hands_date: Optional[date] = None
    owner: Optional[str] = None
    priority: Optional[str] = None
    est_so_no: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True  # Allows conversion from SQLAlchemy models


class JobDetailResponse(JobResponse):
    """Job with its activity history, oldest first"""
    activities: List[ActivityResponse] = []
