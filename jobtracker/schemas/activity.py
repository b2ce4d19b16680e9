from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ActivityIngestRequest(BaseModel):
    """
    Inbound notification (usually an email webhook) about a job.

    job_no is checked by the ingestion service rather than here so a missing
    value surfaces as the same 400 message whatever the transport.
    """
    job_no: Optional[str] = None
    subject: Optional[str] = None
    snippet: Optional[str] = None
    gmail_link: Optional[str] = None
    source: Optional[str] = "email"


class ActivityResponse(BaseModel):
    """Schema for activity response"""
    id: int
    job_id: int
    source: str
    snippet: Optional[str] = None
    gmail_link: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ActivityIngestResponse(BaseModel):
    ok: bool = True
    activity: ActivityResponse
