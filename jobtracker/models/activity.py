"""
Activity database model.

An activity is an immutable note attached to a job, normally created when an
inbound email referencing the job is ingested.
"""

from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from jobtracker.core.database import Base


class Activity(Base):
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)

    source = Column(String, nullable=False, default="email", server_default="email")
    snippet = Column(Text, nullable=True)
    gmail_link = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    job = relationship("Job", back_populates="activities")

    def __repr__(self):
        return f"<Activity(id={self.id}, job_id={self.job_id}, source='{self.source}')>"
