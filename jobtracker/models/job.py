import enum
from sqlalchemy import Column, Integer, String, Date, DateTime, Enum, func
from sqlalchemy.orm import relationship
from jobtracker.core.database import Base


class JobStatus(str, enum.Enum):
    """
    Pipeline stage of a job, in board order.

    - INTAKE: request received, nothing started
    - DESIGN: artwork/design in progress
    - PROOF: proof sent, waiting on approval
    - PRODUCTION: approved and being produced
    - COMPLETE: delivered
    """
    INTAKE = "intake"
    DESIGN = "design"
    PROOF = "proof"
    PRODUCTION = "production"
    COMPLETE = "complete"


class Job(Base):
    """
    A unit of work tracked through the status pipeline.

    job_no is the externally supplied key that inbound emails carry as a
    [J:<digits>] tag; ingestion upserts on it.
    """
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    job_no = Column(String, nullable=False, unique=True, index=True)
    title = Column(String, nullable=False)

    status = Column(
        Enum(JobStatus, name="jobstatus", values_callable=lambda statuses: [s.value for s in statuses]),
        default=JobStatus.INTAKE,
        nullable=False,
        index=True
    )
    in_hands_date = Column(Date, nullable=True)
    owner = Column(String, nullable=True, index=True)
    priority = Column(String, nullable=True)
    est_so_no = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    activities = relationship(
        "Activity",
        back_populates="job",
        cascade="all, delete-orphan",
        order_by="[Activity.created_at, Activity.id]",
    )

    def __repr__(self):
        return f"<Job(id={self.id}, job_no='{self.job_no}', status={self.status.value})>"
