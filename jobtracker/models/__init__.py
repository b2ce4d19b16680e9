"""
Database models package.
"""

from jobtracker.models.job import Job, JobStatus
from jobtracker.models.activity import Activity
from jobtracker.models.app_user import AppUser, UserRole

__all__ = ["Job", "JobStatus", "Activity", "AppUser", "UserRole"]
