"""
CRUD operations (Create, Read, Update, Delete) for database models.

This layer provides a clean separation between API routes and database operations,
following the Repository pattern.
"""

from jobtracker.crud import job, activity, app_user

__all__ = ["job", "activity", "app_user"]
