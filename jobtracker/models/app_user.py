"""
Dashboard user profile.

Identity lives with the auth provider; this row keeps what the dashboard
needs on top of it (display name and role). It is created the first time a
signed-in user reaches a protected page.
"""

import enum
from sqlalchemy import Column, String, DateTime, Enum, func
from jobtracker.core.database import Base


class UserRole(str, enum.Enum):
    """Access level, ordered viewer < staff < admin."""
    VIEWER = "viewer"
    STAFF = "staff"
    ADMIN = "admin"


class AppUser(Base):
    __tablename__ = "app_users"

    # Auth provider user id (a UUID string for Supabase)
    id = Column(String, primary_key=True)
    email = Column(String, nullable=False, index=True)
    display_name = Column(String, nullable=True)

    role = Column(
        Enum(UserRole, name="userrole", values_callable=lambda roles: [r.value for r in roles]),
        default=UserRole.STAFF,
        nullable=False
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<AppUser(id='{self.id}', email='{self.email}', role={self.role.value})>"
