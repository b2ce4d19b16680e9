"""
CRUD operations for AppUser (dashboard profiles).
"""

import logging
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobtracker.models.app_user import AppUser, UserRole
from jobtracker.schemas.user import AuthUser

logger = logging.getLogger(__name__)


def get_by_id(db: Session, user_id: str) -> Optional[AppUser]:
    return db.query(AppUser).filter(AppUser.id == user_id).first()


def get_or_create(db: Session, auth_user: AuthUser) -> AppUser:
    """
    Return the profile for a provider user, creating it with the default role.

    Two first visits can race on the primary key; the loser re-reads the
    winner's row.
    """
    existing = get_by_id(db, auth_user.id)
    if existing:
        return existing

    profile = AppUser(
        id=auth_user.id,
        email=(auth_user.email or "").lower(),
        display_name=auth_user.full_name,
        role=UserRole.STAFF,
    )
    db.add(profile)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return get_by_id(db, auth_user.id)

    db.refresh(profile)
    logger.info(f"Created dashboard profile for {profile.email}")
    return profile
