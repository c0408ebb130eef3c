"""
Helper functions for resolving the local user row from the identity token.
"""
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from bookspace.models import User
import logging

logger = logging.getLogger(__name__)


def get_or_create_user_by_auth_id(
    db: Session,
    auth_user_id: str,
    email: str = "",
    name: str = "",
) -> User:
    """
    Get or create the local User keyed by the identity provider's subject.

    Email and name from the token fill in blanks on the local row but never
    overwrite values already stored. Safe under concurrent first requests: a
    lost insert race falls back to the row the other request created.
    """
    normalized_email = email.lower().strip() if email else None

    user = db.query(User).filter(User.auth_user_id == auth_user_id).one_or_none()
    if user:
        changed = False
        if normalized_email and not user.email:
            user.email = normalized_email
            changed = True
        if name and not user.name:
            user.name = name
            changed = True
        if changed:
            db.commit()
            db.refresh(user)
        return user

    user = User(
        auth_user_id=auth_user_id,
        email=normalized_email,
        name=name or None,
        favorite_genres=[],
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Concurrent user creation for auth_user_id=%s, reloading", auth_user_id)
        user = db.query(User).filter(User.auth_user_id == auth_user_id).one()
        return user

    db.refresh(user)
    logger.info("Created user %s for auth_user_id=%s", user.id, auth_user_id)
    return user
