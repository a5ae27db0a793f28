"""
Credential verification — username + password against the user store.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from flickpick.core.exceptions import InvalidCredentialsError
from flickpick.core.security import PasswordHasher
from flickpick.database import store_operation
from flickpick.models.users import User
from flickpick.services.users import get_user_by_username

logger = logging.getLogger(__name__)


def authenticate(
    db: Session, hasher: PasswordHasher, username: str, password: str
) -> User:
    """
    Return the user if ``password`` matches the stored hash.

    Unknown usernames and wrong passwords raise the same
    InvalidCredentialsError so callers cannot tell which one happened.
    """
    with store_operation(db, "authenticate"):
        user = get_user_by_username(db, username)

    if user is None:
        verified = hasher.dummy_verify()
    else:
        verified = hasher.verify(password, user.password_hash)
    if not verified:
        logger.info("Failed login attempt for %r", username)
        raise InvalidCredentialsError()

    logger.info("Login: %s (%s)", user.username, user.id)
    return user
