"""
FlickPick — User account service.
Registration, profile updates, deregistration and favorites.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from flickpick.core.exceptions import (
    DuplicateIdentityError,
    MovieNotFoundError,
    UserNotFoundError,
)
from flickpick.core.security import PasswordHasher
from flickpick.database import store_operation
from flickpick.models.movies import Movie
from flickpick.models.users import User

logger = logging.getLogger(__name__)


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


class UserService:
    """Credential store operations. Passwords only ever reach the DB hashed."""

    def __init__(self, session: Session, hasher: PasswordHasher) -> None:
        self.session = session
        self.hasher = hasher

    # ── Reads ─────────────────────────────────────────────────────────────────

    def list_users(self) -> List[User]:
        with store_operation(self.session, "list_users"):
            return self.session.query(User).order_by(User.username).all()

    def get_user(self, username: str) -> User:
        with store_operation(self.session, "get_user"):
            user = get_user_by_username(self.session, username)
        if user is None:
            raise UserNotFoundError(username)
        return user

    # ── Writes ────────────────────────────────────────────────────────────────

    def create_user(
        self, username: str, email: str, password: str, birthday: date
    ) -> User:
        with store_operation(self.session, "create_user"):
            if get_user_by_username(self.session, username) is not None:
                raise DuplicateIdentityError(username)

            user = User(
                username=username,
                email=email,
                password_hash=self.hasher.hash(password),
                birthday=birthday,
            )
            self.session.add(user)
            self._commit_unique(username)
            self.session.refresh(user)

        logger.info("Registered user %s (%s)", user.username, user.id)
        return user

    def update_user(
        self,
        username: str,
        new_username: str,
        email: str,
        password: str,
        birthday: date,
    ) -> User:
        with store_operation(self.session, "update_user"):
            user = self.get_user(username)
            if new_username != username and get_user_by_username(self.session, new_username):
                raise DuplicateIdentityError(new_username)

            user.username = new_username
            user.email = email
            user.password_hash = self.hasher.hash(password)
            user.birthday = birthday
            self._commit_unique(new_username)
            self.session.refresh(user)

        logger.info("Updated user %s (%s)", user.username, user.id)
        return user

    def delete_user(self, username: str) -> None:
        with store_operation(self.session, "delete_user"):
            user = self.get_user(username)
            self.session.delete(user)
            self.session.commit()
        logger.info("Deleted user %s", username)

    # ── Favorites ─────────────────────────────────────────────────────────────

    def add_favorite(self, username: str, movie_id: str) -> User:
        with store_operation(self.session, "add_favorite"):
            user = self.get_user(username)
            movie = self.session.get(Movie, movie_id)
            if movie is None:
                raise MovieNotFoundError(movie_id=movie_id)
            # favorites behave as a set
            if movie not in user.favorite_movies:
                user.favorite_movies.append(movie)
                self.session.commit()
        return user

    def remove_favorite(self, username: str, movie_id: str) -> User:
        with store_operation(self.session, "remove_favorite"):
            user = self.get_user(username)
            remaining = [m for m in user.favorite_movies if m.id != movie_id]
            if len(remaining) != len(user.favorite_movies):
                user.favorite_movies = remaining
                self.session.commit()
        return user

    def _commit_unique(self, username: str) -> None:
        try:
            self.session.commit()
        except IntegrityError as exc:
            # lost a race against a concurrent insert of the same username
            self.session.rollback()
            raise DuplicateIdentityError(username) from exc
