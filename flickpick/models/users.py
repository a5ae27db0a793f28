"""
FlickPick — User accounts and favorites.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import List

from sqlalchemy import Column, Date, DateTime, ForeignKey, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flickpick.database import Base
from flickpick.models.movies import Movie


user_favorite_movies = Table(
    "user_favorite_movies",
    Base.metadata,
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("movie_id", String(36), ForeignKey("movies.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    username: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False, index=True
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    birthday: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    favorite_movies: Mapped[List[Movie]] = relationship(
        Movie, secondary=user_favorite_movies, lazy="selectin"
    )

    @property
    def favorite_movie_ids(self) -> List[str]:
        return sorted(movie.id for movie in self.favorite_movies)

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username!r})>"
