"""
FlickPick — Movie catalog model.
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from sqlalchemy import JSON, Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from flickpick.database import Base


class Movie(Base):
    __tablename__ = "movies"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Genre and director are embedded in the movie record, not separate tables
    genre_name: Mapped[Optional[str]] = mapped_column(String(100), index=True)
    genre_description: Mapped[Optional[str]] = mapped_column(Text)
    director_name: Mapped[Optional[str]] = mapped_column(String(255), index=True)
    director_bio: Mapped[Optional[str]] = mapped_column(Text)

    actors: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    image_path: Mapped[Optional[str]] = mapped_column(String(512))
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self):
        return f"<Movie(id={self.id}, title={self.title!r})>"
