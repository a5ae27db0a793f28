"""
FlickPick — Movie catalog queries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.orm import Session

from flickpick.core.exceptions import (
    DirectorNotFoundError,
    GenreNotFoundError,
    MovieNotFoundError,
)
from flickpick.database import store_operation
from flickpick.models.movies import Movie


@dataclass
class Genre:
    name: str
    description: Optional[str]


@dataclass
class Director:
    name: str
    bio: Optional[str]


class MovieService:
    """Read-only access to the movie catalog."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_movies(self) -> List[Movie]:
        with store_operation(self.session, "list_movies"):
            return self.session.query(Movie).order_by(Movie.title).all()

    def get_by_title(self, title: str) -> Movie:
        with store_operation(self.session, "get_movie"):
            movie = self.session.query(Movie).filter(Movie.title == title).first()
        if movie is None:
            raise MovieNotFoundError(title=title)
        return movie

    def get_genre(self, name: str) -> Genre:
        with store_operation(self.session, "get_genre"):
            movie = self.session.query(Movie).filter(Movie.genre_name == name).first()
        if movie is None:
            raise GenreNotFoundError(name)
        return Genre(name=movie.genre_name, description=movie.genre_description)

    def get_director(self, name: str) -> Director:
        with store_operation(self.session, "get_director"):
            movie = self.session.query(Movie).filter(Movie.director_name == name).first()
        if movie is None:
            raise DirectorNotFoundError(name)
        return Director(name=movie.director_name, bio=movie.director_bio)
