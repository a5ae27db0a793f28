"""
FlickPick — API: Movies, genres, directors
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from flickpick.core.security import CurrentUser, get_current_user
from flickpick.database import get_db
from flickpick.models.movies import Movie
from flickpick.services.movies import MovieService

router = APIRouter(tags=["movies"])


class GenreResponse(BaseModel):
    name: str
    description: Optional[str] = None


class DirectorResponse(BaseModel):
    name: str
    bio: Optional[str] = None


class MovieResponse(BaseModel):
    id: str
    title: str
    description: str
    genre: Optional[GenreResponse]
    director: Optional[DirectorResponse]
    actors: List[str]
    image_path: Optional[str]
    featured: bool


def to_movie_response(movie: Movie) -> MovieResponse:
    genre = (
        GenreResponse(name=movie.genre_name, description=movie.genre_description)
        if movie.genre_name
        else None
    )
    director = (
        DirectorResponse(name=movie.director_name, bio=movie.director_bio)
        if movie.director_name
        else None
    )
    return MovieResponse(
        id=movie.id,
        title=movie.title,
        description=movie.description,
        genre=genre,
        director=director,
        actors=list(movie.actors or []),
        image_path=movie.image_path,
        featured=movie.featured,
    )


def get_movie_service(db: Session = Depends(get_db)) -> MovieService:
    return MovieService(db)


@router.get("/movies", response_model=List[MovieResponse])
def list_movies(
    movies: MovieService = Depends(get_movie_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    return [to_movie_response(m) for m in movies.list_movies()]


@router.get("/movies/{title}", response_model=MovieResponse)
def get_movie(
    title: str,
    movies: MovieService = Depends(get_movie_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    return to_movie_response(movies.get_by_title(title))


@router.get("/genres/{name}", response_model=GenreResponse)
def get_genre(
    name: str,
    movies: MovieService = Depends(get_movie_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    genre = movies.get_genre(name)
    return GenreResponse(name=genre.name, description=genre.description)


@router.get("/directors/{name}", response_model=DirectorResponse)
def get_director(
    name: str,
    movies: MovieService = Depends(get_movie_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    director = movies.get_director(name)
    return DirectorResponse(name=director.name, bio=director.bio)
