"""
FlickPick — API: Users & favorites
"""

from __future__ import annotations

from datetime import date
from typing import Dict, List

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, Field, field_validator
from sqlalchemy.orm import Session

from flickpick.core.exceptions import PermissionDeniedError
from flickpick.core.security import (
    CurrentUser,
    PasswordHasher,
    get_current_user,
    get_password_hasher,
)
from flickpick.database import get_db
from flickpick.models.users import User
from flickpick.services.users import UserService

router = APIRouter(prefix="/users", tags=["users"])


class UserResponse(BaseModel):
    id: str
    username: str
    email: str
    birthday: date
    favorite_movies: List[str]


class UserRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1)
    birthday: date

    @field_validator("username")
    @classmethod
    def username_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username is required")
        return v


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        birthday=user.birthday,
        favorite_movies=user.favorite_movie_ids,
    )


def get_user_service(
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> UserService:
    return UserService(db, hasher)


def _require_self(current_user: CurrentUser, username: str, action: str) -> None:
    if current_user.username != username:
        raise PermissionDeniedError(current_user.username, action, f"user {username}")


@router.get("", response_model=List[UserResponse])
def list_users(
    users: UserService = Depends(get_user_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    return [to_user_response(u) for u in users.list_users()]


@router.get("/{username}", response_model=UserResponse)
def get_user(
    username: str,
    users: UserService = Depends(get_user_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    return to_user_response(users.get_user(username))


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    req: UserRequest,
    users: UserService = Depends(get_user_service),
):
    """Register a new user. Public: no token required."""
    user = users.create_user(req.username, req.email, req.password, req.birthday)
    return to_user_response(user)


@router.put("/{username}", response_model=UserResponse)
def update_user(
    username: str,
    req: UserRequest,
    users: UserService = Depends(get_user_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Replace a user's profile. The password is re-hashed."""
    _require_self(current_user, username, "update")
    user = users.update_user(
        username, req.username, req.email, req.password, req.birthday
    )
    return to_user_response(user)


@router.delete("/{username}")
def deregister(
    username: str,
    users: UserService = Depends(get_user_service),
    current_user: CurrentUser = Depends(get_current_user),
) -> Dict[str, str]:
    _require_self(current_user, username, "delete")
    users.delete_user(username)
    return {"message": f"{username} was deleted."}


# ── Favorites ─────────────────────────────────────────────────────────────────


@router.post("/{username}/movies/{movie_id}", response_model=UserResponse)
def add_favorite(
    username: str,
    movie_id: str,
    users: UserService = Depends(get_user_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    _require_self(current_user, username, "modify favorites of")
    return to_user_response(users.add_favorite(username, movie_id))


@router.delete("/{username}/movies/{movie_id}", response_model=UserResponse)
def remove_favorite(
    username: str,
    movie_id: str,
    users: UserService = Depends(get_user_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    _require_self(current_user, username, "modify favorites of")
    return to_user_response(users.remove_favorite(username, movie_id))
