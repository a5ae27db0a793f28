"""
Auth router — login.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from flickpick.api.v1.users import UserResponse, to_user_response
from flickpick.core.security import (
    PasswordHasher,
    TokenService,
    get_password_hasher,
    get_token_service,
)
from flickpick.database import get_db
from flickpick.services.auth import authenticate

router = APIRouter(tags=["auth"])


# ── Request / Response schemas ────────────────────────────────────────────────


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    user: UserResponse
    token: str


# ── Endpoints ─────────────────────────────────────────────────────────────────


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
):
    """
    Authenticate with username + password.
    Returns the user profile and a signed bearer token valid for seven days.
    """
    user = authenticate(db, hasher, body.username, body.password)
    return LoginResponse(user=to_user_response(user), token=tokens.issue(user.username))
