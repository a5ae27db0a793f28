"""
FlickPick — Custom Exceptions.
Each exception carries: message, error_code, http_status_code, optional detail dict.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

# ─────────────────────────────────────────────────────────────────────────────
# BASE
# ─────────────────────────────────────────────────────────────────────────────


class FlickPickError(Exception):
    """Root exception for all FlickPick errors."""

    http_status_code: int = 400
    error_code: str = "FLICKPICK_ERROR"
    headers: Optional[Dict[str, str]] = None

    def __init__(self, message: str, detail: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.detail = detail or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "detail": self.detail,
        }


# ─────────────────────────────────────────────────────────────────────────────
# CREDENTIALS
# ─────────────────────────────────────────────────────────────────────────────


class InvalidCredentialsError(FlickPickError):
    """Unknown username or wrong password. Both cases share one message."""

    http_status_code = 400
    error_code = "INVALID_CREDENTIALS"

    def __init__(self) -> None:
        super().__init__(message="Incorrect username or password.")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "user": None,
        }


# ─────────────────────────────────────────────────────────────────────────────
# TOKENS
# ─────────────────────────────────────────────────────────────────────────────


class AuthenticationError(FlickPickError):
    http_status_code = 401
    error_code = "AUTHENTICATION_FAILED"
    headers = {"WWW-Authenticate": "Bearer"}


class MissingTokenError(AuthenticationError):
    error_code = "MISSING_TOKEN"

    def __init__(self) -> None:
        super().__init__(message="Authorization header with a Bearer token is required.")


class MalformedTokenError(AuthenticationError):
    error_code = "MALFORMED_TOKEN"

    def __init__(self, reason: str = "token could not be parsed") -> None:
        self.reason = reason
        super().__init__(
            message=f"Malformed token: {reason}",
            detail={"reason": reason},
        )


class InvalidSignatureError(AuthenticationError):
    error_code = "INVALID_SIGNATURE"

    def __init__(self) -> None:
        super().__init__(message="Token signature verification failed.")


class TokenExpiredError(AuthenticationError):
    error_code = "TOKEN_EXPIRED"

    def __init__(self, expired_at: Optional[int] = None) -> None:
        self.expired_at = expired_at
        super().__init__(
            message="Token has expired.",
            detail={"expired_at": expired_at} if expired_at is not None else None,
        )


class PermissionDeniedError(FlickPickError):
    http_status_code = 403
    error_code = "PERMISSION_DENIED"

    def __init__(self, username: str, action: str = "", resource: str = "") -> None:
        self.username = username
        self.action = action
        self.resource = resource
        super().__init__(
            message=f"User '{username}' is not permitted to {action} {resource}".strip(),
            detail={"username": username, "action": action, "resource": resource},
        )


# ─────────────────────────────────────────────────────────────────────────────
# REQUESTS / STORE
# ─────────────────────────────────────────────────────────────────────────────


class ValidationFailedError(FlickPickError):
    http_status_code = 422
    error_code = "VALIDATION_FAILED"

    def __init__(self, errors: List[Dict[str, str]]) -> None:
        self.errors = errors
        super().__init__(
            message="Request validation failed",
            detail={"errors": errors},
        )


class DuplicateIdentityError(FlickPickError):
    http_status_code = 400
    error_code = "DUPLICATE_IDENTITY"

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(
            message=f"{username} already exists",
            detail={"username": username},
        )


class UserNotFoundError(FlickPickError):
    http_status_code = 404
    error_code = "USER_NOT_FOUND"

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(
            message=f"User {username} not found.",
            detail={"username": username},
        )


class MovieNotFoundError(FlickPickError):
    http_status_code = 404
    error_code = "MOVIE_NOT_FOUND"

    def __init__(self, title: Optional[str] = None, movie_id: Optional[str] = None) -> None:
        self.title = title
        self.movie_id = movie_id
        identifier = f"title={title!r}" if title else f"id={movie_id!r}"
        super().__init__(
            message=f"No movie found for {identifier}",
            detail={"title": title, "movie_id": movie_id},
        )


class GenreNotFoundError(FlickPickError):
    http_status_code = 404
    error_code = "GENRE_NOT_FOUND"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(message=f"Genre {name} not found.", detail={"name": name})


class DirectorNotFoundError(FlickPickError):
    http_status_code = 404
    error_code = "DIRECTOR_NOT_FOUND"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(message=f"Director {name} not found.", detail={"name": name})


class StoreUnavailableError(FlickPickError):
    """Any storage failure. The client only ever sees the generic message."""

    http_status_code = 500
    error_code = "STORE_UNAVAILABLE"

    def __init__(self, operation: str = "") -> None:
        self.operation = operation
        super().__init__(message="The data store is currently unavailable.")
