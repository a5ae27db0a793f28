"""
FlickPick — Security Layer
Password hashing, JWT issuance/verification, bearer-token route guard.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from numbers import Real
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from jose.utils import base64url_decode, base64url_encode
from passlib.context import CryptContext

from flickpick.config import Settings
from flickpick.core.exceptions import (
    AuthenticationError,
    InvalidSignatureError,
    MalformedTokenError,
    MissingTokenError,
    TokenExpiredError,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def _as_utc(moment: datetime) -> datetime:
    # naive datetimes are taken to be UTC, matching how jose encodes them
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


# ─── Password hashing ─────────────────────────────────────────────────────────


class PasswordHasher:
    """Salted, deliberately slow one-way hashing backed by a passlib CryptContext."""

    def __init__(self, scheme: str = "pbkdf2_sha256", rounds: Optional[int] = None) -> None:
        options: Dict[str, Any] = {}
        if rounds is not None:
            options[f"{scheme}__rounds"] = rounds
        self.scheme = scheme
        self._context = CryptContext(schemes=[scheme], deprecated="auto", **options)

    @classmethod
    def from_settings(cls, settings: Settings) -> "PasswordHasher":
        return cls(settings.PASSWORD_HASH_SCHEME, settings.PASSWORD_HASH_ROUNDS)

    def hash(self, plaintext: str) -> str:
        """Return a fresh hash of the given plain-text password (new salt every call)."""
        return self._context.hash(plaintext)

    def verify(self, plaintext: str, secret_hash: str) -> bool:
        """
        Return True if the plain password matches the hash.
        Malformed or unrecognised hashes fail closed.
        """
        try:
            return self._context.verify(plaintext, secret_hash)
        except (ValueError, TypeError):
            logger.warning("Stored password hash could not be parsed; rejecting")
            return False

    def dummy_verify(self) -> bool:
        """
        Spend the same work as a real verify against a throwaway hash.
        Used when there is no stored hash to check, so lookups for unknown
        usernames take as long as wrong passwords. Always False.
        """
        return self._context.dummy_verify()


# ─── JWT ──────────────────────────────────────────────────────────────────────


class TokenService:
    """
    Issues and verifies stateless HMAC-signed bearer tokens.

    The signing key is fixed for the lifetime of the instance. Rotating it
    means building a new service, which invalidates every token issued by
    the old one.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(days=7),
        clock: Optional[Clock] = None,
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self.algorithm = algorithm
        self.lifetime = lifetime
        self._clock = clock or _utcnow

    @classmethod
    def from_settings(cls, settings: Settings, clock: Optional[Clock] = None) -> "TokenService":
        return cls(
            secret=settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
            lifetime=timedelta(days=settings.JWT_EXPIRY_DAYS),
            clock=clock,
        )

    def issue(self, subject: str, now: Optional[datetime] = None) -> str:
        """
        Create a signed JWT for ``subject``.

        :param subject: The username the token asserts.
        :param now: Issue time override; defaults to the service clock.
        """
        issued_at = _as_utc(now or self._clock())
        payload: Dict[str, Any] = {
            "sub": subject,
            "iat": issued_at,
            "exp": issued_at + self.lifetime,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def decode(self, token: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Validate ``token`` and return its claims.

        Checks run in order: structure, signature, expiry. Raises
        MalformedTokenError, InvalidSignatureError or TokenExpiredError.
        """
        claims = self._parse(token)
        self._check_signature_encoding(token)

        try:
            jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "verify_aud": False,
                },
            )
        except JWTError as exc:
            raise InvalidSignatureError() from exc

        current = _as_utc(now or self._clock()).timestamp()
        if current >= claims["exp"]:
            raise TokenExpiredError(expired_at=int(claims["exp"]))
        return claims

    def verify(self, token: str, now: Optional[datetime] = None) -> str:
        """Validate ``token`` and return the username it was issued for."""
        return self.decode(token, now)["sub"]

    def _parse(self, token: str) -> Dict[str, Any]:
        if not isinstance(token, str) or token.count(".") != 2:
            raise MalformedTokenError("expected three dot-separated segments")
        try:
            header = jwt.get_unverified_header(token)
            claims = jwt.get_unverified_claims(token)
        except JWTError as exc:
            raise MalformedTokenError(str(exc)) from exc

        if header.get("alg") != self.algorithm:
            raise MalformedTokenError(f"unsupported algorithm {header.get('alg')!r}")
        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            raise MalformedTokenError("missing 'sub' claim")
        expiry = claims.get("exp")
        if isinstance(expiry, bool) or not isinstance(expiry, Real):
            raise MalformedTokenError("missing or non-numeric 'exp' claim")
        return claims

    @staticmethod
    def _check_signature_encoding(token: str) -> None:
        """
        Reject signature segments that are not the canonical base64url form.
        The decoder ignores the spare low bits of the last character, so
        without this several spellings of one signature would all verify.
        """
        segment = token.rsplit(".", 1)[1]
        try:
            canonical = base64url_encode(base64url_decode(segment.encode("ascii")))
        except ValueError as exc:
            raise InvalidSignatureError() from exc
        if canonical.decode("ascii") != segment:
            raise InvalidSignatureError()


# ─── FastAPI dependencies ─────────────────────────────────────────────────────

bearer_scheme = HTTPBearer(auto_error=False)


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


class CurrentUser:
    """Represents the authenticated principal extracted from the bearer token."""

    def __init__(self, username: str, raw_claims: Dict[str, Any]) -> None:
        self.username = username
        self.raw_claims = raw_claims

    def __repr__(self) -> str:
        return f"CurrentUser(username={self.username!r})"


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> CurrentUser:
    """
    FastAPI dependency: extracts and validates the Bearer JWT,
    returning a CurrentUser. No database lookup happens here.
    """
    try:
        if credentials is None or not credentials.credentials:
            raise MissingTokenError()
        claims = tokens.decode(credentials.credentials)
    except AuthenticationError as exc:
        logger.info(
            "Rejected %s %s: %s", request.method, request.url.path, exc.error_code
        )
        raise

    user = CurrentUser(username=claims["sub"], raw_claims=claims)
    request.state.principal = user
    return user
