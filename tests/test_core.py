"""
FlickPick — Core Test Suite
Covers flickpick/core/: security (hashing, tokens), exceptions, and config.
"""

from __future__ import annotations

import string
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt
from pydantic import ValidationError

from flickpick.config import DEFAULT_JWT_SECRET, Settings
from flickpick.core.exceptions import (
    AuthenticationError,
    DuplicateIdentityError,
    FlickPickError,
    InvalidCredentialsError,
    InvalidSignatureError,
    MalformedTokenError,
    MissingTokenError,
    MovieNotFoundError,
    StoreUnavailableError,
    TokenExpiredError,
    ValidationFailedError,
)
from flickpick.core.security import PasswordHasher, TokenService

ISSUED = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
BASE64URL = string.ascii_letters + string.digits + "-_"


def _tamper_signature(token: str) -> str:
    header, claims, signature = token.split(".")
    first = "A" if signature[0] != "A" else "B"
    return ".".join([header, claims, first + signature[1:]])


# ═══════════════════════════════════════════════════════════════════════════════
# PasswordHasher
# ═══════════════════════════════════════════════════════════════════════════════


class TestPasswordHasher:
    def test_hash_and_verify(self, hasher):
        hashed = hasher.hash("s3cret!")
        assert hasher.verify("s3cret!", hashed) is True

    def test_wrong_password_rejected(self, hasher):
        hashed = hasher.hash("s3cret!")
        assert hasher.verify("s3cret?", hashed) is False

    def test_hash_is_not_plaintext(self, hasher):
        hashed = hasher.hash("s3cret!")
        assert hashed != "s3cret!"
        assert "s3cret!" not in hashed

    def test_same_input_gets_different_salt(self, hasher):
        first = hasher.hash("s3cret!")
        second = hasher.hash("s3cret!")
        assert first != second
        assert hasher.verify("s3cret!", first)
        assert hasher.verify("s3cret!", second)

    @pytest.mark.parametrize(
        "bad_hash", ["", "not-a-hash", "$pbkdf2-sha256$broken", "$2b$10$short"]
    )
    def test_malformed_hash_fails_closed(self, hasher, bad_hash):
        assert hasher.verify("s3cret!", bad_hash) is False

    def test_from_settings_uses_configured_scheme(self):
        settings = Settings(PASSWORD_HASH_SCHEME="pbkdf2_sha256", PASSWORD_HASH_ROUNDS=1200)
        hasher = PasswordHasher.from_settings(settings)
        hashed = hasher.hash("pw")
        assert hashed.startswith("$pbkdf2-sha256$1200$")

    def test_dummy_verify_always_fails(self, hasher):
        assert hasher.dummy_verify() is False


# ═══════════════════════════════════════════════════════════════════════════════
# TokenService
# ═══════════════════════════════════════════════════════════════════════════════


class TestTokenService:
    def test_issue_then_verify_returns_subject(self, token_service):
        token = token_service.issue("Kim")
        assert token_service.verify(token) == "Kim"

    def test_token_has_three_segments(self, token_service):
        assert len(token_service.issue("Kim").split(".")) == 3

    def test_claims_shape(self, token_service):
        token = token_service.issue("Kim", now=ISSUED)
        header = jwt.get_unverified_header(token)
        claims = jwt.get_unverified_claims(token)
        assert header["alg"] == "HS256"
        assert claims["sub"] == "Kim"
        assert claims["exp"] - claims["iat"] == 7 * 24 * 3600

    def test_valid_just_before_expiry(self, token_service):
        token = token_service.issue("Kim", now=ISSUED)
        almost = ISSUED + timedelta(days=7) - timedelta(seconds=1)
        assert token_service.verify(token, now=almost) == "Kim"

    def test_expired_token_rejected(self, token_service):
        token = token_service.issue("Kim", now=ISSUED)
        later = ISSUED + timedelta(days=7, seconds=1)
        with pytest.raises(TokenExpiredError):
            token_service.verify(token, now=later)

    def test_naive_datetimes_are_utc(self, token_service):
        naive = ISSUED.replace(tzinfo=None)
        token = token_service.issue("Kim", now=naive)
        assert jwt.get_unverified_claims(token)["iat"] == int(ISSUED.timestamp())
        assert token_service.verify(token, now=naive + timedelta(days=7, seconds=-1)) == "Kim"
        with pytest.raises(TokenExpiredError):
            token_service.verify(token, now=naive + timedelta(days=7))

    def test_injected_clock_drives_expiry(self):
        now = {"t": ISSUED}
        service = TokenService("clock-secret", clock=lambda: now["t"])
        token = service.issue("Kim")
        assert service.verify(token) == "Kim"
        now["t"] = ISSUED + timedelta(days=8)
        with pytest.raises(TokenExpiredError):
            service.verify(token)

    def test_altered_signature_rejected(self, token_service):
        token = token_service.issue("Kim")
        with pytest.raises(InvalidSignatureError):
            token_service.verify(_tamper_signature(token))

    @pytest.mark.parametrize("position", [0, 21, -1])
    def test_every_altered_signature_character_rejected(self, token_service, position):
        header, claims, signature = token_service.issue("Kim").split(".")
        index = position % len(signature)
        for replacement in BASE64URL:
            if replacement == signature[index]:
                continue
            altered = signature[:index] + replacement + signature[index + 1 :]
            with pytest.raises(InvalidSignatureError):
                token_service.verify(".".join([header, claims, altered]))

    def test_altered_claims_rejected(self, token_service):
        token = token_service.issue("Kim")
        forged = jwt.encode(
            {"sub": "Admin", "exp": 4102444800}, "other-secret", algorithm="HS256"
        )
        header, _, signature = token.split(".")
        spliced = ".".join([header, forged.split(".")[1], signature])
        with pytest.raises(InvalidSignatureError):
            token_service.verify(spliced)

    def test_other_key_rejected(self, token_service):
        other = TokenService("a-completely-different-secret")
        with pytest.raises(InvalidSignatureError):
            token_service.verify(other.issue("Kim"))

    def test_signature_checked_before_expiry(self, token_service):
        token = token_service.issue("Kim", now=ISSUED)
        with pytest.raises(InvalidSignatureError):
            token_service.verify(_tamper_signature(token), now=ISSUED + timedelta(days=30))

    @pytest.mark.parametrize("garbage", ["", "not-a-token", "a.b.c", "a.b", "....", "x.y.z.w"])
    def test_garbage_is_malformed(self, token_service, garbage):
        with pytest.raises(MalformedTokenError):
            token_service.verify(garbage)

    def test_missing_subject_is_malformed(self, token_service):
        token = jwt.encode({"exp": 4102444800}, token_service._secret, algorithm="HS256")
        with pytest.raises(MalformedTokenError):
            token_service.verify(token)

    def test_missing_expiry_is_malformed(self, token_service):
        token = jwt.encode({"sub": "Kim"}, token_service._secret, algorithm="HS256")
        with pytest.raises(MalformedTokenError):
            token_service.verify(token)

    def test_unexpected_algorithm_is_malformed(self, token_service):
        token = jwt.encode(
            {"sub": "Kim", "exp": 4102444800}, token_service._secret, algorithm="HS512"
        )
        with pytest.raises(MalformedTokenError):
            token_service.verify(token)

    def test_token_errors_are_401(self):
        for exc in (
            MissingTokenError(),
            MalformedTokenError(),
            InvalidSignatureError(),
            TokenExpiredError(),
        ):
            assert isinstance(exc, AuthenticationError)
            assert exc.http_status_code == 401
            assert exc.headers == {"WWW-Authenticate": "Bearer"}

    def test_empty_secret_refused(self):
        with pytest.raises(ValueError):
            TokenService("")

    def test_from_settings(self):
        settings = Settings(JWT_SECRET="settings-secret", JWT_EXPIRY_DAYS=2)
        service = TokenService.from_settings(settings)
        assert service.lifetime == timedelta(days=2)
        assert service.verify(service.issue("Kim")) == "Kim"


# ═══════════════════════════════════════════════════════════════════════════════
# exceptions.py
# ═══════════════════════════════════════════════════════════════════════════════


class TestExceptions:
    def test_base_to_dict(self):
        exc = FlickPickError("boom", detail={"k": "v"})
        assert exc.to_dict() == {
            "error_code": "FLICKPICK_ERROR",
            "message": "boom",
            "detail": {"k": "v"},
        }

    def test_invalid_credentials_shape(self):
        body = InvalidCredentialsError().to_dict()
        assert body["user"] is None
        assert body["message"] == "Incorrect username or password."

    def test_duplicate_identity_message(self):
        exc = DuplicateIdentityError("Kim")
        assert exc.http_status_code == 400
        assert exc.message == "Kim already exists"

    def test_movie_not_found_by_id(self):
        exc = MovieNotFoundError(movie_id="abc")
        assert exc.http_status_code == 404
        assert "abc" in exc.message

    def test_validation_failed_lists_errors(self):
        exc = ValidationFailedError([{"field": "email", "message": "bad"}])
        assert exc.http_status_code == 422
        assert exc.to_dict()["detail"]["errors"][0]["field"] == "email"

    def test_store_unavailable_is_generic(self):
        exc = StoreUnavailableError("create_user")
        assert exc.http_status_code == 500
        assert "create_user" not in exc.message


# ═══════════════════════════════════════════════════════════════════════════════
# config.py
# ═══════════════════════════════════════════════════════════════════════════════


class TestSettings:
    def test_defaults(self):
        settings = Settings(JWT_SECRET="x")
        assert settings.JWT_ALGORITHM == "HS256"
        assert settings.JWT_EXPIRY_DAYS == 7

    def test_invalid_environment_rejected(self):
        with pytest.raises(ValidationError):
            Settings(ENVIRONMENT="qa")

    def test_non_hmac_algorithm_rejected(self):
        with pytest.raises(ValidationError):
            Settings(JWT_ALGORITHM="RS256")

    def test_default_secret_rejected_in_production(self):
        with pytest.raises(ValidationError):
            Settings(ENVIRONMENT="production", JWT_SECRET=DEFAULT_JWT_SECRET)

    def test_log_level_normalised(self):
        assert Settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    def test_default_origins_include_hosted_client(self):
        settings = Settings(JWT_SECRET="x")
        assert "https://flickpick-1911bf3985c5.herokuapp.com" in settings.ALLOWED_ORIGINS
        assert "https://myflickpick.netlify.app" in settings.ALLOWED_ORIGINS

    def test_settings_are_immutable(self):
        settings = Settings(JWT_SECRET="x")
        with pytest.raises(ValidationError):
            settings.JWT_SECRET = "y"
