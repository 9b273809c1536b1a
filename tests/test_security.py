"""
Tests for the token codec, the password hasher and the auth settings.
"""
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from services.exceptions import ConfigurationError, InvalidToken
from services.settings import AuthSettings
from utils.security import Argon2PasswordHasher, TokenCodec

from helpers import ACCESS_SECRET, REFRESH_SECRET, FakeClock

T0 = datetime(2030, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return FakeClock(T0)


@pytest.fixture
def settings():
    return AuthSettings(access_secret=ACCESS_SECRET, refresh_secret=REFRESH_SECRET)


@pytest.fixture
def codec(settings, clock):
    return TokenCodec(settings, clock=clock)


class TestTokenCodec:
    def test_access_round_trip(self, codec):
        claims = codec.verify_access_token(codec.issue_access_token("user-1"))
        assert claims.user_id == "user-1"
        assert claims.token_type == "access"
        assert claims.issued_at == T0
        assert claims.expires_at == T0 + timedelta(days=7)

    def test_refresh_round_trip(self, codec):
        claims = codec.verify_refresh_token(codec.issue_refresh_token("user-1"))
        assert claims.user_id == "user-1"
        assert claims.expires_at == T0 + timedelta(days=30)

    def test_tokens_are_unique_within_the_same_second(self, codec):
        assert codec.issue_refresh_token("user-1") != codec.issue_refresh_token("user-1")

    def test_access_token_signed_with_access_secret(self, codec):
        decoded = jwt.decode(
            codec.issue_access_token("user-1"),
            ACCESS_SECRET,
            algorithms=["HS256"],
            options={"verify_exp": False, "verify_iat": False, "verify_iss": False},
        )
        assert decoded["userId"] == "user-1"
        assert decoded["type"] == "access"

    def test_kinds_are_not_interchangeable(self, codec):
        with pytest.raises(InvalidToken):
            codec.verify_refresh_token(codec.issue_access_token("user-1"))
        with pytest.raises(InvalidToken):
            codec.verify_access_token(codec.issue_refresh_token("user-1"))

    def test_access_expiry_boundary(self, codec, clock):
        token = codec.issue_access_token("user-1")
        clock.advance(days=7, seconds=-1)
        assert codec.verify_access_token(token).user_id == "user-1"
        clock.advance(seconds=2)
        with pytest.raises(InvalidToken):
            codec.verify_access_token(token)

    def test_refresh_expiry(self, codec, clock):
        token = codec.issue_refresh_token("user-1")
        clock.advance(days=29)
        codec.verify_refresh_token(token)
        clock.advance(days=2)
        with pytest.raises(InvalidToken):
            codec.verify_refresh_token(token)

    def test_tampered_token_rejected(self, codec):
        token = codec.issue_access_token("user-1")
        header, payload, signature = token.split(".")
        forged = ".".join([header, payload, signature[::-1]])
        with pytest.raises(InvalidToken):
            codec.verify_access_token(forged)

    def test_token_from_other_secret_rejected(self, codec):
        foreign = jwt.encode(
            {"userId": "user-1", "type": "access", "jti": "x", "iat": int(T0.timestamp()),
             "exp": int((T0 + timedelta(days=1)).timestamp()), "iss": "personal-finance-api"},
            "some-other-secret-0123456789abcdef0123456789",
            algorithm="HS256",
        )
        with pytest.raises(InvalidToken):
            codec.verify_access_token(foreign)

    def test_missing_user_claim_rejected(self, codec):
        token = jwt.encode(
            {"type": "access", "jti": "x", "iat": int(T0.timestamp()),
             "exp": int((T0 + timedelta(days=1)).timestamp()), "iss": "personal-finance-api"},
            ACCESS_SECRET,
            algorithm="HS256",
        )
        with pytest.raises(InvalidToken):
            codec.verify_access_token(token)

    @pytest.mark.parametrize("garbage", ["", "not-a-jwt", "a.b.c", None])
    def test_malformed_tokens_rejected(self, codec, garbage):
        with pytest.raises(InvalidToken):
            codec.verify_access_token(garbage)

    def test_issue_pair_reports_refresh_expiry(self, codec):
        pair = codec.issue_pair("user-1")
        assert pair.refresh_expires_at == T0 + timedelta(days=30)
        assert codec.verify_access_token(pair.access_token).user_id == "user-1"
        assert codec.verify_refresh_token(pair.refresh_token).user_id == "user-1"

    def test_sub_second_clock_expiry_matches_claim(self, settings):
        clock = FakeClock(T0 + timedelta(milliseconds=900))
        codec = TokenCodec(settings, clock=clock)
        pair = codec.issue_pair("user-1")

        claims = codec.verify_refresh_token(pair.refresh_token)
        assert claims.expires_at == pair.refresh_expires_at

        clock.current = pair.refresh_expires_at - timedelta(milliseconds=500)
        assert codec.verify_refresh_token(pair.refresh_token).user_id == "user-1"
        clock.current = pair.refresh_expires_at
        with pytest.raises(InvalidToken):
            codec.verify_refresh_token(pair.refresh_token)

    def test_pair_carries_session_id(self, codec):
        pair = codec.issue_pair("user-1", session_id="session-1")
        assert codec.verify_access_token(pair.access_token).session_id == "session-1"
        assert codec.verify_refresh_token(pair.refresh_token).session_id == "session-1"
        assert codec.verify_access_token(codec.issue_access_token("user-1")).session_id is None


class TestAuthSettings:
    def test_missing_secret_is_fatal(self):
        with pytest.raises(ConfigurationError):
            AuthSettings(access_secret="", refresh_secret=REFRESH_SECRET)
        with pytest.raises(ConfigurationError):
            AuthSettings.from_mapping({"JWT_ACCESS_SECRET": ACCESS_SECRET})

    def test_identical_secrets_are_fatal(self):
        with pytest.raises(ConfigurationError):
            AuthSettings(access_secret=ACCESS_SECRET, refresh_secret=ACCESS_SECRET)

    def test_non_positive_lifetime_is_fatal(self):
        with pytest.raises(ConfigurationError):
            AuthSettings(ACCESS_SECRET, REFRESH_SECRET, access_ttl=timedelta(0))

    def test_from_mapping_reads_lifetimes(self):
        settings = AuthSettings.from_mapping({
            "JWT_ACCESS_SECRET": ACCESS_SECRET,
            "JWT_REFRESH_SECRET": REFRESH_SECRET,
            "ACCESS_TOKEN_EXPIRES": timedelta(minutes=15),
        })
        assert settings.access_ttl == timedelta(minutes=15)
        assert settings.refresh_ttl == timedelta(days=30)

    def test_settings_are_immutable(self):
        settings = AuthSettings(ACCESS_SECRET, REFRESH_SECRET)
        with pytest.raises(AttributeError):
            settings.access_secret = "changed"


class TestArgon2PasswordHasher:
    @pytest.fixture
    def hasher(self):
        return Argon2PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)

    def test_hash_is_salted_and_verifies(self, hasher):
        first, second = hasher.hash("pw123456789"), hasher.hash("pw123456789")
        assert first != second
        assert "pw123456789" not in first
        assert hasher.verify("pw123456789", first)

    def test_wrong_password(self, hasher):
        assert hasher.verify("wrong-password", hasher.hash("pw123456789")) is False

    def test_malformed_hash_is_a_mismatch(self, hasher):
        assert hasher.verify("pw123456789", "not-an-argon2-hash") is False
