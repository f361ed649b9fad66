"""
Tests for bearer token issuance and the Authorization header check.
"""
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from mylo_api.services.auth_service import (
    DEV_SECRET,
    AuthService,
    DenyReason,
    InvalidClaimsError,
    SessionClaims,
)
from mylo_api.errors import SessionStoreError

from doubles import InMemorySessionStore, TEST_SECRET


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def auth(store):
    return AuthService(TEST_SECRET, store)


def bearer(token):
    return f"Bearer {token}"


class TestIssueToken:

    def test_token_carries_session_key_and_24h_expiry(self, auth):
        token = auth.issue_token("abc123")
        payload = jwt.decode(token, TEST_SECRET, algorithms=["HS256"])

        assert payload["session_key"] == "abc123"
        assert payload["exp"] - payload["iat"] == 24 * 3600

    def test_decode_returns_typed_claims(self, auth):
        claims = auth.decode_token(auth.issue_token("abc123"))

        assert isinstance(claims, SessionClaims)
        assert claims.session_key == "abc123"
        assert claims.expires_at - claims.issued_at == timedelta(hours=24)

    def test_missing_secret_falls_back_to_development_secret(self, store):
        service = AuthService(None, store)
        token = service.issue_token("abc")

        assert service.secret == DEV_SECRET
        assert jwt.decode(token, DEV_SECRET, algorithms=["HS256"])["session_key"] == "abc"

    def test_claims_without_session_key_are_rejected(self):
        now = datetime.now(timezone.utc).timestamp()
        with pytest.raises(InvalidClaimsError):
            SessionClaims.from_payload({"iat": now, "exp": now + 60})


class TestAuthorize:

    def test_missing_header(self, auth):
        assert auth.authorize(None).reason is DenyReason.MISSING_HEADER
        assert auth.authorize("").reason is DenyReason.MISSING_HEADER

    def test_header_without_bearer_prefix(self, auth):
        token = auth.issue_token("abc")
        decision = auth.authorize(token)

        assert not decision.allowed
        assert decision.reason is DenyReason.BAD_FORMAT

    def test_garbage_token(self, auth):
        assert auth.authorize("Bearer not-a-jwt").reason is DenyReason.INVALID_TOKEN

    def test_token_signed_with_other_secret(self, auth, store):
        session_id = store.create_session({"email": "a@b.com"})
        token = AuthService("another-secret", store).issue_token(session_id)

        assert auth.authorize(bearer(token)).reason is DenyReason.INVALID_TOKEN

    def test_expired_token(self, auth, store):
        session_id = store.create_session({"email": "a@b.com"})
        past = datetime.now(timezone.utc) - timedelta(days=2)
        token = jwt.encode(
            {"session_key": session_id, "iat": past, "exp": past + timedelta(hours=24)},
            TEST_SECRET, algorithm="HS256")

        assert auth.authorize(bearer(token)).reason is DenyReason.INVALID_TOKEN

    def test_session_claim_of_wrong_type(self, auth):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"session_key": 42, "iat": now, "exp": now + timedelta(hours=1)},
            TEST_SECRET, algorithm="HS256")

        assert auth.authorize(bearer(token)).reason is DenyReason.NO_SESSION_CLAIM

    def test_valid_token_for_unknown_session(self, auth):
        token = auth.issue_token("never-created")

        assert auth.authorize(bearer(token)).reason is DenyReason.SESSION_NOT_FOUND

    def test_deleted_session_invalidates_valid_token(self, auth, store):
        session_id = store.create_session({"email": "a@b.com"})
        token = auth.issue_token(session_id)
        assert auth.authorize(bearer(token)).allowed

        store.data.clear()

        decision = auth.authorize(bearer(token))
        assert not decision.allowed
        assert decision.reason is DenyReason.SESSION_NOT_FOUND

    def test_store_failure_denies(self, auth, store, monkeypatch):
        token = auth.issue_token(store.create_session({"email": "a@b.com"}))

        def broken(_session_id):
            raise SessionStoreError("Unable to read session")

        monkeypatch.setattr(store, "get_session", broken)

        assert auth.authorize(bearer(token)).reason is DenyReason.SESSION_NOT_FOUND

    def test_live_session_is_allowed(self, auth, store):
        session_id = store.create_session({"email": "a@b.com"})
        decision = auth.authorize(bearer(auth.issue_token(session_id)))

        assert decision.allowed
        assert decision.reason is None
        assert decision.claims.session_key == session_id
        assert decision.profile == {"email": "a@b.com"}
