# -*- coding: utf-8 -*-
"""
Bearer token issuance and validation.

A token is only a reference: it carries the id of a server-side session and
is accepted only while that session still exists in the session store.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional

import jwt

from mylo_api.errors import DependencyError, SessionStoreError
from mylo_api.services.session_store import SessionStore
from mylo_api.services.structured_logging import get_logger

logger = get_logger('mylo.auth')

DEV_SECRET = 'devsecret'
BEARER_PREFIX = 'Bearer '
ALGORITHM = 'HS256'


class InvalidClaimsError(jwt.InvalidTokenError):
    """Token verified but its claims do not describe a session."""


@dataclass(frozen=True)
class SessionClaims:
    session_key: str
    issued_at: datetime
    expires_at: datetime

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'SessionClaims':
        session_key = payload.get('session_key')
        if not isinstance(session_key, str) or not session_key:
            raise InvalidClaimsError('session_key claim missing or not a string')
        return cls(
            session_key=session_key,
            issued_at=datetime.fromtimestamp(payload['iat'], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload['exp'], tz=timezone.utc),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            'session_key': self.session_key,
            'iat': self.issued_at,
            'exp': self.expires_at,
        }


class DenyReason(str, Enum):
    """Internal diagnostic for a rejected request; never sent to clients."""
    MISSING_HEADER = 'missing_header'
    BAD_FORMAT = 'bad_format'
    INVALID_TOKEN = 'invalid_token'
    NO_SESSION_CLAIM = 'no_session_claim'
    SESSION_NOT_FOUND = 'session_not_found'


@dataclass(frozen=True)
class AuthDecision:
    allowed: bool
    reason: Optional[DenyReason] = None
    claims: Optional[SessionClaims] = None
    profile: Optional[Dict[str, Any]] = None

    @classmethod
    def deny(cls, reason: DenyReason) -> 'AuthDecision':
        return cls(allowed=False, reason=reason)


class AuthService:
    """Issues session tokens and authorizes Authorization header values."""

    def __init__(self, secret: Optional[str], session_store: SessionStore,
                 token_ttl_seconds: int = 86400):
        if not secret:
            logger.warning("JWT_USER_SECRET_KEY not set; using development secret")
            secret = DEV_SECRET
        self.secret = secret
        self.session_store = session_store
        self.token_ttl = timedelta(seconds=token_ttl_seconds)

    def issue_token(self, session_id: str) -> str:
        now = datetime.now(timezone.utc)
        claims = SessionClaims(session_key=session_id, issued_at=now, expires_at=now + self.token_ttl)
        try:
            return jwt.encode(claims.to_payload(), self.secret, algorithm=ALGORITHM)
        except jwt.PyJWTError as e:
            raise DependencyError('Could not create token') from e

    def decode_token(self, token: str) -> SessionClaims:
        """Verify signature and expiry, then type-check the claims."""
        payload = jwt.decode(
            token,
            self.secret,
            algorithms=[ALGORITHM],
            options={'require': ['exp', 'iat']},
        )
        return SessionClaims.from_payload(payload)

    def authorize(self, header_value: Optional[str]) -> AuthDecision:
        """
        Decide whether a request carrying ``header_value`` may proceed.

        Checks run in order and the first failure wins: header present,
        bearer prefix, signature and expiry, session claim, live session.
        """
        if not header_value:
            return AuthDecision.deny(DenyReason.MISSING_HEADER)

        if not header_value.startswith(BEARER_PREFIX):
            return AuthDecision.deny(DenyReason.BAD_FORMAT)
        token = header_value[len(BEARER_PREFIX):]

        try:
            claims = self.decode_token(token)
        except InvalidClaimsError:
            return AuthDecision.deny(DenyReason.NO_SESSION_CLAIM)
        except jwt.InvalidTokenError:
            return AuthDecision.deny(DenyReason.INVALID_TOKEN)

        try:
            profile = self.session_store.get_session(claims.session_key)
        except SessionStoreError:
            logger.exception("Session lookup failed")
            return AuthDecision.deny(DenyReason.SESSION_NOT_FOUND)
        if not profile:
            return AuthDecision.deny(DenyReason.SESSION_NOT_FOUND)

        return AuthDecision(allowed=True, claims=claims, profile=profile)
