# -*- coding: utf-8 -*-
'''
Redis-backed store for sign-in codes and sessions.

Keys:
- ``signin_code:<email>``  six-digit code, short TTL, single use
- ``session:<session_id>`` JSON user profile, proof of a completed sign-in
'''
import json
import secrets
import hmac
from enum import Enum
from typing import Any, Dict, Optional

import redis

from mylo_api.errors import SessionStoreError
from mylo_api.services.structured_logging import get_logger

logger = get_logger('mylo.auth')

SIGNIN_CODE_PREFIX = 'signin_code:'
SESSION_PREFIX = 'session:'


def signin_code_key(email: str) -> str:
    return f"{SIGNIN_CODE_PREFIX}{email}"


def session_key(session_id: str) -> str:
    return f"{SESSION_PREFIX}{session_id}"


class CodeCheck(str, Enum):
    """Outcome of an attempt to consume a sign-in code."""
    MISSING = 'missing'
    MISMATCH = 'mismatch'
    CONSUMED = 'consumed'


def build_redis_client(config) -> redis.Redis:
    '''Create the session Redis client from app config.'''
    redis_url = config.get('REDIS_URL')
    if redis_url:
        return redis.from_url(redis_url, decode_responses=True, socket_connect_timeout=2)

    host = config.get('REDIS_HOST') or 'localhost:6379'
    port = 6379
    if ':' in host:
        host, _, port_str = host.rpartition(':')
        port = int(port_str)

    return redis.Redis(
        host=host,
        port=port,
        password=config.get('REDIS_PASSWORD') or None,
        db=config.get('REDIS_SESSION_DB', 0),
        decode_responses=True,
        socket_connect_timeout=2,
    )


class SessionStore:
    '''Sign-in codes and sessions on top of a Redis client.'''

    def __init__(self, redis_client: redis.Redis, code_ttl_seconds: int = 300,
                 session_ttl_seconds: int = 86400):
        self.redis = redis_client
        self.code_ttl_seconds = code_ttl_seconds
        # 0 or None keeps sessions until deleted out of band
        self.session_ttl_seconds = session_ttl_seconds

    def save_code(self, email: str, code: str) -> None:
        '''Store ``code`` for ``email``, replacing any previous one.'''
        try:
            self.redis.setex(signin_code_key(email), self.code_ttl_seconds, code)
        except redis.RedisError as e:
            raise SessionStoreError('Unable to store sign-in code') from e

    def consume_code(self, email: str, code: str) -> CodeCheck:
        '''
        Compare and delete the stored code in one transaction.

        The key is WATCHed while it is read; the DEL is only queued on a
        match, and a concurrent write or delete aborts the transaction so
        two callers can never both consume the same code. A mismatch leaves
        the stored code in place.
        '''
        key = signin_code_key(email)
        try:
            with self.redis.pipeline() as pipe:
                try:
                    pipe.watch(key)
                    stored = pipe.get(key)
                    if not stored:
                        return CodeCheck.MISSING
                    if not hmac.compare_digest(str(stored).encode(), code.encode()):
                        pipe.unwatch()
                        return CodeCheck.MISMATCH
                    pipe.multi()
                    pipe.delete(key)
                    deleted, = pipe.execute()
                except redis.WatchError:
                    return CodeCheck.MISSING
        except redis.RedisError as e:
            raise SessionStoreError('Unable to read sign-in code') from e

        return CodeCheck.CONSUMED if deleted else CodeCheck.MISSING

    def create_session(self, profile: Dict[str, Any]) -> str:
        '''Store ``profile`` under a fresh opaque session id and return the id.'''
        session_id = secrets.token_urlsafe(16)
        try:
            self.redis.set(
                session_key(session_id),
                json.dumps(profile),
                ex=self.session_ttl_seconds or None,
            )
        except redis.RedisError as e:
            raise SessionStoreError('Could not store session') from e
        return session_id

    def get_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        '''Return the stored profile, or None when the session is absent.'''
        try:
            raw = self.redis.get(session_key(session_id))
        except redis.RedisError as e:
            raise SessionStoreError('Unable to read session') from e
        if not raw:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Discarding malformed session record")
            return None

    def ping(self) -> bool:
        try:
            return bool(self.redis.ping())
        except redis.RedisError:
            return False
