# -*- coding: utf-8 -*-
"""
Email-code sign-in flow.

request_code:  validate email -> generate code -> store (5 min) -> email it
verify_code:   consume stored code atomically -> create session -> mint token
"""
import secrets
import time
from typing import Optional

from mylo_api.errors import AuthError, ValidationError
from mylo_api.schemas import is_valid_email
from mylo_api.services.auth_service import AuthService
from mylo_api.services.email_service import CodeSender
from mylo_api.services.metrics import MetricsService
from mylo_api.services.session_store import CodeCheck, SessionStore
from mylo_api.services.structured_logging import get_logger, hash_email

logger = get_logger('mylo.signin')

CODE_SENT_MESSAGE = 'A sign-in code has been emailed to you.'


def generate_six_digit_code() -> str:
    """Six random digits; falls back to a clock-derived code if the OS RNG fails."""
    try:
        number = secrets.randbelow(1_000_000)
    except (NotImplementedError, OSError):
        # Degraded availability only: this value is predictable.
        logger.warning("Failed to generate random code, falling back to time-based code")
        number = time.time_ns() % 1_000_000
    return f"{number:06d}"


class SignInService:
    """Issues and verifies sign-in codes. Holds no per-request state."""

    def __init__(self, store: SessionStore, mailer: CodeSender, auth: AuthService,
                 metrics: Optional[MetricsService] = None):
        self.store = store
        self.mailer = mailer
        self.auth = auth
        self.metrics = metrics

    def request_code(self, email: str) -> str:
        """
        Store a fresh code for ``email`` and send it.

        The answer is the same whether or not the address belongs to a
        subscriber. Store and SendGrid failures propagate as dependency
        errors; the caller must simply ask again.
        """
        if not email:
            raise ValidationError('Missing email')
        if not is_valid_email(email):
            raise ValidationError('invalid email')

        code = generate_six_digit_code()
        self.store.save_code(email, code)
        self.mailer.send_code(email, code)

        if self.metrics:
            self.metrics.record_code_issued()
        logger.info("Sign-in code issued", email_hash=hash_email(email))
        return CODE_SENT_MESSAGE

    def verify_code(self, email: str, code: str) -> str:
        """Exchange a valid code for a bearer token bound to a new session."""
        if not email or not code:
            raise ValidationError('Missing email or code')

        result = self.store.consume_code(email, code)
        if self.metrics:
            self.metrics.record_verification(result.value)

        if result is CodeCheck.MISSING:
            logger.info("Sign-in verify without a live code", email_hash=hash_email(email))
            raise ValidationError('No sign-in code found or code expired', code='no_code')
        if result is CodeCheck.MISMATCH:
            logger.warning("Sign-in code mismatch", email_hash=hash_email(email))
            raise AuthError('Invalid code', code='invalid_code')

        session_id = self.store.create_session({'email': email})
        token = self.auth.issue_token(session_id)
        logger.info("Sign-in verified, session created", email_hash=hash_email(email))
        return token
