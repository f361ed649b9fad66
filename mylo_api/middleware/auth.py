# -*- coding: utf-8 -*-
"""
Session-backed bearer token check for protected routes.
"""
from functools import wraps

from flask import current_app, g, jsonify, request

from mylo_api.services.metrics import get_metrics_service
from mylo_api.services.request_context import set_session_context
from mylo_api.services.structured_logging import get_logger

logger = get_logger('mylo.auth')

UNAUTHORIZED_BODY = {
    'error': 'unauthorized',
    'message': 'Invalid or missing credentials',
}


def get_auth_service():
    return current_app.extensions['auth_service']


def require_session(f):
    """
    Decorator requiring ``Authorization: Bearer <jwt>`` with a live session.

    Every denial gets the same 401 body; the reason is only logged.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        decision = get_auth_service().authorize(request.headers.get('Authorization'))

        if not decision.allowed:
            logger.log_auth_event('bearer_token', success=False, failure_reason=decision.reason.value)
            metrics = get_metrics_service()
            if metrics:
                metrics.record_auth_denial(decision.reason.value)
            return jsonify(UNAUTHORIZED_BODY), 401

        set_session_context(decision.claims.session_key)
        g.session_profile = decision.profile
        logger.log_auth_event('bearer_token', success=True)
        return f(*args, **kwargs)
    return decorated_function
