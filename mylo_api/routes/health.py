# -*- coding: utf-8 -*-

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import time

from mylo_api.infra.db import db
from mylo_api.infra.log import get_logger

health_bp = Blueprint('health', __name__)
logger = get_logger(__name__)

SERVICE_NAME = 'mylo-api'


@health_bp.route('/health', methods=['GET', 'HEAD'])
@health_bp.route('/healthz', methods=['GET', 'HEAD'])
def healthz():
    """Liveness check (available at both /health and /healthz)."""
    return jsonify({
        'status': 'healthy',
        'service': SERVICE_NAME,
        'timestamp': time.time()
    }), 200


def _database_ready() -> bool:
    try:
        db.session.execute(text('SELECT 1'))
        return True
    except SQLAlchemyError as e:
        logger.warning(f"Readiness: database check failed: {e}")
        db.session.rollback()
        return False


@health_bp.route('/readyz', methods=['GET', 'HEAD'])
def readyz():
    """Readiness check: Redis answers PING and the database answers SELECT 1."""
    checks = {
        'redis': current_app.extensions['session_store'].ping(),
        'database': _database_ready(),
    }
    ready = all(checks.values())
    return jsonify({
        'status': 'ready' if ready else 'not_ready',
        'service': SERVICE_NAME,
        'timestamp': time.time(),
        'checks': checks
    }), 200 if ready else 503
