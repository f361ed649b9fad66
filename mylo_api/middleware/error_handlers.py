"""
Error handling middleware.
Turns exceptions into small JSON bodies without internal details.
"""
from flask import jsonify
from redis import RedisError
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from mylo_api.errors import ApiError
from mylo_api.infra.log import get_logger

logger = get_logger(__name__)


def register_error_handlers(app):
    """Register JSON error handlers on the app."""

    @app.errorhandler(ApiError)
    def handle_api_error(e):
        if e.status_code >= 500:
            logger.error(f"Dependency failure: {e.message}", error_code=e.code)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(e):
        error_msg = str(e.orig) if hasattr(e, 'orig') else str(e)
        logger.error(f"Database error: {error_msg}")
        return jsonify({
            'error': 'database_error',
            'message': 'Database operation failed. Please try again later.'
        }), 500

    @app.errorhandler(RedisError)
    def handle_redis_error(e):
        logger.error(f"Session store error: {e}")
        return jsonify({
            'error': 'session_store_error',
            'message': 'Session store unavailable. Please try again later.'
        }), 500

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        return jsonify({
            'error': (e.name or 'error').lower().replace(' ', '_'),
            'message': e.description,
        }), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        logger.exception(f"Unhandled error: {e}")
        return jsonify({
            'error': 'internal_error',
            'message': 'An unexpected error occurred.'
        }), 500
