"""
Infrastructure package - unified entry points for core services.

This package provides standardized, centralized access to:
- Database (db)
- Authentication (require_session)
- Logging (configure_logging, init_logging, get_logger)
"""

from mylo_api.infra.db import db
from mylo_api.infra.auth import require_session
from mylo_api.infra.log import configure_logging, init_logging, get_logger

__all__ = [
    "db",
    "require_session",
    "configure_logging",
    "init_logging",
    "get_logger",
]
