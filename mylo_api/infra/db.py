"""
Unified database infrastructure module.

All models should import the SQLAlchemy instance from here.
"""

from mylo_api.database import db, worker_session

__all__ = ["db", "worker_session"]
