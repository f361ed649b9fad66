"""
Unified authentication infrastructure module.

Routes that need a signed-in session import the decorator from here.
"""

from mylo_api.middleware.auth import require_session

__all__ = ["require_session"]
