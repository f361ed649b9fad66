"""
Unified logging infrastructure module.
"""

from mylo_api.services.structured_logging import (
    configure_logging,
    init_logging,
    get_logger,
)

__all__ = ["configure_logging", "init_logging", "get_logger"]
