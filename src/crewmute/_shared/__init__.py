# Area: Shared
"""
Shared utilities used by the core and the Discord integration.

This package contains:
- Logging configuration
- Text rendering for chat replies
"""

from .logging_config import (
    setup_logging,
    enable_quiet_mode,
)
from .reporting import (
    NO_GAME,
    DISPATCH_FAILED,
    format_status,
    format_matches,
    format_error,
    format_dispatch_failures,
)

__all__ = [
    "setup_logging",
    "enable_quiet_mode",
    "NO_GAME",
    "DISPATCH_FAILED",
    "format_status",
    "format_matches",
    "format_error",
    "format_dispatch_failures",
]
