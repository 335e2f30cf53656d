"""
Status reporting for the console operator.

- conditions.py: deriving Progressing/Degraded pairs and merging conditions
- handler.py: per-pass aggregation of primary conditions, flushed as one write
- auth_status.py: the console's entry in the authentication oidcClients status
"""

from .auth_status import AuthStatusHandler
from .conditions import (
    find_condition,
    handle_degraded,
    handle_progressing,
    handle_progressing_or_degraded,
    set_condition,
)
from .handler import StatusHandler

__all__ = [
    "AuthStatusHandler",
    "StatusHandler",
    "find_condition",
    "handle_degraded",
    "handle_progressing",
    "handle_progressing_or_degraded",
    "set_condition",
]
