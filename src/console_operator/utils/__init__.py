"""
Utils package - Utility modules for console operator functionality.

Contains helper modules for:
- Kubernetes client setup, status writes and cache seeding
- The in-memory object cache fed by watch events
- Deployment health checks
- Sync pass scheduling (triggers, jitter and retry backoff)
"""

from console_operator.utils.deployment import is_available_and_updated
from console_operator.utils.object_cache import ObjectCache

__all__ = [
    "ObjectCache",
    "is_available_and_updated",
]
