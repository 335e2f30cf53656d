"""
Models package - Pydantic models for type-safe resource handling.

Defines data models for:
- Status conditions
- The cluster authentication configuration and its OIDC clients
- The console operator configuration
"""

from .authentication import (
    Authentication,
    AuthenticationSpec,
    OIDCClientConfig,
    OIDCClientEntry,
    OIDCProvider,
)
from .conditions import Condition, ConditionStatus
from .console import ConsoleOperatorConfig

__all__ = [
    "Authentication",
    "AuthenticationSpec",
    "Condition",
    "ConditionStatus",
    "ConsoleOperatorConfig",
    "OIDCClientConfig",
    "OIDCClientEntry",
    "OIDCProvider",
]
