"""
Error handling module for the console operator.

This module provides the error hierarchy used by the OIDC setup controller
and its integration with kopf's retry mechanisms.
"""

from .operator_errors import (
    ConfigurationError,
    KubernetesAPIError,
    OperatorError,
    ResourceNotFoundError,
    StatusUpdateError,
    SyntheticRequeueError,
    ValidationError,
)

__all__ = [
    "OperatorError",
    "ConfigurationError",
    "ValidationError",
    "KubernetesAPIError",
    "ResourceNotFoundError",
    "StatusUpdateError",
    "SyntheticRequeueError",
]
