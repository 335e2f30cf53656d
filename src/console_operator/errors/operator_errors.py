"""
Operator error hierarchy with categorization and retry logic.

This module defines the error types used throughout the console operator,
providing clear categorization and integration with kopf's retry mechanisms.
"""

import kopf


class OperatorError(Exception):
    """
    Base error class for all operator-related exceptions.

    Provides categorization, retry behavior, and user guidance for resolution.
    """

    def __init__(
        self,
        message: str,
        category: str,
        retryable: bool = True,
        delay: int = 30,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        """
        Initialize operator error.

        Args:
            message: Human-readable error description
            category: Error category (validation, api, configuration, status)
            retryable: Whether the operation should be retried
            delay: Suggested retry delay in seconds
            user_action: What user should do to resolve the issue
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.category = category
        self.retryable = retryable
        self.delay = delay
        self.user_action = user_action
        self.cause = cause

    def as_kopf_error(self):
        """Convert to appropriate kopf exception type."""
        if self.retryable:
            return kopf.TemporaryError(str(self), delay=self.delay)
        else:
            return kopf.PermanentError(str(self))

    def __str__(self) -> str:
        """Enhanced string representation with user guidance."""
        base_msg = super().__str__()
        if self.user_action:
            return f"{base_msg}\nAction required: {self.user_action}"
        return base_msg


class ValidationError(OperatorError):
    """Error in an externally authored configuration object."""

    def __init__(
        self, message: str, field: str | None = None, user_action: str | None = None
    ):
        if field:
            message = f"Validation error in field '{field}': {message}"
        super().__init__(
            message=message, category="validation", retryable=False, user_action=user_action
        )


class ConfigurationError(OperatorError):
    """Error in operator or cluster configuration."""

    def __init__(
        self, message: str, retryable: bool = False, user_action: str | None = None
    ):
        super().__init__(
            message=message,
            category="configuration",
            retryable=retryable,
            user_action=user_action,
        )


class KubernetesAPIError(OperatorError):
    """Error communicating with Kubernetes API."""

    def __init__(
        self,
        message: str,
        reason: str | None = None,
        retryable: bool = True,
        cause: Exception | None = None,
    ):
        if reason:
            message = f"{message} (reason: {reason})"

        # Some K8s errors are not retryable
        non_retryable_reasons = {"Forbidden", "Unauthorized", "Invalid"}
        if reason in non_retryable_reasons:
            retryable = False

        super().__init__(
            message=message,
            category="api",
            retryable=retryable,
            cause=cause,
        )
        self.reason = reason


class ResourceNotFoundError(OperatorError):
    """A cluster object the controller needs is not present in the object cache."""

    def __init__(self, resource: str, name: str, namespace: str | None = None):
        if namespace:
            message = f'{resource} "{name}" not found in namespace "{namespace}"'
        else:
            message = f'{resource} "{name}" not found'
        super().__init__(message=message, category="not_found", retryable=True)
        self.resource = resource
        self.name = name
        self.namespace = namespace


class StatusUpdateError(OperatorError):
    """Writing status back to the API failed."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(
            message=message, category="status", retryable=True, delay=5, cause=cause
        )


class SyntheticRequeueError(OperatorError):
    """
    Request a fresh pass soon without reporting a failure.

    The pass has already published the failure reasons as conditions; this
    only asks the scheduling layer to re-evaluate.
    """

    def __init__(self, message: str = "synthetic requeue request"):
        super().__init__(message=message, category="requeue", retryable=True, delay=1)
