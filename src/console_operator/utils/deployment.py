"""Rollout predicates for Deployment objects."""

from typing import Any


def is_available_and_updated(deployment: dict[str, Any]) -> bool:
    """
    Check whether the deployment's current generation is fully rolled out.

    True when at least one replica is available, the controller has observed
    the latest generation and every replica runs the updated pod template.
    """
    metadata = deployment.get("metadata") or {}
    status = deployment.get("status") or {}

    available_replicas = status.get("availableReplicas") or 0
    observed_generation = status.get("observedGeneration") or 0
    generation = metadata.get("generation") or 0
    updated_replicas = status.get("updatedReplicas") or 0
    replicas = status.get("replicas") or 0

    return (
        available_replicas > 0
        and observed_generation >= generation
        and updated_replicas == replicas
    )
