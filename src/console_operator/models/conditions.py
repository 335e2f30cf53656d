"""
Condition model shared by both status objects the controller writes.

A condition is identified by its type; at most one condition of a given type
lives on a status object.
"""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ConditionStatus(StrEnum):
    """Kubernetes condition status values."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class Condition(BaseModel):
    """A named status fact with reason and message."""

    model_config = {"populate_by_name": True, "frozen": True}

    type: str = Field(..., description="Condition type, unique per status object")
    status: ConditionStatus = Field(..., description="True, False or Unknown")
    reason: str = Field("", description="Machine-readable reason")
    message: str = Field("", description="Human-readable message")
    last_transition_time: str | None = Field(
        None,
        alias="lastTransitionTime",
        description="When status last changed; stamped on write",
    )

    @property
    def is_true(self) -> bool:
        return self.status == ConditionStatus.TRUE

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the Kubernetes wire layout."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
