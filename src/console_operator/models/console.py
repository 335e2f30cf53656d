"""
Pydantic model for the console operator configuration.

Only the fields the OIDC setup controller reads are modelled.
"""

from typing import Any

from pydantic import BaseModel, Field


class ConsoleOperatorSpec(BaseModel):
    """Operator spec of consoles.operator.openshift.io."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    # Left empty when unset; only Managed, Unmanaged and Removed are recognized
    management_state: str = Field(
        "",
        alias="managementState",
        description="Managed, Unmanaged or Removed",
    )


class ConsoleOperatorConfig(BaseModel):
    """consoles.operator.openshift.io/cluster."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    name: str = Field(..., description="Object name")
    spec: ConsoleOperatorSpec = Field(default_factory=ConsoleOperatorSpec)

    @classmethod
    def from_body(cls, body: dict[str, Any]) -> "ConsoleOperatorConfig":
        return cls(
            name=body.get("metadata", {}).get("name", ""),
            spec=body.get("spec") or {},
        )
