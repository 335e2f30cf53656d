"""
Schema-gated capability detection.

Whether the platform can report OIDC client state at all is decided by the
authentication CRD: the ``status.oidcClients`` field must exist in the schema
of the version that is both served and stored.
"""

from typing import Any

from console_operator.errors import ConfigurationError


def get_active_version(crd: dict[str, Any]) -> dict[str, Any]:
    """
    Find the CRD version that is both served and used for storage.

    Raises:
        ConfigurationError: If no version is both served and stored
    """
    spec = crd.get("spec") or {}
    for version in spec.get("versions") or []:
        if version.get("served") and version.get("storage"):
            return version

    name = (crd.get("metadata") or {}).get("name", "<unknown>")
    raise ConfigurationError(
        f"{name} has no version that is both served and stored",
        user_action="Check the CustomResourceDefinition installed on the cluster",
    )


def authn_config_has_oidc_fields(crd: dict[str, Any]) -> bool:
    """
    Check whether the authentication schema carries ``status.oidcClients``.

    Pure function of the snapshot; the schema is re-checked on every pass
    since upgrades and downgrades can change it.

    Args:
        crd: Snapshot of the authentications.config.openshift.io CRD

    Returns:
        True if the active version's schema declares the field

    Raises:
        ConfigurationError: If no active (served and stored) version exists
    """
    version = get_active_version(crd)
    schema = (version.get("schema") or {}).get("openAPIV3Schema") or {}
    status_schema = (schema.get("properties") or {}).get("status") or {}
    return "oidcClients" in (status_schema.get("properties") or {})
