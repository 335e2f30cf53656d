"""Locating a component's OIDC client in the authentication configuration."""

from console_operator.constants import (
    CONSOLE_COMPONENT_NAME,
    CONSOLE_COMPONENT_NAMESPACE,
)
from console_operator.models import Authentication, OIDCClientConfig


def get_oidc_client_config(
    authn: Authentication,
    component_name: str = CONSOLE_COMPONENT_NAME,
    component_namespace: str = CONSOLE_COMPONENT_NAMESPACE,
) -> OIDCClientConfig | None:
    """
    Find the OIDC client entry declared for a component.

    Providers are scanned in order and the first entry whose component
    name and namespace both match wins. No validation is done here: an entry
    without a client ID is returned as is.

    Returns:
        The matching client configuration, or None when the component has
        no OIDC client configured (a normal state, not an error)
    """
    for provider in authn.spec.oidc_providers:
        for entry in provider.oidc_clients:
            if (
                entry.component_name == component_name
                and entry.component_namespace == component_namespace
            ):
                return OIDCClientConfig(
                    client_id=entry.client_id,
                    secret_ref_name=entry.client_secret.name,
                    provider_name=provider.name,
                    issuer_url=provider.issuer.issuer_url,
                    ca_config_name=provider.issuer.certificate_authority.name,
                )
    return None
