"""
Pydantic models for the cluster authentication configuration.

This module defines a read-only view over authentications.config.openshift.io
covering the OIDC provider list and the per-component OIDC clients, plus the
derived client configuration the controller works with.
"""

from typing import Any

from pydantic import BaseModel, Field

from console_operator.constants import AUTHENTICATION_TYPE_OIDC


class NameReference(BaseModel):
    """Reference to a secret or config map by name."""

    name: str = Field("", description="Name of the referenced object")


class OIDCIssuer(BaseModel):
    """Issuer of an external OIDC provider."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    issuer_url: str = Field("", alias="issuerURL", description="Issuer URL")
    audiences: list[str] = Field(default_factory=list)
    certificate_authority: NameReference = Field(
        default_factory=NameReference,
        alias="issuerCertificateAuthority",
        description="Config map holding the CA bundle trusted for the issuer",
    )


class OIDCClientEntry(BaseModel):
    """A component's OIDC client declared under a provider."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    component_name: str = Field("", alias="componentName")
    component_namespace: str = Field("", alias="componentNamespace")
    client_id: str = Field("", alias="clientID")
    client_secret: NameReference = Field(
        default_factory=NameReference, alias="clientSecret"
    )


class OIDCProvider(BaseModel):
    """An external OIDC identity provider."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    name: str = Field("", description="Provider name")
    issuer: OIDCIssuer = Field(default_factory=OIDCIssuer)
    oidc_clients: list[OIDCClientEntry] = Field(
        default_factory=list, alias="oidcClients"
    )


class AuthenticationSpec(BaseModel):
    """Spec of authentications.config.openshift.io."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    type: str = Field("", description="IntegratedOAuth, None or OIDC")
    oidc_providers: list[OIDCProvider] = Field(
        default_factory=list, alias="oidcProviders"
    )


class Authentication(BaseModel):
    """authentications.config.openshift.io/cluster."""

    model_config = {"populate_by_name": True}

    name: str = Field(..., description="Object name")
    spec: AuthenticationSpec = Field(default_factory=AuthenticationSpec)

    @property
    def is_oidc(self) -> bool:
        return self.spec.type == AUTHENTICATION_TYPE_OIDC

    @classmethod
    def from_body(cls, body: dict[str, Any]) -> "Authentication":
        metadata = body.get("metadata") or {}
        return cls(name=metadata.get("name", ""), spec=body.get("spec") or {})


class OIDCClientConfig(BaseModel):
    """
    The OIDC client entry relevant to one component.

    Derived, read-only view; carries the provider context the entry was
    found under.
    """

    model_config = {"frozen": True}

    client_id: str
    secret_ref_name: str = ""
    provider_name: str = ""
    issuer_url: str = ""
    ca_config_name: str = ""

    @property
    def has_secret_ref(self) -> bool:
        return bool(self.secret_ref_name)
