"""
Service layer for the console operator.

This module holds the OIDC setup business logic, separated from the kopf
handler layer:
- capability.py: schema-gated detection of the oidcClients status field
- client_config.py: locating the console's OIDC client entry
- consistency.py: has the deployment consumed the current secret and CA
- oidc_setup_reconciler.py: the per-pass driver tying it all together
"""

from .capability import authn_config_has_oidc_fields, get_active_version
from .client_config import get_oidc_client_config
from .consistency import ConsistencyChecker, ReadinessResult
from .oidc_setup_reconciler import OIDCSetupReconciler

__all__ = [
    "ConsistencyChecker",
    "OIDCSetupReconciler",
    "ReadinessResult",
    "authn_config_has_oidc_fields",
    "get_active_version",
    "get_oidc_client_config",
]
