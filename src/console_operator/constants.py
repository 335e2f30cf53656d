"""
Constants used throughout the console operator.

This module defines all constant values used by the OIDC setup controller
including:
- Identities of the cluster objects the controller reads and writes
- Annotations carrying applied-configuration fingerprints
- Condition types, statuses and reasons
"""

# Component identity, attributed on the secondary status record
CONSOLE_COMPONENT_NAME = "console"
CONSOLE_COMPONENT_NAMESPACE = "openshift-console"
CONSOLE_OPERATOR_NAME = "console-operator"

# Cluster-scoped configuration objects are all named "cluster"
CONFIG_RESOURCE_NAME = "cluster"

# authentications.config.openshift.io
AUTHENTICATION_GROUP = "config.openshift.io"
AUTHENTICATION_VERSION = "v1"
AUTHENTICATION_PLURAL = "authentications"
AUTHENTICATION_CRD_NAME = f"{AUTHENTICATION_PLURAL}.{AUTHENTICATION_GROUP}"
AUTHENTICATION_TYPE_OIDC = "OIDC"

# consoles.operator.openshift.io
CONSOLE_OPERATOR_GROUP = "operator.openshift.io"
CONSOLE_OPERATOR_VERSION = "v1"
CONSOLE_OPERATOR_PLURAL = "consoles"

# Objects in the target namespace
CONSOLE_DEPLOYMENT_NAME = "console"
OAUTH_CLIENT_SECRET_NAME = "console-oauth-config"

# Fingerprints recorded on the console deployment when it last consumed config
OAUTH_SECRET_VERSION_ANNOTATION = "console.openshift.io/oauth-secret-version"
AUTHN_CA_TRUST_CONFIG_VERSION_ANNOTATION = (
    "console.openshift.io/authn-ca-trust-config-version"
)

# Management states
MANAGEMENT_STATE_MANAGED = "Managed"
MANAGEMENT_STATE_UNMANAGED = "Unmanaged"
MANAGEMENT_STATE_REMOVED = "Removed"

# Condition type suffixes (following Kubernetes conventions)
CONDITION_AVAILABLE = "Available"
CONDITION_PROGRESSING = "Progressing"
CONDITION_DEGRADED = "Degraded"

# Condition status constants
CONDITION_TRUE = "True"
CONDITION_FALSE = "False"
CONDITION_UNKNOWN = "Unknown"

# Condition type prefixes owned by the OIDC setup controller
OIDC_CLIENT_CONFIG = "OIDCClientConfig"
AUTH_STATUS_HANDLER = "AuthStatusHandler"
OWNED_CONDITION_PREFIXES = (OIDC_CLIENT_CONFIG, AUTH_STATUS_HANDLER)

# Primary condition reasons
REASON_OIDC_CONFIG_SYNC_FAILED = "OIDCConfigSyncFailed"
REASON_FAILED_APPLY = "FailedApply"
REASON_DEPLOYMENT_OIDC_CONFIG = "DeploymentOIDCConfig"

# Secondary status reasons
REASON_OIDC_CLIENT_CONFIG = "OIDCClientConfig"
REASON_OIDC_CLIENT_MISSING_SECRET = "OIDCClientMissingSecret"
REASON_OIDC_CLIENT_SECRET_GET = "OIDCClientSecretGet"
REASON_OIDC_CONFIG_AVAILABLE = "OIDCConfigAvailable"
REASON_AS_EXPECTED = "AsExpected"

# Not-ready messages reported by the consistency check
MSG_DEPLOYMENT_NOT_READY = "deployment unavailable or outdated"
MSG_SECRET_OUTDATED = "client secret version not up to date in current deployment"
MSG_CA_OUTDATED = "OIDC provider CA version not up to date in current deployment"
MSG_NO_OIDC_CLIENT = "no OIDC client found"
MSG_MISSING_SECRET = "no client secret in the OIDC client config"

# Resource keys used by the object cache
RESOURCE_CRD = "customresourcedefinitions"
RESOURCE_AUTHENTICATION = AUTHENTICATION_PLURAL
RESOURCE_CONSOLE_OPERATOR = CONSOLE_OPERATOR_PLURAL
RESOURCE_SECRET = "secrets"
RESOURCE_CONFIG_MAP = "configmaps"
RESOURCE_DEPLOYMENT = "deployments"

# Controller naming
CONTROLLER_NAME = "OIDCSetupController"
