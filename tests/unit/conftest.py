"""Shared pytest fixtures for the OIDC setup unit tests."""

import pytest

from console_operator.constants import (
    RESOURCE_AUTHENTICATION,
    RESOURCE_CONFIG_MAP,
    RESOURCE_CONSOLE_OPERATOR,
    RESOURCE_CRD,
    RESOURCE_DEPLOYMENT,
    RESOURCE_SECRET,
)
from console_operator.services import OIDCSetupReconciler
from console_operator.utils.object_cache import ObjectCache
from tests.fixtures.console_resources import (
    InMemoryStatusWriter,
    authentication,
    authentication_crd,
    ca_config_map,
    console_deployment,
    console_operator,
    oauth_secret,
)


@pytest.fixture
def object_cache():
    """A cache holding a fully converged OIDC setup."""
    cache = ObjectCache()
    cache.upsert(RESOURCE_CRD, authentication_crd())
    cache.upsert(RESOURCE_AUTHENTICATION, authentication())
    cache.upsert(RESOURCE_CONSOLE_OPERATOR, console_operator())
    cache.upsert(RESOURCE_SECRET, oauth_secret())
    cache.upsert(RESOURCE_CONFIG_MAP, ca_config_map())
    cache.upsert(RESOURCE_DEPLOYMENT, console_deployment())
    return cache


@pytest.fixture
def status_writer():
    return InMemoryStatusWriter()


@pytest.fixture
def reconciler(object_cache, status_writer):
    return OIDCSetupReconciler(object_cache, status_writer)
