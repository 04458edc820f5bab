import os
import sys

import pytest

# Ensure repository root is on sys.path before importing project modules.
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

from woo_settings_mcp.auth import StaticAuthorizer  # noqa: E402
from woo_settings_mcp.config import SettingsMcpConfig  # noqa: E402
from woo_settings_mcp.factory import build_components  # noqa: E402
from woo_settings_mcp.metrics import default_metrics  # noqa: E402
from woo_settings_mcp.reference import ReferenceResolver, StaticReferenceProvider  # noqa: E402
from woo_settings_mcp.schema import SchemaRegistry  # noqa: E402
from woo_settings_mcp.settings import SettingsService  # noqa: E402
from woo_settings_mcp.store import InMemorySettingsStore  # noqa: E402
from woo_settings_mcp.validation import SettingsValidator  # noqa: E402


@pytest.fixture(autouse=True)
def reset_metrics():
    default_metrics.reset()
    yield
    default_metrics.reset()


@pytest.fixture
def registry():
    return SchemaRegistry()


@pytest.fixture
def resolver():
    return ReferenceResolver(StaticReferenceProvider())


@pytest.fixture
def validator(registry, resolver):
    return SettingsValidator(registry, resolver)


@pytest.fixture
def store():
    return InMemorySettingsStore()


@pytest.fixture
def service(registry, store, resolver, validator):
    return SettingsService(registry, store, resolver, validator)


@pytest.fixture
def memory_config():
    return SettingsMcpConfig(
        backend="memory",
        store_url="",
        consumer_key=None,
        consumer_secret=None,
        admin_token="secret-token",
        stdio_can_manage=True,
    )


@pytest.fixture
def components(memory_config):
    return build_components(memory_config, authorizer=StaticAuthorizer(True))
