import pytest

from woo_settings_mcp.store import InMemorySettingsStore, RestSettingsStore, WOOCOMMERCE_DEFAULTS
from woo_settings_mcp.woo_api import NotFoundError, WooApiError


@pytest.mark.asyncio
async def test_memory_store_defaults(store):
    assert await store.get_option("woocommerce_currency") == "USD"
    assert await store.get_option("woocommerce_default_country") == "US:CA"
    assert await store.get_option("missing_option") == ""
    assert await store.get_option("missing_option", None) is None
    assert set(WOOCOMMERCE_DEFAULTS) == set(store.snapshot())


@pytest.mark.asyncio
async def test_memory_store_unchanged_value_is_not_a_write(store):
    assert await store.update_option("woocommerce_currency", "USD") is False
    assert await store.update_option("woocommerce_currency", "EUR") is True
    assert await store.get_option("woocommerce_currency") == "EUR"


@pytest.mark.asyncio
async def test_memory_store_copies_values():
    store = InMemorySettingsStore({"countries": ["US"]})
    value = await store.get_option("countries")
    value.append("GB")
    assert await store.get_option("countries") == ["US"]
    assert await store.is_available() is True


class StubApiClient:
    def __init__(self, options=None, fail_update=None, reachable=True):
        self.options = dict(options or {})
        self.fail_update = fail_update
        self.reachable = reachable
        self.updates = []

    async def fetch_setting(self, option_name):
        if option_name not in self.options:
            raise NotFoundError("missing", status_code=404)
        return {"id": option_name, "value": self.options[option_name]}

    async def update_setting(self, option_name, value):
        if self.fail_update:
            raise self.fail_update
        self.updates.append((option_name, value))
        self.options[option_name] = value
        return {"id": option_name, "value": value}

    async def ping(self):
        return self.reachable


@pytest.mark.asyncio
async def test_rest_store_reads_and_defaults():
    store = RestSettingsStore(StubApiClient({"woocommerce_currency": "GBP"}))
    assert await store.get_option("woocommerce_currency") == "GBP"
    assert await store.get_option("woocommerce_store_city", "fallback") == "fallback"


@pytest.mark.asyncio
async def test_rest_store_skips_unchanged_write():
    client = StubApiClient({"woocommerce_currency": "GBP"})
    store = RestSettingsStore(client)
    assert await store.update_option("woocommerce_currency", "GBP") is False
    assert client.updates == []
    assert await store.update_option("woocommerce_currency", "EUR") is True
    assert client.updates == [("woocommerce_currency", "EUR")]


@pytest.mark.asyncio
async def test_rest_store_rejected_write_reports_false():
    client = StubApiClient({"woocommerce_currency": "GBP"}, fail_update=WooApiError("bad", status_code=400))
    store = RestSettingsStore(client)
    assert await store.update_option("woocommerce_currency", "EUR") is False


@pytest.mark.asyncio
async def test_rest_store_availability():
    assert await RestSettingsStore(StubApiClient(reachable=False)).is_available() is False
    assert await RestSettingsStore(StubApiClient()).is_available() is True
