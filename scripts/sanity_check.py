"""Minimal sanity checks for the WooCommerce settings MCP server."""

from __future__ import annotations

import asyncio
import json
import os
import sys

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from woo_settings_mcp.config import default_config  # noqa: E402
from woo_settings_mcp.factory import build_components  # noqa: E402

# Opt-in to a write round trip (sets the decimal separator to its current value).
RUN_UPDATE = os.getenv("RUN_UPDATE_SANITY", "false").lower() in {"1", "true", "yes"}


def _message(rpc_id: int, method: str, params: dict | None = None) -> str:
    payload = {"jsonrpc": "2.0", "id": rpc_id, "method": method}
    if params is not None:
        payload["params"] = params
    return json.dumps(payload)


async def main() -> None:
    components = build_components(default_config)
    server = components.mcp_server
    try:
        print("Backend:", default_config.backend)
        print("Store available:", await components.store.is_available())
        print("Initialize:", await server.process_message(_message(1, "initialize", {})))
        print("Ping:", await server.process_message(_message(2, "ping")))
        print("Tools:", await server.process_message(_message(3, "tools/list")))
        print(
            "Currency:",
            await server.process_message(
                _message(4, "tools/call", {"name": "get_setting", "arguments": {"option_name": "woocommerce_currency"}})
            ),
        )
        print(
            "Currency options:",
            await server.process_message(
                _message(5, "tools/call", {"name": "list_settings", "arguments": {"group": "currency_options"}})
            ),
        )
        if RUN_UPDATE:
            current = await components.store.get_option("woocommerce_price_decimal_sep", ".")
            print(
                "Update:",
                await server.process_message(
                    _message(
                        6,
                        "tools/call",
                        {
                            "name": "update_setting",
                            "arguments": {"option_name": "woocommerce_price_decimal_sep", "value": current},
                        },
                    )
                ),
            )
    finally:
        await components.aclose()


if __name__ == "__main__":
    asyncio.run(main())
