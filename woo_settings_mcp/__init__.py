"""
WooCommerce general-settings MCP server package.

Exposes three MCP tools (list, get, update) over JSON-RPC 2.0, served on HTTP
or stdio, backed by an in-memory store or a live store's REST API. See
DESIGN.md for full details.
"""

__all__ = ["config"]
