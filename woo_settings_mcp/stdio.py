"""
Line-oriented stdio transport.

Reads JSON-RPC messages from stdin, writes one response per line to stdout,
and keeps every log line on stderr. Messages may arrive one per line or split
across several reads; input is buffered until a complete JSON value is found.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Optional, TextIO, Tuple

from woo_settings_mcp.config import SettingsMcpConfig, default_config
from woo_settings_mcp.factory import build_components
from woo_settings_mcp.logging_config import configure_logging
from woo_settings_mcp.mcp import McpServer

logger = logging.getLogger(__name__)


def _is_complete(text: str) -> bool:
    try:
        json.loads(text)
    except RecursionError:
        # Nested too deep to decode; handed on so the dispatcher answers -32700.
        return True
    except ValueError:
        return False
    return True


def try_extract_one_message(buffer: str) -> Tuple[Optional[str], str]:
    """
    Pull one complete message off the front of ``buffer``.

    The first line of the (trimmed) buffer is tried first, then the whole
    buffer. Returns ``(message, remaining)``; ``message`` is None when more
    input is needed.
    """
    buffer = buffer.strip()
    if not buffer:
        return None, ""

    first_line, newline, rest = buffer.partition("\n")
    if newline and _is_complete(first_line):
        return first_line, rest
    if _is_complete(buffer):
        return buffer, ""
    return None, buffer


class StdioTransport:
    def __init__(
        self,
        mcp_server: McpServer,
        *,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
    ) -> None:
        self.mcp_server = mcp_server
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._buffer = ""

    async def serve(self) -> None:
        """Run until end of stream."""
        logger.debug("stdio transport started")
        while True:
            line = await asyncio.to_thread(self._stdin.readline)
            if line == "":
                break
            self._buffer += line
            await self._drain()

        leftover = self._buffer.strip()
        self._buffer = ""
        if leftover:
            # Whatever never became valid JSON is answered once as a parse error.
            await self._handle(leftover)
        logger.debug("stdio transport reached end of input")

    async def _drain(self) -> None:
        while True:
            message, self._buffer = try_extract_one_message(self._buffer)
            if message is None:
                return
            await self._handle(message)

    async def _handle(self, message: str) -> None:
        logger.debug("stdio received %d bytes", len(message))
        response = await self.mcp_server.process_message(message)
        if response is not None:
            self._stdout.write(response + "\n")
            self._stdout.flush()


async def run(config: SettingsMcpConfig = default_config) -> None:
    components = build_components(config)
    try:
        await StdioTransport(components.mcp_server).serve()
    finally:
        await components.aclose()


def main() -> None:
    configure_logging(default_config)
    try:
        asyncio.run(run(default_config))
    except KeyboardInterrupt:
        logger.info("stdio transport interrupted")


if __name__ == "__main__":
    main()
