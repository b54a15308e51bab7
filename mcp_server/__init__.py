"""MCP server exposing jobparam tools.

This module implements the Model Context Protocol (MCP) server that
exposes build-name parameter resolution to AI tools and external systems.

MCP tools:
- Are read-only and idempotent
- Return structured errors with codes
- Map directly to core services
"""

from mcp_server.server import mcp

__all__ = ["mcp"]
