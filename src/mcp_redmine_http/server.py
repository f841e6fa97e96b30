"""FastMCP server entry point for the Redmine MCP server."""

from __future__ import annotations

import asyncio
import os
from importlib.metadata import version

from dotenv import load_dotenv
from fastmcp import FastMCP
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware

from mcp_redmine_http.auth import REDMINE_API_KEY_HEADER, REDMINE_URL_HEADER
from mcp_redmine_http.resources import register_resources
from mcp_redmine_http.tools import register_tools

load_dotenv()

# Redmine URL and API key are not configured here; they arrive with each request.
MCP_HOST = os.environ.get("MCP_HOST", "0.0.0.0")
MCP_PORT = int(os.environ.get("MCP_PORT", "8000"))
REDMINE_TIMEOUT = float(os.environ.get("REDMINE_TIMEOUT", "30"))


def create_server(timeout: float = REDMINE_TIMEOUT) -> FastMCP:
    mcp = FastMCP(
        name="Redmine MCP Server",
        version=version("mcp-redmine-http"),
        instructions=(
            "MCP server for Redmine projects and issues. Every request must carry "
            f"the {REDMINE_URL_HEADER} and {REDMINE_API_KEY_HEADER} headers."
        ),
    )
    register_tools(mcp, timeout=timeout)
    register_resources(mcp, timeout=timeout)
    return mcp


mcp = create_server()


def main() -> None:
    asyncio.run(
        mcp.run_http_async(
            host=MCP_HOST,
            port=MCP_PORT,
            transport="streamable-http",
            middleware=[
                Middleware(
                    CORSMiddleware,
                    allow_origins=["*"],
                    allow_methods=["*"],
                    allow_headers=["*"],
                    expose_headers=["Mcp-Session-Id"],
                ),
            ],
        )
    )


if __name__ == "__main__":
    main()
