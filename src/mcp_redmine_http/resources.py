"""MCP resources exposing Redmine reference data.

These give clients the tracker, status and priority ids that create_issue and
update_issue expect. They use the same per-request headers as the tools.
"""

from __future__ import annotations

import json

from fastmcp import FastMCP
from fastmcp.exceptions import ResourceError
from fastmcp.utilities.logging import get_logger

from mcp_redmine_http.auth import client_from_request
from mcp_redmine_http.tools import Operation

logger = get_logger(__name__)


async def read_redmine(uri: str, operation: Operation, timeout: float = 30.0) -> str:
    try:
        redmine = client_from_request(timeout)
        data = await operation(redmine)
    except Exception as e:
        logger.warning("Resource %s failed: %s", uri, e)
        raise ResourceError(f"Error: {e}") from e
    return json.dumps(data, indent=2, ensure_ascii=False)


def register_resources(mcp: FastMCP, timeout: float = 30.0) -> None:
    """Register all Redmine resources on the FastMCP server."""

    @mcp.resource("redmine://trackers", mime_type="application/json")
    async def trackers() -> str:
        """Issue trackers (Bug, Feature, etc.) with their ids."""
        return await read_redmine(
            "redmine://trackers", lambda redmine: redmine.list_trackers(), timeout
        )

    @mcp.resource("redmine://issue-statuses", mime_type="application/json")
    async def issue_statuses() -> str:
        """Issue statuses (New, In Progress, Closed, etc.) with their ids."""
        return await read_redmine(
            "redmine://issue-statuses", lambda redmine: redmine.list_issue_statuses(), timeout
        )

    @mcp.resource("redmine://enumerations/priorities", mime_type="application/json")
    async def issue_priorities() -> str:
        """Issue priority levels (Low, Normal, High, ...) with their ids."""
        return await read_redmine(
            "redmine://enumerations/priorities",
            lambda redmine: redmine.list_issue_priorities(),
            timeout,
        )

    @mcp.resource("redmine://users/me", mime_type="application/json")
    async def current_user() -> str:
        """Profile of the Redmine user owning the API key."""
        return await read_redmine(
            "redmine://users/me", lambda redmine: redmine.get_current_user(), timeout
        )
