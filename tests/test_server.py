"""Smoke tests for the assembled server."""

from __future__ import annotations

import pytest
from fastmcp import Client

from mcp_redmine_http.server import create_server


@pytest.mark.asyncio
async def test_create_server_exposes_tools_and_resources():
    mcp = create_server(timeout=5.0)
    async with Client(mcp) as client:
        tools = {tool.name for tool in await client.list_tools()}
        resources = {str(r.uri) for r in await client.list_resources()}

    assert "create_issue" in tools
    assert "redmine://issue-statuses" in resources


@pytest.mark.asyncio
async def test_read_only_tools_are_annotated():
    mcp = create_server()
    async with Client(mcp) as client:
        tools = {tool.name: tool for tool in await client.list_tools()}

    assert tools["list_issues"].annotations.readOnlyHint is True
    assert tools["update_issue"].annotations.readOnlyHint is False
    assert tools["create_issue"].annotations.title == "Create issue"
