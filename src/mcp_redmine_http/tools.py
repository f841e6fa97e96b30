"""MCP tools for Redmine project and issue operations."""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from typing import Annotated, Any

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.utilities.logging import get_logger
from pydantic import Field

from mcp_redmine_http.auth import client_from_request
from mcp_redmine_http.client import RedmineClient
from mcp_redmine_http.models import IssueCreate, IssueUpdate

logger = get_logger(__name__)

Operation = Callable[[RedmineClient], Awaitable[dict[str, Any]]]

PROJECT_INCLUDE = "Extra data, comma separated: trackers, issue_categories, enabled_modules"
ISSUE_INCLUDE = (
    "Extra data, comma separated: children, attachments, relations, changesets, "
    "journals, watchers"
)


async def call_redmine(name: str, operation: Operation, timeout: float = 30.0) -> str:
    """Run one Redmine operation for the current request and return it as JSON text.

    Any failure is re-raised as ToolError so FastMCP answers with an
    error-flagged result instead of aborting the session.
    """
    try:
        redmine = client_from_request(timeout)
        result = await operation(redmine)
    except Exception as e:
        logger.warning("Tool %s failed: %s", name, e)
        raise ToolError(f"Error: {e}") from e
    return json.dumps(result, indent=2, ensure_ascii=False)


def register_tools(mcp: FastMCP, timeout: float = 30.0) -> None:
    """Register all Redmine tools on the FastMCP server."""

    @mcp.tool(annotations={"title": "List projects", "readOnlyHint": True})
    async def list_projects(
        offset: Annotated[int | None, Field(description="Index of the first project to return")] = None,
        limit: Annotated[int | None, Field(description="Number of projects to return (max 100)")] = None,
        include: Annotated[str | None, Field(description=PROJECT_INCLUDE)] = None,
    ) -> str:
        """List Redmine projects visible to the API key.

        Response: { projects: [...], total_count, offset, limit }
        """
        return await call_redmine(
            "list_projects",
            lambda redmine: redmine.list_projects(offset=offset, limit=limit, include=include),
            timeout,
        )

    @mcp.tool(annotations={"title": "Get project", "readOnlyHint": True})
    async def get_project(
        id: Annotated[int | str, Field(description="Project id or identifier")],
        include: Annotated[str | None, Field(description=PROJECT_INCLUDE)] = None,
    ) -> str:
        """Fetch one Redmine project.

        Response: { project: { id, name, identifier, description, status, ... } }
        """
        return await call_redmine(
            "get_project", lambda redmine: redmine.get_project(id, include), timeout
        )

    @mcp.tool(annotations={"title": "List issues", "readOnlyHint": True})
    async def list_issues(
        project_id: Annotated[
            int | str | None, Field(description="Filter by project id or identifier")
        ] = None,
        status_id: Annotated[
            int | str | None,
            Field(description='Filter by status: "open", "closed", "*" for all, or a status id'),
        ] = None,
        assigned_to_id: Annotated[
            int | str | None, Field(description='Filter by assignee user id, or "me"')
        ] = None,
        tracker_id: Annotated[int | None, Field(description="Filter by tracker id")] = None,
        offset: Annotated[int | None, Field(description="Index of the first issue to return")] = None,
        limit: Annotated[int | None, Field(description="Number of issues to return (max 100)")] = None,
        sort: Annotated[str | None, Field(description='Sort order, e.g. "updated_on:desc"')] = None,
        include: Annotated[
            str | None, Field(description="Extra data, comma separated: attachments, relations")
        ] = None,
    ) -> str:
        """List Redmine issues. Redmine returns only open issues unless status_id says otherwise.

        Response: { issues: [...], total_count, offset, limit }
        """
        return await call_redmine(
            "list_issues",
            lambda redmine: redmine.list_issues(
                project_id=project_id,
                status_id=status_id,
                assigned_to_id=assigned_to_id,
                tracker_id=tracker_id,
                offset=offset,
                limit=limit,
                sort=sort,
                include=include,
            ),
            timeout,
        )

    @mcp.tool(annotations={"title": "Get issue", "readOnlyHint": True})
    async def get_issue(
        id: Annotated[int, Field(description="Issue id")],
        include: Annotated[str | None, Field(description=ISSUE_INCLUDE)] = None,
    ) -> str:
        """Fetch one Redmine issue.

        Response: { issue: { id, subject, description, project, tracker, status,
        priority, author, assigned_to, ... } }
        """
        return await call_redmine(
            "get_issue", lambda redmine: redmine.get_issue(id, include), timeout
        )

    @mcp.tool(
        annotations={"title": "Create issue", "readOnlyHint": False, "idempotentHint": False}
    )
    async def create_issue(
        project_id: Annotated[int | str, Field(description="Project id or identifier")],
        subject: Annotated[str, Field(description="Issue subject")],
        description: Annotated[str | None, Field(description="Issue description")] = None,
        tracker_id: Annotated[int | None, Field(description="Tracker id (instance specific)")] = None,
        status_id: Annotated[int | None, Field(description="Status id (instance specific)")] = None,
        priority_id: Annotated[int | None, Field(description="Priority id (instance specific)")] = None,
        assigned_to_id: Annotated[int | None, Field(description="Assignee user id")] = None,
        category_id: Annotated[int | None, Field(description="Category id (project specific)")] = None,
        parent_issue_id: Annotated[
            int | None, Field(description="Parent issue id, to create a subtask")
        ] = None,
        estimated_hours: Annotated[float | None, Field(description="Estimated hours")] = None,
        start_date: Annotated[str | None, Field(description="Start date (YYYY-MM-DD)")] = None,
        due_date: Annotated[str | None, Field(description="Due date (YYYY-MM-DD)")] = None,
    ) -> str:
        """Create a Redmine issue. Calling this twice creates two issues.

        Response: { issue: { id, subject, ... } } for the created issue
        """

        def create(redmine: RedmineClient) -> Awaitable[dict[str, Any]]:
            return redmine.create_issue(
                IssueCreate(
                    project_id=project_id,
                    subject=subject,
                    description=description,
                    tracker_id=tracker_id,
                    status_id=status_id,
                    priority_id=priority_id,
                    assigned_to_id=assigned_to_id,
                    category_id=category_id,
                    parent_issue_id=parent_issue_id,
                    estimated_hours=estimated_hours,
                    start_date=start_date,
                    due_date=due_date,
                )
            )

        return await call_redmine("create_issue", create, timeout)

    @mcp.tool(
        annotations={"title": "Update issue", "readOnlyHint": False, "idempotentHint": False}
    )
    async def update_issue(
        id: Annotated[int, Field(description="Id of the issue to update")],
        subject: Annotated[str | None, Field(description="Issue subject")] = None,
        description: Annotated[str | None, Field(description="Issue description")] = None,
        tracker_id: Annotated[int | None, Field(description="Tracker id (instance specific)")] = None,
        status_id: Annotated[int | None, Field(description="Status id (instance specific)")] = None,
        priority_id: Annotated[int | None, Field(description="Priority id (instance specific)")] = None,
        assigned_to_id: Annotated[int | None, Field(description="Assignee user id")] = None,
        category_id: Annotated[int | None, Field(description="Category id (project specific)")] = None,
        parent_issue_id: Annotated[int | None, Field(description="Parent issue id")] = None,
        estimated_hours: Annotated[float | None, Field(description="Estimated hours")] = None,
        start_date: Annotated[str | None, Field(description="Start date (YYYY-MM-DD)")] = None,
        due_date: Annotated[str | None, Field(description="Due date (YYYY-MM-DD)")] = None,
        done_ratio: Annotated[int | None, Field(description="Percent done, 0-100")] = None,
        notes: Annotated[str | None, Field(description="Comment added to the issue journal")] = None,
        private_notes: Annotated[bool | None, Field(description="Make the comment private")] = None,
    ) -> str:
        """Update a Redmine issue. Only the given fields change; each call with
        notes adds a journal entry.

        Response: { issue: { id, subject, ... } }, or {} when Redmine answers
        204 No Content
        """

        def update(redmine: RedmineClient) -> Awaitable[dict[str, Any]]:
            return redmine.update_issue(
                id,
                IssueUpdate(
                    subject=subject,
                    description=description,
                    tracker_id=tracker_id,
                    status_id=status_id,
                    priority_id=priority_id,
                    assigned_to_id=assigned_to_id,
                    category_id=category_id,
                    parent_issue_id=parent_issue_id,
                    estimated_hours=estimated_hours,
                    start_date=start_date,
                    due_date=due_date,
                    done_ratio=done_ratio,
                    notes=notes,
                    private_notes=private_notes,
                ),
            )

        return await call_redmine("update_issue", update, timeout)
