"""Request payloads for issue create/update.

Only the fields listed here are forwarded to Redmine. Unset fields are left
out of the JSON body entirely rather than sent as null.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class _IssueFields(BaseModel):
    model_config = ConfigDict(extra="forbid")

    description: str | None = None
    tracker_id: int | None = None
    status_id: int | None = None
    priority_id: int | None = None
    category_id: int | None = None
    assigned_to_id: int | None = None
    parent_issue_id: int | None = None
    estimated_hours: float | None = None
    start_date: str | None = None
    due_date: str | None = None


class IssueCreate(_IssueFields):
    project_id: int | str
    subject: str


class IssueUpdate(_IssueFields):
    subject: str | None = None
    done_ratio: int | None = None
    notes: str | None = None
    private_notes: bool | None = None
