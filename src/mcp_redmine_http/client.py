"""Async HTTP client for the Redmine REST API."""

from __future__ import annotations

from typing import Any

import httpx
from fastmcp.utilities.logging import get_logger

from mcp_redmine_http.models import IssueCreate, IssueUpdate

logger = get_logger(__name__)


class RedmineError(Exception):
    """Base error for everything that can go wrong talking to Redmine."""


class ConfigurationError(RedmineError):
    """Redmine URL or API key missing from the request."""


class NetworkError(RedmineError):
    """Redmine could not be reached (DNS, refused connection, timeout)."""


class DecodeError(RedmineError):
    """Redmine answered with a body that is not valid JSON."""


class RedmineAPIError(RedmineError):
    """Base error for non-2xx Redmine API responses."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Redmine API error: {status_code} - {body}")


class RedmineAuthError(RedmineAPIError):
    """401 Unauthorized: API key is invalid."""


class RedmineForbiddenError(RedmineAPIError):
    """403 Forbidden: user lacks permission for this action."""


class RedmineNotFoundError(RedmineAPIError):
    """404 Not Found: resource does not exist."""


class RedmineValidationError(RedmineAPIError):
    """422 Unprocessable Entity: Redmine rejected the submitted fields."""


_STATUS_ERRORS: dict[int, type[RedmineAPIError]] = {
    401: RedmineAuthError,
    403: RedmineForbiddenError,
    404: RedmineNotFoundError,
    422: RedmineValidationError,
}


def _query(**params: Any) -> dict[str, Any]:
    """Drop unset parameters so they never appear in the query string."""
    return {k: v for k, v in params.items() if v is not None and v != ""}


class RedmineClient:
    """Thin async wrapper around Redmine's REST API.

    One instance is bound to a single Redmine URL and API key. Instances are
    cheap and meant to be created per tool invocation.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not base_url:
            raise ConfigurationError(
                "Redmine URL is not configured. Set x-redmine-url header."
            )
        if not api_key:
            raise ConfigurationError(
                "Redmine API Key is not configured. Set x-redmine-api-key header."
            )
        self.base_url = base_url.removesuffix("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.debug("Redmine %s %s", method, url)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = await client.request(
                    method,
                    url,
                    params=params or None,
                    json=json,
                    headers={
                        "X-Redmine-API-Key": self.api_key,
                        "Content-Type": "application/json",
                    },
                )
        except httpx.RequestError as e:
            raise NetworkError(f"Failed to reach Redmine at {self.base_url}: {e}") from e

        self._raise_for_status(response)

        if response.status_code == 204 or response.headers.get("content-length") == "0":
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"Invalid JSON in Redmine response: {e}") from e

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        error_cls = _STATUS_ERRORS.get(response.status_code, RedmineAPIError)
        raise error_cls(response.status_code, response.text)

    # --- Projects ---

    async def list_projects(
        self,
        *,
        offset: int | None = None,
        limit: int | None = None,
        include: str | None = None,
    ) -> dict[str, Any]:
        return await self._request(
            "GET",
            "/projects.json",
            params=_query(offset=offset, limit=limit, include=include),
        )

    async def get_project(
        self, project_id: int | str, include: str | None = None
    ) -> dict[str, Any]:
        return await self._request(
            "GET", f"/projects/{project_id}.json", params=_query(include=include)
        )

    # --- Issues ---

    async def list_issues(
        self,
        *,
        offset: int | None = None,
        limit: int | None = None,
        sort: str | None = None,
        include: str | None = None,
        project_id: int | str | None = None,
        tracker_id: int | str | None = None,
        status_id: int | str | None = None,
        assigned_to_id: int | str | None = None,
    ) -> dict[str, Any]:
        params = _query(
            offset=offset,
            limit=limit,
            sort=sort,
            include=include,
            project_id=project_id,
            tracker_id=tracker_id,
            status_id=status_id,
            assigned_to_id=assigned_to_id,
        )
        return await self._request("GET", "/issues.json", params=params)

    async def get_issue(self, issue_id: int, include: str | None = None) -> dict[str, Any]:
        return await self._request(
            "GET", f"/issues/{issue_id}.json", params=_query(include=include)
        )

    async def create_issue(self, issue: IssueCreate) -> dict[str, Any]:
        return await self._request(
            "POST", "/issues.json", json={"issue": issue.model_dump(exclude_none=True)}
        )

    async def update_issue(self, issue_id: int, changes: IssueUpdate) -> dict[str, Any]:
        # Redmine answers 204 No Content on most successful updates.
        return await self._request(
            "PUT",
            f"/issues/{issue_id}.json",
            json={"issue": changes.model_dump(exclude_none=True)},
        )

    # --- Reference data ---

    async def list_trackers(self) -> dict[str, Any]:
        return await self._request("GET", "/trackers.json")

    async def list_issue_statuses(self) -> dict[str, Any]:
        return await self._request("GET", "/issue_statuses.json")

    async def list_issue_priorities(self) -> dict[str, Any]:
        return await self._request("GET", "/enumerations/issue_priorities.json")

    async def get_current_user(self) -> dict[str, Any]:
        return await self._request("GET", "/users/current.json")
