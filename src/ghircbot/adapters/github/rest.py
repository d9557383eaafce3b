from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Sequence

import httpx

from ghircbot.core.models import ApiResponse

API_VERSION = "2022-11-28"

_DISCUSSION_QUERY = """
query($owner: String!, $name: String!, $number: Int!) {
  repository(owner: $owner, name: $name) {
    discussion(number: $number) {
      number title url closed
      author { login }
      labels(first: 20) { nodes { name } }
    }
  }
}
"""


@dataclass(frozen=True)
class RateLimitStatus:
    remaining: int | None
    reset_at: datetime | None


class GitHubRestClient:
    """GitHub REST (and, for discussions, GraphQL) calls for the bot.

    Every method returns an ApiResponse instead of raising, so that results
    can travel from worker threads back to the main loop as plain data.
    """

    def __init__(
        self,
        token: str,
        api_base: str = "https://api.github.com",
        timeout_seconds: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._logger = logging.getLogger(self.__class__.__name__)
        self._client = httpx.Client(
            base_url=api_base,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": API_VERSION,
            },
            timeout=timeout_seconds,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GitHubRestClient":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def get_issue(self, owner: str, repo: str, number: int) -> ApiResponse:
        return self._request("GET", f"/repos/{owner}/{repo}/issues/{number}")

    def get_discussion(self, owner: str, repo: str, number: int) -> ApiResponse:
        response = self._request(
            "POST",
            "/graphql",
            json={"query": _DISCUSSION_QUERY, "variables": {"owner": owner, "name": repo, "number": number}},
        )
        if response.failure is not None:
            return response
        data = (response.payload or {}).get("data") or {}
        discussion = (data.get("repository") or {}).get("discussion")
        if not discussion:
            # GraphQL reports a missing discussion as an error with status 200.
            return ApiResponse(status=404, error="discussion not found")
        labels = [node.get("name", "") for node in (discussion.get("labels") or {}).get("nodes") or []]
        return ApiResponse(status=response.status, payload=dict(discussion, labels=labels))

    def create_issue(
        self,
        owner: str,
        repo: str,
        title: str,
        body: str,
        assignees: Sequence[str] = (),
        labels: Sequence[str] = (),
    ) -> ApiResponse:
        payload: dict[str, Any] = {"title": title, "body": body}
        if assignees:
            payload["assignees"] = list(assignees)
        if labels:
            payload["labels"] = list(labels)
        return self._request("POST", f"/repos/{owner}/{repo}/issues", json=payload)

    def add_comment(self, owner: str, repo: str, number: int, body: str) -> ApiResponse:
        return self._request("POST", f"/repos/{owner}/{repo}/issues/{number}/comments", json={"body": body})

    def set_issue_state(self, owner: str, repo: str, number: int, state: str) -> ApiResponse:
        return self._request("PATCH", f"/repos/{owner}/{repo}/issues/{number}", json={"state": state})

    def list_issues(self, owner: str, repo: str, params: dict[str, Any]) -> ApiResponse:
        return self._request("GET", f"/repos/{owner}/{repo}/issues", params=params)

    def get_authenticated_user(self) -> ApiResponse:
        return self._request("GET", "/user")

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> ApiResponse:
        try:
            response = self._client.request(method, path, params=params, json=json)
        except httpx.HTTPError as exc:
            self._logger.warning("GitHub request failed", extra={"path": path, "error": str(exc)})
            return ApiResponse(status=None, error=str(exc))

        rate_limit = _parse_rate_limit(response.headers)
        rate_limited = response.status_code == 429 or (
            response.status_code == 403 and rate_limit.remaining == 0
        )
        if rate_limited:
            self._logger.warning(
                "GitHub rate limit exhausted",
                extra={
                    "path": path,
                    "reset_at": rate_limit.reset_at.isoformat() if rate_limit.reset_at else None,
                },
            )
        elif response.status_code >= 400:
            self._logger.warning(
                "GitHub request rejected",
                extra={
                    "path": path,
                    "status_code": response.status_code,
                    "response_message": response.text[:200],
                },
            )

        try:
            payload = response.json() if response.content else None
        except ValueError:
            payload = None
        return ApiResponse(
            status=response.status_code,
            payload=payload,
            error=None if response.is_success else response.text[:200],
            rate_limited=rate_limited,
        )


def _parse_rate_limit(headers: httpx.Headers) -> RateLimitStatus:
    remaining = headers.get("X-RateLimit-Remaining")
    reset = headers.get("X-RateLimit-Reset")
    remaining_val = int(remaining) if remaining and remaining.isdigit() else None
    reset_at = (
        datetime.fromtimestamp(int(reset), tz=timezone.utc) if reset and reset.isdigit() else None
    )
    return RateLimitStatus(remaining=remaining_val, reset_at=reset_at)
