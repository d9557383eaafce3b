from __future__ import annotations

from datetime import date
from typing import Any, Callable, Protocol, Sequence

from ghircbot.core.models import ApiResponse
from ghircbot.core.state import BotState


class GitHubClient(Protocol):
    def get_issue(self, owner: str, repo: str, number: int) -> ApiResponse:
        """Fetch one issue or pull request."""

    def get_discussion(self, owner: str, repo: str, number: int) -> ApiResponse:
        """Fetch one discussion."""

    def create_issue(
        self,
        owner: str,
        repo: str,
        title: str,
        body: str,
        assignees: Sequence[str] = (),
        labels: Sequence[str] = (),
    ) -> ApiResponse:
        """Open a new issue."""

    def add_comment(self, owner: str, repo: str, number: int, body: str) -> ApiResponse:
        """Add a comment to an issue."""

    def set_issue_state(self, owner: str, repo: str, number: int, state: str) -> ApiResponse:
        """Set an issue to "open" or "closed"."""

    def list_issues(self, owner: str, repo: str, params: dict[str, Any]) -> ApiResponse:
        """List issues matching query parameters."""

    def get_authenticated_user(self) -> ApiResponse:
        """Return the account the token belongs to."""


class ChatTransport(Protocol):
    def say(self, channel: str, line: str) -> None:
        """Send one line to a channel or nick."""

    def part(self, channel: str) -> None:
        """Leave a channel."""


class DateParser(Protocol):
    def parse(self, text: str, today: date) -> date | None:
        """Parse a free-form date expression relative to today."""


class Worker(Protocol):
    def submit(self, channel: str, job: Callable[[], Sequence[str]]) -> None:
        """Run job off the main loop and deliver its lines to channel."""


class StateStore(Protocol):
    def load(self) -> BotState:
        """Read persisted state."""

    def save(self, state: BotState) -> None:
        """Persist state; failures are logged, not raised."""
