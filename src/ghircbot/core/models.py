from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

GITHUB_BASE = "https://github.com"

_GITHUB_REPOSITORY = re.compile(r"^https://github\.com/([^/]+)/([^/]+)$", re.IGNORECASE)


@dataclass(frozen=True)
class IssueRef:
    """Abbreviated reference: ``#n``, ``repo#n`` or ``owner/repo#n``."""

    text: str
    start: int
    end: int
    number: int
    owner: str | None = None
    repo: str | None = None

    @property
    def prefix(self) -> str:
        if self.owner and self.repo:
            return f"{self.owner}/{self.repo}"
        return self.repo or ""


@dataclass(frozen=True)
class FullIssueUrl:
    text: str
    start: int
    end: int
    owner: str
    repo: str
    number: int
    kind: str  # "issues" | "pull" | "discussions"

    @property
    def repository(self) -> str:
        return f"{GITHUB_BASE}/{self.owner}/{self.repo}"


@dataclass(frozen=True)
class UserRef:
    text: str
    start: int
    end: int
    name: str


Reference = Union[IssueRef, FullIssueUrl, UserRef]


class FailureKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not-found"
    GONE = "gone"
    VALIDATION_FAILED = "validation-failed"
    RATE_LIMITED = "rate-limited"
    SERVICE_UNAVAILABLE = "service-unavailable"
    NETWORK = "network"
    ERROR = "error"


@dataclass(frozen=True)
class ApiResponse:
    """Outcome of one GitHub call, as plain data that can cross threads."""

    status: int | None
    payload: Any = None
    error: str | None = None
    rate_limited: bool = False

    @property
    def failure(self) -> FailureKind | None:
        if self.status is None:
            return FailureKind.NETWORK
        if 200 <= self.status < 300:
            return None
        if self.rate_limited or self.status == 429:
            return FailureKind.RATE_LIMITED
        return {
            401: FailureKind.UNAUTHORIZED,
            403: FailureKind.FORBIDDEN,
            404: FailureKind.NOT_FOUND,
            410: FailureKind.GONE,
            422: FailureKind.VALIDATION_FAILED,
            503: FailureKind.SERVICE_UNAVAILABLE,
        }.get(self.status, FailureKind.ERROR)


@dataclass(frozen=True)
class SearchQuery:
    """Stored issue listing, so that "next" can fetch the following page."""

    repository: str  # "owner/name"
    params: dict[str, Any] = field(default_factory=dict)
    page: int = 1
    full: bool = False
    kind: str = "issues"  # "issues" | "actions"


def split_github_repository(url: str) -> tuple[str, str] | None:
    """Return (owner, name) for a repository URL on github.com, else None."""
    match = _GITHUB_REPOSITORY.match(url)
    if not match:
        return None
    return match.group(1), match.group(2)


def github_path(url: str) -> str | None:
    """Strip the github.com base from a repository URL, giving "owner/name"."""
    parts = split_github_repository(url)
    if parts is None:
        return None
    return f"{parts[0]}/{parts[1]}"
