"""GitHub work that runs on a background worker.

Each job takes plain values, calls the GitHub client and returns the chat
lines to send back to the channel. Jobs never touch channel state.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Sequence

from ghircbot.core.interfaces import GitHubClient
from ghircbot.core.models import GITHUB_BASE, ApiResponse, FailureKind, SearchQuery

logger = logging.getLogger(__name__)

ACTION_LABEL = "action"

_DUE_IN_BODY = re.compile(
    r"""^due\ ([1-9 ]?[1-9]\ [a-z]{3}\ [0-9]{4})\b
    |^\s*Due:\s+([0-9]{4}-[0-9]{2}-[0-9]{2})\b
    |\bDue:\s+([0-9]{4}-[0-9]{2}-[0-9]{2})\s*(?:\([^)]*\)\s*)?\.?\s*$""",
    re.IGNORECASE | re.MULTILINE | re.VERBOSE,
)


@dataclass(frozen=True)
class Attribution:
    """Who asked for a change, and where, for the text added on GitHub."""

    nick: str
    login: str
    channel: str
    server: str

    @property
    def who(self) -> str:
        return f"@{self.login}" if self.login != self.nick else self.nick

    def line(self, verb: str) -> str:
        return f"{verb} by {self.who} via IRC channel {self.channel} on {self.server}"


def describe_failure(
    what: str,
    response: ApiResponse,
    not_found: str = "Not found.",
    gone: str = "It is gone.",
    validation: str = "Validation failed.",
) -> str:
    kind = response.failure
    if kind is FailureKind.FORBIDDEN:
        reason = "Forbidden."
    elif kind is FailureKind.UNAUTHORIZED:
        reason = "I have insufficient (or expired) authorization."
    elif kind is FailureKind.NOT_FOUND:
        reason = not_found
    elif kind is FailureKind.GONE:
        reason = gone
    elif kind is FailureKind.VALIDATION_FAILED:
        reason = validation
    elif kind is FailureKind.SERVICE_UNAVAILABLE:
        reason = "Service unavailable."
    elif kind is FailureKind.RATE_LIMITED:
        reason = "GitHub's rate limit was reached. Please, try again later."
    elif kind is FailureKind.NETWORK:
        reason = "GitHub did not respond. Please, try again later."
    else:
        reason = f"Error {response.status}"
    return f"Cannot {what}. {reason}"


def _label_names(issue: dict[str, Any]) -> list[str]:
    return [label.get("name", "") for label in issue.get("labels") or [] if isinstance(label, dict)]


def _logins(issue: dict[str, Any]) -> list[str]:
    return [user.get("login", "?") for user in issue.get("assignees") or []]


def due_date_in(body: str | None) -> str | None:
    if not body:
        return None
    match = _DUE_IN_BODY.search(body)
    if not match:
        return None
    return match.group(1) or match.group(2) or match.group(3)


def format_issue(repository: str, issue: dict[str, Any]) -> str:
    """One-line summary of an issue, pull request or action."""
    number = issue.get("number")
    url = f"{repository}/issues/{number}"
    title = issue.get("title") or ""
    closed = issue.get("state") == "closed"
    labels = _label_names(issue)
    if ACTION_LABEL in labels:
        due = due_date_in(issue.get("body"))
        return (
            f"{url} -> Action {number} {'[closed] ' if closed else ''}{title} "
            f"(on {', '.join(_logins(issue))})" + (f" due {due}" if due else "")
        )
    kind = "Pull Request" if issue.get("pull_request") else "Issue"
    author = (issue.get("user") or {}).get("login", "?")
    tags = "".join(f" [{name}]" for name in labels)
    return f"{url} -> {'CLOSED ' if closed else ''}{kind} {number} {title} (by {author}){tags}"


def lookup_issue(
    client: GitHubClient, channel: str, repository: str, owner: str, repo: str, number: int
) -> list[str]:
    response = client.get_issue(owner, repo, number)
    logger.info(
        "Issue lookup",
        extra={"channel": channel, "repository": f"{owner}/{repo}", "number": number, "status": response.status},
    )
    url = f"{repository}/issues/{number}"
    if response.failure is FailureKind.NOT_FOUND:
        return [f"{url} -> Issue {number} [not found]"]
    if response.failure is FailureKind.GONE:
        return [f"{url} -> Issue {number} [gone]"]
    if response.failure is not None:
        return [f"{url} -> #{number}"]
    return [format_issue(repository, response.payload)]


def lookup_discussion(
    client: GitHubClient, channel: str, owner: str, repo: str, number: int
) -> list[str]:
    response = client.get_discussion(owner, repo, number)
    logger.info(
        "Discussion lookup",
        extra={"channel": channel, "repository": f"{owner}/{repo}", "number": number, "status": response.status},
    )
    url = f"{GITHUB_BASE}/{owner}/{repo}/discussions/{number}"
    if response.failure is FailureKind.NOT_FOUND:
        return [f"{url} -> Discussion {number} [not found]"]
    if response.failure is not None:
        return [f"{url} -> #{number}"]
    discussion = response.payload
    author = (discussion.get("author") or {}).get("login", "?")
    labels = "".join(f" [{name}]" for name in discussion.get("labels", []))
    closed = "CLOSED " if discussion.get("closed") else ""
    return [f"{url} -> {closed}Discussion {number} {discussion.get('title', '')} (by {author}){labels}"]


def create_issue(
    client: GitHubClient, repository: str, title: str, attribution: Attribution
) -> list[str]:
    owner, repo = repository.split("/", 1)
    response = client.create_issue(owner, repo, title=title, body=attribution.line("Opened"))
    logger.info(
        "New issue",
        extra={"channel": attribution.channel, "repository": repository, "status": response.status},
    )
    if response.failure is not None:
        return [
            describe_failure(
                "create issue",
                response,
                not_found=f"Please, check that I have write access to {repository}.",
                gone=f"The repository {repository} is gone.",
            )
        ]
    issue = response.payload
    return [f"Created -> issue #{issue['number']} {issue['html_url']} {issue.get('title', '')}"]


def create_action(
    client: GitHubClient,
    repository: str,
    title: str,
    names: Sequence[str],
    due_line: str,
    attribution: Attribution,
) -> list[str]:
    owner, repo = repository.split("/", 1)
    body = f"{attribution.line('Opened')}\n\n{due_line}"
    response = client.create_issue(
        owner, repo, title=title, body=body, assignees=list(names), labels=[ACTION_LABEL]
    )
    logger.info(
        "New action",
        extra={"channel": attribution.channel, "repository": repository, "status": response.status},
    )
    if response.failure is not None:
        who = "one of the names" if len(names) > 1 else (names[0] if names else "the name")
        return [
            describe_failure(
                "create action",
                response,
                not_found=f"Please, check that I have write access to {repository}.",
                gone=f"The repository {repository} is gone.",
                validation=f"Validation failed. Maybe {who} is not a valid user for {repository}?",
            )
        ]
    issue = response.payload
    assigned = {login.casefold() for login in _logins(issue)}
    missing = [name for name in names if name.casefold() not in assigned]
    if not _label_names(issue):
        return [
            f"I created -> issue #{issue['number']} {issue['html_url']}",
            'but I could not add the "action" label.',
            f"That probably means I don't have push permission on {repository}.",
        ]
    if missing:
        return [
            f"I created -> action #{issue['number']} {issue['html_url']}",
            f"but I could not assign it to {', '.join(missing)}",
            f"They probably aren't collaborators on {repository}.",
        ]
    return [f"Created -> action #{issue['number']} {issue['html_url']}"]


def change_issue_state(
    client: GitHubClient, repository: str, number: int, state: str, attribution: Attribution
) -> list[str]:
    """Close or reopen an issue, leaving a comment that says who did it."""
    owner, repo = repository.split("/", 1)
    verb, what = ("Closed", "close") if state == "closed" else ("Reopened", "reopen")
    response = client.add_comment(owner, repo, number, attribution.line(verb))
    if response.failure is None:
        response = client.set_issue_state(owner, repo, number, state)
    logger.info(
        "Issue state change",
        extra={
            "channel": attribution.channel,
            "repository": repository,
            "number": number,
            "state": state,
            "status": response.status,
        },
    )
    if response.failure is not None:
        return [
            describe_failure(
                f"{what} issue #{number}",
                response,
                not_found="Issue not found.",
                gone="Issue is gone.",
            )
        ]
    issue = response.payload
    labels = _label_names(issue)
    kind = "action" if ACTION_LABEL in labels else "issue"
    if state == "closed" or kind == "issue":
        line = f"{verb} -> {kind} #{issue['number']} {issue['html_url']}"
        if state != "closed":
            line += f" {issue.get('title', '')}"
        return [line]
    due = due_date_in(issue.get("body"))
    return [
        f"{verb} -> action #{issue['number']} {issue['html_url']} {issue.get('title', '')} "
        f"(on {', '.join(_logins(issue))})" + (f" due {due}" if due else "")
    ]


def comment_on_issue(
    client: GitHubClient, repository: str, number: int, comment: str, attribution: Attribution
) -> list[str]:
    owner, repo = repository.split("/", 1)
    body = f"{attribution.line('Comment')}\n\n{comment}"
    response = client.add_comment(owner, repo, number, body)
    logger.info(
        "New comment",
        extra={"channel": attribution.channel, "repository": repository, "number": number, "status": response.status},
    )
    if response.failure is not None:
        return [
            describe_failure(
                f"add a comment to issue #{number}",
                response,
                not_found="Issue not found.",
                gone="Issue is gone.",
            )
        ]
    return [f"Added -> comment {response.payload['html_url']}"]


def account_info(client: GitHubClient, channel: str) -> list[str]:
    response = client.get_authenticated_user()
    logger.info("Account lookup", extra={"channel": channel, "status": response.status})
    if response.failure is not None:
        return [describe_failure("read account", response, not_found="Account not found.")]
    return [f"I am using GitHub login {response.payload['login']}"]


def find_issues(client: GitHubClient, channel: str, query: SearchQuery) -> list[str]:
    owner, repo = query.repository.split("/", 1)
    params = dict(query.params, page=query.page)
    response = client.list_issues(owner, repo, params)
    logger.info(
        "Issue search",
        extra={"channel": channel, "repository": query.repository, "params": params, "status": response.status},
    )
    if response.failure is FailureKind.NOT_FOUND:
        return [f'Repository "{query.repository}" not found']
    if response.failure is FailureKind.VALIDATION_FAILED:
        return ["Validation failed"]
    if response.failure is not None:
        return [describe_failure("search", response)]
    issues = response.payload or []
    if not issues:
        return [f"Found no {query.kind} in {query.repository}"]
    if not query.full:
        numbers = ", ".join(f"#{issue['number']}" for issue in issues)
        return [f"Found {query.kind} in {query.repository}: {numbers}"]
    repository = f"{GITHUB_BASE}/{query.repository}"
    return [format_issue(repository, issue) for issue in issues]
