"""Per-channel repository list and abbreviated-reference resolution."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from ghircbot.core.models import GITHUB_BASE, FullIssueUrl, IssueRef
from ghircbot.core.state import ChannelState

logger = logging.getLogger(__name__)

_REPOSITORY_TEXT = re.compile(
    r"^(?P<base>[a-z]+://(?:[^/?#]*/)*?)?(?P<owner>[^/?#]+/)?(?P<name>[^/?#]+)/?$",
    re.IGNORECASE,
)
_SEPARATORS = re.compile(r"[ ,]+")


@dataclass(frozen=True)
class ChangeReport:
    """Result of adding or removing repositories: what changed and what to say."""

    changed: bool
    errors: list[str]


def split_names(text: str) -> list[str]:
    return [token for token in _SEPARATORS.split(text.strip()) if token]


def resolve(channel: ChannelState, prefix: str) -> str | None:
    """Return the repository URL that prefix refers to on this channel.

    An exact name match wins over a name that merely starts with prefix, so
    that "rdf-star" stays reachable next to "rdf-star-wg-charter". An
    "owner/name" prefix is only ever matched exactly.
    """
    repositories = channel.repositories
    escaped = re.escape(prefix)
    patterns = [re.compile(rf"/{escaped}$", re.IGNORECASE)]
    if "/" not in prefix:
        patterns.append(re.compile(rf"/{escaped}[^/]*$", re.IGNORECASE))
    for pattern in patterns:
        for repository in repositories:
            if pattern.search(repository):
                return repository
    if "/" in prefix:
        return f"{GITHUB_BASE}/{prefix}"
    if prefix and repositories:
        return repositories[0].rsplit("/", 1)[0] + "/" + prefix
    return None


def resolve_reference(
    channel: ChannelState, reference: IssueRef | FullIssueUrl
) -> tuple[str | None, int]:
    """Return (repository URL or None, issue number) for an issue reference."""
    if isinstance(reference, FullIssueUrl):
        return reference.repository, reference.number
    return resolve(channel, reference.prefix), reference.number


def repository_to_url(
    channel: ChannelState, text: str, default_owner: str | None = None
) -> tuple[str | None, str | None]:
    """Turn a repository name as typed on IRC into a URL, or explain why not.

    Returns (url, None) on success and (None, message) on failure. A bare
    name takes its owner from the channel's current default repository.
    """
    match = _REPOSITORY_TEXT.match(text)
    if not match:
        return None, f"sorry, that doesn't look like a valid repository: {text}"
    base, owner, name = match.group("base"), match.group("owner"), match.group("name")
    if base:
        return text.rstrip("/"), None
    current = channel.default_repository
    if owner:
        if current:
            return current.rsplit("/", 2)[0] + f"/{owner}{name}", None
        return f"{GITHUB_BASE}/{owner}{name}", None
    if current:
        return current.rsplit("/", 1)[0] + f"/{name}", None
    if default_owner:
        return f"{GITHUB_BASE}/{default_owner}/{name}", None
    return None, f"sorry, I don't know the owner. Please, use 'OWNER/{name}'"


def add_repositories(
    channel: ChannelState, text: str, default_owner: str | None = None
) -> ChangeReport:
    """Put each named repository at the front of the channel's list."""
    errors: list[str] = []
    changed = False
    for token in split_names(text):
        url, error = repository_to_url(channel, token, default_owner)
        if error:
            errors.append(error)
            continue
        channel.repositories = [url] + [r for r in channel.repositories if r != url]
        changed = True
        logger.info("Repository added", extra={"channel": channel.name, "repository": url})
    channel.forget_history()
    return ChangeReport(changed=changed, errors=errors)


def remove_repositories(channel: ChannelState, text: str) -> ChangeReport:
    errors: list[str] = []
    changed = False
    for token in split_names(text):
        pattern = re.compile(rf"(?:^|/){re.escape(token)}$")
        found = next((r for r in channel.repositories if pattern.search(r)), None)
        if found is None:
            errors.append(f"{token} was already removed.")
            continue
        channel.repositories = [r for r in channel.repositories if r != found]
        changed = True
        logger.info("Repository removed", extra={"channel": channel.name, "repository": found})
    if changed:
        channel.forget_history()
    return ChangeReport(changed=changed, errors=errors)


def clear_repositories(channel: ChannelState) -> ChangeReport:
    changed = bool(channel.repositories)
    channel.repositories = []
    channel.forget_history()
    return ChangeReport(changed=changed, errors=[])
