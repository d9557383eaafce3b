"""Find issue, pull request, discussion and user references in a chat line."""

from __future__ import annotations

import re
from typing import Iterator

from ghircbot.core.models import FullIssueUrl, IssueRef, Reference, UserRef

# Characters that may not directly precede an abbreviated reference. Keeps
# "foo@bar.com", "http://x/#3" and "a#b#3" from matching.
_NOT_BEFORE = r"(?<![a-z0-9._@#/:-])"

_REFERENCE = re.compile(
    r"""
    (?<!`)(?P<ticks>`+)(?!`).*?(?<!`)(?P=ticks)(?!`)
    |\b(?P<url>https://github\.com/(?P<url_owner>[a-z0-9._-]+)/(?P<url_repo>[a-z0-9._-]+)
        /(?P<url_kind>issues|pull|discussions)/(?P<url_number>[0-9]+))(?=\W|$)
    |""" + _NOT_BEFORE + r"""(?P<issue>(?:(?P<first>[a-z0-9._-]*[a-z0-9_-])(?:/(?P<second>[a-z0-9._-]*[a-z0-9_-]))?)?
        \#(?P<number>[0-9]+))(?=\W|$)
    |""" + _NOT_BEFORE + r"""(?P<user>@(?P<name>[\w-]+))(?=\W|$)
    """,
    re.IGNORECASE | re.VERBOSE,
)

# Lines such as "s/old/new/", "s|old|new|g" or "i/anchor/text/" are edit
# commands for the minute-taking bot, not chat.
_SCRIBE_EDIT = re.compile(r"^\s*[si]([/|])(?:(?!\1).)+\1(?:(?!\1).)*\1[g]?\s*$", re.IGNORECASE)


def is_scribe_edit(text: str) -> bool:
    return _SCRIBE_EDIT.match(text) is not None


def scan_references(text: str) -> Iterator[Reference]:
    """Yield the references in text, left to right.

    Code spans between matching runs of backticks are skipped whole, so
    nothing inside them is ever reported.
    """
    if is_scribe_edit(text):
        return
    for match in _REFERENCE.finditer(text):
        if match.group("ticks"):
            continue
        start, end = match.span()
        if match.group("url"):
            yield FullIssueUrl(
                text=match.group("url"),
                start=start,
                end=end,
                owner=match.group("url_owner"),
                repo=match.group("url_repo"),
                number=int(match.group("url_number")),
                kind=match.group("url_kind").lower(),
            )
        elif match.group("issue"):
            first, second = match.group("first"), match.group("second")
            owner, repo = (first, second) if second else (None, first)
            yield IssueRef(
                text=match.group("issue"),
                start=start,
                end=end,
                number=int(match.group("number")),
                owner=owner,
                repo=repo,
            )
        else:
            yield UserRef(text=match.group("user"), start=start, end=end, name=match.group("name"))
