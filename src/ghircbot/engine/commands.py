"""The chat command grammar.

Commands are tried in a fixed order and the first rule that matches wins.
Each rule turns its match into a small command value, so handlers never
reach back into regex groups.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Union


@dataclass(frozen=True)
class Help:
    topic: str


@dataclass(frozen=True)
class Leave:
    pass


@dataclass(frozen=True)
class AddRepositories:
    text: str


@dataclass(frozen=True)
class RemoveRepositories:
    text: str


@dataclass(frozen=True)
class ClearRepositories:
    pass


@dataclass(frozen=True)
class SetDelay:
    lines: int


@dataclass(frozen=True)
class SetMaxLines:
    lines: int


@dataclass(frozen=True)
class Status:
    pass


@dataclass(frozen=True)
class Suspend:
    issues: bool
    names: bool
    suspend: bool


@dataclass(frozen=True)
class CreateIssue:
    title: str


@dataclass(frozen=True)
class SetIssueState:
    reference: str
    state: str  # "closed" | "open"


@dataclass(frozen=True)
class CommentOnIssue:
    reference: str
    comment: str


@dataclass(frozen=True)
class CreateAction:
    names: str
    text: str


@dataclass(frozen=True)
class AccountInfo:
    pass


@dataclass(frozen=True)
class IgnoreNicks:
    nicks: str
    ignore: bool


@dataclass(frozen=True)
class SetAlias:
    nick: str
    login: str


@dataclass(frozen=True)
class FindIssues:
    state: str = "open"
    kind: str = "issues"
    labels: str | None = None
    creator: str | None = None
    assignee: str | None = None
    repository: str | None = None
    full: bool = False


@dataclass(frozen=True)
class NextIssues:
    pass


Command = Union[
    Help,
    Leave,
    AddRepositories,
    RemoveRepositories,
    ClearRepositories,
    SetDelay,
    SetMaxLines,
    Status,
    Suspend,
    CreateIssue,
    SetIssueState,
    CommentOnIssue,
    CreateAction,
    AccountInfo,
    IgnoreNicks,
    SetAlias,
    FindIssues,
    NextIssues,
]

# Commands that change GitHub. They also work without addressing the bot,
# unless issues are suspended, and never for ignored nicks.
MUTATING = (CreateIssue, SetIssueState, CommentOnIssue, CreateAction)


@dataclass(frozen=True)
class Rule:
    name: str
    pattern: re.Pattern[str]
    build: Callable[[re.Match[str]], Command]
    addressed_only: bool = True


_REF = r"[a-z0-9/._-]*\#[0-9]+"
_URL = r"https://github\.com/[a-z0-9._-]+/[a-z0-9._-]+/(?:issues|pull)/[0-9]+"
_ISSUE = rf"(?P<ref>{_REF}|{_URL})"
_REPO_WORD = r"repo(?:s|sitory|sitories)?"
_SEARCH_VERB = r"(?:find|look +up|get|search|search +for|list)"
_ON = ("on", "yes", "true")
_DONT = r"(?:don['’]t|do +not)"


def _rx(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


def _find(match: re.Match[str]) -> FindIssues:
    group = match.group
    return FindIssues(
        state=(group("state") or (group("all") or "").strip() or "open").lower(),
        kind=(group("kind") or "issues").lower(),
        labels=group("labels"),
        creator=group("creator"),
        assignee=group("assignee") or group("my"),
        repository=group("repository"),
        full=bool(group("verbose") or group("full") or group("descriptions") or group("verbose2")),
    )


RULES: tuple[Rule, ...] = (
    Rule("help", _rx(r"^help\b *(?P<topic>.*)$"), lambda m: Help(m.group("topic"))),
    Rule("bye", _rx(r"^bye *\.? *$"), lambda m: Leave()),
    Rule(
        "use",
        _rx(r"^(?:discussing|discuss|use|using|take +up|taking +up|this +will +be|this +is) +(?P<text>[^ ].*?)$"),
        lambda m: AddRepositories(m.group("text")),
    ),
    Rule(
        "repo:",
        _rx(rf"^{_REPO_WORD} *(?:[:：]|\+[:：]?) *(?P<text>[^ ].*?)$"),
        lambda m: AddRepositories(m.group("text")),
        addressed_only=False,
    ),
    Rule(
        "forget",
        _rx(rf"^(?:forget|drop|remove|{_DONT} +use) +(?P<text>[^ ].*?)$"),
        lambda m: RemoveRepositories(m.group("text")),
    ),
    Rule(
        "repo-",
        _rx(rf"^{_REPO_WORD} *-[:：]? *(?P<text>[^ ].*?)$"),
        lambda m: RemoveRepositories(m.group("text")),
        addressed_only=False,
    ),
    Rule(
        "repo: (clear)",
        _rx(rf"^{_REPO_WORD} *(?:[:：]|\+[:：]?)$"),
        lambda m: ClearRepositories(),
        addressed_only=False,
    ),
    Rule(
        "delay",
        _rx(r"^(?:set +)?delay *(?: to |=| ) *(?P<n>[0-9]+) *\.? *$"),
        lambda m: SetDelay(int(m.group("n"))),
    ),
    Rule(
        "lines",
        _rx(r"^(?:set +)?(?:max)?lines *(?: to |=| ) *(?P<n>[0-9]+) *\.? *$"),
        lambda m: SetMaxLines(int(m.group("n"))),
    ),
    Rule("status", _rx(r"^status *[?.]? *$"), lambda m: Status()),
    Rule("on", _rx(r"^on *\.? *$"), lambda m: Suspend(issues=True, names=True, suspend=False)),
    Rule("off", _rx(r"^off *\.? *$"), lambda m: Suspend(issues=True, names=True, suspend=True)),
    Rule(
        "issues",
        _rx(r"^(?:set +)?issues *(?: to |=| ) *(?P<value>on|yes|true|off|no|false) *\.? *$"),
        lambda m: Suspend(issues=True, names=False, suspend=m.group("value").lower() not in _ON),
    ),
    Rule(
        "names",
        _rx(r"^(?:set +)?(?:names|persons|teams)(?: +to +| *= *| +)(?P<value>on|yes|true|off|no|false) *\.? *$"),
        lambda m: Suspend(issues=False, names=True, suspend=m.group("value").lower() not in _ON),
    ),
    Rule(
        "issue:",
        _rx(r"^issue *[:：] *(?P<title>.+)$"),
        lambda m: CreateIssue(m.group("title")),
        addressed_only=False,
    ),
    Rule(
        "close",
        _rx(rf"^close +{_ISSUE}(?=\W|$)"),
        lambda m: SetIssueState(m.group("ref"), "closed"),
        addressed_only=False,
    ),
    Rule(
        "closed",
        _rx(rf"^{_ISSUE} +closed(?: *\.)?$"),
        lambda m: SetIssueState(m.group("ref"), "closed"),
        addressed_only=False,
    ),
    Rule(
        "reopen",
        _rx(rf"^reopen +{_ISSUE}(?=\W|$)"),
        lambda m: SetIssueState(m.group("ref"), "open"),
        addressed_only=False,
    ),
    Rule(
        "reopened",
        _rx(rf"^{_ISSUE} +reopened(?: *\.)?$"),
        lambda m: SetIssueState(m.group("ref"), "open"),
        addressed_only=False,
    ),
    Rule(
        "comment",
        _rx(rf"^(?:note|comment) +{_ISSUE}\b *:? *(?P<comment>.+)$"),
        lambda m: CommentOnIssue(m.group("ref"), m.group("comment")),
        addressed_only=False,
    ),
    Rule(
        "action",
        _rx(r"^action +(?P<names>[^:：]+?) *[:：] *(?P<text>.*)$|^action *[:：] *(?P<names2>.*?)(?: +to | *[:：])(?P<text2>.*)$"),
        lambda m: CreateAction(
            (m.group("names") or m.group("names2")).strip(),
            (m.group("text") if m.group("names") else m.group("text2")).strip(),
        ),
        addressed_only=False,
    ),
    Rule("account", _rx(r"^(?:who +are +you|account|user|login) *\??$"), lambda m: AccountInfo()),
    Rule("ignore", _rx(r"^ignore *(?P<nicks>.*?)$"), lambda m: IgnoreNicks(m.group("nicks"), ignore=True)),
    Rule(
        "don't ignore",
        _rx(rf"^{_DONT} +ignore *(?P<nicks>.*?) *$"),
        lambda m: IgnoreNicks(m.group("nicks"), ignore=False),
    ),
    Rule(
        "alias",
        _rx(r"^(?P<nick>[^ ]+)(?:\s*=\s*|\s+is\s+)@?(?P<login>[^ ]+)$"),
        lambda m: SetAlias(m.group("nick"), m.group("login")),
    ),
    Rule(
        "find",
        _rx(
            rf"^(?P<verbose>verbosely +)?{_SEARCH_VERB}(?:(?P<all> +all)? +(?P<my>my))?(?P<full> +full)?"
            r"(?: +(?P<state>open|closed|all))?(?: +(?P<kind>issues|actions))?"
            r"(?:(?: +with)? +labels? +(?P<labels>[^ ]+(?: *, *[^ ]+)*)"
            r"| +by +(?P<creator>[^ ]+)"
            r"| +for +(?P<assignee>[^ ]+)"
            r"| +from +(?:repo(?:sitory)? +)?(?P<repository>[^ ].*?)"
            r"| +(?P<descriptions>with +descriptions?|in +full))*"
            r"(?P<verbose2> +verbosely)? *\.? *$"
        ),
        _find,
    ),
    Rule(
        "next",
        _rx(
            rf"^(?:(?:next|more)(?: +{_SEARCH_VERB})?(?: +(?:issues|actions))?"
            rf"|{_SEARCH_VERB} +(?:next|more)(?: +(?:issues|actions))?) *\.? *$"
        ),
        lambda m: NextIssues(),
    ),
)


def parse_command(text: str, addressed: bool) -> Command | None:
    """Return the first command that text matches, or None for plain chat."""
    for rule in RULES:
        if rule.addressed_only and not addressed:
            continue
        match = rule.pattern.match(text)
        if match:
            return rule.build(match)
    return None
