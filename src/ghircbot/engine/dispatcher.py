from __future__ import annotations

import logging
import re
from dataclasses import replace
from datetime import date
from functools import partial
from typing import Callable

from ghircbot.core.interfaces import ChatTransport, DateParser, GitHubClient, StateStore, Worker
from ghircbot.core.models import (
    GITHUB_BASE,
    FullIssueUrl,
    IssueRef,
    SearchQuery,
    UserRef,
    github_path,
    split_github_repository,
)
from ghircbot.core.state import MAX_LINES_CEILING, BotState, ChannelState
from ghircbot.engine import jobs
from ghircbot.engine.commands import (
    MUTATING,
    AccountInfo,
    AddRepositories,
    ClearRepositories,
    Command,
    CommentOnIssue,
    CreateAction,
    CreateIssue,
    FindIssues,
    Help,
    IgnoreNicks,
    Leave,
    NextIssues,
    RemoveRepositories,
    SetAlias,
    SetDelay,
    SetIssueState,
    SetMaxLines,
    Status,
    Suspend,
    parse_command,
)
from ghircbot.engine.due_dates import split_due_date
from ghircbot.engine.help import help_text
from ghircbot.engine.rate_limit import RateLimiter
from ghircbot.engine.registry import (
    add_repositories,
    clear_repositories,
    remove_repositories,
    resolve,
    resolve_reference,
    split_names,
)
from ghircbot.engine.scanner import scan_references
from ghircbot.engine.throttle import should_expand

OK = "OK."
SEARCH_PAGE_SIZE = 100

_ASSIGNEE_SEPARATORS = re.compile(r" *,? +and +| *, *", re.IGNORECASE)
_ME = re.compile(r"^m[ey]$", re.IGNORECASE)


def join_names(names: list[str]) -> str:
    """Join names as "a, b and c"."""
    if len(names) < 2:
        return "".join(names)
    return ", ".join(names[:-1]) + " and " + names[-1]


class Dispatcher:
    """Turn one chat line into replies, state changes and GitHub jobs.

    Runs on the main loop only. Anything that talks to GitHub is handed to
    the worker, whose lines reach the channel later.
    """

    def __init__(
        self,
        state: BotState,
        store: StateStore,
        worker: Worker,
        transport: ChatTransport,
        date_parser: DateParser,
        client: GitHubClient | None = None,
        rate_limiter: RateLimiter | None = None,
        nick: str = "gb",
        server: str = "localhost",
        default_owner: str | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.state = state
        self.store = store
        self.worker = worker
        self.transport = transport
        self.date_parser = date_parser
        self.client = client
        self.rate_limiter = rate_limiter or RateLimiter()
        self.nick = nick
        self.server = server
        self.default_owner = default_owner
        self.today = today
        self.logger = logging.getLogger(self.__class__.__name__)
        self._handlers: dict[type, Callable[[ChannelState, str, Command], list[str]]] = {
            Leave: self._leave,
            AddRepositories: self._add_repositories,
            RemoveRepositories: self._remove_repositories,
            ClearRepositories: self._clear_repositories,
            SetDelay: self._set_delay,
            SetMaxLines: self._set_max_lines,
            Status: self._status,
            Suspend: self._suspend,
            CreateIssue: self._create_issue,
            SetIssueState: self._set_issue_state,
            CommentOnIssue: self._comment,
            CreateAction: self._create_action,
            AccountInfo: self._account,
            IgnoreNicks: self._ignore,
            SetAlias: self._alias,
            FindIssues: self._find,
            NextIssues: self._next,
        }

    # Entry points called by the chat transport.

    def handle_line(self, channel: str, nick: str, text: str, addressed: bool) -> list[str]:
        """Process one line said on a channel; return the immediate replies."""
        state = self.state.channel(channel)
        state.next_line()
        text = text.strip()
        command = parse_command(text, addressed)
        if isinstance(command, Help):
            return self.help(command.topic, state)
        if command is not None:
            if isinstance(command, MUTATING) and (
                state.is_ignored(nick) or (state.issues_suspended and not addressed)
            ):
                self.logger.debug(
                    "Command suppressed",
                    extra={"channel": channel, "nick": nick, "command": type(command).__name__},
                )
                return []
            return self._handlers[type(command)](state, nick, command)
        if state.is_ignored(nick):
            return []
        return self._expand_references(state, text, addressed)

    def handle_private(self, nick: str, text: str) -> list[str]:
        """Private messages only get help."""
        command = parse_command(text.strip(), addressed=True)
        if isinstance(command, Help):
            return self.help(command.topic, None)
        return []

    def help(self, topic: str, state: ChannelState | None) -> list[str]:
        if state is None:
            return help_text(topic, self.nick, self.state.default_delay, self.state.default_max_lines)
        return help_text(topic, self.nick, state.delay, state.max_lines)

    def channel_joined(self, channel: str) -> None:
        self.state.channel(channel).reset_session()
        self.logger.info("Joined channel", extra={"channel": channel})

    def channel_parted(self, channel: str) -> None:
        state = self.state.channels.get(channel)
        if state is not None:
            state.reset_session()
        self.logger.info("Left channel", extra={"channel": channel})

    def _save(self) -> None:
        self.store.save(self.state)

    # Channel settings.

    def _leave(self, state: ChannelState, nick: str, command: Leave) -> list[str]:
        self.transport.part(state.name)
        return []

    def _add_repositories(self, state: ChannelState, nick: str, command: AddRepositories) -> list[str]:
        report = add_repositories(state, command.text, self.default_owner)
        self._save()
        if report.errors:
            return report.errors
        if state.issues_suspended:
            return [
                "OK. But note that I am not currently expanding issues. "
                f"You can change that with: {self.nick} issues on"
            ]
        return [OK]

    def _remove_repositories(self, state: ChannelState, nick: str, command: RemoveRepositories) -> list[str]:
        if not state.repositories:
            return ["sorry, this channel has no repositories."]
        report = remove_repositories(state, command.text)
        if report.changed:
            self._save()
        return report.errors or [OK]

    def _clear_repositories(self, state: ChannelState, nick: str, command: ClearRepositories) -> list[str]:
        clear_repositories(state)
        self._save()
        return [OK]

    def _set_delay(self, state: ChannelState, nick: str, command: SetDelay) -> list[str]:
        if state.delay != command.lines:
            state.delay = command.lines
            self._save()
        return [OK]

    def _set_max_lines(self, state: ChannelState, nick: str, command: SetMaxLines) -> list[str]:
        if command.lines > MAX_LINES_CEILING:
            return [f"the number of lines cannot be greater than {MAX_LINES_CEILING}."]
        if state.max_lines != command.lines:
            state.max_lines = command.lines
            self._save()
        return [OK]

    def _status(self, state: ChannelState, nick: str, command: Status) -> list[str]:
        text = (
            f"the delay is {state.delay}"
            f", issues are {'off' if state.issues_suspended else 'on'}"
            f", names are {'off' if state.names_suspended else 'on'}"
            f", full issues are printed {state.max_lines} at a time"
        )
        ignored = join_names(list(state.ignored_nicks.values()))
        if ignored:
            text += f", commands are ignored from {ignored}"
        if not state.repositories:
            text += "; and no repositories are specified."
        elif len(state.repositories) == 1:
            text += f"; and the repository is {state.repositories[0]}"
        else:
            text += "; and the repositories are " + " ".join(state.repositories)
        return [text]

    def _suspend(self, state: ChannelState, nick: str, command: Suspend) -> list[str]:
        word = "off" if command.suspend else "on"
        changed = []
        if command.issues and state.issues_suspended != command.suspend:
            state.issues_suspended = command.suspend
            changed.append("issues")
        if command.names and state.names_suspended != command.suspend:
            state.names_suspended = command.suspend
            changed.append("names")
        if changed:
            self._save()
            self.logger.info(
                "Expansion switched", extra={"channel": state.name, "what": changed, "value": word}
            )
            return [OK]
        if command.issues and command.names:
            return [f"issues and names were already {word}."]
        return [f"{'issues' if command.issues else 'names'} were already {word}."]

    def _ignore(self, state: ChannelState, nick: str, command: IgnoreNicks) -> list[str]:
        nicks = split_names(command.nicks)
        verb = "ignore" if command.ignore else "don't ignore"
        if not nicks:
            return [f'you need to give one or more IRC nicks after "{verb}".']
        replies = []
        changed = False
        for who in nicks:
            key = who.casefold()
            if command.ignore:
                if key in state.ignored_nicks:
                    replies.append(f"{who} was already ignored on this channel.")
                    continue
                state.ignored_nicks[key] = who
            else:
                if key not in state.ignored_nicks:
                    replies.append(f"{who} was not ignored on this channel.")
                    continue
                del state.ignored_nicks[key]
            changed = True
        if changed:
            self._save()
        return replies or [OK]

    def _alias(self, state: ChannelState, nick: str, command: SetAlias) -> list[str]:
        who, login = command.nick, command.login
        key = who.casefold()
        current = self.state.aliases.get(key)
        if key == login.casefold():
            if current is None:
                return [f"I already had that GitHub account for {who}"]
            del self.state.aliases[key]
        else:
            if current is not None and current.casefold() == login.casefold():
                return [f"I already had that GitHub account for {who}"]
            self.state.aliases[key] = login
        self._save()
        return [OK]

    # Commands that go to GitHub.

    def _no_token(self, what: str) -> list[str]:
        return [f"Sorry, I cannot {what}, because I am running without an access token for GitHub."]

    def _target(self, state: ChannelState, reference: str) -> tuple[str | None, int | None]:
        """Resolve "repo#n" or an issue URL typed in a command."""
        found = next(
            (ref for ref in scan_references(reference) if isinstance(ref, (IssueRef, FullIssueUrl))),
            None,
        )
        if found is None:
            return None, None
        return resolve_reference(state, found)

    def _check_rate(self, repository: str) -> list[str]:
        if self.rate_limiter.try_consume(repository):
            return []
        return [self.rate_limiter.denial_message()]

    def _create_issue(self, state: ChannelState, nick: str, command: CreateIssue) -> list[str]:
        if self.client is None:
            return self._no_token("create issues")
        repository = state.default_repository
        if repository is None:
            return ["Sorry, I don't know what repository to use."]
        path = github_path(repository)
        if path is None:
            return [f"Cannot create issues on {repository} as it is not on github.com."]
        denied = self._check_rate(path)
        if denied:
            return denied
        self.worker.submit(
            state.name,
            partial(jobs.create_issue, self.client, path, command.title, self._attribution(state, nick)),
        )
        return []

    def _create_action(self, state: ChannelState, nick: str, command: CreateAction) -> list[str]:
        if self.client is None:
            return self._no_token("create actions")
        repository = state.default_repository
        if repository is None:
            return ["Sorry, I don't know what repository to use."]
        path = github_path(repository)
        if path is None:
            return [f"Cannot create actions on {repository} as it is not on github.com."]
        denied = self._check_rate(path)
        if denied:
            return denied
        names = [self.state.login_for(name) for name in _ASSIGNEE_SEPARATORS.split(command.names) if name]
        due = split_due_date(command.text, self.date_parser, self.today())
        replies = []
        if due.adjusted:
            replies.append(f"Assumed the due date is in {due.due.year}")
        self.worker.submit(
            state.name,
            partial(
                jobs.create_action,
                self.client,
                path,
                due.text,
                names,
                due.body_line,
                self._attribution(state, nick),
            ),
        )
        return replies

    def _set_issue_state(self, state: ChannelState, nick: str, command: SetIssueState) -> list[str]:
        what = "close" if command.state == "closed" else "reopen"
        if self.client is None:
            return self._no_token(f"{what} issues")
        repository, number = self._target(state, command.reference)
        if repository is None or number is None:
            return [f"Sorry, I don't know what repository to use for {command.reference}"]
        path = github_path(repository)
        if path is None:
            return [f"Cannot {what} issues on {repository} as it is not on github.com."]
        denied = self._check_rate(path)
        if denied:
            return denied
        self.worker.submit(
            state.name,
            partial(
                jobs.change_issue_state,
                self.client,
                path,
                number,
                command.state,
                self._attribution(state, nick),
            ),
        )
        return []

    def _comment(self, state: ChannelState, nick: str, command: CommentOnIssue) -> list[str]:
        if self.client is None:
            return self._no_token("add comments to issues")
        repository, number = self._target(state, command.reference)
        if repository is None or number is None:
            return [f"Sorry, I don't know what repository to use for {command.reference}"]
        path = github_path(repository)
        if path is None:
            return [f"Cannot add a comment to {repository} as it is not on github.com."]
        denied = self._check_rate(path)
        if denied:
            return denied
        self.worker.submit(
            state.name,
            partial(
                jobs.comment_on_issue,
                self.client,
                path,
                number,
                command.comment,
                self._attribution(state, nick),
            ),
        )
        return []

    def _account(self, state: ChannelState, nick: str, command: AccountInfo) -> list[str]:
        if self.client is None:
            return ["I am not using a GitHub account."]
        self.worker.submit(state.name, partial(jobs.account_info, self.client, state.name))
        return []

    def _find(self, state: ChannelState, nick: str, command: FindIssues) -> list[str]:
        repository = resolve(state, command.repository or "")
        if repository is None:
            return ["sorry, I don't know what repository to use."]
        if split_github_repository(repository) is None:
            return ["The repository must be on GitHub for searching to work."]
        if self.client is None:
            return ["Sorry, I cannot access GitHub, because I am running without an access token."]

        labels = command.labels.replace(" ", "") if command.labels else None
        if command.kind == "actions":
            labels = f"{labels},{jobs.ACTION_LABEL}" if labels else jobs.ACTION_LABEL
        params: dict[str, object] = {
            "per_page": state.max_lines if command.full else SEARCH_PAGE_SIZE,
            "state": command.state,
        }
        for field, who in (("assignee", command.assignee), ("creator", command.creator)):
            if who:
                params[field] = self.state.login_for(nick if _ME.match(who) else who)
        if labels:
            params["labels"] = labels

        state.search = SearchQuery(
            repository=github_path(repository) or "",
            params=params,
            page=1,
            full=command.full,
            kind=command.kind,
        )
        self.worker.submit(state.name, partial(jobs.find_issues, self.client, state.name, state.search))
        return []

    def _next(self, state: ChannelState, nick: str, command: NextIssues) -> list[str]:
        if state.search is None or self.client is None:
            return ["I have not listed any issues or actions yet."]
        state.search = replace(state.search, page=state.search.page + 1)
        self.worker.submit(state.name, partial(jobs.find_issues, self.client, state.name, state.search))
        return []

    def _attribution(self, state: ChannelState, nick: str) -> jobs.Attribution:
        return jobs.Attribution(
            nick=nick, login=self.state.login_for(nick), channel=state.name, server=self.server
        )

    # Plain chat.

    def _expand_references(self, state: ChannelState, text: str, addressed: bool) -> list[str]:
        replies: list[str] = []
        found = 0
        for reference in scan_references(text):
            found += 1
            if isinstance(reference, UserRef):
                if should_expand(state, reference, addressed):
                    self.logger.info("Name expanded", extra={"channel": state.name, "reference": reference.text})
                    replies.append(f"{GITHUB_BASE}/{reference.name} -> @{reference.name}")
                continue

            repository, number = resolve_reference(state, reference)
            if repository is None:
                self.logger.info(
                    "Cannot infer a repository", extra={"channel": state.name, "reference": reference.text}
                )
                if addressed:
                    replies.append(f"I don't know which repository to use for {reference.text}")
                continue
            if not should_expand(state, reference, addressed):
                continue

            parts = split_github_repository(repository)
            if self.client is not None and parts is not None:
                owner, repo = parts
                if isinstance(reference, FullIssueUrl) and reference.kind == "discussions":
                    job = partial(jobs.lookup_discussion, self.client, state.name, owner, repo, number)
                else:
                    job = partial(jobs.lookup_issue, self.client, state.name, repository, owner, repo, number)
                self.worker.submit(state.name, job)
            elif isinstance(reference, IssueRef):
                replies.append(f"{repository}/issues/{number} -> #{number}")

        if addressed and found == 0:
            return ["sorry, I don't understand what you want me to do. Maybe try \"help\"?"]
        return replies
