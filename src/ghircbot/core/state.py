"""Per-channel and process-wide bot state, owned by the main loop."""

from __future__ import annotations

from dataclasses import dataclass, field

from ghircbot.core.models import SearchQuery

DEFAULT_DELAY = 15
DEFAULT_MAX_LINES = 10
MAX_LINES_CEILING = 100


@dataclass
class ChannelState:
    name: str
    repositories: list[str] = field(default_factory=list)
    delay: int = DEFAULT_DELAY
    max_lines: int = DEFAULT_MAX_LINES
    issues_suspended: bool = False
    names_suspended: bool = False
    # casefolded nick -> nick as it was given
    ignored_nicks: dict[str, str] = field(default_factory=dict)
    # Not persisted:
    line_number: int = field(default=0, compare=False)
    history: dict[str, int] = field(default_factory=dict, compare=False)
    search: SearchQuery | None = field(default=None, compare=False)

    @property
    def default_repository(self) -> str | None:
        return self.repositories[0] if self.repositories else None

    def next_line(self) -> int:
        self.line_number += 1
        return self.line_number

    def forget_history(self) -> None:
        self.history.clear()

    def is_ignored(self, nick: str) -> bool:
        return nick.casefold() in self.ignored_nicks

    def reset_session(self) -> None:
        """Drop the transient fields; called when the bot leaves the channel."""
        self.line_number = 0
        self.history.clear()
        self.search = None


@dataclass
class BotState:
    channels: dict[str, ChannelState] = field(default_factory=dict)
    # casefolded nick or alias -> GitHub login
    aliases: dict[str, str] = field(default_factory=dict)
    default_delay: int = field(default=DEFAULT_DELAY, compare=False)
    default_max_lines: int = field(default=DEFAULT_MAX_LINES, compare=False)

    def channel(self, name: str) -> ChannelState:
        state = self.channels.get(name)
        if state is None:
            state = ChannelState(
                name=name, delay=self.default_delay, max_lines=self.default_max_lines
            )
            self.channels[name] = state
        return state

    def login_for(self, nick: str) -> str:
        """Map a nick to a GitHub login; "@name" is taken literally."""
        if nick.startswith("@"):
            return nick[1:]
        return self.aliases.get(nick.casefold(), nick)
