"""Line-oriented state file ("map file").

Format, one statement per line; blank lines and lines starting with "#"
are ignored:

    channel CHANNEL        following lines apply to CHANNEL
    repo URL               append a repository to CHANNEL's list
    delay N                lines between repeated expansions
    maxlines N             issues listed in full at a time
    issues off             do not expand issue references
    names off              do not expand @names
    ignore NICK            ignore commands from NICK on CHANNEL
    alias NAME LOGIN       GitHub login for an IRC nick (global)

Repositories are written in list order, so the first is the default.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import IO

from ghircbot.adapters.storage.locking import open_locked, replace_locked
from ghircbot.core.errors import StateFileError
from ghircbot.core.state import DEFAULT_DELAY, DEFAULT_MAX_LINES, BotState, ChannelState

_ALIAS = re.compile(r"^\s*alias\s+(\S+)\s+(\S+)\s*$")
_CHANNEL = re.compile(r"^\s*channel\s+(\S+)\s*$")
_REPO = re.compile(r"^\s*repo\b\s*(\S*)\s*$")
_DELAY = re.compile(r"^\s*delay\s+([0-9]+)\s*$")
_MAX_LINES = re.compile(r"^\s*maxlines\s+([0-9]+)\s*$")
_ISSUES_OFF = re.compile(r"^\s*issues\s+off\s*$")
_NAMES_OFF = re.compile(r"^\s*names\s+off\s*$")
_IGNORE = re.compile(r"^\s*ignore\s+(\S+)\s*$")


def parse_map(
    text: str,
    source: str = "<map>",
    default_delay: int = DEFAULT_DELAY,
    default_max_lines: int = DEFAULT_MAX_LINES,
) -> BotState:
    state = BotState(default_delay=default_delay, default_max_lines=default_max_lines)
    channel: ChannelState | None = None
    for number, line in enumerate(text.splitlines(), start=1):
        if line.startswith("#") or not line.strip():
            continue
        match = _ALIAS.match(line)
        if match:
            state.aliases[match.group(1).casefold()] = match.group(2)
            continue
        match = _CHANNEL.match(line)
        if match:
            channel = state.channel(match.group(1))
            continue
        if channel is None:
            raise StateFileError(f'{source}:{number}: missing "channel" line')
        if not _apply(channel, line):
            raise StateFileError(f"{source}:{number}: wrong syntax")
    return state


def _apply(channel: ChannelState, line: str) -> bool:
    match = _REPO.match(line)
    if match:
        if match.group(1) and match.group(1) not in channel.repositories:
            channel.repositories.append(match.group(1))
        return True
    match = _DELAY.match(line)
    if match:
        channel.delay = int(match.group(1))
        return True
    match = _MAX_LINES.match(line)
    if match:
        channel.max_lines = int(match.group(1))
        return True
    match = _IGNORE.match(line)
    if match:
        channel.ignored_nicks[match.group(1).casefold()] = match.group(1)
        return True
    if _ISSUES_OFF.match(line):
        channel.issues_suspended = True
        return True
    if _NAMES_OFF.match(line):
        channel.names_suspended = True
        return True
    return False


def format_map(state: BotState) -> str:
    lines: list[str] = []
    for name in sorted(state.channels):
        channel = state.channels[name]
        lines.append(f"channel {name}")
        lines.extend(f"repo {repository}" for repository in channel.repositories)
        if channel.delay != state.default_delay:
            lines.append(f"delay {channel.delay}")
        if channel.max_lines != state.default_max_lines:
            lines.append(f"maxlines {channel.max_lines}")
        if channel.issues_suspended:
            lines.append("issues off")
        if channel.names_suspended:
            lines.append("names off")
        lines.extend(f"ignore {nick}" for nick in sorted(channel.ignored_nicks.values()))
        lines.append("")
    lines.extend(f"alias {nick} {login}" for nick, login in sorted(state.aliases.items()))
    return "\n".join(lines) + "\n" if lines else ""


class MapFileStore:
    """Channel state persisted in a map file that stays locked while we run."""

    def __init__(
        self,
        path: str,
        default_delay: int = DEFAULT_DELAY,
        default_max_lines: int = DEFAULT_MAX_LINES,
    ) -> None:
        self._logger = logging.getLogger(self.__class__.__name__)
        self._path = Path(path)
        self._default_delay = default_delay
        self._default_max_lines = default_max_lines
        self._handle: IO[str] | None = None

    def load(self) -> BotState:
        """Lock and read the map file. Any problem here is fatal."""
        if self._handle is None:
            self._handle = open_locked(self._path)
        self._handle.seek(0)
        try:
            text = self._handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise StateFileError(f"{self._path}: {exc}") from exc
        state = parse_map(text, str(self._path), self._default_delay, self._default_max_lines)
        self._logger.info(
            "Loaded state file",
            extra={"path": str(self._path), "channels": len(state.channels), "aliases": len(state.aliases)},
        )
        return state

    def save(self, state: BotState) -> None:
        """Rewrite the map file. Failures are logged and otherwise ignored."""
        try:
            handle = replace_locked(self._path, format_map(state))
        except OSError as exc:
            self._logger.warning("Cannot write state file", extra={"path": str(self._path), "error": str(exc)})
            return
        if self._handle is not None:
            self._handle.close()
        self._handle = handle

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
