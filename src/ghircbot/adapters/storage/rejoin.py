from __future__ import annotations

import logging
from pathlib import Path
from typing import IO

from ghircbot.adapters.storage.locking import open_locked, replace_locked


class RejoinFile:
    """The channels the bot is on, one per line, so a restart can rejoin them."""

    def __init__(self, path: str) -> None:
        self._logger = logging.getLogger(self.__class__.__name__)
        self._path = Path(path)
        self._handle: IO[str] | None = None
        self._channels: list[str] = []

    @property
    def channels(self) -> list[str]:
        return list(self._channels)

    def load(self) -> list[str]:
        if self._handle is None:
            self._handle = open_locked(self._path)
        self._handle.seek(0)
        self._channels = []
        for line in self._handle.read().splitlines():
            name = line.strip()
            if name and name not in self._channels:
                self._channels.append(name)
        self._logger.info("Read rejoin file", extra={"path": str(self._path), "channels": len(self._channels)})
        return self.channels

    def add(self, channel: str) -> None:
        if channel not in self._channels:
            self._channels.append(channel)
            self._rewrite()

    def remove(self, channel: str) -> None:
        if channel in self._channels:
            self._channels.remove(channel)
            self._rewrite()

    def _rewrite(self) -> None:
        content = "".join(f"{name}\n" for name in self._channels)
        try:
            handle = replace_locked(self._path, content)
        except OSError as exc:
            self._logger.warning("Cannot write rejoin file", extra={"path": str(self._path), "error": str(exc)})
            return
        if self._handle is not None:
            self._handle.close()
        self._handle = handle

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
