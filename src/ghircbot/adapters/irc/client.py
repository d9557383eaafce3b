from __future__ import annotations

import functools
import logging
import re
import ssl
import textwrap
from typing import Iterable

import irc.bot
import irc.client
from irc.connection import Factory

from ghircbot.adapters.storage.rejoin import RejoinFile
from ghircbot.config.models import IrcServer
from ghircbot.engine.dispatcher import Dispatcher
from ghircbot.engine.worker import BackgroundWorker

# Stay well below the 512-byte IRC line limit once the prefix is added.
MAX_LINE_CHARS = 400
DRAIN_INTERVAL_SECONDS = 0.25


def split_addressed(text: str, nick: str) -> tuple[bool, str]:
    """Recognise "nick, rest" and return (addressed, rest)."""
    match = re.match(rf"^\s*{re.escape(nick)}\s*,\s*(.*)$", text, re.IGNORECASE | re.DOTALL)
    if match:
        return True, match.group(1)
    return False, text


def wrap_lines(lines: Iterable[str], width: int = MAX_LINE_CHARS) -> list[str]:
    wrapped: list[str] = []
    for line in lines:
        wrapped.extend(textwrap.wrap(line, width=width, break_long_words=True) or [""])
    return [line for line in wrapped if line]


class IrcBot(irc.bot.SingleServerIRCBot):
    """IRC transport: turns IRC events into dispatcher calls and says the replies."""

    def __init__(
        self,
        server: IrcServer,
        nick: str,
        realname: str,
        worker: BackgroundWorker,
        rejoin: RejoinFile | None = None,
    ) -> None:
        if server.ssl:
            context = ssl.create_default_context()
            factory = Factory(wrapper=functools.partial(context.wrap_socket, server_hostname=server.host))
        else:
            factory = Factory()
        connect_params = {"connect_factory": factory}
        if server.user:
            connect_params["username"] = server.user
        super().__init__(
            [irc.bot.ServerSpec(server.host, server.port, server.password)],
            nick,
            realname,
            **connect_params,
        )
        self._logger = logging.getLogger(self.__class__.__name__)
        self._server = server
        self._worker = worker
        self._rejoin = rejoin
        self._dispatcher: Dispatcher | None = None
        self._draining = False
        self._wanted: list[str] = []
        if server.channel:
            self._wanted.append(server.channel)
        if rejoin is not None:
            self._wanted.extend(name for name in rejoin.channels if name not in self._wanted)

    def attach(self, dispatcher: Dispatcher) -> None:
        self._dispatcher = dispatcher

    @property
    def dispatcher(self) -> Dispatcher:
        if self._dispatcher is None:
            raise RuntimeError("IrcBot has no dispatcher attached")
        return self._dispatcher

    # ChatTransport

    def say(self, channel: str, line: str) -> None:
        if not self.connection.is_connected():
            self._logger.warning("Not connected, dropping line", extra={"channel": channel})
            return
        for part in wrap_lines([line]):
            self.connection.privmsg(channel, part)

    def part(self, channel: str) -> None:
        self._logger.info("Leaving channel", extra={"channel": channel})
        self.connection.part(channel)

    # IRC events

    def on_nicknameinuse(self, connection: irc.client.ServerConnection, event: irc.client.Event) -> None:
        connection.nick(connection.get_nickname() + "_")

    def on_welcome(self, connection: irc.client.ServerConnection, event: irc.client.Event) -> None:
        self.dispatcher.nick = connection.get_nickname()
        self._logger.info("Connected", extra={"server": self._server.host, "nick": self.dispatcher.nick})
        for channel in self._wanted:
            connection.join(channel)
        if not self._draining:
            self.reactor.scheduler.execute_every(DRAIN_INTERVAL_SECONDS, self._deliver)
            self._draining = True

    def on_nick(self, connection: irc.client.ServerConnection, event: irc.client.Event) -> None:
        if event.target == connection.get_nickname():
            self.dispatcher.nick = event.target

    def on_invite(self, connection: irc.client.ServerConnection, event: irc.client.Event) -> None:
        channel = event.arguments[0]
        self._logger.info("Invited", extra={"channel": channel, "by": event.source.nick})
        connection.join(channel)

    def on_join(self, connection: irc.client.ServerConnection, event: irc.client.Event) -> None:
        if event.source.nick != connection.get_nickname():
            return
        self.dispatcher.channel_joined(event.target)
        if event.target not in self._wanted:
            self._wanted.append(event.target)
        if self._rejoin is not None:
            self._rejoin.add(event.target)

    def on_part(self, connection: irc.client.ServerConnection, event: irc.client.Event) -> None:
        if event.source.nick == connection.get_nickname():
            self._left(event.target)

    def on_kick(self, connection: irc.client.ServerConnection, event: irc.client.Event) -> None:
        if event.arguments and event.arguments[0] == connection.get_nickname():
            self._left(event.target)

    def on_pubmsg(self, connection: irc.client.ServerConnection, event: irc.client.Event) -> None:
        self._said(event.target, event.source.nick, event.arguments[0])

    def on_action(self, connection: irc.client.ServerConnection, event: irc.client.Event) -> None:
        if irc.client.is_channel(event.target):
            self._said(event.target, event.source.nick, event.arguments[0])

    def on_privmsg(self, connection: irc.client.ServerConnection, event: irc.client.Event) -> None:
        nick = event.source.nick
        _, text = split_addressed(event.arguments[0], connection.get_nickname())
        for line in wrap_lines(self.dispatcher.handle_private(nick, text)):
            connection.privmsg(nick, line)

    def _said(self, channel: str, nick: str, text: str) -> None:
        addressed, text = split_addressed(text, self.connection.get_nickname())
        try:
            replies = self.dispatcher.handle_line(channel, nick, text, addressed)
        except Exception:
            self._logger.exception("Failed to handle line", extra={"channel": channel, "nick": nick})
            return
        if replies and addressed:
            replies = [f"{nick}, {replies[0]}"] + replies[1:]
        for line in replies:
            self.say(channel, line)

    def _left(self, channel: str) -> None:
        self.dispatcher.channel_parted(channel)
        if channel in self._wanted:
            self._wanted.remove(channel)
        if self._rejoin is not None:
            self._rejoin.remove(channel)

    def _deliver(self) -> None:
        for channel, lines in self._worker.drain():
            for line in lines:
                self.say(channel, line)
