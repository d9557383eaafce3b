from __future__ import annotations

import logging

from ghircbot.adapters.irc.client import IrcBot
from ghircbot.adapters.storage.rejoin import RejoinFile
from ghircbot.config.models import BotConfig, IrcServer
from ghircbot.engine.dispatcher import Dispatcher
from ghircbot.engine.rate_limit import RateLimiter
from ghircbot.engine.worker import BackgroundWorker
from ghircbot.plugins.registry import build_adapter


def run_bot(config: BotConfig, server: IrcServer) -> None:
    """Connect to IRC and serve until interrupted."""
    logger = logging.getLogger("ghircbot.bot")

    store = build_adapter(
        config.runtime.storage_adapter,
        path=config.runtime.state_file,
        default_delay=config.limits.delay,
        default_max_lines=config.limits.max_lines,
    )
    state = store.load()

    rejoin = None
    if config.runtime.rejoin_file:
        rejoin = RejoinFile(config.runtime.rejoin_file)
        rejoin.load()

    token = config.github.resolve_token()
    client = None
    if token:
        client = build_adapter(
            config.runtime.github_adapter,
            token=token,
            api_base=str(config.github.api_base),
            timeout_seconds=config.github.timeout_seconds,
        )
    else:
        logger.info("No GitHub token, references will only be expanded to URLs")

    date_parser = build_adapter(config.runtime.date_parser)
    worker = BackgroundWorker(max_workers=config.limits.workers)
    bot = IrcBot(server, config.irc.nick, config.irc.realname, worker, rejoin)
    bot.attach(
        Dispatcher(
            state=state,
            store=store,
            worker=worker,
            transport=bot,
            date_parser=date_parser,
            client=client,
            rate_limiter=RateLimiter(config.limits.max_rate, config.limits.rate_period_minutes),
            nick=config.irc.nick,
            server=server.host,
            default_owner=config.github.default_owner,
        )
    )

    logger.info(
        "Starting bot",
        extra={"server": server.host, "port": server.port, "ssl": server.ssl, "state_file": config.runtime.state_file},
    )
    try:
        bot.start()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        bot.die("Bye")
    finally:
        worker.shutdown(wait=False)
        for resource in (client, rejoin, store):
            close = getattr(resource, "close", None)
            if callable(close):
                close()
