from __future__ import annotations

import argparse
import getpass
import logging
import netrc
from dataclasses import replace
from pathlib import Path
from typing import Any

from ghircbot.config.loader import load_config
from ghircbot.config.models import IrcServer
from ghircbot.core.errors import AdapterError, ConfigError, StateFileError
from ghircbot.logging.setup import configure_logging
from ghircbot.plugins.registry import build_adapter


def resolve_credentials(server: IrcServer) -> IrcServer:
    """Fill in a missing IRC login or password from ~/.netrc, else prompt."""
    user, password = server.user, server.password
    if user is None or password is None:
        try:
            entry = netrc.netrc().authenticators(server.host)
        except (OSError, netrc.NetrcParseError):
            entry = None
        if entry is not None:
            login, _, secret = entry
            if user is None:
                user, password = login, secret
            elif login == user:
                password = secret
    if user is not None and password is None:
        password = getpass.getpass(f'IRC password for user "{user}": ')
    return replace(server, user=user, password=password)


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    return {
        "runtime": {
            "state_file": args.map_file,
            "rejoin_file": getattr(args, "rejoin_file", None),
            "log_level": "DEBUG" if getattr(args, "verbose", False) else None,
        },
        "irc": {
            "url": getattr(args, "url", None),
            "nick": getattr(args, "nick", None),
            "realname": getattr(args, "realname", None),
        },
        "github": {"token_file": getattr(args, "token_file", None)},
    }


def _check_state(path: str) -> None:
    if not Path(path).is_file():
        raise StateFileError(f"{path}: no such file")
    store = build_adapter("ghircbot.adapters.storage.mapfile:MapFileStore", path=path)
    try:
        state = store.load()
    finally:
        store.close()
    print(f"{path}: {len(state.channels)} channel(s), {len(state.aliases)} alias(es)")
    for name in sorted(state.channels):
        channel = state.channels[name]
        repositories = " ".join(channel.repositories) or "-"
        print(f"  {name}: {repositories}")


def main() -> None:
    parser = argparse.ArgumentParser(description="IRC bot for GitHub issue references")
    parser.add_argument("--config", default=None, help="Path to config YAML file")
    sub = parser.add_subparsers(dest="command", required=True)

    run_p = sub.add_parser("run", help="Connect to IRC and run the bot")
    run_p.add_argument("url", nargs="?", default=None, help="irc[s]://[user[:password]@]host[:port][/channel]")
    run_p.add_argument("-n", dest="nick", default=None, help="IRC nickname (default gb)")
    run_p.add_argument("-N", dest="realname", default=None, help="IRC real name")
    run_p.add_argument("-m", dest="map_file", default=None, help="State (map) file")
    run_p.add_argument("-r", dest="rejoin_file", default=None, help="File of channels to rejoin")
    run_p.add_argument("-t", dest="token_file", default=None, help="File containing a GitHub token")
    run_p.add_argument("-v", dest="verbose", action="store_true", help="Log debug output")

    check_p = sub.add_parser("check-state", help="Parse a state file and summarise it")
    check_p.add_argument("-m", dest="map_file", default=None, help="State (map) file")

    args = parser.parse_args()
    logger = logging.getLogger("CLI")
    try:
        if args.command == "run":
            config = load_config(args.config, _overrides(args))
            configure_logging(config.runtime.log_level)
            logger.info("Loaded configuration", extra={"nick": config.irc.nick})
            server = resolve_credentials(config.irc.server)
            from ghircbot.bot import run_bot

            run_bot(config, server)
        elif args.command == "check-state":
            configure_logging("WARNING")
            path = args.map_file
            if path is None and args.config is not None:
                path = load_config(args.config).runtime.state_file
            _check_state(path or "ghurlbot.map")
    except (ConfigError, AdapterError, StateFileError) as exc:
        logger.error("Fatal error: %s", exc)
        raise SystemExit(1) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unhandled error")
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
