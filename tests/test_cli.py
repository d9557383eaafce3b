from __future__ import annotations

import logging
import sys

import pytest

from ghircbot import cli
from ghircbot.config.models import IrcServer


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class _FakeNetrc:
    def __init__(self, entries: dict[str, tuple[str, str, str]]) -> None:
        self.entries = entries

    def authenticators(self, host: str):
        return self.entries.get(host)


def _server(**kwargs) -> IrcServer:
    return IrcServer(host="irc.w3.org", port=6697, ssl=True, **kwargs)


def test_netrc_supplies_login_and_password(monkeypatch) -> None:
    monkeypatch.setattr(cli.netrc, "netrc", lambda: _FakeNetrc({"irc.w3.org": ("gb", "", "s3cret")}))

    server = cli.resolve_credentials(_server())

    assert (server.user, server.password) == ("gb", "s3cret")


def test_netrc_password_must_match_user(monkeypatch) -> None:
    prompts: list[str] = []
    monkeypatch.setattr(cli.netrc, "netrc", lambda: _FakeNetrc({"irc.w3.org": ("other", "", "nope")}))
    monkeypatch.setattr(cli.getpass, "getpass", lambda prompt: prompts.append(prompt) or "typed")

    server = cli.resolve_credentials(_server(user="gb"))

    assert server.password == "typed"
    assert prompts == ['IRC password for user "gb": ']


def test_no_netrc_and_no_user_means_no_login(monkeypatch) -> None:
    def missing():
        raise FileNotFoundError("~/.netrc")

    monkeypatch.setattr(cli.netrc, "netrc", missing)

    server = cli.resolve_credentials(_server())

    assert server.user is None and server.password is None


def test_check_state_summarises_file(tmp_path, monkeypatch, capsys) -> None:
    path = tmp_path / "bot.map"
    path.write_text("channel #aria\nrepo https://github.com/w3c/aria\n\nalias a b\n", encoding="utf-8")
    monkeypatch.setattr(sys, "argv", ["ghircbot", "check-state", "-m", str(path)])

    cli.main()

    out = capsys.readouterr().out
    assert "1 channel(s), 1 alias(es)" in out
    assert "#aria: https://github.com/w3c/aria" in out


def test_check_state_refuses_bad_file(tmp_path, monkeypatch) -> None:
    path = tmp_path / "bot.map"
    path.write_text("delay 3\n", encoding="utf-8")
    monkeypatch.setattr(sys, "argv", ["ghircbot", "check-state", "-m", str(path)])

    with pytest.raises(SystemExit) as excinfo:
        cli.main()

    assert excinfo.value.code == 1
