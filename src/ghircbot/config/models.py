from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote

from pydantic import BaseModel, Field, HttpUrl, field_validator

from ghircbot.core.errors import ConfigError
from ghircbot.core.state import DEFAULT_DELAY, DEFAULT_MAX_LINES, MAX_LINES_CEILING
from ghircbot.engine.rate_limit import MAX_RATE, RATE_PERIOD_MINUTES

_IRC_URL = re.compile(
    r"^(?P<scheme>ircs?)://"
    r"(?:(?P<user>[^:@/?#]+)(?::(?P<password>[^@/?#]*))?@)?"
    r"(?P<host>[^:/#?]+)(?::(?P<port>[^/]*))?"
    r"(?:/(?P<channel>.+)?)?$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class IrcServer:
    host: str
    port: int
    ssl: bool
    user: str | None = None
    password: str | None = None
    channel: str | None = None


def parse_irc_url(url: str) -> IrcServer:
    """Split irc[s]://[user[:password]@]host[:port][/channel] into its parts."""
    match = _IRC_URL.match(url)
    if not match:
        raise ConfigError("The IRC URL must start with 'irc:' or 'ircs:'")
    ssl = match.group("scheme").lower() == "ircs"
    port_text = match.group("port")
    if port_text and not port_text.isdigit():
        raise ConfigError(f"Invalid port in IRC URL: {port_text}")
    user = match.group("user")
    password = match.group("password")
    channel = match.group("channel")
    if channel is not None:
        channel = unquote(channel)
        if not channel.startswith(("#", "&")):
            channel = "#" + channel
    return IrcServer(
        host=match.group("host"),
        port=int(port_text) if port_text else (6697 if ssl else 6667),
        ssl=ssl,
        user=unquote(user) if user is not None else None,
        password=unquote(password) if password is not None else None,
        channel=channel,
    )


class RuntimeConfig(BaseModel):
    log_level: str = "INFO"
    state_file: str = "ghurlbot.map"
    rejoin_file: str | None = None
    github_adapter: str = "ghircbot.adapters.github.rest:GitHubRestClient"
    storage_adapter: str = "ghircbot.adapters.storage.mapfile:MapFileStore"
    date_parser: str = "ghircbot.adapters.dates:DateparserParser"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        if value.upper() not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("Unsupported log level")
        return value.upper()


class IrcConfig(BaseModel):
    url: str
    nick: str = "gb"
    realname: str = "ghircbot, https://w3c.github.io/GHURLBot"

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        try:
            parse_irc_url(value)
        except ConfigError as exc:
            raise ValueError(str(exc)) from exc
        return value

    @field_validator("nick")
    @classmethod
    def validate_nick(cls, value: str) -> str:
        if not value or " " in value:
            raise ValueError("irc.nick must be a single word")
        return value

    @property
    def server(self) -> IrcServer:
        return parse_irc_url(self.url)


class GitHubConfig(BaseModel):
    token: str | None = None
    token_file: str | None = None
    api_base: HttpUrl = Field(default="https://api.github.com")
    timeout_seconds: float = 10.0
    default_owner: str | None = None

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be positive")
        return value

    def resolve_token(self) -> str | None:
        """The token itself, or the first line of token_file."""
        if self.token:
            return self.token.strip()
        if not self.token_file:
            return None
        try:
            lines = Path(self.token_file).read_text(encoding="utf-8").splitlines()
        except OSError as exc:
            raise ConfigError(f"Failed to read token file: {self.token_file}") from exc
        token = lines[0].strip() if lines else ""
        if not token:
            raise ConfigError(f"Token file is empty: {self.token_file}")
        return token


class LimitsConfig(BaseModel):
    delay: int = DEFAULT_DELAY
    max_lines: int = DEFAULT_MAX_LINES
    max_rate: int = MAX_RATE
    rate_period_minutes: float = RATE_PERIOD_MINUTES
    workers: int = 4

    @field_validator("delay")
    @classmethod
    def validate_delay(cls, value: int) -> int:
        if value < 0:
            raise ValueError("limits.delay must be non-negative")
        return value

    @field_validator("max_lines")
    @classmethod
    def validate_max_lines(cls, value: int) -> int:
        if not 0 < value <= MAX_LINES_CEILING:
            raise ValueError(f"limits.max_lines must be between 1 and {MAX_LINES_CEILING}")
        return value

    @field_validator("max_rate", "workers")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("rate_period_minutes")
    @classmethod
    def validate_period(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("limits.rate_period_minutes must be positive")
        return value


class BotConfig(BaseModel):
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    irc: IrcConfig
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
