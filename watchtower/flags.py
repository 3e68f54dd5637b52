"""Command-line flags, their environment-backed defaults and the processing applied to them."""

from __future__ import annotations

import csv
import enum
import io
import logging
import os
import re
from collections import deque
from collections.abc import Iterable, Mapping, MutableMapping
from dataclasses import dataclass, field
from datetime import timedelta
from fractions import Fraction
from pathlib import Path
from typing import Any, Optional

_log = logging.getLogger(__name__)

DOCKER_API_MIN_VERSION = "1.25"
"""The minimum Docker API version required."""

DEFAULT_INTERVAL = int(timedelta(hours=24).total_seconds())
"""The default poll interval, in seconds."""

SUPPORTED_PORCELAIN = "v1"

_SECRET_FLAGS = (
    "notification-email-server-password",
    "notification-slack-hook-url",
    "notification-msteams-hook",
    "notification-gotify-token",
    "notification-url",
)

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_OCTAL = re.compile(r"[+-]?0[0-7]+")

# Unit sizes in microseconds.
_DURATION_UNITS = {
    "ns": Fraction(1, 1000),
    "us": Fraction(1),
    "µs": Fraction(1),
    "μs": Fraction(1),
    "ms": Fraction(1000),
    "s": Fraction(10**6),
    "m": Fraction(60 * 10**6),
    "h": Fraction(3600 * 10**6),
}
_DURATION_COMPONENT = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_DURATION_UNIT_CHARS = frozenset("nsuµμmh")


class FlagError(Exception):
    """Raised when flags are undefined, malformed or combined in an invalid way."""


class FlagKind(enum.Enum):
    """The type of value a flag holds."""

    BOOL = "bool"
    STRING = "string"
    INT = "int"
    DURATION = "duration"
    STRING_SLICE = "stringSlice"
    STRING_ARRAY = "stringArray"

    @property
    def is_slice(self) -> bool:
        """Whether the flag holds a list of strings."""
        return self in (FlagKind.STRING_SLICE, FlagKind.STRING_ARRAY)


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``10s``, ``1h30m`` or ``1.5h``."""
    body = text
    negative = False
    if body and body[0] in "+-":
        negative = body[0] == "-"
        body = body[1:]
    if body == "0":
        return timedelta(0)
    if not body:
        raise FlagError(f'invalid duration "{text}"')

    total = Fraction(0)
    position = 0
    while position < len(body):
        match = _DURATION_COMPONENT.match(body, position)
        if match is None:
            raise FlagError(f'invalid duration "{text}"')
        total += Fraction(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()

    microseconds = round(total)
    return timedelta(microseconds=-microseconds if negative else microseconds)


def _trim_fraction(value: int, unit: int) -> str:
    whole, remainder = divmod(value, unit)
    if not remainder:
        return str(whole)
    digits = len(str(unit)) - 1
    return f"{whole}.{str(remainder).zfill(digits).rstrip('0')}"


def _format_duration(duration: timedelta) -> str:
    microseconds = duration // timedelta(microseconds=1)
    if microseconds == 0:
        return "0s"
    sign = "-" if microseconds < 0 else ""
    microseconds = abs(microseconds)
    if microseconds < 1000:
        return f"{sign}{microseconds}µs"
    if microseconds < 10**6:
        return f"{sign}{_trim_fraction(microseconds, 1000)}ms"
    hours, remainder = divmod(microseconds, 3600 * 10**6)
    minutes, remainder = divmod(remainder, 60 * 10**6)
    seconds = _trim_fraction(remainder, 10**6) + "s"
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}"
    if minutes:
        return f"{sign}{minutes}m{seconds}"
    return sign + seconds


def _parse_bool(text: str) -> bool:
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise FlagError(f'invalid boolean value "{text}"')


def _parse_int(text: str) -> int:
    if _OCTAL.fullmatch(text):
        return int(text, 8)
    try:
        return int(text, 0)
    except ValueError:
        raise FlagError(f'invalid integer value "{text}"') from None


def _read_csv(text: str) -> list[str]:
    if text == "":
        return []
    try:
        return next(csv.reader([text]))
    except (csv.Error, StopIteration) as err:
        raise FlagError(f'invalid list value "{text}": {err}') from err


def _write_csv(values: Iterable[str]) -> str:
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="").writerow(list(values))
    return buffer.getvalue()


def _normalise(kind: FlagKind, value: Any) -> Any:
    if kind is FlagKind.BOOL:
        return _parse_bool(value) if isinstance(value, str) else bool(value)
    if kind is FlagKind.INT:
        return _parse_int(value) if isinstance(value, str) else int(value or 0)
    if kind is FlagKind.DURATION:
        if isinstance(value, timedelta):
            return value
        return parse_duration(value) if isinstance(value, str) else timedelta(0)
    if kind.is_slice:
        return list(value or ())
    return "" if value is None else str(value)


@dataclass
class Flag:
    """A named command-line option with its current value."""

    name: str
    kind: FlagKind
    default: Any = None
    usage: str = ""
    shorthand: str = ""
    value: Any = field(init=False)
    changed: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        self.default = _normalise(self.kind, self.default)
        self.value = list(self.default) if self.kind.is_slice else self.default

    def value_string(self) -> str:
        """The current value rendered as text."""
        if self.kind is FlagKind.BOOL:
            return "true" if self.value else "false"
        if self.kind is FlagKind.INT:
            return str(self.value)
        if self.kind is FlagKind.DURATION:
            return _format_duration(self.value)
        if self.kind.is_slice:
            return "[" + _write_csv(self.value) + "]"
        return self.value


class FlagSet:
    """A collection of flags that can be parsed from command-line arguments."""

    def __init__(self) -> None:
        self._flags: dict[str, Flag] = {}
        self._shorthands: dict[str, Flag] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._flags

    def __iter__(self):
        return iter(self._flags.values())

    def add(self, name: str, kind: FlagKind, default: Any = None, usage: str = "", shorthand: str = "") -> Flag:
        """Define a new flag and return it."""
        if name in self._flags:
            raise FlagError(f"flag redefined: {name}")
        if len(shorthand) > 1:
            raise FlagError(f'shorthand "{shorthand}" for flag {name} is more than one character')
        if shorthand and shorthand in self._shorthands:
            raise FlagError(f"unable to redefine shorthand {shorthand!r} for flag {name}")
        flag = Flag(name, kind, default, usage, shorthand)
        self._flags[name] = flag
        if shorthand:
            self._shorthands[shorthand] = flag
        return flag

    def lookup(self, name: str) -> Optional[Flag]:
        """Return the flag called ``name``, or ``None`` if it is not defined."""
        return self._flags.get(name)

    def _require(self, name: str) -> Flag:
        flag = self._flags.get(name)
        if flag is None:
            raise FlagError(f"flag accessed but not defined: {name}")
        return flag

    def get(self, name: str) -> Any:
        """Return the current value of a flag."""
        flag = self._require(name)
        return list(flag.value) if flag.kind.is_slice else flag.value

    def set(self, name: str, value: str) -> None:
        """Set a flag from its textual form and mark it as changed."""
        flag = self._require(name)
        if flag.kind is FlagKind.STRING_SLICE:
            items = _read_csv(value)
            flag.value = flag.value + items if flag.changed else items
        elif flag.kind is FlagKind.STRING_ARRAY:
            flag.value = flag.value + [value] if flag.changed else [value]
        else:
            flag.value = _normalise(flag.kind, value)
        flag.changed = True

    def changed(self, name: str) -> bool:
        """Whether the flag was set explicitly."""
        return self._require(name).changed

    def append(self, name: str, value: str) -> None:
        """Append a value to a list flag without marking it as changed."""
        flag = self._require(name)
        if not flag.kind.is_slice:
            raise FlagError(f'the value for flag "{name}" is not a slice value')
        flag.value = flag.value + [value]

    def replace(self, name: str, values: Iterable[str]) -> None:
        """Replace the values of a list flag without marking it as changed."""
        flag = self._require(name)
        if not flag.kind.is_slice:
            raise FlagError(f'the value for flag "{name}" is not a slice value')
        flag.value = list(values)

    def parse(self, args: Iterable[str]) -> list[str]:
        """Parse command-line arguments, setting flags and returning the positional arguments."""
        queue = deque(args)
        positional: list[str] = []
        while queue:
            arg = queue.popleft()
            if arg == "--":
                positional.extend(queue)
                break
            if arg.startswith("--"):
                self._parse_long(arg[2:], queue)
            elif arg.startswith("-") and len(arg) > 1:
                self._parse_short(arg[1:], queue)
            else:
                positional.append(arg)
        return positional

    def _parse_long(self, body: str, queue: deque) -> None:
        name, separator, value = body.partition("=")
        flag = self._flags.get(name)
        if flag is None:
            raise FlagError(f"unknown flag: --{name}")
        if separator:
            self.set(name, value)
        elif flag.kind is FlagKind.BOOL:
            self.set(name, "true")
        elif queue:
            self.set(name, queue.popleft())
        else:
            raise FlagError(f"flag needs an argument: --{name}")

    def _parse_short(self, shorthands: str, queue: deque) -> None:
        while shorthands:
            char, shorthands = shorthands[0], shorthands[1:]
            flag = self._shorthands.get(char)
            if flag is None:
                raise FlagError(f"unknown shorthand flag: {char!r} in -{char}{shorthands}")
            if shorthands.startswith("="):
                self.set(flag.name, shorthands[1:])
                return
            if flag.kind is FlagKind.BOOL:
                self.set(flag.name, "true")
                continue
            if shorthands:
                self.set(flag.name, shorthands)
            elif queue:
                self.set(flag.name, queue.popleft())
            else:
                raise FlagError(f"flag needs an argument: {char!r} in -{char}")
            return


class Environment:
    """Configuration values read from environment variables, falling back to defaults."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None, defaults: Optional[Mapping[str, Any]] = None) -> None:
        self._environ = os.environ if environ is None else environ
        self._defaults = {key.upper(): value for key, value in (defaults or {}).items()}

    def _raw(self, key: str) -> Any:
        value = self._environ.get(key.upper())
        if value:
            return value
        return self._defaults.get(key.upper())

    def get_string(self, key: str) -> str:
        """The value as a string, empty when unset."""
        raw = self._raw(key)
        if raw is None or isinstance(raw, (list, tuple)):
            return ""
        if isinstance(raw, bool):
            return "true" if raw else "false"
        if isinstance(raw, timedelta):
            return _format_duration(raw)
        return str(raw)

    def get_bool(self, key: str) -> bool:
        """The value as a boolean, false when unset or invalid."""
        raw = self._raw(key)
        if isinstance(raw, str):
            return raw in _TRUE_VALUES
        if isinstance(raw, (bool, int)):
            return bool(raw)
        return False

    def get_int(self, key: str) -> int:
        """The value as an integer, 0 when unset or invalid."""
        raw = self._raw(key)
        if isinstance(raw, str):
            try:
                return _parse_int(raw)
            except FlagError:
                return 0
        if isinstance(raw, (bool, int)):
            return int(raw)
        return 0

    def get_duration(self, key: str) -> timedelta:
        """The value as a duration; plain numbers count nanoseconds. Zero when unset or invalid."""
        raw = self._raw(key)
        if isinstance(raw, timedelta):
            return raw
        if isinstance(raw, str):
            text = raw if _DURATION_UNIT_CHARS.intersection(raw) else raw + "ns"
            try:
                return parse_duration(text)
            except FlagError:
                return timedelta(0)
        if isinstance(raw, int) and not isinstance(raw, bool):
            return timedelta(microseconds=round(Fraction(raw, 1000)))
        return timedelta(0)

    def get_string_slice(self, key: str) -> list[str]:
        """The value as a list of strings; text is split on whitespace."""
        raw = self._raw(key)
        if isinstance(raw, str):
            return raw.split()
        if isinstance(raw, (list, tuple)):
            return [str(item) for item in raw]
        return []

    def is_set(self, key: str) -> bool:
        """Whether the key has a non-empty environment value or a default."""
        return bool(self._environ.get(key.upper())) or key.upper() in self._defaults


def set_defaults(environ: Optional[Mapping[str, str]] = None) -> Environment:
    """Return the environment lookup with the standard default values."""
    return Environment(
        environ,
        {
            "DOCKER_HOST": "unix:///var/run/docker.sock",
            "DOCKER_API_VERSION": DOCKER_API_MIN_VERSION,
            "WATCHTOWER_POLL_INTERVAL": DEFAULT_INTERVAL,
            "WATCHTOWER_TIMEOUT": timedelta(seconds=10),
            "WATCHTOWER_NOTIFICATIONS": [],
            "WATCHTOWER_NOTIFICATIONS_LEVEL": "info",
            "WATCHTOWER_NOTIFICATION_EMAIL_SERVER_PORT": 25,
            "WATCHTOWER_NOTIFICATION_EMAIL_SUBJECTTAG": "",
            "WATCHTOWER_NOTIFICATION_SLACK_IDENTIFIER": "watchtower",
            "WATCHTOWER_LOG_LEVEL": "info",
        },
    )


def _env_value(env: Environment, kind: FlagKind, key: str) -> Any:
    if kind is FlagKind.BOOL:
        return env.get_bool(key)
    if kind is FlagKind.INT:
        return env.get_int(key)
    if kind is FlagKind.DURATION:
        return env.get_duration(key)
    if kind.is_slice:
        return env.get_string_slice(key)
    return env.get_string(key)


def _register(flags: FlagSet, env: Optional[Environment], specs: Iterable[tuple[str, str, FlagKind, str, str]]) -> None:
    env = env if env is not None else set_defaults()
    for name, shorthand, kind, key, usage in specs:
        flags.add(name, kind, _env_value(env, kind, key), usage, shorthand)


_B, _S, _I, _D = FlagKind.BOOL, FlagKind.STRING, FlagKind.INT, FlagKind.DURATION

_DOCKER_FLAGS = (
    ("host", "H", _S, "DOCKER_HOST", "daemon socket to connect to"),
    ("tlsverify", "v", _B, "DOCKER_TLS_VERIFY", "use TLS and verify the remote"),
    ("api-version", "a", _S, "DOCKER_API_VERSION", "api version to use by docker client"),
)

_SYSTEM_FLAGS = (
    ("interval", "i", _I, "WATCHTOWER_POLL_INTERVAL", "Poll interval (in seconds)"),
    ("schedule", "s", _S, "WATCHTOWER_SCHEDULE", "The cron expression which defines when to update"),
    ("stop-timeout", "t", _D, "WATCHTOWER_TIMEOUT", "Timeout before a container is forcefully stopped"),
    ("no-pull", "", _B, "WATCHTOWER_NO_PULL", "Do not pull any new images"),
    ("no-restart", "", _B, "WATCHTOWER_NO_RESTART", "Do not restart any containers"),
    ("no-startup-message", "", _B, "WATCHTOWER_NO_STARTUP_MESSAGE", "Prevents watchtower from sending a startup message"),
    ("cleanup", "c", _B, "WATCHTOWER_CLEANUP", "Remove previously used images after updating"),
    ("remove-volumes", "", _B, "WATCHTOWER_REMOVE_VOLUMES", "Remove attached volumes before updating"),
    ("label-enable", "e", _B, "WATCHTOWER_LABEL_ENABLE",
     "Watch containers where the com.centurylinklabs.watchtower.enable label is true"),
    ("debug", "d", _B, "WATCHTOWER_DEBUG", "Enable debug mode with verbose logging"),
    ("trace", "", _B, "WATCHTOWER_TRACE", "Enable trace mode with very verbose logging - caution, exposes credentials"),
    ("monitor-only", "m", _B, "WATCHTOWER_MONITOR_ONLY", "Will only monitor for new images, not update the containers"),
    ("run-once", "R", _B, "WATCHTOWER_RUN_ONCE", "Run once now and exit"),
    ("include-restarting", "", _B, "WATCHTOWER_INCLUDE_RESTARTING", "Will also include restarting containers"),
    ("include-stopped", "S", _B, "WATCHTOWER_INCLUDE_STOPPED", "Will also include created and exited containers"),
    ("revive-stopped", "", _B, "WATCHTOWER_REVIVE_STOPPED",
     "Will also start stopped containers that were updated, if include-stopped is active"),
    ("enable-lifecycle-hooks", "", _B, "WATCHTOWER_LIFECYCLE_HOOKS",
     "Enable the execution of commands triggered by pre- and post-update lifecycle hooks"),
    ("rolling-restart", "", _B, "WATCHTOWER_ROLLING_RESTART", "Restart containers one at a time"),
    ("http-api-update", "", _B, "WATCHTOWER_HTTP_API_UPDATE",
     "Runs Watchtower in HTTP API mode, so that image updates must to be triggered by a request"),
    ("http-api-metrics", "", _B, "WATCHTOWER_HTTP_API_METRICS", "Runs Watchtower with the Prometheus metrics API enabled"),
    ("http-api-token", "", _S, "WATCHTOWER_HTTP_API_TOKEN", "Sets an authentication token to HTTP API requests."),
    ("http-api-periodic-polls", "", _B, "WATCHTOWER_HTTP_API_PERIODIC_POLLS",
     "Also run periodic updates (specified with --interval and --schedule) if HTTP API is enabled"),
)

_SYSTEM_FLAGS_AFTER_COLOR = (
    ("scope", "", _S, "WATCHTOWER_SCOPE", "Defines a monitoring scope for the Watchtower instance."),
    ("porcelain", "P", _S, "WATCHTOWER_PORCELAIN",
     'Write session results to stdout using a stable versioned format. Supported values: "v1"'),
    ("log-level", "", _S, "WATCHTOWER_LOG_LEVEL",
     "The maximum log level that will be written to STDERR. "
     "Possible values: panic, fatal, error, warn, info, debug or trace"),
)

_NOTIFICATION_FLAGS = (
    ("notifications", "n", FlagKind.STRING_SLICE, "WATCHTOWER_NOTIFICATIONS",
     " Notification types to send (valid: email, slack, msteams, gotify, shoutrrr)"),
    ("notifications-level", "", _S, "WATCHTOWER_NOTIFICATIONS_LEVEL",
     "The log level used for sending notifications. Possible values: panic, fatal, error, warn, info or debug"),
    ("notifications-delay", "", _I, "WATCHTOWER_NOTIFICATIONS_DELAY",
     "Delay before sending notifications, expressed in seconds"),
    ("notifications-hostname", "", _S, "WATCHTOWER_NOTIFICATIONS_HOSTNAME", "Custom hostname for notification titles"),
    ("notification-email-from", "", _S, "WATCHTOWER_NOTIFICATION_EMAIL_FROM", "Address to send notification emails from"),
    ("notification-email-to", "", _S, "WATCHTOWER_NOTIFICATION_EMAIL_TO", "Address to send notification emails to"),
    ("notification-email-delay", "", _I, "WATCHTOWER_NOTIFICATION_EMAIL_DELAY",
     "Delay before sending notifications, expressed in seconds"),
    ("notification-email-server", "", _S, "WATCHTOWER_NOTIFICATION_EMAIL_SERVER",
     "SMTP server to send notification emails through"),
    ("notification-email-server-port", "", _I, "WATCHTOWER_NOTIFICATION_EMAIL_SERVER_PORT",
     "SMTP server port to send notification emails through"),
    ("notification-email-server-tls-skip-verify", "", _B, "WATCHTOWER_NOTIFICATION_EMAIL_SERVER_TLS_SKIP_VERIFY",
     "Controls whether watchtower verifies the SMTP server's certificate chain and host name.\n"
     "Should only be used for testing."),
    ("notification-email-server-user", "", _S, "WATCHTOWER_NOTIFICATION_EMAIL_SERVER_USER",
     "SMTP server user for sending notifications"),
    ("notification-email-server-password", "", _S, "WATCHTOWER_NOTIFICATION_EMAIL_SERVER_PASSWORD",
     "SMTP server password for sending notifications"),
    ("notification-email-subjecttag", "", _S, "WATCHTOWER_NOTIFICATION_EMAIL_SUBJECTTAG",
     "Subject prefix tag for notifications via mail"),
    ("notification-slack-hook-url", "", _S, "WATCHTOWER_NOTIFICATION_SLACK_HOOK_URL",
     "The Slack Hook URL to send notifications to"),
    ("notification-slack-identifier", "", _S, "WATCHTOWER_NOTIFICATION_SLACK_IDENTIFIER",
     "A string which will be used to identify the messages coming from this watchtower instance"),
    ("notification-slack-channel", "", _S, "WATCHTOWER_NOTIFICATION_SLACK_CHANNEL",
     "A string which overrides the webhook's default channel. Example: #my-custom-channel"),
    ("notification-slack-icon-emoji", "", _S, "WATCHTOWER_NOTIFICATION_SLACK_ICON_EMOJI",
     "An emoji code string to use in place of the default icon"),
    ("notification-slack-icon-url", "", _S, "WATCHTOWER_NOTIFICATION_SLACK_ICON_URL",
     "An icon image URL string to use in place of the default icon"),
    ("notification-msteams-hook", "", _S, "WATCHTOWER_NOTIFICATION_MSTEAMS_HOOK_URL",
     "The MSTeams WebHook URL to send notifications to"),
    ("notification-msteams-data", "", _B, "WATCHTOWER_NOTIFICATION_MSTEAMS_USE_LOG_DATA",
     "The MSTeams notifier will try to extract log entry fields as MSTeams message facts"),
    ("notification-gotify-url", "", _S, "WATCHTOWER_NOTIFICATION_GOTIFY_URL", "The Gotify URL to send notifications to"),
    ("notification-gotify-token", "", _S, "WATCHTOWER_NOTIFICATION_GOTIFY_TOKEN",
     "The Gotify Application required to query the Gotify API"),
    ("notification-gotify-tls-skip-verify", "", _B, "WATCHTOWER_NOTIFICATION_GOTIFY_TLS_SKIP_VERIFY",
     "Controls whether watchtower verifies the Gotify server's certificate chain and host name.\n"
     "Should only be used for testing."),
    ("notification-template", "", _S, "WATCHTOWER_NOTIFICATION_TEMPLATE", "The shoutrrr text/template for the messages"),
    ("notification-url", "", FlagKind.STRING_ARRAY, "WATCHTOWER_NOTIFICATION_URL",
     "The shoutrrr URL to send notifications to"),
    ("notification-report", "", _B, "WATCHTOWER_NOTIFICATION_REPORT",
     "Use the session report as the notification template data"),
    ("notification-title-tag", "", _S, "WATCHTOWER_NOTIFICATION_TITLE_TAG", "Title prefix tag for notifications"),
    ("notification-skip-title", "", _B, "WATCHTOWER_NOTIFICATION_SKIP_TITLE",
     "Do not pass the title param to notifications"),
    ("warn-on-head-failure", "", _S, "WATCHTOWER_WARN_ON_HEAD_FAILURE",
     "When to warn about HEAD pull requests failing. Possible values: always, auto or never"),
    ("notification-log-stdout", "", _B, "WATCHTOWER_NOTIFICATION_LOG_STDOUT",
     "Write notification logs to stdout instead of logging (to stderr)"),
)


def register_docker_flags(flags: FlagSet, env: Optional[Environment] = None) -> None:
    """Register the flags used by the Docker API client."""
    _register(flags, env, _DOCKER_FLAGS)


def register_system_flags(flags: FlagSet, env: Optional[Environment] = None) -> None:
    """Register the flags that control the program flow."""
    env = env if env is not None else set_defaults()
    _register(flags, env, _SYSTEM_FLAGS)
    flags.add("no-color", FlagKind.BOOL, env.is_set("NO_COLOR"), "Disable ANSI color escape codes in log output")
    _register(flags, env, _SYSTEM_FLAGS_AFTER_COLOR)


def register_notification_flags(flags: FlagSet, env: Optional[Environment] = None) -> None:
    """Register the flags that configure notifications."""
    _register(flags, env, _NOTIFICATION_FLAGS)


def _set_env_opt(environ: MutableMapping[str, str], key: str, value: str) -> None:
    if value == "" or value == environ.get(key):
        return
    environ[key] = value


def env_config(flags: FlagSet, environ: Optional[MutableMapping[str, str]] = None) -> None:
    """Export the Docker connection flags as the environment variables the client reads."""
    environ = os.environ if environ is None else environ
    host = _typed_get(flags, "host", FlagKind.STRING)
    tls = _typed_get(flags, "tlsverify", FlagKind.BOOL)
    version = _typed_get(flags, "api-version", FlagKind.STRING)
    _set_env_opt(environ, "DOCKER_HOST", host)
    if tls:
        _set_env_opt(environ, "DOCKER_TLS_VERIFY", "1")
    _set_env_opt(environ, "DOCKER_API_VERSION", version)


def _typed_get(flags: FlagSet, name: str, kind: FlagKind) -> Any:
    flag = flags.lookup(name)
    if flag is None:
        raise FlagError(f'The flag "{name}" is not defined')
    if flag.kind is not kind:
        raise FlagError(f'trying to get {kind.value} value of flag of type {flag.kind.value}')
    return flags.get(name)


def read_flags(flags: FlagSet) -> tuple[bool, bool, bool, timedelta]:
    """Return the cleanup, no-restart, monitor-only and stop-timeout settings."""
    return (
        _typed_get(flags, "cleanup", FlagKind.BOOL),
        _typed_get(flags, "no-restart", FlagKind.BOOL),
        _typed_get(flags, "monitor-only", FlagKind.BOOL),
        _typed_get(flags, "stop-timeout", FlagKind.DURATION),
    )


def is_file(path: str) -> bool:
    """Whether ``path`` looks like a path to something that exists."""
    first_colon = path.find(":")
    if first_colon not in (1, -1):
        # A colon anywhere but after a drive letter means this is probably not a path.
        return False
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    except ValueError:
        return False
    except OSError:
        return True
    return True


def _read_secret(path: str) -> str:
    try:
        return Path(path).read_text()
    except OSError as err:
        raise FlagError(f"failed to read secret from {path}: {err}") from err


def get_secrets_from_files(flags: FlagSet) -> None:
    """Replace secret flag values that name a file with the contents of that file."""
    for secret in _SECRET_FLAGS:
        flag = flags.lookup(secret)
        if flag is None:
            raise FlagError(f'The flag "{secret}" is not defined')
        if flag.kind.is_slice:
            values: list[str] = []
            for value in flag.value:
                if value != "" and is_file(value):
                    lines = (line.rstrip("\r") for line in _read_secret(value).split("\n"))
                    values.extend(line for line in lines if line)
                else:
                    values.append(value)
            flags.replace(secret, values)
            continue

        value = flag.value_string()
        if value != "" and is_file(value):
            flags.set(secret, _read_secret(value).strip())


def _set_flag_if_default(flags: FlagSet, name: str, value: str) -> None:
    if flags.changed(name):
        return
    try:
        flags.set(name, value)
    except FlagError as err:
        _log.error("Failed to set flag: %s", err)


def process_flag_aliases(flags: FlagSet) -> None:
    """Apply the flags that act as shorthands for other flags, and derive the schedule."""
    porcelain = _typed_get(flags, "porcelain", FlagKind.STRING)
    if porcelain != "":
        if porcelain != SUPPORTED_PORCELAIN:
            raise FlagError(f'Unknown porcelain version "{porcelain}". Supported values: "{SUPPORTED_PORCELAIN}"')
        try:
            flags.append("notification-url", "logger://")
        except FlagError as err:
            _log.error("Failed to set flag: %s", err)
        _set_flag_if_default(flags, "notification-log-stdout", "true")
        _set_flag_if_default(flags, "notification-report", "true")
        _set_flag_if_default(flags, "notification-template", f"porcelain.{porcelain}.summary-no-log")

    # Defaults come from the environment, so a non-default value counts as set too.
    schedule_changed = flags.changed("schedule") or _typed_get(flags, "schedule", FlagKind.STRING) != ""
    interval = _typed_get(flags, "interval", FlagKind.INT)
    interval_changed = flags.changed("interval") or interval != DEFAULT_INTERVAL

    if interval_changed and schedule_changed:
        raise FlagError("Only schedule or interval can be defined, not both.")

    if interval_changed or not schedule_changed:
        flags.set("schedule", f"@every {interval}s")

    if _typed_get(flags, "debug", FlagKind.BOOL):
        flags.set("log-level", "debug")
    if _typed_get(flags, "trace", FlagKind.BOOL):
        flags.set("log-level", "trace")