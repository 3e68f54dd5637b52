from datetime import timedelta

import pytest

from watchtower.flags import (
    Environment,
    FlagError,
    FlagKind,
    FlagSet,
    env_config,
    get_secrets_from_files,
    is_file,
    parse_duration,
    process_flag_aliases,
    read_flags,
    register_docker_flags,
    register_notification_flags,
    register_system_flags,
    set_defaults,
)

ALL_REGISTRATIONS = (register_docker_flags, register_system_flags, register_notification_flags)


def make_flags(environ=None, registrations=ALL_REGISTRATIONS, args=()):
    env = set_defaults({} if environ is None else environ)
    flags = FlagSet()
    for register in registrations:
        register(flags, env)
    flags.parse(list(args))
    return flags


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)


def test_env_config_defaults():
    flags = make_flags(registrations=(register_docker_flags,))
    environ = {}
    env_config(flags, environ)
    assert environ["DOCKER_HOST"] == "unix:///var/run/docker.sock"
    assert environ.get("DOCKER_TLS_VERIFY", "") == ""
    assert environ["DOCKER_API_VERSION"] == "1.25"


def test_env_config_custom():
    flags = make_flags(
        registrations=(register_docker_flags,),
        args=["--host", "some-custom-docker-host", "--tlsverify", "--api-version", "1.99"],
    )
    environ = {}
    env_config(flags, environ)
    assert environ["DOCKER_HOST"] == "some-custom-docker-host"
    assert environ["DOCKER_TLS_VERIFY"] == "1"
    assert environ["DOCKER_API_VERSION"] == "1.99"


def test_secret_from_string():
    flags = make_flags(
        {"WATCHTOWER_NOTIFICATION_EMAIL_SERVER_PASSWORD": "secret"},
        registrations=(register_notification_flags,),
    )
    get_secrets_from_files(flags)
    assert flags.lookup("notification-email-server-password").value_string() == "secret"


def test_secret_from_file(tmp_path):
    secret_file = tmp_path / "watchtower-secret"
    secret_file.write_text("secret")
    flags = make_flags(
        {"WATCHTOWER_NOTIFICATION_EMAIL_SERVER_PASSWORD": str(secret_file)},
        registrations=(register_notification_flags,),
    )
    get_secrets_from_files(flags)
    assert flags.lookup("notification-email-server-password").value_string() == "secret"
    assert flags.changed("notification-email-server-password") is True


def test_slice_secrets_from_file(tmp_path):
    url_file = tmp_path / "watchtower-urls"
    url_file.write_text("".join("\n" + value for value in ["entry2", "", "entry3"]))
    flags = make_flags(
        registrations=(register_notification_flags,),
        args=["--notification-url", "entry1", "--notification-url", str(url_file)],
    )
    get_secrets_from_files(flags)
    assert flags.lookup("notification-url").value_string() == "[entry1,entry2,entry3]"


def test_http_api_periodic_polls_flag():
    flags = make_flags(
        registrations=(register_docker_flags, register_system_flags),
        args=["--http-api-periodic-polls"],
    )
    assert flags.get("http-api-periodic-polls") is True


def test_is_file(tmp_path):
    existing = tmp_path / "present"
    existing.write_text("x")
    assert is_file("https://example.com") is False
    assert is_file(str(existing)) is True
    assert is_file(str(tmp_path / "absent")) is False


def test_process_flag_aliases():
    flags = make_flags(args=["--porcelain", "v1", "--interval", "10", "--trace"])
    process_flag_aliases(flags)
    assert "logger://" in flags.get("notification-url")
    assert flags.get("notification-log-stdout") is True
    assert flags.get("notification-report") is True
    assert flags.get("notification-template") == "porcelain.v1.summary-no-log"
    assert flags.get("schedule") == "@every 10s"
    assert flags.get("log-level") == "trace"


def test_process_flag_aliases_log_level_from_environment():
    flags = make_flags({"WATCHTOWER_DEBUG": "true"})
    process_flag_aliases(flags)
    assert flags.get("log-level") == "debug"


def test_process_flag_aliases_schedule_and_interval():
    flags = make_flags(args=["--schedule", "@hourly", "--interval", "10"])
    with pytest.raises(FlagError):
        process_flag_aliases(flags)


def test_process_flag_aliases_schedule_from_environment():
    flags = make_flags({"WATCHTOWER_SCHEDULE": "@hourly"})
    process_flag_aliases(flags)
    assert flags.get("schedule") == "@hourly"


def test_process_flag_aliases_invalid_porcelain_version():
    flags = make_flags(args=["--porcelain", "cowboy"])
    with pytest.raises(FlagError):
        process_flag_aliases(flags)


def test_process_flag_aliases_default_schedule():
    flags = make_flags()
    process_flag_aliases(flags)
    assert flags.get("schedule") == "@every 86400s"
    assert flags.get("log-level") == "info"


def test_porcelain_keeps_explicit_template():
    flags = make_flags(args=["--porcelain", "v1", "--notification-template", "custom"])
    process_flag_aliases(flags)
    assert flags.get("notification-template") == "custom"


def test_read_flags_defaults():
    flags = make_flags()
    assert read_flags(flags) == (False, False, False, timedelta(seconds=10))


def test_read_flags_from_arguments():
    flags = make_flags(args=["-c", "--monitor-only", "--stop-timeout", "1m30s"])
    assert read_flags(flags) == (True, False, True, timedelta(seconds=90))


@pytest.mark.parametrize(
    "text, expected",
    [
        ("10s", timedelta(seconds=10)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("1.5h", timedelta(minutes=90)),
        ("300ms", timedelta(milliseconds=300)),
        ("-2m", timedelta(minutes=-2)),
        ("0", timedelta(0)),
    ],
)
def test_parse_duration(text, expected):
    assert parse_duration(text) == expected


@pytest.mark.parametrize("text", ["", "10", "abc", "5x"])
def test_parse_duration_invalid(text):
    with pytest.raises(FlagError):
        parse_duration(text)


def test_duration_value_string():
    flags = make_flags(args=["--stop-timeout", "90s"])
    assert flags.lookup("stop-timeout").value_string() == "1m30s"
    assert make_flags().lookup("stop-timeout").value_string() == "10s"


def test_shorthand_parsing_returns_positionals():
    flags = FlagSet()
    register_system_flags(flags, set_defaults({}))
    positional = flags.parse(["-R", "-i", "30", "web", "--", "--cleanup"])
    assert positional == ["web", "--cleanup"]
    assert flags.get("run-once") is True
    assert flags.get("interval") == 30
    assert flags.get("cleanup") is False


def test_combined_shorthands():
    flags = make_flags(args=["-cRi5"])
    assert flags.get("cleanup") is True
    assert flags.get("run-once") is True
    assert flags.get("interval") == 5


def test_unknown_flag_raises():
    flags = make_flags()
    with pytest.raises(FlagError):
        flags.parse(["--does-not-exist"])


def test_missing_argument_raises():
    flags = make_flags()
    with pytest.raises(FlagError):
        flags.parse(["--schedule"])


def test_invalid_bool_value_raises():
    flags = make_flags()
    with pytest.raises(FlagError):
        flags.set("cleanup", "maybe")


def test_append_to_non_slice_raises():
    flags = make_flags()
    with pytest.raises(FlagError):
        flags.append("schedule", "x")


def test_slice_first_set_replaces_default():
    flags = make_flags(
        {"WATCHTOWER_NOTIFICATIONS": "email slack"},
        args=["--notifications", "gotify,msteams", "-n", "shoutrrr"],
    )
    assert flags.get("notifications") == ["gotify", "msteams", "shoutrrr"]


def test_slice_default_from_environment():
    flags = make_flags({"WATCHTOWER_NOTIFICATIONS": "email slack"})
    assert flags.get("notifications") == ["email", "slack"]
    assert flags.changed("notifications") is False


def test_add_duplicate_raises():
    flags = FlagSet()
    flags.add("name", FlagKind.STRING, "", "usage", "x")
    with pytest.raises(FlagError):
        flags.add("name", FlagKind.STRING)
    with pytest.raises(FlagError):
        flags.add("other", FlagKind.BOOL, False, "usage", "x")


def test_get_undefined_raises():
    with pytest.raises(FlagError):
        FlagSet().get("missing")


def test_environment_getters():
    env = Environment(
        {"A": "42", "B": "yes", "C": "t", "D": "5m", "E": "a b c", "F": "oops"},
        {"G": 7},
    )
    assert env.get_int("A") == 42
    assert env.get_int("F") == 0
    assert env.get_int("G") == 7
    assert env.get_bool("B") is False
    assert env.get_bool("C") is True
    assert env.get_duration("D") == timedelta(minutes=5)
    assert env.get_string_slice("E") == ["a", "b", "c"]
    assert env.get_string("missing") == ""
    assert env.is_set("G") is True
    assert env.is_set("missing") is False


def test_empty_environment_value_uses_default():
    env = set_defaults({"WATCHTOWER_LOG_LEVEL": ""})
    assert env.get_string("WATCHTOWER_LOG_LEVEL") == "info"


def test_no_color_from_environment():
    assert make_flags({"NO_COLOR": "1"}).get("no-color") is True
    assert make_flags().get("no-color") is False


def test_defaults_from_set_defaults():
    flags = make_flags()
    assert flags.get("interval") == 86400
    assert flags.get("notification-email-server-port") == 25
    assert flags.get("notification-slack-identifier") == "watchtower"
    assert flags.get("notifications-level") == "info"