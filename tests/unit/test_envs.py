"""Unit tests for the environment tree builder and decoder."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from ipaddress import IPv4Address, IPv4Network

import pytest

from fieldconf import setting
from fieldconf.errors import EnvDecodeError
from fieldconf.kinds import Uint16, new_record
from fieldconf.loaders.defaults import set_defaults
from fieldconf.loaders.envs import (
    compose_hooks,
    load_envs,
    prepare_envs,
    string_to_sequence_hook,
    usage_of_envs,
)
from tests.records import Color, LogLevel, ServiceConfig, Theme


@dataclass
class Hello:
    world: int = setting(env="WORLD")


@dataclass
class Foo:
    bar: str = setting(env="BAR")


@dataclass
class Greeting:
    hello: Hello = setting(env="HELLO")
    foo: Foo = setting(env="FOO")
    timeout: timedelta = setting(env="TIMEOUT")


@dataclass
class Ssh:
    auth_sock: str = setting(env="AUTH_SOCK")


@dataclass
class Agent:
    ssh: Ssh = setting(env="SSH")


@dataclass
class Weights:
    weights: dict[str, int] = setting(env="WEIGHTS")


@dataclass
class Untagged:
    port: Uint16 = setting()
    host: str = setting()


def test_prepare_envs_stores_flat_and_nested_keys() -> None:
    """Every multi-segment name should be stored flat and nested at every level."""

    envs = [
        "HELLO_WORLD=1",
        "TEST_VALUE_FOR_TEST=42",
        "FOO_BAR_BAZ=100",
        "INVALID_FORMAT",
    ]

    assert prepare_envs(envs, "") == {
        "HELLO_WORLD": "1",
        "TEST_VALUE_FOR_TEST": "42",
        "FOO_BAR_BAZ": "100",
        "HELLO": {"WORLD": "1"},
        "TEST": {
            "VALUE_FOR_TEST": "42",
            "VALUE": {
                "FOR_TEST": "42",
                "FOR": {"TEST": "42"},
            },
        },
        "FOO": {
            "BAR_BAZ": "100",
            "BAR": {"BAZ": "100"},
        },
    }


def test_prepare_envs_filters_and_strips_prefix() -> None:
    """Only prefixed entries should be kept, without the `PREFIX_` part."""

    tree = prepare_envs(["APP_SSH_AUTH_SOCK=aaaa", "ENV_WITH_UNKNOWN_PREFIX=bbb"], "APP")

    assert tree == {"SSH_AUTH_SOCK": "aaaa", "SSH": {"AUTH_SOCK": "aaaa", "AUTH": {"SOCK": "aaaa"}}}


def test_prepare_envs_keeps_values_containing_equals_signs() -> None:
    """Only the first `=` should separate the name from the value."""

    assert prepare_envs(["DSN=postgres://u:p@h/db?sslmode=disable"]) == {
        "DSN": "postgres://u:p@h/db?sslmode=disable"
    }


def test_prepare_envs_leaf_blocks_nested_insert() -> None:
    """An existing leaf should silently block nesting under the same segment."""

    tree = prepare_envs(["A=leaf", "A_B=nested"])

    assert tree == {"A": "leaf", "A_B": "nested"}


def test_load_envs_decodes_nested_records() -> None:
    """Nested mappings should fill nested records through their `env` names."""

    config = new_record(Greeting)

    load_envs({"HELLO": {"WORLD": "1"}, "FOO": {"BAR": "test-value"}, "TIMEOUT": "15s"}, config)

    assert config.hello.world == 1
    assert config.foo.bar == "test-value"
    assert config.timeout == timedelta(seconds=15)


def test_load_envs_with_prefixed_tree() -> None:
    """A prefixed tree should decode multi-segment names into nested records."""

    config = new_record(Agent)

    load_envs(prepare_envs(["APP_SSH_AUTH_SOCK=aaaa", "ENV_WITH_UNKNOWN_PREFIX=bbb"], "APP"), config)

    assert config.ssh.auth_sock == "aaaa"


def test_load_envs_matches_attribute_names_case_insensitively() -> None:
    """Untagged fields should match their attribute name in any case."""

    config = new_record(Untagged)

    load_envs(prepare_envs(["PORT=8080", "HOST=example.org"]), config)

    assert config.port == 8080
    assert config.host == "example.org"


def test_load_envs_decodes_squashed_records_from_parent_level() -> None:
    """Squashed records should read their fields from the parent mapping."""

    config = new_record(ServiceConfig)

    load_envs(prepare_envs(["BURST=3", "RATIO=0.25", "DB_HOST=db.internal", "DB_PORT=6432"]), config)

    assert config.limits.burst == 3
    assert config.limits.ratio == 0.25
    assert config.db.host == "db.internal"
    assert config.db.port == 6432


def test_load_envs_decodes_sequences_and_special_formats() -> None:
    """Comma lists, enums, addresses, and networks should all be decoded."""

    config = new_record(ServiceConfig)

    load_envs(
        prepare_envs(
            [
                "TAGS=a,b,c",
                "PORTS=80,443",
                "LEVEL=debug",
                "BIND=10.0.0.1",
                "ALLOW=127.0.0.1/16",
                "MASK=/30",
                "SECRET=104,105",
                "DEBUG=true",
            ]
        ),
        config,
    )

    assert config.tags == ["a", "b", "c"]
    assert config.ports == [80, 443]
    assert config.level is LogLevel.DEBUG
    assert config.bind == IPv4Address("10.0.0.1")
    assert config.allow == IPv4Network("127.0.0.0/16")
    assert config.mask == IPv4Address("255.255.255.252")
    assert config.secret == b"hi"
    assert config.debug is True


def test_load_envs_overrides_defaults_and_skips_empty_values() -> None:
    """Environment values should replace defaults; empty values should be ignored."""

    config = new_record(ServiceConfig)
    set_defaults(config)

    load_envs(prepare_envs(["PORT=9090", "NAME="]), config)

    assert config.port == 9090
    assert config.name == "svc"


def test_load_envs_decodes_text_decodable_classes() -> None:
    """Classes with `from_text` should be decoded as single values."""

    theme = new_record(Theme)

    load_envs(prepare_envs(["ACCENT=#102030"]), theme)

    assert theme.accent == Color(16, 32, 48)


def test_load_envs_accepts_sub_tree_for_mappings() -> None:
    """A mapping destination should accept the nested sub-tree of its name."""

    config = new_record(Weights)

    load_envs(prepare_envs(["WEIGHTS_A=1", "WEIGHTS_B=2"]), config)

    assert config.weights == {"A": 1, "B": 2}


def test_load_envs_uses_zero_values_for_empty_mapping_entries() -> None:
    """An empty entry inside a mapping sub-tree should decode to the zero value."""

    config = new_record(Weights)

    load_envs(prepare_envs(["WEIGHTS_A=", "WEIGHTS_B=2"]), config)

    assert config.weights == {"A": 0, "B": 2}


def test_load_envs_rejects_text_for_records() -> None:
    """A plain string where a record is expected should fail to decode."""

    config = new_record(Greeting)

    with pytest.raises(EnvDecodeError) as excinfo:
        load_envs({"HELLO": "invalid structure"}, config)

    assert str(excinfo.value) == "could not decode: 'HELLO' expected a map, got 'str'"


def test_load_envs_reports_field_errors() -> None:
    """Unparseable values should name the field."""

    config = new_record(ServiceConfig)

    with pytest.raises(EnvDecodeError, match='could not decode: failed to set field "port": parsing "http": invalid syntax'):
        load_envs(prepare_envs(["PORT=http"]), config)


@pytest.mark.parametrize("dest", [None, Greeting, 5])
def test_load_envs_rejects_malformed_roots(dest: object) -> None:
    """Only mutable record instances can be decoded into."""

    with pytest.raises(EnvDecodeError, match="could not prepare decoder"):
        load_envs({}, dest)


def test_composed_hooks_run_in_order() -> None:
    """Each hook should receive the output of the previous one."""

    calls: list[object] = []

    def record_hook(tp: object, value: object) -> object:
        calls.append(value)
        return value

    hook = compose_hooks(string_to_sequence_hook, record_hook)

    assert hook(list[int], "1,2") == [1, 2]
    assert calls == [[1, 2]]


def test_usage_of_envs_lists_variables() -> None:
    """Usage should join env names along the owner chain and apply the prefix."""

    usage = usage_of_envs(new_record(ServiceConfig), "APP")
    lines = usage.splitlines()

    assert lines[0] == "Environment variables:"
    assert "  - 'APP_NAME' <str> - service name (default: svc)" in lines
    assert "  - 'APP_PORT' <int> - listen port (default: 8080)" in lines
    assert "  - 'APP_DB_HOST' <str> - database host (default: localhost)" in lines
    assert "  - 'APP_BURST' <int8> (default: 10)" in lines
    assert not any("config" in line.lower() for line in lines[1:])


def test_usage_of_envs_is_empty_for_malformed_roots() -> None:
    """Usage for anything but a mutable record should be empty."""

    assert usage_of_envs(None) == ""
