"""Sample configuration records shared across the test suite.

Records are declared at module level so that postponed annotations resolve.
Every record is built through `new_record`, which fills fields without Python
defaults with their zero values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
import enum
from ipaddress import IPv4Address, IPv4Network
from pathlib import Path

from fieldconf import IPAddress, IPMask, IPNetwork, setting
from fieldconf.kinds import Float32, Int8, Int32, Uint8, Uint16


class LogLevel(enum.Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"


@dataclass
class Address:
    city: str = setting(env="CITY", required=True)
    country: str = setting(env="COUNTRY", required=True)
    zip_code: Int32 = setting(env="ZIP", default="10001")


@dataclass
class Person:
    name: str = setting(required=True)
    email: str = setting(required=True)
    ip: IPAddress = setting(required=True)
    address: Address = setting()
    nickname: str = setting(required=False)


@dataclass
class Database:
    host: str = setting(flag="db-host", env="HOST", default="localhost", usage="database host")
    port: Uint16 = setting(flag="db-port", env="PORT", default="5432", usage="database port")
    timeout: timedelta = setting(flag="db-timeout", env="TIMEOUT", default="5s")


@dataclass
class Limits:
    burst: Int8 = setting(env="BURST", default="10")
    ratio: Float32 = setting(env="RATIO", default="0.5")


@dataclass
class ServiceConfig:
    name: str = setting(flag="name,short:n", env="NAME", default="svc", usage="service name")
    port: int = setting(flag="port,short:p", env="PORT", default="8080", usage="listen port")
    debug: bool = setting(flag="debug,short:d", env="DEBUG", usage="enable debug mode")
    tags: list[str] = setting(flag="tags", env="TAGS")
    ports: list[int] = setting(flag="ports", env="PORTS")
    level: LogLevel | None = setting(flag="level", env="LEVEL", default="INFO")
    bind: IPAddress = setting(flag="bind", env="BIND", default="127.0.0.1")
    allow: IPNetwork = setting(flag="allow", env="ALLOW", default="10.0.0.0/8")
    mask: IPMask = setting(flag="mask", env="MASK", default="/24")
    config_file: str = setting(flag="config,short:c,config:true", usage="path to the configuration file")
    secret: bytes = setting(flag="secret,base:hex", env="SECRET")
    db: Database = setting(env="DB")
    limits: Limits = setting(env=",squash")
    token: str = setting(env="TOKEN", required=True)


@dataclass
class Scalars:
    text: str = setting(default="hello")
    signed: int = setting(default="-42")
    small: Int8 = setting(default="127")
    unsigned: Uint8 = setting(default="255")
    ratio: float = setting(default="2.5")
    narrow: Float32 = setting(default="0.1")
    number: complex = setting(default="(1+2i)")
    flag: bool = setting(default="true")
    wait: timedelta = setting(default="1m30s")
    path: Path | None = setting(default="/var/lib/app")
    address: IPv4Address | None = setting(default="192.168.0.1")
    network: IPv4Network | None = setting(default="192.168.0.0/16")


@dataclass
class Collections:
    items: list[int] = setting(default="1,2,3,,")
    triple: tuple[int, int, int] = setting(default=",5,6")
    pair: tuple[str, ...] = setting(default="a,b")
    weights: dict[str, int] = setting(default="key1:100,key2:200")
    raw: bytes = setting(default="104,105")


@dataclass
class Overflowing:
    triple: tuple[int, int, int] = setting(default="1,2,3,4")


@dataclass
class BadNumber:
    some_field: int = setting(default="1:1")


@dataclass
class Unsupported:
    callback: object = setting(default="anything")


@dataclass
class Tree:
    label: str = setting(default="root")
    left: Branch | None = setting()
    right: Branch = setting()


@dataclass
class Branch:
    label: str = setting(default="branch")
    leaf: Leaf = setting()


@dataclass
class Leaf:
    label: str = setting(default="leaf")


@dataclass
class WithPrivate:
    public: str = setting(default="visible")
    _hidden: str = setting(default="secret")


@dataclass(frozen=True)
class FrozenSection:
    value: str = setting(default="frozen", required=True)


@dataclass
class WithFrozen:
    name: str = setting(default="outer")
    section: FrozenSection = field(default_factory=lambda: FrozenSection(value=""))


@dataclass
class BadShorthand:
    verbose: bool = setting(flag="verbose,short:vv")


@dataclass
class BadBytes:
    payload: bytes = setting(flag="payload,base:b32")


@dataclass
class NonStringConfig:
    config: int = setting(flag="config,config:true")


@dataclass
class Color:
    red: int = 0
    green: int = 0
    blue: int = 0

    @classmethod
    def from_text(cls, text: str) -> Color:
        body = text.removeprefix("#")
        if len(body) != 6:
            raise ValueError(f'invalid color "{text}"')
        return cls(int(body[0:2], 16), int(body[2:4], 16), int(body[4:6], 16))


@dataclass
class Theme:
    accent: Color = setting(flag="accent", env="ACCENT", default="#ff8800")
    background: Color = setting(default="#000000")
