"""Server configuration read from a simple ``key value`` file."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Iterable, Optional

_INT_RE = re.compile(r"[+-]?[0-9]+")


def _to_int(value: str) -> int:
    if not _INT_RE.fullmatch(value):
        raise ValueError(value)
    number = int(value)
    if not -(2**63) <= number < 2**63:
        raise ValueError(value)
    return number


def _to_bool(value: str) -> bool:
    return value == "yes"


def _to_list(value: str) -> list[str]:
    return value.split(",")


def _meta(key: Optional[str], convert: Callable[[str], Any]) -> dict:
    """Field metadata; without a key the field name minus underscores is used."""
    return {"cfg": key, "convert": convert}


@dataclass
class ServerProperties:
    """Settings of the server."""

    bind: str = field(default="", metadata=_meta("bind", str))
    port: int = field(default=0, metadata=_meta("port", _to_int))
    append_only: bool = field(default=False, metadata=_meta("appendOnly", _to_bool))
    append_filename: str = field(default="", metadata=_meta("appendFilename", str))
    max_clients: int = field(default=0, metadata=_meta("maxclients", _to_int))
    require_pass: str = field(default_factory=str, metadata=_meta(None, str))
    databases: int = field(default=0, metadata=_meta("databases", _to_int))
    peers: list[str] = field(default_factory=list, metadata=_meta("peers", _to_list))
    self_address: str = field(default="", metadata=_meta("self", str))


properties = ServerProperties(bind="127.0.0.1", port=6379, append_only=False)


def _config_key(spec) -> str:
    key = spec.metadata["cfg"]
    if key is None:
        key = spec.name.replace("_", "")
    return key.lower()


def _read_pairs(src: Iterable[str]) -> dict[str, str]:
    pairs: dict[str, str] = {}
    for raw in src:
        line = raw[:-1] if raw.endswith("\n") else raw
        if line.endswith("\r"):
            line = line[:-1]
        if line.startswith("#"):
            continue
        pivot = line.find(" ")
        if 0 < pivot < len(line) - 1:
            pairs[line[:pivot].lower()] = line[pivot + 1 :].strip(" ")
    return pairs


def parse(src: Iterable[str]) -> ServerProperties:
    """Build properties from lines of ``key value`` text."""
    pairs = _read_pairs(src)
    config = ServerProperties()
    for spec in fields(ServerProperties):
        value = pairs.get(_config_key(spec))
        if value is None:
            continue
        try:
            setattr(config, spec.name, spec.metadata["convert"](value))
        except ValueError:
            pass
    return config


def setup_config(filename: str) -> ServerProperties:
    """Read the file and make it the active configuration."""
    global properties
    with open(filename, encoding="utf-8") as f:
        properties = parse(f)
    return properties