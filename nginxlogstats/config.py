"""Application settings loaded from a TOML, YAML or JSON file."""

from __future__ import annotations

import json
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


class ConfigError(Exception):
    """Raised when the settings cannot be read or are malformed."""


def _as_str(value: Any, name: str) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ConfigError(f"invalid type for `{name}`: expected a string")


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    if name not in data:
        raise ConfigError(f"missing field `{name}`")
    value = data[name]
    if not isinstance(value, Mapping):
        raise ConfigError(f"invalid type for `{name}`: expected a table")
    return value


def _string(data: Mapping[str, Any], name: str) -> str:
    if name not in data:
        raise ConfigError(f"missing field `{name}`")
    return _as_str(data[name], name)


def _string_list(data: Mapping[str, Any], name: str) -> list[str]:
    if name not in data:
        raise ConfigError(f"missing field `{name}`")
    value = data[name]
    if not isinstance(value, list):
        raise ConfigError(f"invalid type for `{name}`: expected a list")
    return [_as_str(item, name) for item in value]


@dataclass(frozen=True)
class LogConfig:
    path_templates: list[str]
    pattern: str


@dataclass(frozen=True)
class SmtpConfig:
    host: str


@dataclass(frozen=True)
class MailConfig:
    smtp: SmtpConfig
    sender: str
    password: str = field(repr=False)
    recipients: list[str]
    title: str
    content: str


@dataclass(frozen=True)
class Settings:
    log: LogConfig
    mail: MailConfig
    placeholder: dict[str, str]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Settings:
        """Build settings from an already parsed document."""
        if not isinstance(data, Mapping):
            raise ConfigError("configuration root must be a table")
        log = _section(data, "log")
        mail = _section(data, "mail")
        smtp = _section(mail, "smtp")
        placeholder = _section(data, "placeholder")
        return cls(
            log=LogConfig(
                path_templates=_string_list(log, "path_templates"),
                pattern=_string(log, "pattern"),
            ),
            mail=MailConfig(
                smtp=SmtpConfig(host=_string(smtp, "host")),
                sender=_string(mail, "sender"),
                password=_string(mail, "password"),
                recipients=_string_list(mail, "recipients"),
                title=_string(mail, "title"),
                content=_string(mail, "content"),
            ),
            placeholder={str(key): _as_str(value, str(key)) for key, value in placeholder.items()},
        )

    @classmethod
    def from_file(cls, path: str | Path) -> Settings:
        """Load settings from a file; the format follows its extension."""
        path = Path(path)
        suffix = path.suffix.lower()
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"configuration file {str(path)!r} not found") from exc
        try:
            if suffix == ".toml":
                data = tomllib.loads(text)
            elif suffix in (".yaml", ".yml"):
                data = yaml.safe_load(text)
            elif suffix == ".json":
                data = json.loads(text)
            else:
                raise ConfigError(f"unsupported configuration format: {str(path)!r}")
        except (tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as exc:
            raise ConfigError(f"cannot parse {str(path)!r}: {exc}") from exc
        return cls.from_dict(data if data is not None else {})