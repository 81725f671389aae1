# Copyright 2025 icecake0141
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# This file was created or modified with the assistance of an AI (Large Language Model).
# Review required for correctness, security, and licensing.

"""
Configuration for MultiPing.

Settings are gathered once at process entry into a ProbeConfig and passed to
the probing engine, which never reads the environment itself.

Sources, highest priority first:
    CLI flags > environment (munin plugin variables) > ~/.multiping.conf > defaults

The config file may be written as INI or YAML.
"""

import configparser
import dataclasses
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.expanduser("~/.multiping.conf")


@dataclass(frozen=True)
class ProbeConfig:
    """Settings for one probe run."""

    hosts: str = ""
    names: str = ""
    ping: str = "ping"
    ping6: str = "ping6"
    ping_args: str = "-c 2 -w 1"
    ping_args2: str = ""
    fork: bool = False
    host_command: str = "host"
    probe_timeout: Optional[float] = None
    log_level: str = "WARNING"
    log_file: Optional[str] = None


# Mapping of config field names to their expected Python types
_CONFIG_FIELD_TYPES: Dict[str, type] = {
    "hosts": str,
    "names": str,
    "ping": str,
    "ping6": str,
    "ping_args": str,
    "ping_args2": str,
    "fork": bool,
    "host_command": str,
    "probe_timeout": float,
    "log_level": str,
    "log_file": str,
}

# munin writes flags as anything from "yes" to "1"; only these read as off.
_FLAG_OFF_VALUES = frozenset(("false", "no", "0", "off", "disabled"))
_FLAG_ON_VALUES = frozenset(("true", "yes", "1", "on", "enabled"))


def _parse_flag(key: str, value: Any) -> bool:
    """Read a boolean-ish plugin setting; unrecognized non-empty text counts as on."""
    if isinstance(value, bool):
        return value
    lower = str(value).strip().lower()
    if lower in _FLAG_OFF_VALUES or not lower:
        return False
    if lower not in _FLAG_ON_VALUES:
        logger.warning("Treating unrecognized value %r for '%s' as enabled.", value, key)
    return True


def _coerce_field(key: str, raw_value: Any) -> Any:
    """Coerce a raw config value to the expected type for the given field name."""
    field_type = _CONFIG_FIELD_TYPES[key]
    if field_type is bool:
        return _parse_flag(key, raw_value)
    if field_type is str:
        return str(raw_value)
    try:
        value = float(raw_value)
    except (ValueError, TypeError) as exc:
        raise ValueError(f"Invalid value for config field '{key}': expected a number, got {raw_value!r}") from exc
    if value <= 0:
        raise ValueError(f"Invalid value for config field '{key}': must be positive, got {raw_value!r}")
    return value


def config_from_mapping(environ: Mapping[str, str], base: Optional[ProbeConfig] = None) -> ProbeConfig:
    """
    Overlay munin-style plugin variables onto a configuration.

    Only the lowercase keys named in ProbeConfig are consulted; everything
    else in the mapping is ignored.

    Args:
        environ: Variable mapping, typically ``os.environ``
        base: Configuration to overlay onto (default: built-in defaults)

    Returns:
        New ProbeConfig

    Raises:
        ValueError: If a numeric variable holds an unparsable value
    """
    base = base if base is not None else ProbeConfig()
    updates: Dict[str, Any] = {}
    for key in _CONFIG_FIELD_TYPES:
        if key not in environ:
            continue
        raw_value = environ[key]
        if raw_value == "" and _CONFIG_FIELD_TYPES[key] is not str:
            continue
        updates[key] = _coerce_field(key, raw_value)
    return dataclasses.replace(base, **updates)


def config_from_dict(values: Dict[str, Any], base: Optional[ProbeConfig] = None) -> ProbeConfig:
    """Build a ProbeConfig from a dict returned by load_config."""
    base = base if base is not None else ProbeConfig()
    known = {key: value for key, value in values.items() if key in _CONFIG_FIELD_TYPES}
    return dataclasses.replace(base, **known)


def _settings_from_section(items: Iterable[Tuple[Any, Any]], section: str, path: str) -> Dict[str, Any]:
    """Coerce the known keys of a settings section, warning about the rest."""
    result: Dict[str, Any] = {}
    for key, raw_value in items:
        if key not in _CONFIG_FIELD_TYPES:
            logger.warning("Unknown config key '%s' in '%s' section of '%s'; ignoring.", key, section, path)
        elif raw_value is None:
            logger.debug("Config key '%s' has no value in '%s'; ignoring.", key, path)
        else:
            result[key] = _coerce_field(key, raw_value)
    return result


def _join_hosts(entries: List[Dict[str, str]]) -> Dict[str, str]:
    """Turn parsed host entries into the comma-separated hosts/names pair."""
    if not entries:
        return {}
    result = {"hosts": ",".join(entry["host"] for entry in entries)}
    if all(entry.get("name") for entry in entries):
        result["names"] = ",".join(entry["name"] for entry in entries)
    elif any(entry.get("name") for entry in entries):
        logger.warning("Some hosts in the config file have no name; addresses will be used as labels.")
    return result


def load_ini_config(path: str) -> Dict[str, Any]:
    """
    Load and parse an INI-format config file.

    Only ``=`` is accepted as a key-value delimiter so that IPv6 host specs
    keep their colons. The ``[hosts]`` section accepts ``name = token`` lines
    or bare ``token`` lines.

    Raises:
        ValueError: On parse errors or invalid field values.
    """
    parser = configparser.ConfigParser(allow_no_value=True, delimiters=("=",), interpolation=None)
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    try:
        read_files = parser.read(path, encoding="utf-8")
    except configparser.Error as exc:
        raise ValueError(f"Invalid config file '{path}': {exc}") from exc

    if not read_files:
        raise ValueError(f"Config file '{path}' could not be read.")

    result: Dict[str, Any] = {}
    if parser.has_section("default"):
        result.update(_settings_from_section(parser.items("default"), "default", path))

    if parser.has_section("hosts"):
        entries = [
            {"name": key.strip(), "host": value.strip()} if value and value.strip() else {"host": key.strip()}
            for key, value in parser.items("hosts")
        ]
        result.update(_join_hosts(entries))

    return result


def _yaml_host_entry(item: Any, path: str) -> Optional[Dict[str, str]]:
    """Read one item of the YAML ``hosts`` list: a token or a name/host mapping."""
    if isinstance(item, dict):
        host = str(item.get("host") or "").strip()
        if not host:
            raise ValueError(f"Host entry {item!r} in '{path}' has no 'host' key.")
        name = str(item.get("name") or "").strip()
        return {"host": host, "name": name} if name else {"host": host}
    if item is None or not str(item).strip():
        return None
    return {"host": str(item).strip()}


def load_yaml_config(path: str) -> Dict[str, Any]:
    """
    Load and parse a YAML-format config file.

    ``default`` is a mapping of settings; ``hosts`` is a list whose items are
    either host spec strings or ``{name: ..., host: ...}`` mappings. Parsed
    with ``yaml.safe_load``.

    Raises:
        ImportError: If PyYAML is not installed.
        ValueError: On parse errors or invalid file content.
    """
    try:
        import yaml  # type: ignore[import-untyped]  # pylint: disable=import-outside-toplevel
    except ImportError as exc:
        raise ImportError("YAML config files need PyYAML: pip install pyyaml") from exc

    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except (yaml.YAMLError, OSError) as exc:
        raise ValueError(f"Cannot load YAML config '{path}': {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Config file '{path}' must be a YAML mapping, not a {type(data).__name__}.")

    settings = data.get("default") or {}
    hosts = data.get("hosts") or []
    if not isinstance(settings, dict):
        raise ValueError(f"The 'default' section in '{path}' must be a YAML mapping.")
    if not isinstance(hosts, list):
        raise ValueError(f"The 'hosts' section in '{path}' must be a YAML list.")

    result = _settings_from_section(settings.items(), "default", path)
    entries = [entry for entry in (_yaml_host_entry(item, path) for item in hosts) if entry is not None]
    result.update(_join_hosts(entries))
    return result


def _detect_format(path: str) -> str:
    """Return ``"ini"`` when the first meaningful line is a ``[section]`` header, else ``"yaml"``."""
    with open(path, "r", encoding="utf-8") as fh:
        for line in fh:
            stripped = line.strip()
            if stripped and not stripped.startswith(("#", ";")):
                return "ini" if stripped.startswith("[") else "yaml"
    return "ini"


_LOADERS = {"ini": load_ini_config, "yaml": load_yaml_config}


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load settings and hosts from ``path`` (default ``~/.multiping.conf``).

    A missing file yields an empty dict.

    Raises:
        ValueError: If the file exists but cannot be read or parsed.
        ImportError: If a YAML file is found but PyYAML is not installed.
    """
    path = path or DEFAULT_CONFIG_PATH
    if not os.path.exists(path):
        return {}

    try:
        config_format = _detect_format(path)
    except OSError as exc:
        raise ValueError(f"Cannot read config file '{path}': {exc}") from exc
    logger.debug("Loading %s config from '%s'.", config_format, path)
    return _LOADERS[config_format](path)
