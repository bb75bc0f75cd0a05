"""
Configuration Loader (``returns_config.loader``).

Responsibility
--------------
Loads a YAML file and parses it into a ``ReturnsConfig``.

Scalar values are checked against the type of the field's default before
any dataclass is built: YAML ``"false"`` is a string, not a boolean, and
is rejected rather than coerced.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys or bad values  -> ``ValueError`` with the offending key.
"""

from __future__ import annotations

from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from returns_config.schema import DatabaseSettings, LoggingSettings, ReturnsConfig
from returns_kernel.domain.validation import ValidationRules

_TYPE_NAMES = {bool: "a boolean", int: "an integer", str: "a string"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return data


def _check_type(key: str, value: Any, expected: type) -> Any:
    # bool is a subclass of int; neither may stand in for the other
    if type(value) is not expected:
        raise ValueError(
            f"'{key}' must be {_TYPE_NAMES[expected]}, got {type(value).__name__} {value!r}"
        )
    return value


def _section(data: dict[str, Any], name: str, cls: type) -> Any:
    """Build dataclass ``cls`` from ``data[name]``, rejecting unknown keys and mistyped values."""
    raw = data.get(name) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"'{name}' must be a mapping")
    defaults = {f.name: f.default for f in fields(cls)}
    unknown = set(raw) - set(defaults)
    if unknown:
        raise ValueError(f"Unknown keys in '{name}': {sorted(unknown)}")
    return cls(**{
        key: _check_type(f"{name}.{key}", value, type(defaults[key]))
        for key, value in raw.items()
    })


def parse_config(data: dict[str, Any]) -> ReturnsConfig:
    """Parse a ``ReturnsConfig`` from a dict."""
    known = {"database", "logging", "rules", "refund_reason_prefix",
             "require_order_item_for_cascade"}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

    return ReturnsConfig(
        database=_section(data, "database", DatabaseSettings),
        logging=_section(data, "logging", LoggingSettings),
        rules=_section(data, "rules", ValidationRules),
        refund_reason_prefix=_check_type(
            "refund_reason_prefix",
            data.get("refund_reason_prefix", "Returned Item: "),
            str,
        ),
        require_order_item_for_cascade=_check_type(
            "require_order_item_for_cascade",
            data.get("require_order_item_for_cascade", False),
            bool,
        ),
    )


def load_config(path: Path | str) -> ReturnsConfig:
    """Load and parse a YAML configuration file."""
    return parse_config(load_yaml_file(Path(path)))
