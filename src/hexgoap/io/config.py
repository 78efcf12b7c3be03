"""Configuration loading utilities for hexgoap."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, cast

from hexgoap.core.models import Config


def read_toml(
    *,
    path: Path | str | None = None,
    data: str | bytes | None = None,
) -> dict[str, Any]:
    """Parse TOML from exactly one of ``path`` or ``data``.

    Missing files raise ``FileNotFoundError``; directories, unreadable files
    and invalid TOML raise ``ValueError`` naming the offending source.
    """
    if (path is None) == (data is None):
        msg = "Provide exactly one of 'path' or 'data' when loading TOML."
        raise ValueError(msg)

    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(path)
        if not path.is_file():
            msg = f"TOML path is not a file: {path}"
            raise ValueError(msg)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Unable to read TOML file {path}: {exc}"
            raise ValueError(msg) from exc
        source = str(path)
    else:
        text = data if isinstance(data, str) else cast("bytes", data).decode()
        source = "<data>"

    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {source}: {exc}"
        raise ValueError(msg) from exc


def load_config(
    *,
    path: Path | str | None = None,
    data: str | bytes | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Config:
    """Load and validate configuration from TOML data.

    Exactly one of ``path`` or ``data`` must be provided. ``overrides`` allows
    callers to patch specific sections before validation, which is useful for
    CLI flags or tests.
    """
    raw_content = read_toml(path=path, data=data)

    if overrides is not None:
        typed_overrides: dict[str, Any] = {str(key): value for key, value in overrides.items()}
        raw_content = _merge_dicts(dict(raw_content), typed_overrides)

    return Config.model_validate(_normalise(raw_content))


def _merge_dicts(base: dict[str, Any], updates: Mapping[str, Any]) -> dict[str, Any]:
    for key, value in updates.items():
        if key in base and isinstance(base[key], Mapping) and isinstance(value, Mapping):
            nested_base = cast("dict[str, Any]", dict(base[key]))
            nested_updates = cast("Mapping[str, Any]", value)
            base[key] = _merge_dicts(nested_base, nested_updates)
        else:
            base[key] = value
    return base


def _normalise(raw: Mapping[str, Any]) -> dict[str, Any]:
    config_dict: dict[str, Any] = {
        "planner": dict(raw.get("planner", {})),
        "attack": dict(raw.get("attack", {})),
        "executor": dict(raw.get("executor", {})),
    }

    # ``json`` reads better in TOML than the model's field name.
    logging_section = dict(raw.get("logging", {}))
    if "json" in logging_section:
        logging_section["json_mode"] = logging_section.pop("json")
    if "level" in logging_section and isinstance(logging_section["level"], str):
        logging_section["level"] = logging_section["level"].upper()
    config_dict["logging"] = logging_section

    unknown = set(raw) - {"planner", "attack", "executor", "logging"}
    for key in unknown:
        config_dict[key] = raw[key]

    return config_dict


__all__ = ["load_config", "read_toml"]
