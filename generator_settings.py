"""Rendering settings for the generated model and SQL files."""

from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Any

try:
    import yaml
except ImportError as exc:  # pragma: no cover
    raise SystemExit("PyYAML is required. Install with: pip install pyyaml") from exc

from schema_model import ParseError


@dataclasses.dataclass(frozen=True)
class GeneratorSettings:
    package: str = "models"
    extension: str = ".go"
    registry_name: str = "common"
    register_import: str = "marco_uc_server/common"
    register_func: str = "MODELS_INIT"
    register_call: str = "common.DB_REGISTER_MODELS"
    engine: str = "InnoDB"
    charset: str = "utf8"


DEFAULT_SETTINGS = GeneratorSettings()


def _section(raw: dict, key: str) -> dict:
    section = raw.get(key) or {}
    if not isinstance(section, dict):
        raise ParseError(f"settings: {key!r} must be a mapping, got {section!r}")
    return section


def _str_setting(section: dict, key: str, default: str, where: str) -> str:
    value = section.get(key, default)
    if not isinstance(value, str):
        raise ParseError(f"settings: {where}.{key} must be a string, got {value!r}")
    return value


def settings_from_dict(raw: Any) -> GeneratorSettings:
    """Build settings from a parsed YAML document; missing keys keep defaults."""
    if raw is None:
        return DEFAULT_SETTINGS
    if not isinstance(raw, dict):
        raise ParseError(f"settings must be a mapping, got {type(raw).__name__}")

    models_cfg = _section(raw, "models")
    sql_cfg = _section(raw, "sql")
    d = DEFAULT_SETTINGS
    return GeneratorSettings(
        package=_str_setting(models_cfg, "package", d.package, "models"),
        extension=_str_setting(models_cfg, "extension", d.extension, "models"),
        registry_name=_str_setting(models_cfg, "registry_name", d.registry_name, "models"),
        register_import=_str_setting(models_cfg, "register_import", d.register_import, "models"),
        register_func=_str_setting(models_cfg, "register_func", d.register_func, "models"),
        register_call=_str_setting(models_cfg, "register_call", d.register_call, "models"),
        engine=_str_setting(sql_cfg, "engine", d.engine, "sql"),
        charset=_str_setting(sql_cfg, "charset", d.charset, "sql"),
    )


def load_settings(path: Path | None) -> GeneratorSettings:
    if path is None:
        return DEFAULT_SETTINGS
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (UnicodeDecodeError, yaml.YAMLError) as exc:
        raise ParseError(f"cannot decode settings {path}: {exc}") from exc
    return settings_from_dict(raw)
