"""Build TableSpecs from the declarative table document (config.json)."""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any

try:
    import yaml
except ImportError as exc:  # pragma: no cover
    raise SystemExit("PyYAML is required. Install with: pip install pyyaml") from exc

from schema_model import DEFAULT_TYPE_MAP, ColumnSpec, IndexSpec, ParseError, TableSpec, TypeMap

COMMENT = "comment"
PK = "pk"
NULL = "null"
TYPE = "type"
DEFAULT = "default"
MODEL_NAME = "model_name"
INDEX = "index"
SN = "sn"
SIZE = "size"


def read_document(path: Path) -> Any:
    """Read the table document; JSON by suffix, YAML otherwise.

    Both parsers build plain dicts, which keep the file's key order. That
    order decides table order in every generated SQL file.
    """
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ParseError(f"cannot decode {path}: {exc}") from exc


def expect_str(value: Any, where: str) -> str:
    if not isinstance(value, str):
        raise ParseError(f"{where}: expected string, got {value!r}")
    return value


def expect_bool(value: Any, where: str) -> bool:
    if not isinstance(value, bool):
        raise ParseError(f"{where}: expected boolean, got {value!r}")
    return value


def expect_int(value: Any, where: str) -> int:
    # bool is an int subclass; JSON true/false must not pass as numbers.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ParseError(f"{where}: expected number, got {value!r}")
    # json and yaml both accept NaN and Infinity.
    if isinstance(value, float) and not math.isfinite(value):
        raise ParseError(f"{where}: expected number, got {value!r}")
    return int(value)


def parse_column(
    table_name: str,
    column_name: str,
    attrs: Any,
    type_map: TypeMap = DEFAULT_TYPE_MAP,
) -> ColumnSpec:
    where = f"{table_name}.{column_name}"
    if not isinstance(attrs, dict):
        raise ParseError(f"{where}: column definition must be a mapping, got {attrs!r}")
    # YAML reads an unquoted `null:` key as None.
    bad_keys = [k for k in attrs if not isinstance(k, str)]
    if bad_keys:
        raise ParseError(f"{where}: attribute names must be strings, got {bad_keys!r}")

    if TYPE not in attrs:
        raise ParseError(f"{where}: missing {TYPE!r}")
    storage_type = expect_str(attrs[TYPE], f"{where}.{TYPE}")
    if storage_type not in type_map:
        raise ParseError(f"{where}.{TYPE}: unsupported storage type {storage_type!r}")

    size = expect_int(attrs[SIZE], f"{where}.{SIZE}") if SIZE in attrs else 0
    if type_map.is_character(storage_type) and size <= 0:
        raise ParseError(f"{where}.{SIZE}: {storage_type} column needs a positive size, got {size}")

    field_name = expect_str(attrs.get(MODEL_NAME, ""), f"{where}.{MODEL_NAME}")
    if not field_name:
        raise ParseError(f"{where}: missing {MODEL_NAME!r}")

    return ColumnSpec(
        name=column_name,
        storage_type=storage_type,
        field_name=field_name,
        size=size,
        default=attrs.get(DEFAULT),
        is_pk=expect_bool(attrs.get(PK, False), f"{where}.{PK}"),
        is_nullable=expect_bool(attrs.get(NULL, False), f"{where}.{NULL}"),
        comment=expect_str(attrs.get(COMMENT, ""), f"{where}.{COMMENT}"),
        sn=expect_int(attrs.get(SN, 0), f"{where}.{SN}"),
    )


def parse_indexes(table_name: str, raw: Any) -> list[IndexSpec]:
    where = f"{table_name}.{INDEX}"
    if not isinstance(raw, list):
        raise ParseError(f"{where}: expected a list of column lists, got {raw!r}")

    indexes: list[IndexSpec] = []
    for group in raw:
        if not isinstance(group, list):
            raise ParseError(f"{where}: index entry must be a list of column names, got {group!r}")
        names = tuple(expect_str(name, where) for name in group)
        if not names:
            raise ParseError(f"{where}: index entry must name at least one column")
        indexes.append(IndexSpec(columns=names))
    return indexes


def parse_table(table_name: str, body: Any, type_map: TypeMap = DEFAULT_TYPE_MAP) -> TableSpec:
    if not isinstance(body, dict):
        raise ParseError(f"{table_name}: table definition must be a mapping, got {body!r}")

    model_name = ""
    comment = ""
    indexes: list[IndexSpec] = []
    columns: list[ColumnSpec] = []
    for key, value in body.items():
        if key == MODEL_NAME:
            model_name = expect_str(value, f"{table_name}.{MODEL_NAME}")
        elif key == COMMENT:
            comment = expect_str(value, f"{table_name}.{COMMENT}")
        elif key == INDEX:
            indexes = parse_indexes(table_name, value)
        elif isinstance(key, str) and key:
            columns.append(parse_column(table_name, key, value, type_map))
        else:
            raise ParseError(f"{table_name}: invalid column name {key!r}")

    # sorted() is stable: equal sn keeps document order.
    columns = sorted(columns, key=lambda c: c.sn)

    return TableSpec(
        name=table_name,
        model_name=model_name,
        comment=comment,
        columns=tuple(columns),
        indexes=tuple(indexes),
    )


def load_tables(document: Any, type_map: TypeMap = DEFAULT_TYPE_MAP) -> list[TableSpec]:
    """Parse every table of the document, in document order.

    The first malformed entry raises ParseError; no partial result is
    returned.
    """
    if not isinstance(document, dict):
        raise ParseError(f"table document must be a mapping of table name to definition, got {type(document).__name__}")

    tables: list[TableSpec] = []
    for table_name, body in document.items():
        if not isinstance(table_name, str) or not table_name:
            raise ParseError(f"invalid table name: {table_name!r}")
        tables.append(parse_table(table_name, body, type_map))
    return tables
