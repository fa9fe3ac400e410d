"""Table/column/index model shared by the loader and the renderers."""

from __future__ import annotations

import dataclasses
from types import MappingProxyType
from typing import Any, Mapping


class ParseError(ValueError):
    """Raised for any malformed table document or settings file."""


@dataclasses.dataclass(frozen=True)
class TypeMap:
    """Read-only mapping of MySQL storage types to record field types."""

    field_types: Mapping[str, str]
    character_types: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "field_types", MappingProxyType(dict(self.field_types)))
        object.__setattr__(self, "character_types", frozenset(self.character_types))

    def __contains__(self, storage_type: object) -> bool:
        return storage_type in self.field_types

    def field_type(self, storage_type: str) -> str:
        try:
            return self.field_types[storage_type]
        except (KeyError, TypeError):
            raise ParseError(f"unsupported storage type: {storage_type!r}") from None

    def is_character(self, storage_type: str) -> bool:
        return storage_type in self.character_types


DEFAULT_TYPE_MAP = TypeMap(
    field_types={
        "tinyint unsigned": "uint8",
        "tinyint": "int8",
        "smallint unsigned": "uint16",
        "smallint": "int16",
        "int unsigned": "uint32",
        "int": "int32",
        "bigint unsigned": "uint64",
        "bigint": "int64",
        "char": "string",
        "varchar": "string",
    },
    character_types=frozenset({"char", "varchar"}),
)


@dataclasses.dataclass(frozen=True)
class ColumnSpec:
    name: str
    storage_type: str
    field_name: str = ""
    size: int = 0
    # None means "no default clause"; the value itself is only rendered for
    # non-character columns.
    default: Any = None
    is_pk: bool = False
    is_nullable: bool = False
    comment: str = ""
    sn: int = 0

    @property
    def has_default(self) -> bool:
        return self.default is not None


@dataclasses.dataclass(frozen=True)
class IndexSpec:
    columns: tuple[str, ...]

    def index_name(self, table_name: str) -> str:
        return "_".join([table_name, *self.columns])


@dataclasses.dataclass(frozen=True)
class TableSpec:
    name: str
    model_name: str
    columns: tuple[ColumnSpec, ...]
    comment: str = ""
    indexes: tuple[IndexSpec, ...] = ()

    def __post_init__(self) -> None:
        if not self.name:
            raise ParseError("table name must not be empty")
        if not self.model_name:
            raise ParseError(f"table {self.name!r}: missing model_name")
        if not self.columns:
            raise ParseError(f"table {self.name!r}: no columns defined")
        seen: set[str] = set()
        for col in self.columns:
            if col.name in seen:
                raise ParseError(f"table {self.name!r}: duplicate column {col.name!r}")
            seen.add(col.name)

    @property
    def primary_keys(self) -> list[str]:
        return [c.name for c in self.columns if c.is_pk]

    @property
    def model_primary_key(self) -> ColumnSpec | None:
        """The ORM only supports one primary key; the first flagged column wins."""
        for col in self.columns:
            if col.is_pk:
                return col
        return None
