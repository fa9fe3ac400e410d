"""Render MySQL DDL scripts (create / alter / drop / add) for each table.

The alter, drop and add scripts redeclare every column of every table. They
are not diffs against a live database; an operator picks the statements
that apply before running them.
"""

from __future__ import annotations

from typing import Any

from generator_settings import DEFAULT_SETTINGS, GeneratorSettings
from schema_model import DEFAULT_TYPE_MAP, ColumnSpec, TableSpec, TypeMap

CREATE_SQL_FILE = "__all_table_create.sql"
ALTER_SQL_FILE = "__all_table_field_alter.sql"
DROP_SQL_FILE = "__all_table_field_drop.sql"
ADD_SQL_FILE = "__all_table_field_add.sql"

BANNER = "-- " + "-" * 50


def escape_comment(comment: str) -> str:
    return comment.replace("\\", "\\\\").replace("'", "\\'")


def render_default_literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def render_column_definition(col: ColumnSpec, type_map: TypeMap = DEFAULT_TYPE_MAP) -> str:
    """`name` type[(size)] NULL|NOT NULL [DEFAULT ...], without the comment."""
    is_character = type_map.is_character(col.storage_type)
    if is_character:
        parts = [f"`{col.name}` {col.storage_type}({col.size})"]
    else:
        parts = [f"`{col.name}` {col.storage_type}"]

    parts.append("NULL" if col.is_nullable else "NOT NULL")

    if col.has_default:
        # Character defaults always render as the empty string.
        parts.append("DEFAULT ''" if is_character else f"DEFAULT {render_default_literal(col.default)}")
    return " ".join(parts)


def render_comment(col: ColumnSpec) -> str:
    return f"COMMENT '{escape_comment(col.comment)}'"


def table_banner(title: str) -> list[str]:
    return [BANNER, f"--  {title}", BANNER]


def render_create_sql(
    table: TableSpec,
    type_map: TypeMap = DEFAULT_TYPE_MAP,
    settings: GeneratorSettings = DEFAULT_SETTINGS,
) -> str:
    lines = table_banner(f"Table Structure for `{settings.package}.{table.model_name}`")
    lines.append(f"CREATE TABLE IF NOT EXISTS `{table.name}` (")

    primary_keys = table.primary_keys
    for idx, col in enumerate(table.columns):
        is_last = idx == len(table.columns) - 1
        trailing = "" if is_last and not primary_keys else ","
        lines.append(f"{render_column_definition(col, type_map)} {render_comment(col)}{trailing}")

    if primary_keys:
        lines.append("PRIMARY KEY(" + ",".join(f"`{name}`" for name in primary_keys) + ")")

    lines.append(
        f") ENGINE={settings.engine} COMMENT='{escape_comment(table.comment)}' DEFAULT CHARSET={settings.charset};"
    )

    for index in table.indexes:
        columns = ", ".join(f"`{name}`" for name in index.columns)
        lines.append(f"CREATE INDEX `{index.index_name(table.name)}` ON `{table.name}` ({columns});")

    lines.append("")
    return "\n".join(lines) + "\n"


def render_alter_sql(table: TableSpec, type_map: TypeMap = DEFAULT_TYPE_MAP) -> str:
    lines = table_banner(f"`{table.name}`")
    for col in table.columns:
        lines.append(
            f"ALTER TABLE `{table.name}` CHANGE `{col.name}` "
            f"{render_column_definition(col, type_map)} {render_comment(col)};"
        )
    lines.append("")
    return "\n".join(lines) + "\n"


def render_drop_sql(table: TableSpec) -> str:
    lines = table_banner(f"`{table.name}`")
    for col in table.columns:
        lines.append(f"ALTER TABLE `{table.name}` DROP `{col.name}`;")
    lines.append("")
    return "\n".join(lines) + "\n"


def render_add_sql(table: TableSpec, type_map: TypeMap = DEFAULT_TYPE_MAP) -> str:
    lines = table_banner(f"`{table.name}`")
    previous: str | None = None
    for col in table.columns:
        stmt = f"ALTER TABLE `{table.name}` ADD {render_column_definition(col, type_map)} {render_comment(col)}"
        if previous is not None:
            stmt += f" AFTER `{previous}`"
        lines.append(stmt + ";")
        previous = col.name
    lines.append("")
    return "\n".join(lines) + "\n"


def render_sql_outputs(
    tables: list[TableSpec],
    type_map: TypeMap = DEFAULT_TYPE_MAP,
    settings: GeneratorSettings = DEFAULT_SETTINGS,
) -> dict[str, str]:
    """File name -> concatenated statements for all tables, in table order."""
    create_parts: list[str] = []
    alter_parts: list[str] = []
    drop_parts: list[str] = []
    add_parts: list[str] = []
    for table in tables:
        create_parts.append(render_create_sql(table, type_map, settings))
        alter_parts.append(render_alter_sql(table, type_map))
        drop_parts.append(render_drop_sql(table))
        add_parts.append(render_add_sql(table, type_map))

    return {
        CREATE_SQL_FILE: "".join(create_parts),
        ALTER_SQL_FILE: "".join(alter_parts),
        DROP_SQL_FILE: "".join(drop_parts),
        ADD_SQL_FILE: "".join(add_parts),
    }
