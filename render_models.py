"""Render ORM record definitions (Go structs with beego orm tags)."""

from __future__ import annotations

from generator_settings import DEFAULT_SETTINGS, GeneratorSettings
from schema_model import DEFAULT_TYPE_MAP, ColumnSpec, ParseError, TableSpec, TypeMap


def orm_tag(col: ColumnSpec, is_model_pk: bool) -> str:
    parts = [f"column({col.name})"]
    if col.is_nullable:
        parts.append("null")
    if is_model_pk:
        parts.append("pk")
    if col.size > 0:
        parts.append(f"size({col.size})")
    return f'`orm:"{";".join(parts)}"`'


def render_model(
    table: TableSpec,
    type_map: TypeMap = DEFAULT_TYPE_MAP,
    settings: GeneratorSettings = DEFAULT_SETTINGS,
) -> str:
    """One struct per table; fields follow the sorted column order.

    Only the first primary-key column is tagged ``pk``; the ORM accepts a
    single key per model, so further key columns become plain fields.
    """
    model_pk = table.model_primary_key
    lines: list[str] = [f"package {settings.package}", "", f"type {table.model_name} struct {{"]
    for col in table.columns:
        field_type = type_map.field_type(col.storage_type)
        lines.append(f"\t{col.field_name} {field_type} {orm_tag(col, col is model_pk)}")
    lines.append("}")
    lines.append("")
    return "\n".join(lines)


def render_registry(tables: list[TableSpec], settings: GeneratorSettings = DEFAULT_SETTINGS) -> str:
    lines: list[str] = [
        f"package {settings.package}",
        "",
        f'import "{settings.register_import}"',
        "",
        f"func {settings.register_func}() (err error) {{",
        f"\t{settings.register_call}(",
    ]
    for table in tables:
        lines.append(f"\t\tnew({table.model_name}),")
    lines.append("\t)")
    lines.append("")
    lines.append("\treturn")
    lines.append("}")
    lines.append("")
    return "\n".join(lines)


def model_file_name(table: TableSpec, settings: GeneratorSettings = DEFAULT_SETTINGS) -> str:
    return f"{table.name}{settings.extension}"


def registry_file_name(settings: GeneratorSettings = DEFAULT_SETTINGS) -> str:
    return f"{settings.registry_name}{settings.extension}"


def render_model_outputs(
    tables: list[TableSpec],
    type_map: TypeMap = DEFAULT_TYPE_MAP,
    settings: GeneratorSettings = DEFAULT_SETTINGS,
) -> dict[str, str]:
    """File name -> content for the registry file and every model file."""
    outputs: dict[str, str] = {registry_file_name(settings): render_registry(tables, settings)}
    for table in tables:
        file_name = model_file_name(table, settings)
        if file_name in outputs:
            raise ParseError(f"table {table.name!r}: model file {file_name} collides with another output file")
        outputs[file_name] = render_model(table, type_map, settings)
    return outputs
