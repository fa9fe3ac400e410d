#!/usr/bin/env python3
"""Generate ORM model files and MySQL DDL scripts from a declarative table document."""

from __future__ import annotations

import argparse
import difflib
import sys
from pathlib import Path

from generator_settings import DEFAULT_SETTINGS, GeneratorSettings, load_settings
from render_models import render_model_outputs
from render_sql import render_sql_outputs
from schema_loader import load_tables, read_document
from schema_model import DEFAULT_TYPE_MAP, ParseError, TableSpec, TypeMap

CONFIG_FILE = "config.json"
MODEL_DIR = "../../models/"
SQL_DIR = "../../sql/"


def generate_outputs(
    config_path: Path,
    settings: GeneratorSettings = DEFAULT_SETTINGS,
    type_map: TypeMap = DEFAULT_TYPE_MAP,
) -> tuple[dict[str, str], dict[str, str], list[TableSpec]]:
    """Load the table document and render every artifact in memory.

    Returns (model files, sql files, tables). Nothing touches the disk
    besides reading ``config_path``, so a parse error leaves existing output
    untouched.
    """
    document = read_document(config_path)
    tables = load_tables(document, type_map)

    model_outputs = render_model_outputs(tables, type_map, settings)
    sql_outputs = render_sql_outputs(tables, type_map, settings)
    return model_outputs, sql_outputs, tables


def write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def check_equal(path: Path, generated: str) -> bool:
    if not path.exists():
        print(f"[check] missing file: {path}", file=sys.stderr)
        return False

    existing = path.read_text(encoding="utf-8")
    if existing == generated:
        return True

    print(f"[check] drift detected: {path}", file=sys.stderr)
    diff = difflib.unified_diff(
        existing.splitlines(),
        generated.splitlines(),
        fromfile=str(path),
        tofile=f"generated:{path}",
        lineterm="",
    )
    for idx, line in enumerate(diff):
        if idx > 200:
            print("... (diff truncated)", file=sys.stderr)
            break
        print(line, file=sys.stderr)
    return False


def planned_files(model_dir: Path, sql_dir: Path, model_outputs: dict[str, str], sql_outputs: dict[str, str]) -> list[tuple[Path, str]]:
    files = [(model_dir / name, content) for name, content in model_outputs.items()]
    files.extend((sql_dir / name, content) for name, content in sql_outputs.items())
    return files


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate ORM models and MySQL DDL from a table document")
    parser.add_argument("--config", default=CONFIG_FILE, help="Table document (JSON, or YAML by suffix)")
    parser.add_argument("--model-dir", default=MODEL_DIR, help="Output directory for model files")
    parser.add_argument("--sql-dir", default=SQL_DIR, help="Output directory for SQL scripts")
    parser.add_argument("--settings", default=None, help="Optional YAML rendering settings")
    parser.add_argument("--check", action="store_true", help="Verify outputs are up-to-date without writing")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    config_path = Path(args.config)
    model_dir = Path(args.model_dir)
    sql_dir = Path(args.sql_dir)

    try:
        settings = load_settings(Path(args.settings) if args.settings else None)
        model_outputs, sql_outputs, tables = generate_outputs(config_path, settings)
    except ParseError as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"[error] cannot read input: {exc}", file=sys.stderr)
        return 1

    files = planned_files(model_dir, sql_dir, model_outputs, sql_outputs)

    if args.check:
        results = [check_equal(path, content) for path, content in files]
        return 0 if all(results) else 1

    for path, content in files:
        try:
            write_text(path, content)
        except OSError as exc:
            print(f"[error] cannot write {path}: {exc}", file=sys.stderr)
            return 1
        print(f"Generated {path}")
    print(f"Total: {len(tables)} tables generated from {config_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
