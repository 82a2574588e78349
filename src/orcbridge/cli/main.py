from __future__ import annotations

"""
orcbridge CLI: inspect ORC files.

Thin layer: parse args → call the library → print.
"""

import json
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, List, NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

import orcbridge
from orcbridge.errors import ConfigError, FileTypeInvalidError, OrcBridgeError, format_error_for_cli
from orcbridge.rows import Row, UnionValue
from orcbridge.types.unified import describe
from orcbridge.version import VERSION

app = typer.Typer(help="orcbridge CLI: read ORC files as rows")
console = Console()

# Exit codes (stable for scripts)
EXIT_SUCCESS = 0
EXIT_NOT_ORC = 1
EXIT_CONFIG_ERROR = 2
EXIT_RUNTIME_ERROR = 3


@app.callback(invoke_without_command=True)
def _version(
    version: Optional[bool] = typer.Option(
        None, "--version", help="Show the orcbridge version and exit.", is_eager=True
    )
) -> None:
    if version:
        typer.echo(f"orcbridge {VERSION}")
        raise typer.Exit(code=EXIT_SUCCESS)


def _split(columns: Optional[str]) -> Optional[List[str]]:
    if not columns:
        return None
    return [c.strip() for c in columns.split(",") if c.strip()]


def _build_options(columns: Optional[str], partition: Optional[List[str]], encoding: str):
    raw = {"text_encoding": encoding, "selected_columns": _split(columns)}
    if partition:
        raw["merge_partitions"] = True
        raw["partition_definitions"] = list(partition)
    return orcbridge.ReaderOptions.from_mapping(raw)


def _jsonable(value: Any) -> Any:
    if isinstance(value, Row):
        return [_jsonable(v) for v in value.fields]
    if isinstance(value, UnionValue):
        return {"tag": value.tag, "value": _jsonable(value.value)}
    if isinstance(value, dict):
        return [[_jsonable(k), _jsonable(v)] for k, v in value.items()]
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, bytes):
        return value.hex()
    return value


def _fail(e: Exception) -> NoReturn:
    typer.secho(format_error_for_cli(e), fg=typer.colors.RED, err=True)
    if isinstance(e, ConfigError):
        raise typer.Exit(code=EXIT_CONFIG_ERROR)
    if isinstance(e, FileTypeInvalidError):
        raise typer.Exit(code=EXIT_NOT_ORC)
    raise typer.Exit(code=EXIT_RUNTIME_ERROR)


@app.command("sniff")
def sniff(path: str = typer.Argument(..., help="Local path or URI of the file.")) -> None:
    """Check whether a file carries the ORC magic."""
    try:
        ok = orcbridge.detect_format(path)
    except OrcBridgeError as e:
        _fail(e)
    if ok:
        typer.secho(f"{path}: ORC", fg=typer.colors.GREEN)
        raise typer.Exit(code=EXIT_SUCCESS)
    typer.secho(f"{path}: not an ORC file", fg=typer.colors.YELLOW)
    raise typer.Exit(code=EXIT_NOT_ORC)


@app.command("schema")
def schema(
    path: str = typer.Argument(..., help="Local path or URI of the file."),
    columns: Optional[str] = typer.Option(
        None, "--columns", "-c", help="Comma-separated columns to select (default: all)."
    ),
    partition: Optional[List[str]] = typer.Option(
        None, "--partition", "-p", help="Hive-style partition column to merge (repeatable)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table."),
) -> None:
    """Print the unified schema of a file."""
    try:
        options = _build_options(columns, partition, "utf-8")
        row_type = orcbridge.infer_schema(path, options=options)
    except OrcBridgeError as e:
        _fail(e)

    if as_json:
        typer.echo(json.dumps(describe(row_type), indent=2))
        return
    table = Table(title=path)
    table.add_column("#", justify="right")
    table.add_column("name")
    table.add_column("type")
    for i, (name, ftype) in enumerate(row_type.fields()):
        table.add_row(str(i), name, str(ftype))
    console.print(table)


@app.command("head")
def head(
    path: str = typer.Argument(..., help="Local path or URI of the file."),
    n: int = typer.Option(10, "--rows", "-n", min=0, help="Number of rows to print."),
    columns: Optional[str] = typer.Option(
        None, "--columns", "-c", help="Comma-separated columns to select (default: all)."
    ),
    partition: Optional[List[str]] = typer.Option(
        None, "--partition", "-p", help="Hive-style partition column to merge (repeatable)."
    ),
    encoding: str = typer.Option("utf-8", "--encoding", help="Text encoding for string columns."),
) -> None:
    """Print the first N rows as JSON lines."""
    try:
        options = _build_options(columns, partition, encoding)
        with orcbridge.read(path, options=options) as rows:
            row_type = orcbridge.infer_schema(path, options=options)
            for i, row in enumerate(rows):
                if i >= n:
                    break
                typer.echo(json.dumps(dict(zip(row_type.names, _jsonable(row)))))
    except OrcBridgeError as e:
        _fail(e)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
