"""Command-line interface for the telemetry-h5 converter."""

from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from telemetry_h5.config.settings import LayoutMode

app = typer.Typer(
    name="telemetry-h5",
    help="Convert JSON telemetry records into a chunked, compressed HDF5 file.",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        from telemetry_h5 import __version__

        console.print(f"telemetry-h5 version {__version__}")
        raise typer.Exit


@app.command()
def convert(
    input_path: Annotated[
        Path,
        typer.Argument(help="JSON input file (list of namespaces of records)."),
    ],
    output_path: Annotated[
        Path,
        typer.Argument(help="HDF5 file to create (overwritten if it exists)."),
    ],
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration YAML file.",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    layout: Annotated[
        LayoutMode | None,
        typer.Option("--layout", "-l", help="Output layout (overrides config)."),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Log level (overrides config)."),
    ] = None,
    json_logs: Annotated[
        bool,
        typer.Option("--json-logs", help="Emit logs as JSON."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version information and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Convert INPUT_PATH (JSON) into OUTPUT_PATH (HDF5)."""
    from telemetry_h5.config.loader import load_config
    from telemetry_h5.etl import run_conversion
    from telemetry_h5.ingestion.reader import InputError
    from telemetry_h5.storage.writer import StoreError
    from telemetry_h5.utils.logging import configure_logging

    overrides: dict[str, Any] = {}
    if layout is not None:
        overrides.setdefault("layout", {})["mode"] = layout.value
    if log_level is not None:
        overrides.setdefault("logging", {})["level"] = log_level
    if json_logs:
        overrides.setdefault("logging", {})["json_output"] = True

    try:
        converter_config = load_config(config, overrides=overrides)
    except (FileNotFoundError, ValueError) as e:
        err_console.print(f"[red]Error: invalid configuration: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    configure_logging(
        level=converter_config.logging.level,
        json_output=converter_config.logging.json_output,
    )

    try:
        result = run_conversion(input_path, output_path, converter_config)
    except (InputError, StoreError) as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    table = Table(title="Conversion Results")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Namespaces", str(result.n_namespaces))
    table.add_row("Records", str(result.n_records))
    table.add_row("Datasets written", str(result.n_written))
    table.add_row("Skipped (empty)", str(result.n_skipped))
    table.add_row("Renamed", str(result.n_renamed))
    table.add_row("Coercion warnings", str(result.n_coercion_warnings))
    table.add_row("Layout", result.layout.value)
    if result.layout == LayoutMode.FLAT:
        table.add_row("Gzip level", str(result.compression_level))
    if result.n_compression_fallbacks:
        table.add_row("Uncompressed fallbacks", str(result.n_compression_fallbacks))

    console.print(table)
    console.print(
        f"\n[green]Conversion successful. HDF5 file created: {result.output_path}[/green]"
    )


if __name__ == "__main__":
    app()
