"""Command-line interface for ffiwire code generation."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from lark.exceptions import LarkError
from rich.console import Console
from rich.table import Table

from ffiwire import __version__
from ffiwire.generator import python, swift
from ffiwire.generator.config import ConfigError, FfiwireConfig, load_config
from ffiwire.generator.log import configure_logging
from ffiwire.generator.parser import ValidationError, load_interface
from ffiwire.generator.references import ObjectReferenceAnalyzer
from ffiwire.generator.sizes import InterfaceSizeInfo, SizeInfo, calculate_sizes

if TYPE_CHECKING:
    from ffiwire.generator.types import Interface


@click.group()
@click.version_option(version=__version__, prog_name="ffiwire")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, log_json: bool, config_path: str | None) -> None:
    """ffiwire sum-type binding generator."""
    configure_logging(verbose=verbose, log_json=log_json)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config_path) if config_path else None


def _load_config(ctx: click.Context) -> FfiwireConfig:
    try:
        return load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        print(f"Config error: {e}")
        sys.exit(1)


def _load_interface(input_file: str) -> Interface:
    try:
        return load_interface(input_file)
    except (ValidationError, LarkError, ValueError, KeyError, OSError) as e:
        print(f"Error reading {input_file}: {e}")
        sys.exit(1)


@cli.command()
@click.option("--language", "-l", required=True, help="Target language (python, swift)")
@click.option("--input", "-i", "input_file", required=True, help="Input interface file")
@click.option("--output", "-o", "output_file", required=True, help="Output file")
@click.option(
    "--runtime-import",
    "runtime_import",
    default=None,
    help="Import path for the Python runtime (default from config: ffiwire_runtime)",
)
@click.option("--module-name", default=None, help="Swift FFI module name")
@click.pass_context
def gen(
    ctx: click.Context,
    language: str,
    input_file: str,
    output_file: str,
    runtime_import: str | None,
    module_name: str | None,
) -> None:
    """Generate bindings from an interface file."""
    config = _load_config(ctx)
    interface = _load_interface(input_file)

    try:
        if language == "python":
            import_path = runtime_import or config.bindings.python.runtime_import
            generated_file = python.render(interface, runtime_import=import_path)
        elif language == "swift":
            generated_file = swift.render(
                interface, module_name=module_name or config.bindings.swift.module_name
            )
        else:
            print(f"Unknown language: {language}")
            sys.exit(1)
    except ValidationError as e:
        print(f"Cannot generate {language} bindings: {e}")
        sys.exit(1)

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(generated_file)


@cli.command()
@click.option("--language", "-l", required=True, help="Target language (python)")
@click.option("--output", "-o", "output_path", default=".", help="Output directory")
@click.option("--name", default="ffiwire_runtime", help="Runtime folder name")
def runtime(language: str, output_path: str, name: str) -> None:
    """Generate runtime support code."""
    if language == "python":
        runtime_dir = Path(output_path) / name
        runtime_dir.mkdir(parents=True, exist_ok=True)
        for filename, content in python.runtime().items():
            (runtime_dir / filename).write_text(content)
        print(f"Generated Python runtime in {runtime_dir}")
    else:
        print(f"Unknown language: {language}")
        sys.exit(1)


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input interface file")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_file: str, output_json: bool) -> None:
    """Display variants, wire tags and encoded sizes."""
    interface = _load_interface(input_file)
    size_info = calculate_sizes(interface)
    analyzer = ObjectReferenceAnalyzer(interface)

    if output_json:
        _output_json(interface, size_info, analyzer)
    else:
        _output_plain(interface, size_info, analyzer)


def _format_size(size: SizeInfo) -> str:
    """Format a size range, handling None for unbounded."""
    if size.max_size is None:
        return f"{size.min_size}+ bytes"
    if size.min_size == size.max_size:
        return f"{size.min_size} bytes"
    return f"{size.min_size}-{size.max_size} bytes"


def _output_json(
    interface: Interface,
    size_info: InterfaceSizeInfo,
    analyzer: ObjectReferenceAnalyzer,
) -> None:
    """Output interface info as JSON."""
    data: dict = {
        "namespace": interface.namespace,
        "enums": {},
        "records": {},
        "objects": [o.name for o in interface.objects],
    }

    for enum in interface.enums:
        enum_info = size_info.enums[enum.name]
        data["enums"][enum.name] = {
            "min_size": enum_info.size.min_size,
            "max_size": enum_info.size.max_size,
            "kind": enum_info.size.kind.value,
            "equality": analyzer.supports_equality(enum.name),
            "variants": [
                {
                    "name": v.name,
                    "tag": v.tag,
                    "fields": [
                        {"name": f.name, "type": str(f.type)} for f in variant.fields
                    ],
                    "min_size": v.size.min_size,
                    "max_size": v.size.max_size,
                }
                for v, variant in zip(enum_info.variants, enum.variants, strict=True)
            ],
        }

    for name, record_info in size_info.records.items():
        data["records"][name] = {
            "min_size": record_info.size.min_size,
            "max_size": record_info.size.max_size,
            "kind": record_info.size.kind.value,
            "equality": analyzer.supports_equality(name),
        }

    print(json.dumps(data, indent=2))


def _output_plain(
    interface: Interface,
    size_info: InterfaceSizeInfo,
    analyzer: ObjectReferenceAnalyzer,
) -> None:
    """Output interface info using rich text formatting."""
    console = Console()

    if interface.namespace:
        console.print(f"[bold cyan]Namespace[/bold cyan] {interface.namespace}")
        console.print()

    for enum in interface.enums:
        enum_info = size_info.enums[enum.name]
        equality = "eq+hash" if analyzer.supports_equality(enum.name) else "identity"
        console.print(
            f"[bold cyan]enum {enum.name}[/bold cyan] "
            f"[yellow]{_format_size(enum_info.size)}[/yellow] [dim]{equality}[/dim]"
        )

        table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        table.add_column("Tag", style="green", justify="right")
        table.add_column("Variant", style="white")
        table.add_column("Fields", style="dim")
        table.add_column("Size", style="yellow", justify="right")

        for v, variant in zip(enum_info.variants, enum.variants, strict=True):
            fields = ", ".join(f"{f.name}: {f.type}" for f in variant.fields)
            table.add_row(str(v.tag), v.name, fields, _format_size(v.size))

        console.print(table)
        console.print()

    if size_info.records:
        console.print("[bold cyan]Records[/bold cyan]")
        record_table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        record_table.add_column("Name", style="white")
        record_table.add_column("Size", style="yellow", justify="right")
        record_table.add_column("Kind", style="dim")
        record_table.add_column("Equality", style="dim")

        for name, record_info in size_info.records.items():
            equality = "eq+hash" if analyzer.supports_equality(name) else "identity"
            record_table.add_row(
                name, _format_size(record_info.size), record_info.size.kind.value, equality
            )

        console.print(record_table)
        console.print()

    if interface.objects:
        console.print("[bold cyan]Objects[/bold cyan]")
        for o in interface.objects:
            console.print(f"  {o.name}")


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
