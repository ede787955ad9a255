"""Command-line interface for protostruct code generation."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from protostruct.generator import TARGETS, GenerationError, GeneratorConfig, generate, load

if TYPE_CHECKING:
    from protostruct.generator.types import DescriptorSet, FileDescriptor, MessageDescriptor


def _fail(error: GenerationError) -> None:
    Console(stderr=True).print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log every generation step")
def cli(verbose: bool) -> None:
    """protostruct: native structs and converters from protobuf schemas."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@cli.command()
@click.option("--language", "-l", required=True, help="Target language (unreal, python)")
@click.option(
    "--input",
    "-i",
    "input_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Descriptor set from protoc --descriptor_set_out, or a JSON model dump",
)
@click.option("--output", "-o", "output_path", required=True, help="Output directory")
@click.option("--file", "files", multiple=True, help="Schema file to generate (repeatable)")
@click.option("--converter-class", default=None, help="Name of the converter class (unreal)")
@click.option("--struct-prefix", default=None, help="Prefix of generated struct names")
@click.option("--enum-prefix", default=None, help="Prefix of generated enum names")
@click.option("--source-module", default=None, help="Module of the protoc messages (python)")
def gen(
    language: str,
    input_file: str,
    output_path: str,
    files: tuple[str, ...],
    converter_class: str | None,
    struct_prefix: str | None,
    enum_prefix: str | None,
    source_module: str | None,
) -> None:
    """Generate structs, enums and converters from a descriptor set."""
    if language not in TARGETS:
        print(f"Unknown language: {language}")
        sys.exit(1)

    try:
        descriptor_set = load(input_file)
        config = GeneratorConfig.for_target(
            language,
            converter_class=converter_class,
            struct_prefix=struct_prefix,
            enum_prefix=enum_prefix,
            source_module=source_module,
        )
        generated = generate(descriptor_set, config, list(files) or None)
    except GenerationError as e:
        _fail(e)
        return

    output_dir = Path(output_path)
    output_dir.mkdir(parents=True, exist_ok=True)
    for unit in generated:
        (output_dir / unit.name).write_text(unit.content, encoding="utf-8")
    print(f"Generated {len(generated)} files in {output_dir}")


@cli.command()
@click.option(
    "--input",
    "-i",
    "input_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Descriptor set or JSON model dump",
)
@click.option("--json", "output_json", is_flag=True, help="Output the descriptor model as JSON")
def info(input_file: str, output_json: bool) -> None:
    """Display the messages and enums of a descriptor set."""
    try:
        descriptor_set = load(input_file)
    except GenerationError as e:
        _fail(e)
        return

    if output_json:
        print(descriptor_set.to_json(indent=2))
    else:
        _output_plain(descriptor_set)


def _message_rows(message: MessageDescriptor) -> list[tuple[str, str, str, str]]:
    """Rows for a message and everything nested in it, map entries excluded."""
    if message.map_entry:
        return []
    oneofs = [o.name for _, o in message.real_oneofs()]
    rows = [(message.full_name, "message", f"{len(message.fields)} fields", ", ".join(oneofs))]
    rows += [(e.full_name, "enum", f"{len(e.values)} values", "") for e in message.nested_enums]
    for nested in message.nested_messages:
        rows += _message_rows(nested)
    return rows


def _output_plain(descriptor_set: DescriptorSet) -> None:
    """Output the descriptor set using rich text formatting."""
    console = Console()
    selected = set(descriptor_set.files_to_generate)

    for file in descriptor_set.files:
        _print_file(console, file, not selected or file.name in selected)


def _print_file(console: Console, file: FileDescriptor, generated: bool) -> None:
    marker = "" if generated else " [dim](dependency)[/dim]"
    console.print(f"[bold cyan]{escape(file.name)}[/bold cyan]{marker}")

    meta = Table(show_header=False, box=None, padding=(0, 2, 0, 2))
    meta.add_column("Label", style="dim")
    meta.add_column("Value", style="white")
    meta.add_row("Package", file.package or "(none)")
    meta.add_row("Syntax", file.syntax)
    if file.dependencies:
        meta.add_row("Imports", ", ".join(file.dependencies))
    console.print(meta)

    table = Table(show_header=True, box=None, padding=(0, 2, 0, 2))
    table.add_column("Type", style="white")
    table.add_column("Kind", style="dim")
    table.add_column("Members", style="yellow", justify="right")
    table.add_column("Oneofs", style="green")

    for enum in file.enums:
        table.add_row(enum.full_name, "enum", f"{len(enum.values)} values", "")
    for message in file.messages:
        for row in _message_rows(message):
            table.add_row(*row)

    console.print(table)
    console.print()


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
