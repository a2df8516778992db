"""Command-line interface for protocol extraction."""

from __future__ import annotations

import dataclasses
import json
import logging
import sys
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from d2protocol.extractor.builder import build as build_protocol
from d2protocol.extractor.config import DEFAULT_SETTINGS, Settings
from d2protocol.extractor.errors import BuildError

if TYPE_CHECKING:
    from d2protocol.extractor.types import Protocol


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_settings(config_file: str | None, entry: str | None) -> Settings:
    settings = DEFAULT_SETTINGS
    if config_file:
        with open(config_file, encoding="utf-8") as f:
            settings = Settings.from_json(f.read())
    if entry:
        settings = dataclasses.replace(settings, entry_tag=entry)
    return settings


def _build(input_file: str, settings: Settings) -> Protocol:
    try:
        return build_protocol(input_file, settings)
    except BuildError as err:
        print(f"Error: {err}")
        sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Show debug logging")
def cli(verbose: bool) -> None:
    """Dofus protocol extractor."""
    _configure_logging(verbose)


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Client SWF file")
@click.option(
    "--output", "-o", "output_file", default=None, help="Output JSON file (default stdout)"
)
@click.option("--config", "config_file", default=None, help="JSON settings override")
@click.option("--entry", default=None, help="Name of the DoABC tag holding the client code")
def build(
    input_file: str, output_file: str | None, config_file: str | None, entry: str | None
) -> None:
    """Extract the protocol and write it as JSON."""
    protocol = _build(input_file, _load_settings(config_file, entry))
    text = protocol.to_json(indent=2)

    if output_file:
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(text)
    else:
        print(text)


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Client SWF file")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.option("--config", "config_file", default=None, help="JSON settings override")
def info(input_file: str, output_json: bool, config_file: str | None) -> None:
    """Display a summary of the extracted protocol."""
    protocol = _build(input_file, _load_settings(config_file, None))

    if output_json:
        _output_json(protocol)
    else:
        _output_plain(protocol)


def _output_json(protocol: Protocol) -> None:
    """Output protocol summary as JSON."""
    data = {
        "version": {
            "name": str(protocol.version),
            **protocol.version.to_dict(),
        },
        "counts": {
            "messages": len(protocol.messages),
            "types": len(protocol.types),
            "enums": len(protocol.enums),
        },
        "messages": {
            m.name: {"id": m.protocol_id, "fields": len(m.fields)} for m in protocol.messages
        },
    }
    print(json.dumps(data, indent=2))


def _output_plain(protocol: Protocol) -> None:
    """Output protocol summary using rich text formatting."""
    console = Console()
    version = protocol.version

    console.print("[bold cyan]Protocol[/bold cyan]")
    summary = Table(show_header=False, box=None, padding=(0, 2, 0, 2))
    summary.add_column("Label", style="dim")
    summary.add_column("Value", style="white")
    summary.add_row("Version", f"{version} (revision {version.revision}, patch {version.patch})")
    summary.add_row("Messages", str(len(protocol.messages)))
    summary.add_row("Types", str(len(protocol.types)))
    summary.add_row("Enums", str(len(protocol.enums)))
    console.print(summary)
    console.print()

    console.print("[bold cyan]Messages[/bold cyan]")
    messages = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
    messages.add_column("Name", style="white")
    messages.add_column("ID", style="green", justify="right")
    messages.add_column("Fields", style="yellow", justify="right")
    messages.add_column("Parent", style="dim")

    for message in sorted(protocol.messages, key=lambda m: m.protocol_id):
        messages.add_row(
            message.name, str(message.protocol_id), str(len(message.fields)), message.parent
        )

    console.print(messages)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
