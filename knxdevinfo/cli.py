"""Typer CLI entrypoint."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import typer

from knxdevinfo.api import Client
from knxdevinfo.core.errors import InterrogationCanceled, KnxDevinfoError
from knxdevinfo.core.model import DeviceInfoItem

app = typer.Typer(help="Read and decode KNX device information")

EXIT_CANCELED = 130
GENERAL_CATEGORY = "General"


def _build_client() -> Client:
    client = Client()
    for warning in client.load_warnings:
        typer.echo(f"Warning: {warning}", err=True)
    return client


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


class _ItemPrinter:
    """Prints items as they arrive, with a heading for each new category."""

    def __init__(self, *, raw: bool) -> None:
        self.raw = raw
        self._category = GENERAL_CATEGORY

    def __call__(self, item: DeviceInfoItem) -> None:
        if item.category != self._category:
            self._category = item.category
            typer.echo(f"\n{item.category}")
        line = f"  {item.parameter.friendly_name} = {item.value}"
        if self.raw and item.raw:
            line += f" [{item.raw.hex()}]"
        typer.echo(line)


@app.command("inspect")
def inspect(
    snapshot: Path = typer.Argument(..., help="YAML device snapshot"),
    as_json: bool = typer.Option(False, "--json", help="Print items as a JSON array"),
    raw: bool = typer.Option(False, "--raw", help="Append the raw bytes of every item"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every read"),
) -> None:
    """Read all information of the device recorded in SNAPSHOT."""
    _configure_logging(verbose)
    try:
        client = _build_client()
        device = client.load_snapshot(snapshot)
        if not as_json:
            typer.echo(f"Reading data from device {device.name} ...")
        on_item = None if as_json else _ItemPrinter(raw=raw)
        try:
            report = client.read_device_info(device, on_item=on_item)
        except KeyboardInterrupt:
            raise InterrogationCanceled("interrupted by user") from None

        if as_json:
            typer.echo(json.dumps([item.to_dict() for item in report.items], indent=2))
        if report.canceled:
            typer.echo("Reading device info canceled", err=True)
            raise typer.Exit(code=EXIT_CANCELED)
    except InterrogationCanceled:
        typer.echo("Reading device info canceled", err=True)
        raise typer.Exit(code=EXIT_CANCELED) from None
    except KnxDevinfoError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("manufacturer")
def manufacturer(manufacturer_id: int = typer.Argument(..., help="KNX manufacturer id")) -> None:
    """Print the name registered for a KNX manufacturer id."""
    try:
        client = _build_client()
        typer.echo(client.manufacturer_name(manufacturer_id))
    except KnxDevinfoError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
