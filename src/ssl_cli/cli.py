"""ssl-cli command-line entry point.

Usage::

    ssl-cli                    # welcome screen
    ssl-cli create-local-ca
    ssl-cli create-cert [--domain mysite.test]
    ssl-cli setup-nginx
    ssl-cli check-openssl
"""

import logging
from typing import Any, Dict

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .config import Settings
from .orchestrator import Orchestrator
from .prompts import RichConfirmationProvider
from .response import ResponseType

console = Console()
logger = logging.getLogger("ssl_cli")

INTERRUPTED_EXIT_CODE = 130


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _certificate_table(summary: Dict[str, Any]) -> Table:
    table = Table(title="Certificate", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for label, key in [("Subject", "subject"), ("Issuer", "issuer"), ("Serial", "serial_number"),
                       ("Valid from", "not_before"), ("Valid until", "not_after"),
                       ("SHA-256", "fingerprint_sha256")]:
        table.add_row(label, str(summary.get(key, "")))
    if summary.get("dns_names"):
        table.add_row("DNS names", ", ".join(summary["dns_names"]))
    return table


def _finish(ctx: click.Context, result: ResponseType) -> None:
    """Print the outcome and exit with the status mapped from the error kind."""
    if not result.success:
        console.print(f"✗ {result.error}", style="red", markup=False, highlight=False)
        if result.stage:
            console.print(f"  failed stage: {result.stage}", style="dim", markup=False)
        logger.debug("Exiting with %s (%s)", result.exit_code, result.kind.value)
        ctx.exit(result.exit_code)

    for warning in result.warnings:
        console.print(f"⚠ {warning}", style="yellow", markup=False, highlight=False)
    if result.cancelled:
        console.print(f"⚠ {result.output}", style="yellow", markup=False, highlight=False)
        ctx.exit(0)
    console.print(f"✓ {result.output}", style="green", markup=False, highlight=False)


def _run(ctx: click.Context, operation, *args) -> ResponseType:
    try:
        return operation(*args)
    except (KeyboardInterrupt, EOFError):
        console.print("\nAborted.", style="yellow")
        ctx.exit(INTERRUPTED_EXIT_CODE)


@click.group(invoke_without_command=True)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.version_option(__version__, prog_name="ssl-cli")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """CLI tool for creating and managing SSL certificates."""
    try:
        settings = Settings()
    except ValidationError as e:
        raise click.UsageError(f"Invalid configuration: {e}")
    configure_logging("DEBUG" if verbose else settings.log_level)

    if ctx.obj is None:
        ctx.obj = Orchestrator(settings, RichConfirmationProvider(console))

    if ctx.invoked_subcommand is None:
        console.print(Panel.fit(
            "A tool for creating and managing SSL certificates\n"
            "for both local development and production environments\n\n"
            "[yellow]Type[/yellow] [green]ssl-cli --help[/green] [yellow]to see available commands[/yellow]",
            title="SSL CERTIFICATE MANAGER",
            border_style="blue",
        ))


@main.command("create-local-ca")
@click.pass_context
def create_local_ca(ctx: click.Context) -> None:
    """Create a Certificate Authority for local development."""
    result = _run(ctx, ctx.obj.create_local_ca)
    _finish(ctx, result)

    data = result.data
    if data.get("certificate"):
        console.print(_certificate_table(data["certificate"]))
    console.print("Next steps:", style="blue")
    console.print("1. Install the CA certificate in your browser/system")
    console.print("2. Run 'ssl-cli create-cert' to create certificates for your domains")
    console.print("\nInstallation instructions for your platform:", style="yellow")
    console.print(data["install_instructions"], markup=False, highlight=False)


@main.command("create-cert")
@click.option("--domain", "-d", default=None, help="Domain name; prompted for when omitted.")
@click.pass_context
def create_cert(ctx: click.Context, domain: str) -> None:
    """Create a certificate for a domain signed by your local CA."""
    result = _run(ctx, ctx.obj.create_cert, domain)
    _finish(ctx, result)

    data = result.data
    if data.get("certificate"):
        console.print(_certificate_table(data["certificate"]))
    console.print("Files created:", style="blue")
    console.print(f"- {data['key_path']}: Private key", markup=False)
    console.print(f"- {data['cert_path']}: Certificate", markup=False)
    if not data["temporary_files_removed"]:
        for path in data["temporary_files"]:
            console.print(f"- {path}: Temporary file", markup=False)
    console.print("\nTo use this certificate with your web server:", style="yellow")
    console.print(data["server_config"], markup=False, highlight=False)


@main.command("setup-nginx")
@click.pass_context
def setup_nginx(ctx: click.Context) -> None:
    """Set up Nginx with SSL certificates from Let's Encrypt."""
    console.print("ℹ Setting up Nginx with SSL certificates...", style="blue")
    console.print("⚠ Note: This requires root/admin privileges", style="yellow")
    result = _run(ctx, ctx.obj.setup_nginx)
    _finish(ctx, result)

    console.print("\nImportant Notes:", style="blue")
    for note in result.data["notes"]:
        console.print(note, markup=False, highlight=False)


@main.command("check-openssl")
@click.pass_context
def check_openssl(ctx: click.Context) -> None:
    """Check if OpenSSL is installed and working."""
    result = _run(ctx, ctx.obj.check_openssl)
    _finish(ctx, result)
    console.print(f"ℹ OpenSSL version: {result.data['version']}", style="blue", markup=False)


if __name__ == "__main__":
    main()
