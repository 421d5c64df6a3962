"""Command-line interface for transvalid."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from transvalid.config import ConfigError, ValidatorConfig, build_validator, load_config
from transvalid.errors import ValidationErrors
from transvalid.i18n import CatalogLoadError
from transvalid.options import DEFAULT_MESSAGES, FORMAT_OPTIONS

app = typer.Typer(
    name="transvalid",
    help="Localized validation of values against rule expressions",
    add_completion=False,
)

console = Console()

EXIT_INVALID = 1
EXIT_INTERNAL = 2


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Localized validation of values against rule expressions."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _print_errors(errs: ValidationErrors, name: str) -> None:
    console.print()
    if not errs.has_error():
        console.print(f"[green]✓ {name} is valid[/green]")
        console.print()
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Field", style="cyan")
    table.add_column("Rule", style="yellow")
    table.add_column("Message", style="white")

    for field, rules in errs.errors().items():
        for rule, message in rules.items():
            table.add_row(field, rule, message)

    console.print(table)
    console.print()


@app.command(name="check")
def check_cmd(
    value: Annotated[str, typer.Argument(help="Value to validate")],
    rules: Annotated[
        str,
        typer.Option("--rules", "-r", help="Rule expression, e.g. 'required,national_code'"),
    ],
    name: Annotated[
        str,
        typer.Option("--name", "-n", help="Field name used in messages"),
    ] = "value",
    locale: Annotated[
        Optional[str],
        typer.Option("--locale", "-l", help="Message locale (default from config)"),
    ] = None,
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="YAML configuration file"),
    ] = None,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format (text, json)"),
    ] = "text",
) -> None:
    """Validate a single value.

    Exits with 0 when the value is valid, 1 on validation errors and 2 on
    configuration or rule errors.

    Examples:
        transvalid check 0499370899 -r national_code
        transvalid check ab -r required,min=3 -n username -l fa
        transvalid check 127.0.0.1:80 -r ip_port -f json
    """
    if format not in ("text", "json"):
        typer.echo(f"Error: Unsupported format: {format}", err=True)
        raise typer.Exit(EXIT_INTERNAL)

    try:
        config = load_config(config_file) if config_file else ValidatorConfig.from_env()
        if not config.rules:
            config.rules = list(FORMAT_OPTIONS)
        validator = build_validator(config)
    except (ConfigError, CatalogLoadError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(EXIT_INTERNAL)

    errs = validator.var(locale or config.locale, name, value, rules)

    if errs.has_internal_error():
        typer.echo(f"Error: {errs.internal_error()}", err=True)
        raise typer.Exit(EXIT_INTERNAL)

    if format == "json":
        typer.echo(errs.to_json(indent=2))
    else:
        _print_errors(errs, name)

    if errs.has_validation_errors():
        raise typer.Exit(EXIT_INVALID)


@app.command(name="rules")
def rules_cmd() -> None:
    """List the available format rules."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Rule", style="cyan")
    table.add_column("Default message", style="white")

    for rule in FORMAT_OPTIONS:
        table.add_row(rule, DEFAULT_MESSAGES[rule])

    console.print(table)
