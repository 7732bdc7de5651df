"""edbml CLI

Usage:
    edbml compile page.edbml               # Print compiled function source
    edbml compile page.edbml -o page.py    # Write it to a file
    edbml render page.edbml -a user='{"name": "Ada"}'
    edbml --version
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, List, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax

from edbml._version import __version__
from edbml.compiler import Degraded, FunctionCompiler
from edbml.config import CompilerConfig, load_config
from edbml.errors import EdbmlError
from edbml.runtime import Runtime

log = logging.getLogger(__name__)

console = Console()

typer_app = typer.Typer(no_args_is_help=True)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the edbml CLI.

    Log levels:
    - Normal: Only warnings/errors shown
    - Verbose (-v): INFO level
    - Debug (EDBML_DEBUG=1): DEBUG level, shows every compile step
    """
    if os.environ.get("EDBML_DEBUG"):
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=verbose,
        show_path=bool(os.environ.get("EDBML_DEBUG")),
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("edbml")
    logger.setLevel(level)
    logger.handlers = [handler]
    logger.propagate = False


def parse_pairs(pairs: Optional[List[str]], option: str) -> dict[str, str]:
    """Parse key=value options into a dict."""
    result: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(
                f"Expected key=value, got {pair!r}", param_hint=option
            )
        result[key.strip()] = value
    return result


def _load(config_path: Optional[Path]) -> CompilerConfig:
    if config_path is None:
        return CompilerConfig()
    return load_config(config_path)


def _fail(error: Exception) -> NoReturn:
    typer.secho(f"Error: {error}", err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"edbml {__version__}")
        raise typer.Exit()


@typer_app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging."),
) -> None:
    """Compile edbml templates to Python functions."""
    setup_logging(verbose)


@typer_app.command("compile")
def compile_command(
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="Template file."
    ),
    config: Optional[Path] = typer.Option(None, "-c", "--config", help="Config YAML."),
    directive: Optional[List[str]] = typer.Option(
        None, "-d", "--directive", help="Directive as key=value (repeatable)."
    ),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write source to file instead of printing."
    ),
) -> None:
    """Compile a template and show the generated function."""
    try:
        compiler = FunctionCompiler(_load(config))
        directives = parse_pairs(directive, "--directive")
        result = compiler.compile(file.read_text(encoding="utf-8"), directives)
    except EdbmlError as e:
        _fail(e)

    if isinstance(result, Degraded):
        typer.secho(f"Warning: {result.errormessage}", err=True, fg=typer.colors.YELLOW)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(result.source + "\n", encoding="utf-8")
        typer.echo(f"Wrote compiled function to {output}")
    elif console.is_terminal:
        console.print(Syntax(result.source, "python"))
    else:
        typer.echo(result.source)


@typer_app.command("render")
def render_command(
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="Template file."
    ),
    config: Optional[Path] = typer.Option(None, "-c", "--config", help="Config YAML."),
    arg: Optional[List[str]] = typer.Option(
        None, "-a", "--arg", help="Argument as name=json (repeatable)."
    ),
) -> None:
    """Compile a template, call it, and print what it rendered."""
    runtime = Runtime()
    try:
        compiler = FunctionCompiler(_load(config), runtime)
        result = compiler.compile(file.read_text(encoding="utf-8"))
        kwargs: dict[str, Any] = {
            name: json.loads(value)
            for name, value in parse_pairs(arg, "--arg").items()
        }
    except (EdbmlError, json.JSONDecodeError) as e:
        _fail(e)

    missing = [name for name in result.params if name not in kwargs]
    if missing:
        _fail(EdbmlError(f"Missing arguments: {', '.join(missing)}"))

    log.info("Calling %s with %s", file.name, ", ".join(kwargs) or "no arguments")
    value = result(**kwargs)
    if value is not None:
        typer.echo(value)
    elif runtime.outputs:
        typer.echo(runtime.outputs[-1].html)


def app() -> None:
    """Entry point for the CLI."""
    typer_app()


if __name__ == "__main__":
    app()
