"""
tapdigit command line interface.

Commands:
  eval    Evaluate one or more expressions against a shared environment
  tokens  Show the token stream of an expression
  parse   Show the syntax tree and warnings of an expression
  repl    Interactive calculator session
"""

from __future__ import annotations

import logging
import math
import platform
import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tapdigit._version import get_version
from tapdigit.core.config import CalcConfig, build_environment, find_config, load_config
from tapdigit.core.errors import ConfigError, ExpressionError, ParseError
from tapdigit.core.expression_lang.environment import Environment
from tapdigit.core.expression_lang.evaluator import Evaluator
from tapdigit.core.expression_lang.limits import check_nesting
from tapdigit.core.expression_lang.parser import ParseWarning, Parser
from tapdigit.core.expression_lang.tokenizer import Tokenizer

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="tapdigit – evaluate arithmetic expressions with variables and functions",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"tapdigit {get_version()}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version information",
        ),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to tapdigit.toml (default: $TAPDIGIT_CONFIG)"),
    ] = None,
) -> None:
    """tapdigit CLI main callback for global options."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )
    try:
        ctx.obj = load_config(config or find_config())
    except ConfigError as e:
        err_console.print(f"[red]Invalid configuration:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e


def _get_config(ctx: typer.Context) -> CalcConfig:
    return ctx.obj if isinstance(ctx.obj, CalcConfig) else CalcConfig()


def format_number(value: float) -> str:
    """Render integral values without a trailing ``.0``."""
    if math.isfinite(value) and value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def _print_warnings(warnings: list[ParseWarning]) -> None:
    for warning in warnings:
        err_console.print(
            f"[yellow]warning:[/yellow] {escape(warning.message)} at character {warning.pos}"
        )


def _print_error(error: ExpressionError) -> None:
    err_console.print(f"[red]{error.kind} error:[/red] {escape(str(error))}")


def _too_deep(max_depth: int) -> ParseError:
    return ParseError(
        f"Expression is nested too deeply to process (configured limit {max_depth})", 0
    )


def _run(evaluator: Evaluator, source: str, max_depth: int) -> float | None:
    check_nesting(source, max_depth)
    try:
        value = evaluator.evaluate(source)
    except RecursionError:
        # A max_depth raised above what the interpreter stack can hold
        raise _too_deep(max_depth) from None
    _print_warnings(evaluator.parser.warnings)
    return value


@app.command("eval")
def eval_command(
    ctx: typer.Context,
    expressions: Annotated[list[str], typer.Argument(help="Expressions, evaluated in order")],
) -> None:
    """Evaluate expressions; variables carry over from one to the next."""
    config = _get_config(ctx)
    evaluator = Evaluator(build_environment(config))

    for source in expressions:
        try:
            value = _run(evaluator, source, config.limits.max_depth)
        except ExpressionError as e:
            _print_error(e)
            raise typer.Exit(1) from e
        if value is not None:
            console.print(format_number(value))


@app.command("tokens")
def tokens_command(
    expression: Annotated[str, typer.Argument(help="Expression to tokenize")],
) -> None:
    """Show the tokens of an expression with their offsets."""
    table = Table(title="Tokens")
    table.add_column("Kind")
    table.add_column("Lexeme", justify="center")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")

    try:
        for token in Tokenizer(expression):
            table.add_row(str(token.kind), escape(token.value), str(token.start), str(token.end))
    except ExpressionError as e:
        _print_error(e)
        raise typer.Exit(1) from e

    console.print(table)


@app.command("parse")
def parse_command(
    ctx: typer.Context,
    expression: Annotated[str, typer.Argument(help="Expression to parse")],
) -> None:
    """Show the parsed syntax tree of an expression."""
    config = _get_config(ctx)
    parser = Parser(build_environment(config))

    try:
        check_nesting(expression, config.limits.max_depth)
        try:
            result = parser.parse(expression)
            rendered = None
            if result.expression is not None:
                rendered = (str(result.expression), repr(result.expression))
        except RecursionError:
            raise _too_deep(config.limits.max_depth) from None
    except ExpressionError as e:
        _print_error(e)
        raise typer.Exit(1) from e

    if rendered is None:
        console.print("[dim](no expression)[/dim]")
        return
    console.print(escape(rendered[0]))
    console.print(escape(rendered[1]), style="dim")
    _print_warnings(result.warnings)


def _print_variables(env: Environment) -> None:
    if not env.variables:
        console.print("[dim](no variables)[/dim]")
        return
    for name, value in sorted(env.variables.items()):
        console.print(f"{name} = {format_number(value)}")


@app.command("repl")
def repl_command(ctx: typer.Context) -> None:
    """Interactive session. :vars lists variables, :quit exits."""
    config = _get_config(ctx)
    env = build_environment(config)
    evaluator = Evaluator(env)

    while True:
        try:
            line = console.input("[bold]>[/bold] ")
        except (EOFError, KeyboardInterrupt):
            console.print()
            break

        command = line.strip()
        if command in (":quit", ":q"):
            break
        if command == ":vars":
            _print_variables(env)
            continue

        try:
            value = _run(evaluator, line, config.limits.max_depth)
        except ExpressionError as e:
            _print_error(e)
            continue
        if value is not None:
            console.print(format_number(value))


def main(argv: list[str] | None = None) -> None:
    app(args=argv if argv is not None else sys.argv[1:], standalone_mode=True)


if __name__ == "__main__":
    main()
