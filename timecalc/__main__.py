"""CLI for timecalc.

Usage:
    python -m timecalc keys "123+45"                  # Rendering after each keystroke
    python -m timecalc eval "1:00 + 30s" "2 * 3"      # Evaluate with the engine
    python -m timecalc eval "1:00 + 30s" --one-shot   # One engine process per expression
    python -m timecalc repl                           # Interactive keystroke session
    python -m timecalc repl --stub                    # Same, without an engine
"""

from __future__ import annotations

import logging
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from timecalc.bridge import (
    EngineStartError,
    EvaluationBridge,
    ExpressionEvaluator,
    OneShotEvaluator,
    StubEvaluator,
)
from timecalc.environment import EngineConfig
from timecalc.session import Calculator

app = typer.Typer(
    name="timecalc",
    help="Keystroke-level time calculator",
    no_args_is_help=True,
)
console = Console(stderr=True)
out = Console(highlight=False)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(engine: Optional[str], timeout: Optional[float]) -> EngineConfig:
    try:
        return EngineConfig.from_env(engine=engine, timeout_s=timeout)
    except ValueError as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(2)


def _open_evaluator(config: EngineConfig, one_shot: bool) -> ExpressionEvaluator:
    if one_shot:
        return OneShotEvaluator(config.command, timeout=config.timeout_s)
    try:
        return EvaluationBridge(config.command, timeout=config.timeout_s)
    except EngineStartError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _close_evaluator(evaluator: Optional[ExpressionEvaluator]) -> None:
    if isinstance(evaluator, EvaluationBridge):
        evaluator.shutdown()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Keystroke-level time calculator."""
    level = "DEBUG" if verbose else _load_config(None, None).log_level
    _configure_logging(level)


@app.command("keys")
def cmd_keys(
    keys: str = typer.Argument(help="Keystrokes to type, e.g. '123+4#'"),
    engine: Optional[str] = typer.Option(None, "--engine", "-e", help="Also evaluate each step with this engine command line"),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Seconds to wait for each answer"),
) -> None:
    """Show the expression after each keystroke.

    Keys are read as in the repl: '<' deletes, 'C' clears and '=' promotes
    the result. Without --engine nothing is evaluated, so '=' clears.
    """
    evaluator = None
    if engine:
        evaluator = _open_evaluator(_load_config(engine, timeout), one_shot=False)
    calculator = Calculator(evaluator)

    table = Table(title="Keystrokes", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Key", style="green")
    table.add_column("Expression", min_width=20)
    if evaluator is not None:
        table.add_column("Result", style="cyan")

    try:
        for i, ch in enumerate(keys, start=1):
            display = calculator.press(ch)
            row = [str(i), repr(ch), display.expression]
            if evaluator is not None:
                row.append(display.result)
            table.add_row(*row)
    finally:
        _close_evaluator(evaluator)

    console.print()
    console.print(table)
    console.print()
    out.print(calculator.expression, markup=False)


@app.command("eval")
def cmd_eval(
    expressions: list[str] = typer.Argument(help="Expressions to evaluate"),
    engine: Optional[str] = typer.Option(None, "--engine", "-e", help="Engine command line (default: $TIMECALC_ENGINE or time-calc)"),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Seconds to wait for each answer"),
    one_shot: bool = typer.Option(False, "--one-shot", help="Start a new engine process per expression"),
) -> None:
    """Evaluate expressions with the time-calc engine."""
    config = _load_config(engine, timeout)
    evaluator = _open_evaluator(config, one_shot)

    failed = 0
    try:
        for expression in expressions:
            result = evaluator.evaluate(expression)
            if result.is_success:
                out.print(result.value, markup=False)
            else:
                failed += 1
                console.print(f"[red]{escape(expression)}:[/red] {escape(result.error)}", highlight=False)
    finally:
        _close_evaluator(evaluator)

    if failed:
        raise typer.Exit(1)


@app.command("repl")
def cmd_repl(
    engine: Optional[str] = typer.Option(None, "--engine", "-e", help="Engine command line (default: $TIMECALC_ENGINE or time-calc)"),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Seconds to wait for each answer"),
    stub: bool = typer.Option(False, "--stub", help="Use the built-in stub evaluator instead of an engine"),
) -> None:
    """Interactive session. Each line is typed key by key.

    '<' deletes, '=' promotes the result to the expression, 'C' clears,
    '#' toggles time/number and '~' toggles the sign.
    """
    if stub:
        evaluator: ExpressionEvaluator = StubEvaluator()
    else:
        evaluator = _open_evaluator(_load_config(engine, timeout), one_shot=False)

    calculator = Calculator(evaluator)
    try:
        while True:
            try:
                line = console.input("[bold]>[/bold] ")
            except EOFError:
                break
            display = calculator.type_keys(line)
            out.print(display.expression, markup=False)
            if display.result:
                out.print(f"= {display.result}", markup=False, style="cyan")
    finally:
        _close_evaluator(evaluator)


if __name__ == "__main__":
    app()
