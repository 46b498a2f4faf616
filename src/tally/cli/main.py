"""Tally CLI — run command streams and check them against expected output."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, TextIO

import click

try:
    from rich.console import Console
    from rich.markup import escape

    _console = Console(highlight=False)
    _err_console = Console(stderr=True, highlight=False)
except ImportError:
    raise ImportError("The CLI requires click and rich. " "Install them with: pip install tally")

from tally import MalformedInputError, TallyConfigError
from tally.processor import CommandProcessor

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _enable_debug_logging() -> None:
    """Send tally's debug log to stderr."""
    from rich.logging import RichHandler

    root = logging.getLogger("tally")
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        root.addHandler(RichHandler(console=_err_console, show_path=False))
    root.setLevel(logging.DEBUG)


def _print_summary(snapshot: dict[str, int]) -> None:
    """Print the final ledger as a table on stderr."""
    from rich.table import Table

    table = Table(show_header=True)
    table.add_column("Key")
    table.add_column("Value", justify="right")
    for key in sorted(snapshot):
        table.add_row(escape(key), str(snapshot[key]))
    _err_console.print(table)


def _load_cases(path: str) -> list[dict]:
    """Load and shape-check a YAML test-case file.

    Raises TallyConfigError when the file is not a mapping with a
    ``cases`` list.
    """
    import yaml

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise TallyConfigError(f"Failed to parse YAML: {e}") from e

    if not isinstance(data, dict) or "cases" not in data:
        raise TallyConfigError("Test cases file must contain a 'cases' list.")
    cases = data["cases"]
    if not isinstance(cases, list):
        raise TallyConfigError("'cases' must be a list.")
    return cases


def _run_case(text: str) -> tuple[list[int] | None, str | None]:
    """Run one input in a fresh processor. Returns (results, error)."""
    try:
        return CommandProcessor().process_text(text), None
    except MalformedInputError as e:
        return None, str(e)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group(invoke_without_command=True)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Tally — in-memory counters driven by a command stream."""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command()
def version() -> None:
    """Show the installed tally version."""
    from tally import __version__

    click.echo(f"tally {__version__}")


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("source", default="-", type=click.File("r"))
@click.option("--dump", default=None, type=click.Path(), help="Write the final ledger as JSON.")
@click.option("--summary", is_flag=True, default=False, help="Print the final ledger to stderr.")
@click.option("--otel", "use_otel", is_flag=True, default=False, help="Export a trace span via OpenTelemetry.")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log every command to stderr.")
def run(source: TextIO, dump: str | None, summary: bool, use_otel: bool, verbose: bool) -> None:
    """Process a command stream from SOURCE (default: stdin).

    Exit code 0: all commands processed.
    Exit code 1: malformed input.
    """
    if verbose:
        _enable_debug_logging()

    if use_otel:
        from tally import __version__
        from tally.otel import configure_otel, has_otel

        if not has_otel():
            _err_console.print("[yellow]OpenTelemetry is not installed; --otel ignored.[/yellow]")
        configure_otel(tally_version=__version__)

    processor = CommandProcessor()
    try:
        processor.run(source, sys.stdout)
    except MalformedInputError as e:
        sys.stdout.flush()
        _err_console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)

    snapshot = processor.ledger.snapshot()
    if dump:
        Path(dump).write_text(json.dumps(snapshot, indent=2, sort_keys=True) + "\n")
    if summary:
        _print_summary(snapshot)


# ---------------------------------------------------------------------------
# test
# ---------------------------------------------------------------------------


def _describe(expect: Any) -> str:
    return "error" if expect == "error" else json.dumps(expect)


def _is_int_list(value: Any) -> bool:
    """True for a list of ints; YAML booleans do not count."""
    return isinstance(value, list) and all(isinstance(v, int) and not isinstance(v, bool) for v in value)


@cli.command("test")
@click.argument("cases_file", type=click.Path(exists=True))
def test_cmd(cases_file: str) -> None:
    """Run YAML test cases, each against a fresh ledger.

    Each case has an ``input`` command stream and an ``expect`` list of
    query results, or ``expect: error`` for input that must be rejected.

    Exit code 0: all cases pass.
    Exit code 1: one or more failures.
    Exit code 2: usage error.
    """
    try:
        cases = _load_cases(cases_file)
    except TallyConfigError as e:
        _err_console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(2)

    passed = 0
    failed = 0

    for i, tc in enumerate(cases):
        if not isinstance(tc, dict):
            _err_console.print(f"[red]  case-{i + 1}: must be a mapping[/red]")
            sys.exit(2)

        tc_id = str(tc.get("id", f"case-{i + 1}"))

        missing = [f for f in ("input", "expect") if f not in tc]
        if missing:
            _err_console.print(f"[red]  {escape(tc_id)}: missing required field(s): {', '.join(missing)}[/red]")
            sys.exit(2)

        expect = tc["expect"]
        if expect != "error" and not _is_int_list(expect):
            _err_console.print(
                f"[red]  {escape(tc_id)}: 'expect' must be a list of integers or 'error'[/red]"
            )
            sys.exit(2)

        results, error = _run_case(str(tc["input"]))
        actual = "error" if error is not None else results

        if actual == expect:
            passed += 1
            _console.print(f"[green]  {escape(tc_id)}:[/green] {escape(_describe(actual))}")
        else:
            failed += 1
            detail = f" ({error})" if error else ""
            _console.print(
                f"[red]  {escape(tc_id)}:[/red] expected {escape(_describe(expect))}, "
                f"got {escape(_describe(actual))}{escape(detail)}"
            )

    _console.print(f"\n{passed}/{len(cases)} passed, {failed} failed")
    sys.exit(1 if failed else 0)
