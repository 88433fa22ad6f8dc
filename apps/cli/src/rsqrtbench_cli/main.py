
from __future__ import annotations
import logging
import sys
from typing import Optional

import typer

from rsqrtbench import Provider, registry
from .runners.common import (
    DEFAULT_SAMPLES,
    SAMPLES_ENV,
    ExternalProviderUnavailable,
    _load_adapters,
    cross_check,
    export_json,
    report_lines,
    resolve_functions,
    run_benchmark,
)

app = typer.Typer(add_completion=False, help="Fast inverse square root benchmark CLI")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        stream=sys.stderr,
    )


def _stdin_is_terminal() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


def _pause() -> None:
    # No key to wait for when input is piped or captured
    if not _stdin_is_terminal():
        return
    typer.echo("Press any key to continue ...")
    typer.getchar()


def _resolve_or_exit():
    try:
        return resolve_functions()
    except ExternalProviderUnavailable as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)


@app.command("list-providers")
def list_providers():
    """List registered square root providers."""
    _load_adapters()
    for provider in registry.list().keys():
        typer.echo(f"- {provider.value}")


@app.command()
def demo(value: float = typer.Argument(..., min=0.0)):
    """Evaluate every provider for one input and show its error against Native."""
    functions = _resolve_or_exit()
    reference = float(functions[Provider.NATIVE](value))
    for provider, fn in functions.items():
        result = float(fn(value))
        if provider.is_approximation:
            err = abs(result - reference) / reference * 100 if reference else float("nan")
            typer.echo(f"[{provider.value}] sqrt({value}) = {result!r} (error {err:.6f}%)")
        else:
            typer.echo(f"[{provider.value}] sqrt({value}) = {result!r}")


@app.command()
def run(
    samples: int = typer.Option(
        DEFAULT_SAMPLES,
        "--samples",
        "-n",
        min=1,
        envvar=SAMPLES_ENV,
        help="Number of random inputs.",
    ),
    seed: Optional[int] = typer.Option(None, help="Seed for the input generator."),
    export: Optional[str] = typer.Option(None, help="Write a JSON summary to this path."),
    pause: bool = typer.Option(True, "--pause/--no-pause", help="Wait for a key press after the report."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Run the Native, Inline and External passes and print aggregate statistics."""
    _configure_logging(verbose)
    try:
        summary = run_benchmark(samples, seed=seed)
    except ExternalProviderUnavailable as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    for line in report_lines(summary):
        typer.echo(line)
    export_json(summary, export)
    if pause:
        _pause()


@app.command("cross-check")
def cross_check_cmd(
    samples: int = typer.Option(100_000, "--samples", "-n", min=1),
    seed: Optional[int] = typer.Option(None),
):
    """Verify Inline and External return bit-identical results."""
    _configure_logging(False)
    try:
        result = cross_check(samples, seed=seed)
    except ExternalProviderUnavailable as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    if result.ok:
        typer.echo(f"Inline and External agree on all {result.samples} inputs")
        return
    typer.echo(
        f"{result.mismatches} of {result.samples} inputs differ "
        f"(max abs diff {result.max_abs_diff!r}, first at x={result.first_mismatch!r})"
    )
    raise typer.Exit(code=1)


def app_main():
    app()

if __name__ == "__main__":
    app_main()
