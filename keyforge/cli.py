"""
KeyForge CLI
=============

Click-based command-line interface for KeyForge. Provides subcommands for
password, pattern, PIN and passphrase generation, strength analysis,
crack-time estimation, a randomness self-test and history file queries.

Usage::

    python -m keyforge generate --length 24 --count 5
    python -m keyforge pattern "XXX-999-xxx"
    python -m keyforge pin --length 8
    python -m keyforge passphrase --words 5 --language tr
    python -m keyforge analyze "Tr0ub4dor&3"
    python -m keyforge crack-time 72
    python -m keyforge selftest
    python -m keyforge generate --save history.json --label work --tag email
    python -m keyforge history stats history.json
    python -m keyforge history export history.json history.csv

References:
    - Click Documentation. https://click.palletsprojects.com/
"""

from __future__ import annotations

import asyncio
import json
from contextlib import nullcontext
from pathlib import Path
from typing import Any, Optional, Sequence, Union

import click

from shared.config import ForgeConfig
from shared.console import ForgeConsole

from keyforge import __version__
from keyforge.core.engine import KeyForgeEngine
from keyforge.core.errors import KeyForgeError
from keyforge.core.models import (
    GeneratedPassphrase,
    GeneratedPassword,
    Language,
    PassphraseOptions,
    PasswordOptions,
)
from keyforge.history import queries
from keyforge.output.console import ForgeConsoleOutput
from keyforge.output.report import ForgeReportGenerator

AnyResult = Union[GeneratedPassword, GeneratedPassphrase]


# ===================================================================== #
#  Async Runner Helper
# ===================================================================== #

def _run_async(coro):
    """Run an async coroutine from synchronous Click handlers."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop and loop.is_running():
        # Already inside an event loop (embedding), run on a worker thread
        import concurrent.futures
        with concurrent.futures.ThreadPoolExecutor() as pool:
            return pool.submit(asyncio.run, coro).result()
    return asyncio.run(coro)


# ===================================================================== #
#  CLI Group
# ===================================================================== #

@click.group()
@click.version_option(__version__, prog_name="keyforge")
@click.option(
    "--config", "-c",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to KeyForge configuration file (TOML).",
)
@click.option(
    "--output", "-o",
    type=click.Choice(["console", "json"]),
    default="console",
    help="Output format.",
)
@click.option(
    "--output-file", "-f",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the JSON report to this file instead of stdout.",
)
@click.option(
    "--quiet", "-q",
    is_flag=True,
    default=False,
    help="Print bare values only (no banner, tables or meters).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[str],
    output: str,
    output_file: Optional[str],
    quiet: bool,
) -> None:
    """KeyForge -- Password & Passphrase Generation Toolkit.

    Generate passwords, PINs and passphrases from the OS CSPRNG, score
    their strength and keep a local JSON history.
    """
    ctx.ensure_object(dict)

    forge_config = ForgeConfig.load(config) if config else ForgeConfig.load()
    ctx.obj["config"] = forge_config
    ctx.obj["output_format"] = output
    ctx.obj["output_file"] = output_file
    ctx.obj["quiet"] = quiet

    console = ForgeConsole(quiet=quiet)
    ctx.obj["console"] = console
    ctx.obj["engine"] = KeyForgeEngine(forge_config)
    ctx.obj["display"] = ForgeConsoleOutput(console)
    ctx.obj["reporter"] = ForgeReportGenerator()

    if not quiet and output == "console":
        console.banner(version=__version__)


def _fail(exc: KeyForgeError) -> click.ClickException:
    return click.ClickException(str(exc))


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _busy(ctx: click.Context, text: str):
    if ctx.obj["quiet"] or ctx.obj["output_format"] != "console":
        return nullcontext()
    return ctx.obj["console"].status(text)


def _handle_results(ctx: click.Context, results: Sequence[AnyResult]) -> None:
    """Render generated secrets in the selected output format."""
    output_format = ctx.obj["output_format"]
    output_file = ctx.obj["output_file"]
    reporter: ForgeReportGenerator = ctx.obj["reporter"]
    display: ForgeConsoleOutput = ctx.obj["display"]

    if output_format == "json":
        if output_file:
            path = reporter.generate_json(results, Path(output_file))
            click.echo(f"JSON report saved to: {path}", err=True)
        else:
            _echo_json(reporter.build_report(results))
        return

    if ctx.obj["quiet"]:
        for result in results:
            click.echo(result.value)
        return

    if len(results) > 1:
        display.display_passwords(results)  # type: ignore[arg-type]
    elif isinstance(results[0], GeneratedPassphrase):
        display.display_passphrase(results[0])
    else:
        display.display_password(results[0])


def _save_history(
    ctx: click.Context,
    results: Sequence[AnyResult],
    save: Optional[str],
    label: Optional[str],
    tags: Sequence[str],
) -> None:
    if not save:
        return
    engine: KeyForgeEngine = ctx.obj["engine"]
    reporter: ForgeReportGenerator = ctx.obj["reporter"]
    records = [engine.to_history_record(r, label=label, tags=tags) for r in results]
    try:
        merged = reporter.append_history(records, Path(save))
    except KeyForgeError as exc:
        raise _fail(exc) from exc
    if not ctx.obj["quiet"] and ctx.obj["output_format"] == "console":
        ctx.obj["console"].success(
            f"Saved {len(records)} record(s) to {save} ({len(merged)} total)"
        )


_save_options = [
    click.option("--save", type=click.Path(dir_okay=False), default=None,
                 help="Append the result(s) to this JSON history file."),
    click.option("--label", default=None, help="Label for saved history records."),
    click.option("--tag", "tags", multiple=True, help="Tag for saved records (repeatable)."),
]


def _with_save_options(func):
    for option in reversed(_save_options):
        func = option(func)
    return func


# ===================================================================== #
#  Generation
# ===================================================================== #

@cli.command()
@click.option("--length", "-l", type=int, default=None, help="Password length (4-128).")
@click.option("--count", "-n", type=int, default=1, show_default=True,
              help="Number of passwords (1-100).")
@click.option("--uppercase/--no-uppercase", default=True, show_default=True)
@click.option("--lowercase/--no-lowercase", default=True, show_default=True)
@click.option("--numbers/--no-numbers", default=True, show_default=True)
@click.option("--symbols/--no-symbols", default=True, show_default=True)
@click.option("--exclude-similar", is_flag=True, help="Drop look-alike characters (il1Lo0O).")
@click.option("--exclude-ambiguous", is_flag=True, help="Drop brackets, quotes and punctuation.")
@click.option("--charset", default=None, help="Custom alphabet; overrides the class flags.")
@click.option("--min-upper", type=int, default=0, show_default=True)
@click.option("--min-lower", type=int, default=0, show_default=True)
@click.option("--min-numbers", type=int, default=0, show_default=True)
@click.option("--min-symbols", type=int, default=0, show_default=True)
@_with_save_options
@click.pass_context
def generate(
    ctx: click.Context,
    length: Optional[int],
    count: int,
    uppercase: bool,
    lowercase: bool,
    numbers: bool,
    symbols: bool,
    exclude_similar: bool,
    exclude_ambiguous: bool,
    charset: Optional[str],
    min_upper: int,
    min_lower: int,
    min_numbers: int,
    min_symbols: int,
    save: Optional[str],
    label: Optional[str],
    tags: tuple[str, ...],
) -> None:
    """Generate random passwords."""
    engine: KeyForgeEngine = ctx.obj["engine"]
    options = PasswordOptions(
        length=length if length is not None else engine.config.generator.default_length,
        include_uppercase=uppercase,
        include_lowercase=lowercase,
        include_numbers=numbers,
        include_symbols=symbols,
        exclude_similar=exclude_similar,
        exclude_ambiguous=exclude_ambiguous,
        custom_charset=charset,
        min_uppercase=min_upper,
        min_lowercase=min_lower,
        min_numbers=min_numbers,
        min_symbols=min_symbols,
    )
    try:
        if count == 1:
            results: list[GeneratedPassword] = [engine.generate_password(options)]
        else:
            results = engine.generate_bulk(options, count)
    except KeyForgeError as exc:
        raise _fail(exc) from exc

    _handle_results(ctx, results)
    _save_history(ctx, results, save, label, tags)


@cli.command()
@click.argument("template", required=False)
@_with_save_options
@click.pass_context
def pattern(
    ctx: click.Context,
    template: Optional[str],
    save: Optional[str],
    label: Optional[str],
    tags: tuple[str, ...],
) -> None:
    """Generate a password from a TEMPLATE.

    X = uppercase, x = lowercase, 9 = digit, @ = symbol, A = any letter;
    every other character is kept as-is. Defaults to the configured
    pattern.
    """
    engine: KeyForgeEngine = ctx.obj["engine"]
    try:
        result = engine.generate_from_pattern(template)
    except KeyForgeError as exc:
        raise _fail(exc) from exc
    _handle_results(ctx, [result])
    _save_history(ctx, [result], save, label, tags)


@cli.command()
@click.option("--length", "-l", type=int, default=None, help="PIN length (4-128).")
@_with_save_options
@click.pass_context
def pin(
    ctx: click.Context,
    length: Optional[int],
    save: Optional[str],
    label: Optional[str],
    tags: tuple[str, ...],
) -> None:
    """Generate a numeric PIN."""
    engine: KeyForgeEngine = ctx.obj["engine"]
    try:
        result = engine.generate_pin(length)
    except KeyForgeError as exc:
        raise _fail(exc) from exc
    _handle_results(ctx, [result])
    _save_history(ctx, [result], save, label, tags)


@cli.command()
@click.option("--words", "-w", type=int, default=4, show_default=True, help="Word count (3-10).")
@click.option("--separator", "-s", default="-", show_default=True)
@click.option("--capitalize/--no-capitalize", default=True, show_default=True)
@click.option("--number/--no-number", default=True, show_default=True,
              help="Append one digit.")
@click.option("--symbol/--no-symbol", default=False, show_default=True,
              help="Append one symbol from !@#$%&*.")
@click.option("--min-word-length", type=int, default=4, show_default=True)
@click.option("--max-word-length", type=int, default=8, show_default=True)
@click.option(
    "--language",
    type=click.Choice([lang.value for lang in Language]),
    default=None,
    help="Dictionary language (defaults to the configured one).",
)
@_with_save_options
@click.pass_context
def passphrase(
    ctx: click.Context,
    words: int,
    separator: str,
    capitalize: bool,
    number: bool,
    symbol: bool,
    min_word_length: int,
    max_word_length: int,
    language: Optional[str],
    save: Optional[str],
    label: Optional[str],
    tags: tuple[str, ...],
) -> None:
    """Generate a Diceware-style passphrase."""
    engine: KeyForgeEngine = ctx.obj["engine"]
    options = PassphraseOptions(
        word_count=words,
        separator=separator,
        capitalize=capitalize,
        include_number=number,
        include_symbol=symbol,
        min_word_length=min_word_length,
        max_word_length=max_word_length,
        language=Language(language or engine.config.passphrase.language),
    )
    try:
        with _busy(ctx, f"Loading {options.language.value} word list..."):
            result = _run_async(engine.generate_passphrase(options))
    except KeyForgeError as exc:
        raise _fail(exc) from exc
    _handle_results(ctx, [result])
    _save_history(ctx, [result], save, label, tags)


# ===================================================================== #
#  Analysis
# ===================================================================== #

@cli.command()
@click.argument("password", required=False)
@click.pass_context
def analyze(ctx: click.Context, password: Optional[str]) -> None:
    """Analyse the strength of PASSWORD (prompted for when omitted)."""
    if password is None:
        password = click.prompt("Password", hide_input=True, default="", show_default=False)
    engine: KeyForgeEngine = ctx.obj["engine"]
    result = engine.analyze(password)

    if ctx.obj["output_format"] == "json":
        _echo_json({"length": len(password), **result.model_dump(mode="json")})
    elif ctx.obj["quiet"]:
        click.echo(f"{result.level.label} ({result.entropy:.2f} bits, {result.time_to_crack})")
    else:
        ctx.obj["display"].console.section("Strength Analysis")
        ctx.obj["display"].display_strength(result, length=len(password))


@cli.command("crack-time")
@click.argument("entropy", type=float)
@click.pass_context
def crack_time(ctx: click.Context, entropy: float) -> None:
    """Estimate the average brute-force time for ENTROPY bits."""
    engine: KeyForgeEngine = ctx.obj["engine"]
    estimate = engine.estimate_time_to_crack(entropy)

    if ctx.obj["output_format"] == "json":
        _echo_json(
            {
                "entropy": entropy,
                "attempts_per_second": engine.analyzer.attempts_per_second,
                "time_to_crack": estimate,
            }
        )
    elif ctx.obj["quiet"]:
        click.echo(estimate)
    else:
        ctx.obj["display"].display_crack_time(entropy, estimate)


@cli.command()
@click.option("--buckets", type=int, default=10, show_default=True,
              help="Buckets for the random_int check.")
@click.option("--samples", type=int, default=10_000, show_default=True,
              help="Draws for the random_int check.")
@click.option("--bytes", "byte_samples", type=int, default=25_600, show_default=True,
              help="Bytes for the random_bytes check.")
@click.pass_context
def selftest(ctx: click.Context, buckets: int, samples: int, byte_samples: int) -> None:
    """Chi-squared uniformity self-test of the random source."""
    engine: KeyForgeEngine = ctx.obj["engine"]
    try:
        with _busy(ctx, "Sampling random source..."):
            audit = engine.audit_randomness(
                buckets=buckets, int_samples=samples, byte_samples=byte_samples
            )
    except KeyForgeError as exc:
        raise _fail(exc) from exc

    if ctx.obj["output_format"] == "json":
        _echo_json({**audit.model_dump(mode="json"), "passed": audit.passed})
    elif ctx.obj["quiet"]:
        click.echo("PASS" if audit.passed else "FAIL")
    else:
        ctx.obj["display"].display_audit(audit)

    if not audit.passed:
        ctx.exit(2)


# ===================================================================== #
#  History
# ===================================================================== #

@cli.group()
def history() -> None:
    """Query and export JSON history files."""


def _load_history(ctx: click.Context, path: str):
    reporter: ForgeReportGenerator = ctx.obj["reporter"]
    try:
        return reporter.import_history_json(Path(path))
    except KeyForgeError as exc:
        raise _fail(exc) from exc


@history.command("stats")
@click.argument("history_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def history_stats(ctx: click.Context, history_file: str) -> None:
    """Show statistics for HISTORY_FILE."""
    stats = queries.statistics(_load_history(ctx, history_file))
    if ctx.obj["output_format"] == "json":
        _echo_json(stats.model_dump(mode="json"))
    else:
        ctx.obj["display"].display_history_stats(stats)


@history.command("search")
@click.argument("history_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("query", default="")
@click.pass_context
def history_search(ctx: click.Context, history_file: str, query: str) -> None:
    """Search HISTORY_FILE labels and tags for QUERY."""
    matches = queries.search(_load_history(ctx, history_file), query)
    if ctx.obj["output_format"] == "json":
        _echo_json([r.model_dump(mode="json") for r in matches])
    elif ctx.obj["quiet"]:
        for record in matches:
            click.echo(record.password)
    else:
        ctx.obj["display"].display_history(matches)


@history.command("export")
@click.argument("history_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("csv_file", type=click.Path(dir_okay=False))
@click.pass_context
def history_export(ctx: click.Context, history_file: str, csv_file: str) -> None:
    """Export HISTORY_FILE to CSV_FILE."""
    records = _load_history(ctx, history_file)
    path = ctx.obj["reporter"].generate_csv(records, Path(csv_file))
    if not ctx.obj["quiet"]:
        ctx.obj["console"].success(f"Exported {len(records)} record(s) to {path}")


# ===================================================================== #
#  Entry Point
# ===================================================================== #

def main() -> None:
    """Main entry point for the KeyForge CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
