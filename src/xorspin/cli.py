import logging
import sys
from typing import List, Optional, Tuple

import click
import structlog
from rich.console import Console

from xorspin.algorithm.bits import MatrixMode
from xorspin.algorithm.xor import EmptyKeyError
from xorspin.decoder import (
    INPUT_FORMATS,
    NUMERAL_POLICIES,
    DecodeError,
    decode_input,
    detect_format,
    load_input,
    reverse_input,
)
from xorspin.models.analysis_result import MatrixConfig
from xorspin.settings import AnalysisSettings
from xorspin.solver import (
    cache_summary,
    collision_warning,
    enumerate_matrix_options,
    run_exhaustive_analysis,
    run_single_analysis,
)
from xorspin.ui import render_detail, render_ranked, render_single


def _stderr_logger(*args) -> structlog.PrintLogger:
    # Looked up per logger so a swapped sys.stderr (tests, pipes) is honoured.
    return structlog.PrintLogger(sys.stderr)


def configure_logging(verbose: bool = False) -> None:
    """Structured logs to stderr so they never mix with rendered results."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if verbose else logging.INFO),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def _parse_matrix(ctx, param, value: str) -> MatrixConfig:
    try:
        return MatrixConfig.parse(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


def _parse_view(ctx, param, value: Optional[str]) -> Optional[Tuple[int, int]]:
    if value is None:
        return None
    try:
        scenario, rotation = (int(part) for part in value.split(":"))
    except ValueError:
        raise click.BadParameter("expected SCENARIO:ROTATION, e.g. 1:3")
    if scenario not in (1, 2) or rotation < 0:
        raise click.BadParameter("scenario must be 1 or 2 and rotation at least 0")
    return scenario, rotation


def _read_text(text: Optional[str], path: Optional[str]) -> str:
    if path is not None:
        return load_input(path)
    return text or ""


def _decode(text: str, input_format: str, numeral_policy: str, label: str) -> List[int]:
    try:
        return decode_input(text, input_format, numeral_policy=numeral_policy)
    except DecodeError as e:
        raise click.ClickException(f"Invalid {label}: {e}")


CIPHERTEXT_OPTIONS = [
    click.option("--ciphertext", "-c", help="Ciphertext text"),
    click.option("--ciphertext-path", type=click.Path(exists=True, dir_okay=False),
                 help="Read the ciphertext from a file"),
    click.option("--ciphertext-format", "-f", type=click.Choice(INPUT_FORMATS), default="auto", show_default=True),
    click.option("--reverse", is_flag=True, help="Reverse the ciphertext text before decoding"),
    click.option("--numeral-policy", type=click.Choice(NUMERAL_POLICIES), default="passthrough", show_default=True,
                 help="How decimal/octal/binary values outside 0-255 are handled"),
]

KEY_OPTIONS = [
    click.option("--key", "-k", help="XOR key text"),
    click.option("--key-path", type=click.Path(exists=True, dir_okay=False), help="Read the XOR key from a file"),
    click.option("--key-format", "-F", type=click.Choice(INPUT_FORMATS), default="auto", show_default=True),
]


ANALYSIS_OPTIONS = [
    click.option("--rotations", type=click.IntRange(1, 8), default=8, show_default=True,
                 help="Number of bit rotations to try, starting at 0"),
    click.option("--high-threshold", type=click.FloatRange(0, 100), default=10.0, show_default=True,
                 help="Match percentage above which a result is highlighted"),
    click.option("--strong-threshold", type=click.FloatRange(0, 100), default=20.0, show_default=True,
                 help="Match percentage above which a ranked result is shown as strong"),
]


def ciphertext_options(fn):
    for option in reversed(CIPHERTEXT_OPTIONS):
        fn = option(fn)
    return fn


def key_options(fn):
    for option in reversed(KEY_OPTIONS):
        fn = option(fn)
    return fn


def analysis_options(fn):
    for option in reversed(ANALYSIS_OPTIONS):
        fn = option(fn)
    return fn


def read_ciphertext(ciphertext, ciphertext_path, ciphertext_format, reverse, numeral_policy) -> List[int]:
    text = _read_text(ciphertext, ciphertext_path)
    if not text.strip():
        raise click.UsageError("Please enter a ciphertext")
    if reverse:
        text = reverse_input(text)
    return _decode(text, ciphertext_format, numeral_policy, "ciphertext")


def read_inputs(
    ciphertext, ciphertext_path, ciphertext_format, reverse, numeral_policy,
    key, key_path, key_format,
) -> Tuple[List[int], List[int]]:
    ciphertext_text = _read_text(ciphertext, ciphertext_path)
    key_text = _read_text(key, key_path)
    if not ciphertext_text.strip() or not key_text.strip():
        raise click.UsageError("Please enter both ciphertext and XOR key")

    ciphertext_bytes = read_ciphertext(ciphertext_text, None, ciphertext_format, reverse, numeral_policy)
    key_bytes = _decode(key_text, key_format, numeral_policy, "XOR key")
    return ciphertext_bytes, key_bytes


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    configure_logging(verbose)


@cli.command()
@click.argument("text")
@click.option("--format", "-f", "input_format", type=click.Choice(INPUT_FORMATS), default="auto", show_default=True)
def detect(text: str, input_format: str):
    """Print the format an input would be decoded as."""
    click.echo(detect_format(text, input_format))


@cli.command("matrix-options")
@ciphertext_options
def matrix_options(ciphertext, ciphertext_path, ciphertext_format, reverse, numeral_policy):
    """List the matrix dimensions available for a ciphertext."""
    ciphertext_bytes = read_ciphertext(ciphertext, ciphertext_path, ciphertext_format, reverse, numeral_policy)
    click.echo("none")
    for rows, cols in enumerate_matrix_options(ciphertext_bytes):
        click.echo(f"{rows}x{cols} ({rows * cols} bits)")


@cli.command()
@ciphertext_options
@key_options
@click.option("--matrix", "-m", default="none", show_default=True, callback=_parse_matrix,
              help="Matrix dimensions RxC applied before analysis, or none")
@click.option("--mode", type=click.Choice([m.value for m in MatrixMode]), default="standard", show_default=True)
@click.option("--view", callback=_parse_view, help="Show byte detail for SCENARIO:ROTATION, e.g. 1:3")
@analysis_options
def analyze(
    ciphertext, ciphertext_path, ciphertext_format, reverse, numeral_policy,
    key, key_path, key_format,
    matrix: MatrixConfig, mode: str, view: Optional[Tuple[int, int]],
    rotations: int, high_threshold: float, strong_threshold: float,
):
    """Score both scenarios over every rotation for one matrix configuration."""
    settings = AnalysisSettings(
        numeral_policy=numeral_policy,
        rotations=rotations,
        high_match_threshold=high_threshold,
        strong_match_threshold=strong_threshold,
    )
    if view is not None and view[1] >= settings.rotations:
        raise click.BadParameter(
            f"rotation {view[1]} is out of range (0-{settings.rotations - 1})", param_hint="--view",
        )
    ciphertext_bytes, key_bytes = read_inputs(
        ciphertext, ciphertext_path, ciphertext_format, reverse, settings.numeral_policy,
        key, key_path, key_format,
    )

    try:
        analysis = run_single_analysis(ciphertext_bytes, key_bytes, matrix, mode, rotations=settings.rotations)
    except EmptyKeyError as e:
        raise click.ClickException(str(e))

    console = Console()
    if analysis.matrix_error:
        console.print(f"[yellow]Matrix transformation error: {analysis.matrix_error}[/yellow]")

    warning = collision_warning(analysis.cache)
    if warning:
        console.print(f"[yellow]{warning}[/yellow]")
    console.print(cache_summary(analysis.cache, key_bytes, matrix, mode))
    console.print(render_single(analysis, settings.high_match_threshold))

    if view is not None:
        console.print(render_detail(analysis.result(*view)))


@cli.command()
@ciphertext_options
@key_options
@click.option("--top", "-n", type=click.IntRange(min=1), default=50, show_default=True,
              help="Number of ranked configurations to show")
@click.option("--view", type=click.IntRange(min=1), help="Show byte detail for the result at this rank")
@click.option("--workers", "-w", type=click.IntRange(min=1), default=1, show_default=True)
@analysis_options
def auto(
    ciphertext, ciphertext_path, ciphertext_format, reverse, numeral_policy,
    key, key_path, key_format,
    top: int, view: Optional[int], workers: int,
    rotations: int, high_threshold: float, strong_threshold: float,
):
    """Try every matrix, mode, scenario and rotation and rank the results."""
    settings = AnalysisSettings(
        numeral_policy=numeral_policy,
        rotations=rotations,
        top_n=top,
        high_match_threshold=high_threshold,
        strong_match_threshold=strong_threshold,
        workers=workers,
    )
    ciphertext_bytes, key_bytes = read_inputs(
        ciphertext, ciphertext_path, ciphertext_format, reverse, settings.numeral_policy,
        key, key_path, key_format,
    )

    console = Console()
    try:
        with console.status("Analyzing all configurations..."):
            results = run_exhaustive_analysis(
                ciphertext_bytes, key_bytes, rotations=settings.rotations, workers=settings.workers,
            )
    except EmptyKeyError as e:
        raise click.ClickException(str(e))

    console.print(render_ranked(
        results, settings.top_n, settings.high_match_threshold, settings.strong_match_threshold,
    ))

    if view is not None:
        if view > len(results):
            raise click.BadParameter(f"rank {view} is out of range (1-{len(results)})", param_hint="--view")
        console.print(render_detail(results[view - 1]))


if __name__ == "__main__":
    cli()
