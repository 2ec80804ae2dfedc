"""
Main CLI entry point for cjk-font-subsetter.
"""

import logging
import sys
from pathlib import Path

import click

from cjk_font_subsetter import __version__
from cjk_font_subsetter.config.options import (
    DEFAULT_SRC_PREFIX,
    DEFAULT_TIMEOUT,
    FontDisplay,
    FontWeight,
    Locale,
    WebFontFormat,
    build_options,
)
from cjk_font_subsetter.config.sources import DEFAULT_CACHE_TTL
from cjk_font_subsetter.core.errors import FontSubsetterError
from cjk_font_subsetter.utils.logging import logger

ENGINES = ("pyftsubset", "fonttools")


def pipeline_options(func):
    """Options shared by the commands that fetch and plan a stylesheet."""
    decorators = [
        click.argument("font_file", type=click.Path(path_type=Path)),
        click.option(
            "-o",
            "--output",
            "output_path",
            type=click.Path(file_okay=False, path_type=Path),
            required=True,
            help="Output directory",
        ),
        click.option(
            "-l",
            "--locale",
            type=click.Choice([loc.value for loc in Locale], case_sensitive=False),
            default=Locale.SC.value,
            show_default=True,
            help="Noto Sans CJK locale whose unicode ranges are used",
        ),
        click.option(
            "-w",
            "--weight",
            "font_weight",
            type=click.Choice([str(int(w)) for w in FontWeight]),
            default=str(int(FontWeight.REGULAR)),
            show_default=True,
            help="Font weight of the upstream stylesheet",
        ),
        click.option(
            "--display",
            "font_display",
            type=click.Choice([d.value for d in FontDisplay], case_sensitive=False),
            default=FontDisplay.SWAP.value,
            show_default=True,
            help="font-display value",
        ),
        click.option(
            "-f",
            "--format",
            "formats",
            type=click.Choice([f.value for f in WebFontFormat], case_sensitive=False),
            multiple=True,
            help="Output format, repeatable; order sets src order [default: woff2, woff]",
        ),
        click.option(
            "--family",
            "font_family",
            default=None,
            help="font-family to assign (default: the font's family name)",
        ),
        click.option(
            "--src-prefix",
            default=DEFAULT_SRC_PREFIX,
            show_default=True,
            help="URL path prepended to generated file names in src",
        ),
        click.option(
            "--cache-dir",
            type=click.Path(file_okay=False, path_type=Path),
            default=None,
            help="Directory for cached upstream stylesheets",
        ),
        click.option(
            "--cache-ttl",
            type=click.FloatRange(min=0),
            default=DEFAULT_CACHE_TTL,
            show_default=True,
            help="Seconds a cached stylesheet stays valid",
        ),
        click.option("-v", "--verbose", is_flag=True, help="Enable debug logging"),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def make_source(cache_dir: Path | None, cache_ttl: float):
    from cjk_font_subsetter.operations.fetch import GoogleFontsSource, ResponseCache

    cache = ResponseCache(ttl=cache_ttl, directory=cache_dir) if cache_dir else None
    return GoogleFontsSource(cache=cache)


def make_subsetter(engine: str, timeout: float, timeout_given: bool = False):
    from cjk_font_subsetter.operations.subset import (
        FontToolsSubsetter,
        PyftsubsetSubsetter,
    )

    if engine == "fonttools":
        if timeout_given:
            logger.warning("--timeout has no effect with --engine fonttools")
        return FontToolsSubsetter()
    return PyftsubsetSubsetter(timeout=timeout)


def set_verbose(verbose: bool) -> None:
    if verbose:
        logger.setLevel(logging.DEBUG)


@click.group()
@click.version_option(version=__version__)
def cli():
    """Generate CJK web font subsets from Google Fonts unicode ranges."""
    pass


@cli.command()
@pipeline_options
@click.option("--overwrite", is_flag=True, help="Regenerate existing subset files")
@click.option(
    "-j",
    "--jobs",
    "concurrency",
    type=click.IntRange(min=1),
    default=None,
    help="Parallel subset jobs [default: CPU count]",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help=f"Seconds allowed per pyftsubset job [default: {DEFAULT_TIMEOUT:g}]",
)
@click.option(
    "--engine",
    type=click.Choice(ENGINES),
    default="pyftsubset",
    show_default=True,
    help="Subsetting engine",
)
@click.option(
    "--print-width",
    type=click.IntRange(min=1),
    default=None,
    help="Wrap long declarations in the output CSS",
)
def subset(
    font_file,
    output_path,
    locale,
    font_weight,
    font_display,
    formats,
    font_family,
    src_prefix,
    cache_dir,
    cache_ttl,
    verbose,
    overwrite,
    concurrency,
    timeout,
    engine,
    print_width,
):
    """Generate subsets of FONT_FILE and a matching stylesheet."""
    from cjk_font_subsetter.pipeline.runner import run_pipeline

    set_verbose(verbose)
    try:
        options = build_options(
            input_font=font_file,
            output_path=output_path,
            locale=locale,
            font_weight=font_weight,
            font_display=font_display,
            formats=formats or [f.value for f in WebFontFormat],
            font_family=font_family,
            src_prefix=src_prefix,
            overwrite=overwrite,
            concurrency=concurrency,
            timeout=DEFAULT_TIMEOUT if timeout is None else timeout,
            print_width=print_width,
        )
        report = run_pipeline(
            options,
            source=make_source(cache_dir, cache_ttl),
            subsetter=make_subsetter(engine, options.timeout, timeout is not None),
        )
    except FontSubsetterError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"Stylesheet: {report.css_file}")


@cli.command()
@pipeline_options
def plan(
    font_file,
    output_path,
    locale,
    font_weight,
    font_display,
    formats,
    font_family,
    src_prefix,
    cache_dir,
    cache_ttl,
    verbose,
):
    """List the subset jobs for FONT_FILE without running them."""
    from cjk_font_subsetter.config.paths import OutputLayout
    from cjk_font_subsetter.core.font_io import read_font_info
    from cjk_font_subsetter.core.stylesheet import parse_stylesheet
    from cjk_font_subsetter.operations.plan import plan_jobs

    set_verbose(verbose)
    try:
        options = build_options(
            input_font=font_file,
            output_path=output_path,
            locale=locale,
            font_weight=font_weight,
            font_display=font_display,
            formats=formats or [f.value for f in WebFontFormat],
            font_family=font_family,
            src_prefix=src_prefix,
        )
        font = read_font_info(options.input_font)
        source = make_source(cache_dir, cache_ttl)
        css = source.fetch(options.locale, options.font_weight, options.font_display)
        groups = plan_jobs(
            parse_stylesheet(css),
            options.input_font,
            options.formats,
            OutputLayout(options.output_path, font.postscript_name),
        )
    except FontSubsetterError as e:
        logger.error(str(e))
        sys.exit(1)

    for group in groups:
        click.echo(f"[{group.rule_index}] {group.unicodes}")
        for job in group.jobs:
            exists = " (exists)" if job.output_font.exists() else ""
            click.echo(f"    {job.format.value}: {job.output_font}{exists}")


@cli.command()
@click.argument("font_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def info(font_file):
    """Show the names used for FONT_FILE's output."""
    from cjk_font_subsetter.core.font_io import read_font_info

    try:
        font = read_font_info(font_file)
    except FontSubsetterError as e:
        logger.error(str(e))
        sys.exit(1)

    click.echo(f"PostScript name: {font.postscript_name}")
    click.echo(f"Family: {font.family_name}")


if __name__ == "__main__":
    cli()
