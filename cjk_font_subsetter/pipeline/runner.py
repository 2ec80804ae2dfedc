"""
Pipeline orchestration.

Runs the subset pipeline for one source font:

  1. read font names
  2. create output directories
  3. download the upstream stylesheet
  4. parse it and plan one subset job per (@font-face rule, format)
  5. run the jobs
  6. rewrite each rule to point at its generated files
  7. write the stylesheet
"""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from cjk_font_subsetter.config.options import PipelineOptions, build_options
from cjk_font_subsetter.config.paths import OutputLayout
from cjk_font_subsetter.core.errors import PipelineFailedError, WriteError
from cjk_font_subsetter.core.font_io import FontInfo, read_font_info
from cjk_font_subsetter.core.stylesheet import parse_stylesheet, serialize_stylesheet
from cjk_font_subsetter.operations.fetch import GoogleFontsSource, StylesheetSource
from cjk_font_subsetter.operations.plan import flatten_jobs, plan_jobs
from cjk_font_subsetter.operations.rewrite import rewrite_rule
from cjk_font_subsetter.operations.subset import (
    PyftsubsetSubsetter,
    SubsetResult,
    Subsetter,
    SubsetStatus,
    execute_jobs,
)
from cjk_font_subsetter.utils.logging import logger


@dataclass(frozen=True)
class PipelineReport:
    """What a pipeline run produced."""

    font: FontInfo
    layout: OutputLayout
    results: tuple[SubsetResult, ...]

    @property
    def css_file(self) -> Path:
        return self.layout.css_file

    def _with_status(self, status: SubsetStatus) -> list[SubsetResult]:
        return [result for result in self.results if result.status is status]

    @property
    def created(self) -> list[SubsetResult]:
        return self._with_status(SubsetStatus.CREATED)

    @property
    def existing(self) -> list[SubsetResult]:
        return self._with_status(SubsetStatus.EXISTING)

    @property
    def failed(self) -> list[SubsetResult]:
        return self._with_status(SubsetStatus.FAILED)

    @property
    def ok(self) -> bool:
        return not self.failed


def make_dirs(*paths: Path) -> None:
    for path in paths:
        logger.info(f"Creating output directory: {path}")
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WriteError(f"Cannot create {path}: {e}") from e


def run_pipeline(
    options: PipelineOptions,
    *,
    source: StylesheetSource | None = None,
    subsetter: Subsetter | None = None,
    font_reader: Callable[[Path], FontInfo] = read_font_info,
) -> PipelineReport:
    """
    Generate subsets and the rewritten stylesheet.

    Args:
        options: Validated pipeline options
        source: Stylesheet source (defaults to Google Fonts, uncached)
        subsetter: Subsetter (defaults to the external pyftsubset)
        font_reader: Font introspection function

    Returns:
        Report of the run

    Raises:
        FontReadError, FetchError, ParseError, WriteError: Fatal errors
        PipelineFailedError: If any subset job failed. The stylesheet has
            been written before this is raised.
    """
    source = source or GoogleFontsSource()
    subsetter = subsetter or PyftsubsetSubsetter(timeout=options.timeout)

    logger.info(f"Opening font file: {options.input_font}")
    font = font_reader(options.input_font)
    family = options.font_family or font.family_name
    logger.info(f"  PostScript name: {font.postscript_name}, family: {family}")

    layout = OutputLayout(options.output_path, font.postscript_name)
    make_dirs(layout.css_dir, layout.webfonts_dir)

    css = source.fetch(options.locale, options.font_weight, options.font_display)

    logger.info("Parsing CSS")
    stylesheet = parse_stylesheet(css)
    groups = plan_jobs(stylesheet, options.input_font, options.formats, layout)
    jobs = flatten_jobs(groups)
    logger.info(f"Found {len(groups)} @font-face rules, {len(jobs)} subset jobs")

    results = execute_jobs(
        jobs,
        subsetter,
        concurrency=options.concurrency,
        overwrite=options.overwrite,
    )

    succeeded: dict[int, list] = {group.rule_index: [] for group in groups}
    for result in results:
        if result.ok:
            succeeded[result.job.rule_index].append(result.job)

    for rule in stylesheet.find_font_face_rules():
        rewrite_rule(rule, family, succeeded[rule.index], options.src_prefix)

    output_css = serialize_stylesheet(stylesheet, options.print_width)
    logger.info(f"Writing CSS: {layout.css_file}")
    try:
        layout.css_file.write_text(output_css, encoding="utf-8")
    except OSError as e:
        raise WriteError(f"Cannot write {layout.css_file}: {e}") from e

    report = PipelineReport(font=font, layout=layout, results=tuple(results))
    logger.info(
        f"Created {len(report.created)}, existing {len(report.existing)}, "
        f"failed {len(report.failed)}"
    )

    if not report.ok:
        raise PipelineFailedError(report)

    return report


def generate_subsets(
    *,
    source: StylesheetSource | None = None,
    subsetter: Subsetter | None = None,
    font_reader: Callable[[Path], FontInfo] = read_font_info,
    **raw_options,
) -> PipelineReport:
    """
    Validate raw option values and run the pipeline.

    Validation errors are raised before any network or filesystem access.
    """
    options = build_options(**raw_options)
    return run_pipeline(
        options, source=source, subsetter=subsetter, font_reader=font_reader
    )
