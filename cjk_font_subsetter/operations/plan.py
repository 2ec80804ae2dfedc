"""
Subset job planning.

Turns each @font-face rule into one job per requested output format.
"""

from dataclasses import dataclass
from pathlib import Path

from cjk_font_subsetter.config.options import WebFontFormat
from cjk_font_subsetter.config.paths import OutputLayout
from cjk_font_subsetter.core.stylesheet import Stylesheet


@dataclass(frozen=True)
class SubsetJob:
    """One (rule, format) unit of subsetting work."""

    input_font: Path
    output_font: Path
    unicodes: str  # comma-joined unicode-range tokens of the rule
    format: WebFontFormat
    rule_index: int

    @property
    def file_name(self) -> str:
        return self.output_font.name


@dataclass(frozen=True)
class JobGroup:
    """All jobs planned for one @font-face rule, in requested format order."""

    rule_index: int
    unicodes: str
    jobs: tuple[SubsetJob, ...]


def plan_jobs(
    stylesheet: Stylesheet,
    input_font: Path,
    formats: tuple[WebFontFormat, ...],
    layout: OutputLayout,
) -> list[JobGroup]:
    """
    Plan subset jobs for every @font-face rule in document order.

    Unicode ranges are passed through verbatim: no sorting, merging or
    de-duplication.

    Args:
        stylesheet: Parsed upstream stylesheet
        input_font: Source font to subset
        formats: Output formats, in src order
        layout: Output layout providing file names and directories

    Returns:
        One JobGroup per @font-face rule
    """
    groups = []
    for rule in stylesheet.find_font_face_rules():
        unicodes = ",".join(rule.unicode_ranges)
        jobs = tuple(
            SubsetJob(
                input_font=input_font,
                output_font=layout.font_file(rule.index, fmt.value),
                unicodes=unicodes,
                format=fmt,
                rule_index=rule.index,
            )
            for fmt in formats
        )
        groups.append(JobGroup(rule.index, unicodes, jobs))
    return groups


def flatten_jobs(groups: list[JobGroup]) -> list[SubsetJob]:
    """All jobs of all groups, rule by rule."""
    return [job for group in groups for job in group.jobs]
