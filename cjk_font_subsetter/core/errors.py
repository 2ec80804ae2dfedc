"""
Error taxonomy.

Everything raised on purpose derives from FontSubsetterError so the CLI can
report it and exit non-zero.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cjk_font_subsetter.pipeline.runner import PipelineReport


class FontSubsetterError(Exception):
    """Base class for all errors raised by this package."""


class ValidationError(FontSubsetterError):
    """An option value is invalid. Raised before any I/O happens."""


class FetchError(FontSubsetterError):
    """The upstream stylesheet could not be downloaded."""


class ParseError(FontSubsetterError):
    """The upstream stylesheet is malformed."""


class FontReadError(FontSubsetterError):
    """The input font file is missing, unreadable or corrupt."""


class SubsetJobError(FontSubsetterError):
    """A single subsetter invocation failed."""

    def __init__(self, message: str, output: str = ""):
        super().__init__(message)
        self.output = output


class WriteError(FontSubsetterError):
    """An output artifact could not be written."""


class PipelineFailedError(FontSubsetterError):
    """
    One or more subset jobs failed.

    The stylesheet has still been written on a best-effort basis; the report
    describes what was produced.
    """

    def __init__(self, report: PipelineReport):
        self.report = report
        self.failures = [
            (result.job.rule_index, result.job.format.value)
            for result in report.failed
        ]
        listing = ", ".join(f"rule {index} ({fmt})" for index, fmt in self.failures)
        super().__init__(f"{len(self.failures)} subset job(s) failed: {listing}")
