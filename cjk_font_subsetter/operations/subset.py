"""
Subset generation.

Runs planned subset jobs against a Subsetter with bounded parallelism.
Results come back in job order whatever order the jobs finish in, and one
job's failure never stops its siblings.
"""

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

from fontTools import subset as ft_subset

from cjk_font_subsetter.core.errors import SubsetJobError, WriteError
from cjk_font_subsetter.operations.plan import SubsetJob
from cjk_font_subsetter.utils.logging import logger
from cjk_font_subsetter.utils.subprocess import run_pyftsubset


class Subsetter(Protocol):
    """Produces a subset font file, or raises SubsetJobError."""

    def subset(
        self, input_font: Path, output_font: Path, unicodes: str, flavor: str
    ) -> None: ...


class PyftsubsetSubsetter:
    """Runs the external pyftsubset tool, one process per job."""

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout

    def subset(
        self, input_font: Path, output_font: Path, unicodes: str, flavor: str
    ) -> None:
        run_pyftsubset(input_font, output_font, unicodes, flavor, timeout=self.timeout)


class FontToolsSubsetter:
    """Subsets in-process with fontTools.subset, using pyftsubset's defaults."""

    def subset(
        self, input_font: Path, output_font: Path, unicodes: str, flavor: str
    ) -> None:
        options = ft_subset.Options()
        options.flavor = flavor

        try:
            font = ft_subset.load_font(str(input_font), options)
            try:
                subsetter = ft_subset.Subsetter(options=options)
                subsetter.populate(unicodes=ft_subset.parse_unicodes(unicodes))
                subsetter.subset(font)
                ft_subset.save_font(font, str(output_font), options)
            finally:
                font.close()
        except Exception as e:
            raise SubsetJobError(f"fontTools subset failed: {e}") from e


class SubsetStatus(Enum):
    CREATED = "created"
    EXISTING = "existing"  # output already present and overwrite is off
    FAILED = "failed"


@dataclass(frozen=True)
class SubsetResult:
    """Outcome of one SubsetJob."""

    job: SubsetJob
    status: SubsetStatus
    error: str | None = None
    output: str = ""  # diagnostic output of the subsetter

    @property
    def ok(self) -> bool:
        return self.status is not SubsetStatus.FAILED


def run_job(job: SubsetJob, subsetter: Subsetter, overwrite: bool) -> SubsetResult:
    """
    Run a single job.

    The subsetter writes to a temporary sibling file that is renamed into
    place on success, so the target path only ever holds a complete font.
    """
    target = job.output_font

    if not overwrite and target.exists():
        logger.info(f"File exists: {target}")
        return SubsetResult(job, SubsetStatus.EXISTING)

    logger.info(f"Generating subset: {target}")
    temp_path = target.with_name(f".{target.name}.tmp")

    try:
        subsetter.subset(job.input_font, temp_path, job.unicodes, job.format.value)
        if not temp_path.exists():
            raise SubsetJobError(f"Subsetter produced no output for {target.name}")
        try:
            temp_path.replace(target)
        except OSError as e:
            raise WriteError(f"Cannot write {target}: {e}") from e
    except (SubsetJobError, WriteError) as e:
        logger.error(f"Failed to generate {target.name}: {e}")
        return SubsetResult(
            job,
            SubsetStatus.FAILED,
            error=str(e),
            output=getattr(e, "output", ""),
        )
    except Exception as e:
        logger.error(f"Failed to generate {target.name}: {e}")
        return SubsetResult(job, SubsetStatus.FAILED, error=str(e))
    finally:
        temp_path.unlink(missing_ok=True)

    return SubsetResult(job, SubsetStatus.CREATED)


def execute_jobs(
    jobs: Sequence[SubsetJob],
    subsetter: Subsetter,
    *,
    concurrency: int,
    overwrite: bool,
) -> list[SubsetResult]:
    """
    Run jobs with at most `concurrency` in flight.

    Every job is attempted. Failures, including unexpected errors raised by
    the subsetter, are reported in the returned results, never raised.

    Args:
        jobs: Jobs to run
        subsetter: Subsetter used for every job
        concurrency: Maximum number of jobs running at once
        overwrite: Regenerate outputs that already exist

    Returns:
        One SubsetResult per job, in job order
    """
    if not jobs:
        return []

    workers = max(1, min(concurrency, len(jobs)))
    logger.info(f"Running {len(jobs)} subset jobs on {workers} workers")

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(run_job, job, subsetter, overwrite) for job in jobs]
        results = [future.result() for future in futures]

    failed = sum(1 for result in results if not result.ok)
    logger.info(f"Subset summary: {len(results) - failed}/{len(results)} successful")
    return results
