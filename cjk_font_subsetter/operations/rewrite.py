"""
Stylesheet rewriting.

Points each @font-face rule at the subset files generated for it.
"""

import posixpath
from collections.abc import Sequence

from cjk_font_subsetter.core.stylesheet import FontFaceRule, SrcTerm
from cjk_font_subsetter.operations.plan import SubsetJob
from cjk_font_subsetter.utils.logging import logger


def src_terms(jobs: Sequence[SubsetJob], src_prefix: str) -> list[SrcTerm]:
    """Build url/format terms for jobs, keeping their order."""
    return [
        SrcTerm(url=posixpath.join(src_prefix, job.file_name), format=job.format.value)
        for job in jobs
    ]


def rewrite_rule(
    rule: FontFaceRule,
    family: str,
    jobs: Sequence[SubsetJob],
    src_prefix: str,
) -> bool:
    """
    Rewrite one @font-face rule in place.

    The family is replaced and the src descriptor becomes one url/format
    group per job, in the order given; callers pass only the jobs that
    produced a file. A rule with no such job is left untouched, so it never
    pairs the assigned family with upstream files.

    Args:
        rule: Rule to rewrite
        family: Family name to assign
        jobs: Successful jobs of this rule, in requested format order
        src_prefix: URL path prepended to each generated file name

    Returns:
        True if the rule was rewritten
    """
    stray = [job for job in jobs if job.rule_index != rule.index]
    if stray:
        raise ValueError(
            f"Jobs for rule {stray[0].rule_index} cannot rewrite rule {rule.index}"
        )

    if not jobs:
        logger.warning(
            f"No subset generated for @font-face rule {rule.index}, leaving it unchanged"
        )
        return False

    rule.set_family(family)
    rule.set_src_terms(src_terms(jobs, src_prefix))
    return True
