"""Orphan classifier — allow-list, then reverse deps, then the source's own rule."""

from __future__ import annotations

from collections.abc import Callable

from .models import OrphanCandidate, OrphanEvidence, ToolRecord, ToolSource
from .rules.allowlists import allow_list
from .rules.base import OrphanState, Verdict
from .rules.registry import ORPHAN_RULES

Rule = Callable[[ToolRecord, OrphanEvidence], Verdict]


def classify(
    record: ToolRecord,
    evidence: OrphanEvidence,
    allowed: frozenset[str],
    rule: Rule,
) -> Verdict:
    """Fixed precedence: EXCLUDED > REQUIRED_ELSEWHERE > whatever ``rule`` decides."""
    key = record.full_name.lower()
    if key in allowed:
        return Verdict(OrphanState.EXCLUDED)
    if key in evidence.required_by:
        return Verdict(OrphanState.REQUIRED_ELSEWHERE)
    return rule(record, evidence)


def find_orphans(
    records: list[ToolRecord],
    evidence: OrphanEvidence,
    source: ToolSource,
    extra_exclusions: frozenset[str] = frozenset(),
) -> list[OrphanCandidate]:
    """Orphan candidates for one source, in the order the adapter emitted them."""
    rule = ORPHAN_RULES.get(source)
    if rule is None:
        return []
    allowed = allow_list(source, extra_exclusions)
    orphans = []
    for record in records:
        verdict = classify(record, evidence, allowed, rule)
        if verdict.state is not OrphanState.ORPHAN:
            continue
        orphans.append(
            OrphanCandidate(
                name=record.full_name,
                version=record.version or "",
                source=source,
                reason=verdict.reason,
            )
        )
    return orphans
