"""Rule: pip package that nothing else requires."""

from ..models import OrphanEvidence, ToolRecord
from .base import OrphanState, Verdict

RULE_ID = "pip_not_required"


def check(record: ToolRecord, evidence: OrphanEvidence) -> Verdict:
    """Orphan if absent from the reverse-dependency set; no signal if pip show skipped it."""
    key = record.full_name.lower()
    if evidence.shown is not None and key not in evidence.shown:
        return Verdict(OrphanState.NO_SIGNAL, RULE_ID)
    if key in evidence.required_by:
        return Verdict(OrphanState.REQUIRED_ELSEWHERE, RULE_ID)
    return Verdict(
        OrphanState.ORPHAN,
        RULE_ID,
        reason="Not required by any other installed package.",
    )
