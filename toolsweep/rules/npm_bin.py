"""Rule: global npm package without an executable is probably a stray library."""

from ..models import OrphanEvidence, ToolRecord
from .base import OrphanState, Verdict

RULE_ID = "npm_no_executable"


def check(record: ToolRecord, evidence: OrphanEvidence) -> Verdict:
    """Orphan if the package declares no "bin"; no signal if that is unknown."""
    has_bin = evidence.executables.get(record.full_name)
    if has_bin is None:
        return Verdict(OrphanState.NO_SIGNAL, RULE_ID)
    if has_bin:
        return Verdict(OrphanState.RETAINED, RULE_ID)
    return Verdict(
        OrphanState.ORPHAN,
        RULE_ID,
        reason="Not a CLI tool; likely a library installed globally by mistake.",
    )
