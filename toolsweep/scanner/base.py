"""Source adapter interface shared by every ecosystem."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..config import ScanConfig
from ..errors import IntrospectionParseFailure
from ..models import OrphanEvidence, RawRecord, ToolRecord, ToolSource
from ..runner import CommandRunner


class SourceAdapter:
    """One package manager: list what it installed, and (optionally) why it is there.

    Subclasses raise ScanError subclasses on failure; the scan orchestrator
    turns those into "no data from this source".
    """

    source: ToolSource = ToolSource.UNKNOWN
    supports_orphans: bool = False

    def __init__(self, runner: CommandRunner, config: ScanConfig) -> None:
        self.runner = runner
        self.config = config

    async def list_packages(self, measure: bool = True) -> list[RawRecord]:
        """Installed entries. ``measure=False`` skips directory sizing."""
        raise NotImplementedError

    async def reverse_dependencies(self, records: list[ToolRecord]) -> frozenset[str]:
        """Lower-cased names another installed package depends on. Empty = no facility."""
        return frozenset()

    async def orphan_evidence(self, records: list[ToolRecord]) -> OrphanEvidence:
        return OrphanEvidence(required_by=await self.reverse_dependencies(records))


def parse_json(tool: str, text: str) -> Any:
    """json.loads, raising IntrospectionParseFailure instead of JSONDecodeError."""
    if not text.strip():
        raise IntrospectionParseFailure(tool, "empty output")
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise IntrospectionParseFailure(tool, str(e)) from e


def file_times(path: Path) -> tuple[datetime | None, datetime | None]:
    """(modified, accessed) timestamps for a path, or (None, None)."""
    try:
        st = path.stat()
    except OSError:
        return None, None
    return (
        datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        datetime.fromtimestamp(st.st_atime, tz=timezone.utc),
    )
