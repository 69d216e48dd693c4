"""pip adapter — packages from ``pip list``, reverse deps from ``pip show``."""

from __future__ import annotations

import structlog

from ..errors import IntrospectionParseFailure, ScanError, SourceUnavailable
from ..models import OrphanEvidence, RawRecord, ToolRecord, ToolSource
from .base import SourceAdapter, parse_json

log = structlog.get_logger("toolsweep.scanner")

PIP_COMMANDS = ("pip", "pip3")


def parse_pip_list(text: str) -> list[tuple[str, str | None]]:
    """(name, version) pairs from ``pip list --format=json``."""
    data = parse_json("pip", text)
    if not isinstance(data, list):
        raise IntrospectionParseFailure("pip", "expected a JSON array")
    pairs = []
    for pkg in data:
        if not isinstance(pkg, dict):
            continue
        name = pkg.get("name")
        if not name:
            continue
        version = pkg.get("version")
        pairs.append((str(name), str(version) if version else None))
    return pairs


def _split_names(value: str) -> list[str]:
    return [n.strip().lower() for n in value.split(",") if n.strip()]


def parse_show(text: str) -> tuple[frozenset[str], frozenset[str]]:
    """(required, shown) from batched ``pip show`` output.

    A package whose ``Required-by:`` line is non-empty is depended on;
    so is every name listed under some package's ``Requires:``.
    ``shown`` holds every package that had a block at all. Names are
    lower-cased.
    """
    required: set[str] = set()
    shown: set[str] = set()
    current: str | None = None
    for line in text.splitlines():
        if line.startswith("Name:"):
            current = line[len("Name:"):].strip().lower()
            shown.add(current)
        elif line.startswith("Required-by:"):
            if current and _split_names(line[len("Required-by:"):]):
                required.add(current)
        elif line.startswith("Requires:"):
            required.update(_split_names(line[len("Requires:"):]))
        elif line.strip() == "---":
            current = None
    if text.strip() and not shown:
        raise IntrospectionParseFailure("pip show", "no package blocks in output")
    return frozenset(required), frozenset(shown)


def parse_required_by(text: str) -> frozenset[str]:
    """Reverse-dependency set only; see parse_show."""
    return parse_show(text)[0]


class PipAdapter(SourceAdapter):
    source = ToolSource.PIP
    supports_orphans = True

    _pip: str | None = None

    async def _run_list(self) -> str:
        last_error: ScanError = SourceUnavailable("pip")
        for cmd in PIP_COMMANDS:
            if not self.runner.available(cmd):
                continue
            try:
                text = await self.runner.run(cmd, "list", "--format=json")
            except ScanError as e:
                last_error = e
                continue
            self._pip = cmd
            return text
        raise last_error

    async def list_packages(self, measure: bool = True) -> list[RawRecord]:
        # no install-path convention, so nothing to size
        pairs = parse_pip_list(await self._run_list())
        return [RawRecord(full_name=name, version=version) for name, version in pairs]

    async def _show(self, records: list[ToolRecord]) -> tuple[frozenset[str], frozenset[str]]:
        pip = self._pip or PIP_COMMANDS[0]
        # pip show exits 1 if any name is missing but still prints the rest
        text = await self.runner.run(
            pip, "show", "--no-color", *[r.full_name for r in records], check=False
        )
        if not text.strip():
            raise IntrospectionParseFailure("pip show", "empty output")
        required, shown = parse_show(text)
        log.debug(
            "pip.reverse_dependencies",
            packages=len(records),
            shown=len(shown),
            required=len(required),
        )
        return required, shown

    async def reverse_dependencies(self, records: list[ToolRecord]) -> frozenset[str]:
        if not records:
            return frozenset()
        required, _ = await self._show(records)
        return required

    async def orphan_evidence(self, records: list[ToolRecord]) -> OrphanEvidence:
        if not records:
            return OrphanEvidence(shown=frozenset())
        required, shown = await self._show(records)
        return OrphanEvidence(required_by=required, shown=shown)
