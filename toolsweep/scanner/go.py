"""go adapter — binaries in GOBIN (or GOPATH/bin)."""

from __future__ import annotations

import os
from pathlib import Path

import structlog

from ..errors import ScanError
from ..models import RawRecord, ToolSource
from .base import SourceAdapter, file_times

log = structlog.get_logger("toolsweep.scanner")


def parse_build_info(text: str) -> tuple[str | None, str | None]:
    """(module path, version) from ``go version -m <binary>``.

    The relevant line is tab separated: "\\tmod\\t<path>\\t<version>\\t<sum>".
    """
    for line in text.splitlines():
        parts = line.strip().split("\t")
        if len(parts) >= 3 and parts[0] == "mod":
            version = parts[2] if parts[2] != "(devel)" else None
            return parts[1], version
    return None, None


class GoAdapter(SourceAdapter):
    source = ToolSource.GO

    async def bin_dir(self) -> Path | None:
        gobin = (await self.runner.run("go", "env", "GOBIN")).strip()
        if gobin:
            return Path(gobin)
        gopath = (await self.runner.run("go", "env", "GOPATH")).strip()
        if gopath:
            # GOPATH may hold several entries; binaries land in the first
            return Path(gopath.split(os.pathsep)[0]) / "bin"
        return None

    async def list_packages(self, measure: bool = True) -> list[RawRecord]:
        bin_dir = await self.bin_dir()
        if bin_dir is None or not bin_dir.is_dir():
            return []
        records = []
        for binary in sorted(bin_dir.iterdir()):
            if binary.name.startswith(".") or not binary.is_file():
                continue
            module, version = None, None
            try:
                module, version = parse_build_info(
                    await self.runner.run("go", "version", "-m", str(binary))
                )
            except ScanError as e:
                log.debug("go.build_info_unavailable", binary=binary.name, error=str(e))
            installed_at, last_accessed = file_times(binary)
            size = 0
            if measure:
                try:
                    size = binary.stat().st_size
                except OSError:
                    pass
            records.append(
                RawRecord(
                    full_name=binary.stem if binary.suffix == ".exe" else binary.name,
                    version=version,
                    install_path=str(binary),
                    size_bytes=size,
                    description=module,
                    installed_at=installed_at,
                    last_accessed=last_accessed,
                )
            )
        return records
