"""npm adapter — global packages from ``npm list -g``."""

from __future__ import annotations

import json
import platform
from pathlib import Path

import structlog

from ..errors import IntrospectionParseFailure, ScanError
from ..models import OrphanEvidence, RawRecord, ToolRecord, ToolSource
from ..sizer import size_of_async
from .base import SourceAdapter, file_times, parse_json

log = structlog.get_logger("toolsweep.scanner")


def global_modules_dir(prefix: str) -> Path | None:
    """<prefix>/lib/node_modules, or <prefix>/node_modules on Windows."""
    if not prefix:
        return None
    if platform.system() == "Windows":
        return Path(prefix) / "node_modules"
    return Path(prefix) / "lib" / "node_modules"


def parse_npm_list(text: str) -> list[tuple[str, str | None]]:
    """(full_name, version) pairs from ``npm list -g --json --depth=0``, in output order."""
    data = parse_json("npm", text)
    if not isinstance(data, dict):
        raise IntrospectionParseFailure("npm", "expected a JSON object")
    deps = data.get("dependencies") or {}
    if not isinstance(deps, dict):
        raise IntrospectionParseFailure("npm", "'dependencies' is not an object")
    pairs = []
    for full_name, info in deps.items():
        version = info.get("version") if isinstance(info, dict) else None
        pairs.append((full_name, str(version) if version else None))
    return pairs


def manifest_declares_bin(package_dir: Path) -> bool | None:
    """Whether package.json declares a "bin" entry. None if the manifest is unreadable."""
    try:
        data = json.loads((package_dir / "package.json").read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    return bool(data.get("bin"))


def view_output_declares_bin(text: str) -> bool:
    """``npm view <pkg> bin --json`` prints nothing or null when there is no bin."""
    text = text.strip()
    if not text or text == "null":
        return False
    try:
        return bool(json.loads(text))
    except ValueError:
        return True


class NpmAdapter(SourceAdapter):
    source = ToolSource.NPM
    supports_orphans = True

    async def _prefix(self) -> str:
        try:
            return (await self.runner.run("npm", "config", "get", "prefix")).strip()
        except ScanError as e:
            log.debug("npm.prefix_unavailable", error=str(e))
            return ""

    async def _listing(self) -> list[tuple[str, str | None]]:
        # npm exits non-zero on peer-dependency problems but still prints the tree
        text = await self.runner.run("npm", "list", "-g", "--json", "--depth=0", check=False)
        return parse_npm_list(text)

    async def list_packages(self, measure: bool = True) -> list[RawRecord]:
        pairs = await self._listing()
        modules = global_modules_dir(await self._prefix())
        records = []
        for full_name, version in pairs:
            rec = RawRecord(full_name=full_name, version=version)
            if modules is not None:
                pkg_dir = modules / full_name
                rec.install_path = str(pkg_dir)
                rec.installed_at, _ = file_times(pkg_dir)
                if measure:
                    # sequential: one walker per adapter
                    rec.size_bytes, _ = await size_of_async(pkg_dir)
            records.append(rec)
        return records

    async def has_executable(self, full_name: str, install_path: str = "") -> bool | None:
        """Local manifest first, registry metadata second, None when neither answers."""
        if install_path:
            local = manifest_declares_bin(Path(install_path))
            if local is not None:
                return local
        try:
            text = await self.runner.run("npm", "view", full_name, "bin", "--json")
        except ScanError as e:
            log.debug("npm.view_failed", package=full_name, error=str(e))
            return None
        return view_output_declares_bin(text)

    async def orphan_evidence(self, records: list[ToolRecord]) -> OrphanEvidence:
        executables = {}
        for rec in records:
            executables[rec.full_name] = await self.has_executable(rec.full_name, rec.install_path)
        return OrphanEvidence(required_by=frozenset(), executables=executables)
