"""cargo adapter — binaries recorded in ``$CARGO_HOME/.crates.toml``."""

from __future__ import annotations

import os
import platform
from pathlib import Path

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from ..errors import IntrospectionParseFailure
from ..models import RawRecord, ToolSource
from .base import SourceAdapter, file_times


def parse_crates_toml(content: str) -> list[tuple[str, str, list[str]]]:
    """(name, version, binaries) from .crates.toml.

    Keys look like "ripgrep 14.1.0 (registry+https://...)" and values list
    the installed binaries.
    """
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise IntrospectionParseFailure(".crates.toml", str(e)) from e
    v1 = data.get("v1") or {}
    if not isinstance(v1, dict):
        raise IntrospectionParseFailure(".crates.toml", "'v1' is not a table")
    crates = []
    for key, bins in v1.items():
        parts = key.split()
        if len(parts) < 2:
            continue
        binaries = [str(b) for b in bins] if isinstance(bins, list) else []
        crates.append((parts[0], parts[1], binaries))
    return crates


def parse_install_list(text: str) -> list[tuple[str, str, list[str]]]:
    """Same shape from ``cargo install --list``::

        ripgrep v14.1.0:
            rg
    """
    crates: list[tuple[str, str, list[str]]] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        if line[0].isspace():
            if crates:
                crates[-1][2].append(line.strip())
            continue
        parts = line.rstrip(":").split()
        if len(parts) >= 2:
            crates.append((parts[0], parts[1].lstrip("v"), []))
    return crates


class CargoAdapter(SourceAdapter):
    source = ToolSource.CARGO

    def cargo_home(self) -> Path:
        env = os.environ.get("CARGO_HOME")
        if env:
            return Path(env)
        return self.config.home_dir() / ".cargo"

    async def _crates(self) -> list[tuple[str, str, list[str]]]:
        crates_toml = self.cargo_home() / ".crates.toml"
        if crates_toml.exists():
            try:
                content = crates_toml.read_text(encoding="utf-8")
            except OSError as e:
                raise IntrospectionParseFailure(".crates.toml", str(e)) from e
            return parse_crates_toml(content)
        return parse_install_list(await self.runner.run("cargo", "install", "--list"))

    async def list_packages(self, measure: bool = True) -> list[RawRecord]:
        bin_dir = self.cargo_home() / "bin"
        suffix = ".exe" if platform.system() == "Windows" else ""
        records = []
        for name, version, binaries in await self._crates():
            size = 0
            installed_at = last_accessed = None
            for binary in binaries or [name]:
                exe = bin_dir / f"{binary}{suffix}"
                if not exe.is_file():
                    continue
                if measure:
                    try:
                        size += exe.stat().st_size
                    except OSError:
                        pass
                if installed_at is None:
                    installed_at, last_accessed = file_times(exe)
            records.append(
                RawRecord(
                    full_name=name,
                    version=version,
                    install_path=str(bin_dir),
                    size_bytes=size,
                    installed_at=installed_at,
                    last_accessed=last_accessed,
                )
            )
        return records
