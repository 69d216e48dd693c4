"""Package-manager caches — where they live and how big they are."""

from __future__ import annotations

import platform
from pathlib import Path

from ..config import ScanConfig
from ..models import CacheEntry
from ..sizer import size_of_async


def pip_cache_dir(home: Path, system: str | None = None) -> Path:
    system = system or platform.system()
    if system == "Darwin":
        return home / "Library" / "Caches" / "pip"
    if system == "Windows":
        return home / "AppData" / "Local" / "pip" / "cache"
    return home / ".cache" / "pip"


def cache_locations(home: Path, system: str | None = None) -> list[tuple[str, Path]]:
    """(name, path) for every known cache, in display order."""
    return [
        ("npm cache", home / ".npm" / "_cacache"),
        ("pnpm store", home / ".pnpm-store"),
        ("yarn cache", home / ".yarn" / "cache"),
        ("cargo registry cache", home / ".cargo" / "registry" / "cache"),
        ("pip cache", pip_cache_dir(home, system)),
        ("Gradle caches", home / ".gradle" / "caches"),
        ("Maven repository", home / ".m2" / "repository"),
        ("Go module cache", home / "go" / "pkg" / "mod" / "cache"),
    ]


async def scan_caches(config: ScanConfig | None = None) -> list[CacheEntry]:
    """Size every known cache; missing ones are reported with exists=False."""
    config = config or ScanConfig()
    home = config.home_dir()
    entries = []
    for name, path in cache_locations(home):
        size, _ = await size_of_async(path)
        entries.append(CacheEntry(name=name, path=str(path), size_bytes=size, exists=path.exists()))
    return entries
