"""Disk usage of tool directories, largest first."""

from __future__ import annotations

import os
import platform
from pathlib import Path

from ..config import ScanConfig
from ..errors import FilesystemAccessDenied
from ..models import DiskUsageEntry
from ..sizer import count_entries, size_of, size_of_async


def disk_locations(home: Path, system: str | None = None) -> list[tuple[str, Path]]:
    """(category, path) pairs worth measuring on this platform."""
    system = system or platform.system()
    common = [
        ("npm data", home / ".npm"),
        ("cargo binaries", home / ".cargo" / "bin"),
        ("cargo registry", home / ".cargo" / "registry"),
        ("cargo git cache", home / ".cargo" / "git"),
        ("rustup toolchains", home / ".rustup"),
    ]
    if system == "Windows":
        local = home / "AppData" / "Local"
        roaming = home / "AppData" / "Roaming"
        return common + [
            ("npm global packages", roaming / "npm"),
            ("npm cache", local / "npm-cache"),
            ("pnpm global", local / "pnpm"),
            ("pnpm cache", local / "pnpm-cache"),
            ("pnpm store", local / "pnpm-store"),
            ("yarn data", local / "Yarn"),
            ("pip cache", local / "pip"),
            ("Python installs", local / "Programs" / "Python"),
            ("nvm versions", roaming / "nvm"),
            ("fnm cache", local / "fnm_multishells"),
        ]
    if system == "Darwin":
        return common + [
            ("pnpm global", home / "Library" / "pnpm"),
            ("yarn cache", home / "Library" / "Caches" / "Yarn"),
            ("pip cache", home / "Library" / "Caches" / "pip"),
            ("nvm versions", home / ".nvm"),
            ("fnm versions", home / "Library" / "Application Support" / "fnm"),
            ("pyenv versions", home / ".pyenv"),
        ]
    return common + [
        ("pnpm global", home / ".local" / "share" / "pnpm"),
        ("yarn cache", home / ".cache" / "yarn"),
        ("pip cache", home / ".cache" / "pip"),
        ("nvm versions", home / ".nvm"),
        ("fnm versions", home / ".local" / "share" / "fnm"),
        ("pyenv versions", home / ".pyenv"),
    ]


async def scan_disk_usage(config: ScanConfig | None = None) -> list[DiskUsageEntry]:
    """Existing, non-empty tool directories sorted by size descending."""
    config = config or ScanConfig()
    results = []
    for category, path in disk_locations(config.home_dir()):
        if not path.exists():
            continue
        size, _ = await size_of_async(path)
        if size > 0:
            results.append(
                DiskUsageEntry(
                    category=category,
                    path=str(path),
                    size_bytes=size,
                    item_count=count_entries(path),
                )
            )
    results.sort(key=lambda e: e.size_bytes, reverse=True)
    return results


def get_dir_details(path) -> list[DiskUsageEntry]:
    """Direct children of ``path`` with their sizes, largest first."""
    root = Path(path)
    if not root.exists():
        raise FileNotFoundError(f"Directory not found: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")
    try:
        it = os.scandir(root)
    except OSError as e:
        raise FilesystemAccessDenied(str(root), str(e)) from e
    results = []
    with it:
        for entry in it:
            try:
                if entry.is_dir(follow_symlinks=False):
                    size, _ = size_of(entry.path)
                    count = count_entries(entry.path)
                elif entry.is_file(follow_symlinks=False):
                    size, count = entry.stat(follow_symlinks=False).st_size, 1
                else:
                    continue
            except OSError:
                continue
            results.append(
                DiskUsageEntry(category=entry.name, path=entry.path, size_bytes=size, item_count=count)
            )
    results.sort(key=lambda e: e.size_bytes, reverse=True)
    return results
