"""Dot-directories in the home folder — config stores left behind by tools."""

from __future__ import annotations

from datetime import datetime, timezone

from ..config import ScanConfig
from ..models import DotFolder
from ..sizer import size_of_async

RELATED_TOOLS = {
    ".npm": "npm",
    ".cargo": "cargo",
    ".rustup": "rustup",
    ".nvm": "nvm",
    ".fnm": "fnm",
    ".bun": "bun",
    ".deno": "deno",
    ".pip": "pip",
    ".pyenv": "pyenv",
    ".gradle": "gradle",
    ".m2": "maven",
    ".vscode": "vscode",
    ".git": "git",
    ".ssh": "ssh",
}


def guess_related_tool(name: str) -> str | None:
    return RELATED_TOOLS.get(name)


async def scan_dotfiles(config: ScanConfig | None = None) -> list[DotFolder]:
    """Every dot-directory directly under home, sorted by name."""
    config = config or ScanConfig()
    home = config.home_dir()
    folders = []
    try:
        children = list(home.iterdir())
    except OSError:
        return []
    for path in children:
        if not path.name.startswith(".") or path.is_symlink() or not path.is_dir():
            continue
        try:
            modified_at = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
        except OSError:
            modified_at = None
        size, count = await size_of_async(path)
        folders.append(
            DotFolder(
                name=path.name,
                path=str(path),
                size_bytes=size,
                file_count=count,
                modified_at=modified_at,
                related_tool=guess_related_tool(path.name),
            )
        )
    folders.sort(key=lambda f: f.name)
    return folders
