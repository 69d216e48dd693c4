"""Directory sizing — symlink-safe, stack-based, skips unreadable entries."""

import asyncio
import os
from pathlib import Path


def size_of(path) -> tuple[int, int]:
    """Return (size_bytes, file_count) for everything under ``path``.

    Missing paths give (0, 0). Symlinks are never followed, so a link back
    to an ancestor cannot loop. Unreadable entries are skipped and the
    total is partial.
    """
    root = Path(path)
    try:
        st = root.stat()
    except OSError:
        return 0, 0
    if not root.is_dir():
        return (st.st_size, 1) if root.is_file() else (0, 0)

    total = 0
    count = 0
    seen: set[tuple[int, int]] = {(st.st_dev, st.st_ino)}
    pending: list[str] = [str(root)]
    while pending:
        current = pending.pop()
        try:
            it = os.scandir(current)
        except OSError:
            continue
        with it:
            for entry in it:
                try:
                    if entry.is_file(follow_symlinks=False):
                        total += entry.stat(follow_symlinks=False).st_size
                        count += 1
                    elif entry.is_dir(follow_symlinks=False):
                        est = entry.stat(follow_symlinks=False)
                        key = (est.st_dev, est.st_ino)
                        if key not in seen:
                            seen.add(key)
                            pending.append(entry.path)
                except OSError:
                    continue
    return total, count


async def size_of_async(path) -> tuple[int, int]:
    """size_of in a worker thread, so the event loop keeps running."""
    return await asyncio.to_thread(size_of, path)


def count_entries(path) -> int:
    """Number of direct children of a directory (0 if missing or unreadable)."""
    try:
        with os.scandir(path) as it:
            return sum(1 for _ in it)
    except OSError:
        return 0
