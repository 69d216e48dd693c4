"""Terminal output formatting — box layout, colors, width control."""

import shutil
from typing import List

import click

from .models import CacheEntry, DiskUsageEntry, DotFolder, OrphanCandidate, ScanSummary, ToolRecord


def _get_width() -> int:
    try:
        return min(88, shutil.get_terminal_size((88, 24)).columns)
    except OSError:
        return 88


def human_size(n: int) -> str:
    """1536 -> '1.5 KB'."""
    size = float(n)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def _size_color(n: int) -> str | None:
    if n >= 1024**3:
        return "red"
    if n >= 100 * 1024**2:
        return "yellow"
    return None


def _fit(text: str, width: int) -> str:
    return text if len(text) <= width else text[: max(width - 1, 0)] + "…"


def _box(title: str, body: List[str], footer: str, width: int) -> str:
    lines = ["┌" + "─" * (width - 2) + "┐", f" toolsweep · {title}", "─" * width]
    lines.extend(body)
    lines.append("─" * width)
    lines.append(click.style(f" {footer}", dim=True))
    lines.append("└" + "─" * (width - 2) + "┘")
    return "\n".join(lines)


def format_tools(records: List[ToolRecord]) -> str:
    width = _get_width()
    if not records:
        return _box("installed tools", [" No tools found."], "0 tools", width)
    name_w = min(max(len(r.full_name) for r in records), width // 2)
    body = []
    for r in records:
        size = human_size(r.size_bytes) if r.size_bytes else "-"
        row = f" {_fit(r.full_name, name_w):<{name_w}}  {(r.version or '?'):<12} {r.source.value:<6} {size:>9}"
        body.append(click.style(row, fg=_size_color(r.size_bytes)))
    total = sum(r.size_bytes for r in records)
    return _box("installed tools", body, f"{len(records)} tool(s), {human_size(total)} measured", width)


def format_orphans(candidates: List[OrphanCandidate]) -> str:
    width = _get_width()
    if not candidates:
        return _box("orphans", [" No orphaned packages detected."], "Nothing to remove.", width)
    body = []
    for c in candidates:
        body.append(f" ○ {c.name} {c.version}".rstrip() + click.style(f"  [{c.source.value}]", dim=True))
        body.append(click.style(f"     {_fit(c.reason, width - 6)}", dim=True))
    footer = f"{len(candidates)} candidate(s). toolsweep never uninstalls; review before removing."
    return _box("orphans", body, _fit(footer, width - 2), width)


def format_caches(entries: List[CacheEntry]) -> str:
    width = _get_width()
    body = []
    for e in entries:
        if not e.exists:
            body.append(click.style(f" {e.name:<24} {'absent':>9}  {_fit(e.path, width - 38)}", dim=True))
            continue
        row = f" {e.name:<24} {human_size(e.size_bytes):>9}  {_fit(e.path, width - 38)}"
        body.append(click.style(row, fg=_size_color(e.size_bytes)))
    total = sum(e.size_bytes for e in entries)
    return _box("caches", body or [" No caches found."], f"{human_size(total)} reclaimable", width)


def format_disk_usage(entries: List[DiskUsageEntry], title: str = "disk usage") -> str:
    width = _get_width()
    body = []
    for e in entries:
        row = f" {_fit(e.category, 28):<28} {human_size(e.size_bytes):>9} {e.item_count:>7} items"
        body.append(click.style(row, fg=_size_color(e.size_bytes)))
    total = sum(e.size_bytes for e in entries)
    return _box(title, body or [" Nothing measured."], f"{human_size(total)} total", width)


def format_dotfiles(folders: List[DotFolder]) -> str:
    width = _get_width()
    body = []
    for f in folders:
        tool = f" ({f.related_tool})" if f.related_tool else ""
        row = f" {_fit(f.name + tool, 32):<32} {human_size(f.size_bytes):>9} {f.file_count:>7} files"
        body.append(click.style(row, fg=_size_color(f.size_bytes)))
    return _box("dot-directories", body or [" No dot-directories."], f"{len(folders)} folder(s)", width)


def format_summary(summary: ScanSummary) -> str:
    width = _get_width()
    body = [f" Total tools  {summary.total_tools}", f" Measured     {human_size(summary.total_size_bytes)}"]
    for source, count in sorted(summary.by_source.items(), key=lambda x: -x[1]):
        body.append(f"   {source:<8} {count}")
    return _box("summary", body, "Run with --json for machine output", width)
