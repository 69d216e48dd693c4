"""Scan orchestrator — fan out over sources, join, merge, sort.

One task per source. A source that fails, times out, or is not installed
contributes nothing; the others still report.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import Awaitable

import structlog

from .config import ScanConfig
from .engine import find_orphans
from .errors import HomeDirectoryUnavailable, ScanError, SourceUnavailable, UnsupportedSource
from .models import OrphanCandidate, ScanSummary, ToolRecord, ToolSource
from .normalize import normalize_all
from .scanner.base import SourceAdapter
from .scanner.registry import build_adapters

log = structlog.get_logger("toolsweep.scan")

SOURCE_ORDER = {source: i for i, source in enumerate(ToolSource)}


def _log_failure(source: ToolSource, exc: BaseException, timeout: float) -> None:
    if isinstance(exc, SourceUnavailable):
        log.info("scan.source_unavailable", source=source.value, tool=exc.tool)
    elif isinstance(exc, asyncio.TimeoutError):
        log.warning("scan.source_timeout", source=source.value, timeout=timeout)
    elif isinstance(exc, ScanError):
        log.warning("scan.source_failed", source=source.value, error=str(exc))
    else:
        log.error(
            "scan.source_crashed",
            source=source.value,
            error=f"{type(exc).__name__}: {exc}",
            exc_info=exc,
        )


async def _fan_out(
    jobs: dict[ToolSource, Awaitable[list]],
    timeout: float,
    propagate_home: bool,
) -> dict[ToolSource, list]:
    """Run every job concurrently with a per-job timeout; failures become []."""
    sources = list(jobs)
    results = await asyncio.gather(
        *(asyncio.wait_for(job, timeout=timeout) for job in jobs.values()),
        return_exceptions=True,
    )
    merged: dict[ToolSource, list] = {}
    for source, result in zip(sources, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            if propagate_home and isinstance(result, HomeDirectoryUnavailable):
                raise result
            _log_failure(source, result, timeout)
            merged[source] = []
            continue
        merged[source] = result
    return merged


async def _inventory(adapter: SourceAdapter) -> list[ToolRecord]:
    records = normalize_all(await adapter.list_packages(), adapter.source)
    log.debug("scan.source_done", source=adapter.source.value, count=len(records))
    return records


async def _orphans(adapter: SourceAdapter, config: ScanConfig) -> list[OrphanCandidate]:
    records = normalize_all(await adapter.list_packages(measure=False), adapter.source)
    if not records:
        return []
    # a failure here drops the whole source: no evidence means no verdicts
    evidence = await adapter.orphan_evidence(records)
    return find_orphans(
        records,
        evidence,
        adapter.source,
        config.extra_exclusions(adapter.source.value),
    )


def _sort_key(record: ToolRecord) -> tuple:
    return (record.name.lower(), SOURCE_ORDER[record.source], record.full_name)


async def scan_inventory(
    source: ToolSource,
    config: ScanConfig | None = None,
    adapters: dict[ToolSource, SourceAdapter] | None = None,
) -> list[ToolRecord]:
    """Installed tools for one source, sorted by name. Unavailable source -> []."""
    config = config or ScanConfig()
    adapters = adapters if adapters is not None else build_adapters(config)
    adapter = adapters.get(source)
    if adapter is None:
        raise UnsupportedSource(f"no scanner for source '{source.value}'")
    merged = await _fan_out({source: _inventory(adapter)}, config.adapter_timeout, propagate_home=True)
    return sorted(merged[source], key=_sort_key)


async def scan_all(
    config: ScanConfig | None = None,
    sources: list[ToolSource] | None = None,
    adapters: dict[ToolSource, SourceAdapter] | None = None,
) -> list[ToolRecord]:
    """Every source at once. No cross-source dedup: a tool installed twice shows twice."""
    config = config or ScanConfig()
    adapters = adapters if adapters is not None else build_adapters(config)
    wanted = [s for s in ToolSource if s in adapters and (sources is None or s in sources)]
    jobs = {s: _inventory(adapters[s]) for s in wanted}
    merged = await _fan_out(jobs, config.adapter_timeout, propagate_home=True)
    records = [r for s in wanted for r in merged[s]]
    return sorted(records, key=_sort_key)


async def scan_orphans(
    config: ScanConfig | None = None,
    adapters: dict[ToolSource, SourceAdapter] | None = None,
) -> list[OrphanCandidate]:
    """Orphan candidates from every orphan-capable source. Never raises.

    Sources are concatenated in ToolSource order; within a source the
    adapter's emission order is kept.
    """
    config = config or ScanConfig()
    try:
        adapters = adapters if adapters is not None else build_adapters(config)
    except ScanError as e:
        log.warning("scan.orphans_unavailable", error=str(e))
        return []
    wanted = [s for s in ToolSource if s in adapters and adapters[s].supports_orphans]
    jobs = {s: _orphans(adapters[s], config) for s in wanted}
    merged = await _fan_out(jobs, config.adapter_timeout, propagate_home=False)
    return [c for s in wanted for c in merged[s]]


def summarize(records: list[ToolRecord]) -> ScanSummary:
    counts = Counter(r.source.value for r in records)
    return ScanSummary(
        total_tools=len(records),
        total_size_bytes=sum(r.size_bytes for r in records),
        by_source=dict(counts),
    )
