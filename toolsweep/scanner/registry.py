"""Adapter registry — the closed set of package-manager sources."""

from __future__ import annotations

from ..config import ScanConfig
from ..models import ToolSource
from ..runner import CommandRunner
from .base import SourceAdapter
from .cargo import CargoAdapter
from .go import GoAdapter
from .npm import NpmAdapter
from .pip import PipAdapter

ADAPTER_TYPES: dict[ToolSource, type[SourceAdapter]] = {
    ToolSource.NPM: NpmAdapter,
    ToolSource.CARGO: CargoAdapter,
    ToolSource.PIP: PipAdapter,
    ToolSource.GO: GoAdapter,
}


def build_adapters(
    config: ScanConfig, runner: CommandRunner | None = None
) -> dict[ToolSource, SourceAdapter]:
    """One adapter per supported source, sharing a runner built from config."""
    runner = runner or CommandRunner.from_config(config)
    return {source: cls(runner, config) for source, cls in ADAPTER_TYPES.items()}
