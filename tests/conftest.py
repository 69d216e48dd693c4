"""Shared fixtures: a fake command runner and in-memory source adapters."""

import asyncio

import pytest

from toolsweep.config import ScanConfig
from toolsweep.errors import SourceUnavailable, SubprocessExecutionFailure
from toolsweep.models import OrphanEvidence, RawRecord
from toolsweep.runner import CommandRunner
from toolsweep.scanner.base import SourceAdapter


class FakeRunner(CommandRunner):
    """Canned command output keyed by argv prefix. Unknown commands exit 1."""

    def __init__(self, outputs=None, missing=()):
        super().__init__(search_path="", timeout=1.0)
        self.outputs = outputs or {}
        self.missing = set(missing)
        self.calls = []

    def resolve(self, name):
        return None if name in self.missing else f"/fake/bin/{name}"

    async def run(self, name, *args, check=True):
        call = (name, *args)
        self.calls.append(call)
        if self.resolve(name) is None:
            raise SourceUnavailable(name)
        matches = [k for k in self.outputs if call[: len(k)] == k]
        if not matches:
            raise SubprocessExecutionFailure(list(call), "exit 1", returncode=1)
        out = self.outputs[max(matches, key=len)]
        if isinstance(out, Exception):
            raise out
        return out


class StaticAdapter(SourceAdapter):
    """Adapter returning fixed records/evidence, optionally failing or stalling."""

    def __init__(self, source, pairs=(), evidence=None, error=None, delay=0.0, orphans=True):
        super().__init__(FakeRunner(), ScanConfig())
        self.source = source
        self.supports_orphans = orphans
        self.pairs = list(pairs)
        self.evidence = evidence or OrphanEvidence()
        self.error = error
        self.delay = delay
        self.measured = []

    async def list_packages(self, measure=True):
        self.measured.append(measure)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return [RawRecord(full_name=name, version=version) for name, version in self.pairs]

    async def orphan_evidence(self, records):
        return self.evidence


@pytest.fixture
def fake_runner():
    return FakeRunner


@pytest.fixture
def make_adapter():
    return StaticAdapter


@pytest.fixture
def home_config(tmp_path, monkeypatch):
    """ScanConfig rooted at an empty temporary home."""
    monkeypatch.delenv("CARGO_HOME", raising=False)
    home = tmp_path / "home"
    home.mkdir()
    return ScanConfig(home=home, extra_paths=[], command_timeout=1.0, adapter_timeout=2.0)
