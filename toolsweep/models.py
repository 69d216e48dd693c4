"""Structured records for installed tools, orphan candidates and disk usage."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class ToolSource(str, Enum):
    """Where a tool came from. Declaration order is the merge order for orphan scans."""

    NPM = "npm"
    CARGO = "cargo"
    PIP = "pip"
    GO = "go"
    SCRIPT = "script"  # installer scripts (rustup, fnm, scoop, ...)
    MANUAL = "manual"
    UNKNOWN = "unknown"


def _jsonable(data: dict) -> dict:
    out = {}
    for k, v in data.items():
        if isinstance(v, datetime):
            v = v.isoformat()
        elif isinstance(v, Enum):
            v = v.value
        out[k] = v
    return out


@dataclass
class RawRecord:
    """One entry as an adapter saw it, before normalization."""

    full_name: str
    version: Optional[str] = None
    install_path: str = ""
    size_bytes: int = 0
    description: Optional[str] = None
    installed_at: Optional[datetime] = None
    last_accessed: Optional[datetime] = None


@dataclass
class ToolRecord:
    """Normalized view of one installed package or tool."""

    name: str
    full_name: str  # native identifier, e.g. "@anthropic-ai/claude-code"
    source: ToolSource
    scope: Optional[str] = None  # e.g. "@anthropic-ai"
    version: Optional[str] = None  # opaque, not assumed semver
    install_path: str = ""
    size_bytes: int = 0
    description: Optional[str] = None
    installed_at: Optional[datetime] = None
    last_accessed: Optional[datetime] = None

    def to_dict(self) -> dict:
        return _jsonable(asdict(self))


@dataclass
class OrphanCandidate:
    """An installed package that is probably not needed."""

    name: str
    version: str
    source: ToolSource
    reason: str
    size_bytes: int = 0  # orphan scans skip sizing

    def to_dict(self) -> dict:
        return _jsonable(asdict(self))


@dataclass(frozen=True)
class OrphanEvidence:
    """Per-source signals consulted by the classifier. Read-only once built."""

    required_by: frozenset = frozenset()  # lower-cased names some other package depends on
    executables: dict = field(default_factory=dict)  # full_name -> bool | None
    shown: Optional[frozenset] = None  # lower-cased names the evidence covered; None = not tracked


@dataclass
class CacheEntry:
    name: str
    path: str
    size_bytes: int
    exists: bool

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DiskUsageEntry:
    category: str
    path: str
    size_bytes: int
    item_count: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DotFolder:
    """A dot-directory under the home directory."""

    name: str
    path: str
    size_bytes: int
    file_count: int
    modified_at: Optional[datetime] = None
    related_tool: Optional[str] = None

    def to_dict(self) -> dict:
        return _jsonable(asdict(self))


@dataclass
class ScanSummary:
    total_tools: int = 0
    total_size_bytes: int = 0
    by_source: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)
