"""Normalizer — adapter raw records to ToolRecord."""

from .models import RawRecord, ToolRecord, ToolSource


def split_scoped_name(full_name: str) -> tuple[str | None, str]:
    """'@org/pkg' -> ('@org', 'pkg'); anything else -> (None, full_name)."""
    if full_name.startswith("@"):
        pos = full_name.find("/")
        if pos > 1:
            return full_name[:pos], full_name[pos + 1 :]
    return None, full_name


def normalize(raw: RawRecord, source: ToolSource) -> ToolRecord:
    """Convert one raw record. Fields the adapter did not supply stay None."""
    scope, name = split_scoped_name(raw.full_name)
    return ToolRecord(
        name=name,
        scope=scope,
        full_name=raw.full_name,
        version=raw.version,
        source=source,
        install_path=raw.install_path,
        size_bytes=raw.size_bytes,
        description=raw.description,
        installed_at=raw.installed_at,
        last_accessed=raw.last_accessed,
    )


def normalize_all(raws: list[RawRecord], source: ToolSource) -> list[ToolRecord]:
    """Normalize a source's records, keeping the first of any duplicate full_name."""
    seen: set[str] = set()
    records = []
    for raw in raws:
        if not raw.full_name or raw.full_name in seen:
            continue
        seen.add(raw.full_name)
        records.append(normalize(raw, source))
    return records
