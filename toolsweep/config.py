"""Scan configuration — search path, timeouts, extra exclusions.

Loaded from YAML (``~/.toolsweep/config.yaml`` or ``$TOOLSWEEP_CONFIG``)
with environment overrides. Read-only: toolsweep never writes it.

Example::

    extra_paths: [/opt/homebrew/bin]
    command_timeout: 5
    adapter_timeout: 10
    exclusions:
      npm: [my-internal-cli]
      pip: [ansible-core]
"""

from __future__ import annotations

import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

from .errors import ConfigError, HomeDirectoryUnavailable

log = structlog.get_logger("toolsweep.config")

DEFAULT_COMMAND_TIMEOUT = 5.0
DEFAULT_ADAPTER_TIMEOUT = 10.0


def _default_extra_paths() -> list[str]:
    # GUI-launched processes on macOS often miss Homebrew's bin dirs
    if platform.system() == "Darwin":
        return ["/opt/homebrew/bin", "/usr/local/bin"]
    return []


@dataclass
class ScanConfig:
    home: Path | None = None
    extra_paths: list[str] = field(default_factory=_default_extra_paths)
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    adapter_timeout: float = DEFAULT_ADAPTER_TIMEOUT
    exclusions: dict[str, list[str]] = field(default_factory=dict)

    def home_dir(self) -> Path:
        """Resolve the home directory, or raise HomeDirectoryUnavailable."""
        if self.home is not None:
            return Path(self.home)
        try:
            return Path.home()
        except (RuntimeError, KeyError) as e:
            raise HomeDirectoryUnavailable(f"cannot resolve home directory: {e}") from e

    def search_path(self) -> str:
        """PATH for child processes: extra paths first, then the inherited PATH."""
        inherited = os.environ.get("PATH", "")
        parts = [p for p in self.extra_paths if p and p not in inherited.split(os.pathsep)]
        if inherited:
            parts.append(inherited)
        return os.pathsep.join(parts)

    def extra_exclusions(self, source: str) -> frozenset[str]:
        return frozenset(n.lower() for n in self.exclusions.get(source, []))


def _config_path(path: Path | None) -> Path | None:
    if path is not None:
        return path
    env = os.environ.get("TOOLSWEEP_CONFIG")
    if env:
        return Path(env)
    try:
        return Path.home() / ".toolsweep" / "config.yaml"
    except (RuntimeError, KeyError):
        return None


def _as_float(key: str, value: Any) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be a number, got {value!r}") from e
    if result <= 0:
        raise ConfigError(f"{key} must be positive, got {value!r}")
    return result


def config_from_dict(data: dict[str, Any]) -> ScanConfig:
    """Build a ScanConfig from parsed YAML, validating value types."""
    cfg = ScanConfig()
    if "home" in data and data["home"]:
        cfg.home = Path(str(data["home"])).expanduser()
    if "extra_paths" in data:
        paths = data["extra_paths"] or []
        if not isinstance(paths, list):
            raise ConfigError("extra_paths must be a list")
        cfg.extra_paths = [str(Path(str(p)).expanduser()) for p in paths]
    if "command_timeout" in data:
        cfg.command_timeout = _as_float("command_timeout", data["command_timeout"])
    if "adapter_timeout" in data:
        cfg.adapter_timeout = _as_float("adapter_timeout", data["adapter_timeout"])
    if "exclusions" in data:
        excl = data["exclusions"] or {}
        if not isinstance(excl, dict) or not all(isinstance(v, list) for v in excl.values()):
            raise ConfigError("exclusions must map a source name to a list of package names")
        cfg.exclusions = {str(k).lower(): [str(n) for n in v] for k, v in excl.items()}
    return cfg


def load_config(path: Path | None = None) -> ScanConfig:
    """Load config from YAML + environment. Missing file means defaults."""
    cfg_path = _config_path(path)
    data: dict[str, Any] = {}
    if cfg_path is not None and cfg_path.exists():
        try:
            loaded = yaml.safe_load(cfg_path.read_text())
        except (yaml.YAMLError, OSError) as e:
            raise ConfigError(f"cannot read config {cfg_path}: {e}") from e
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigError(f"config {cfg_path} must be a mapping")
        data = loaded or {}
        log.debug("config.loaded", path=str(cfg_path))
    cfg = config_from_dict(data)

    env_cmd = os.environ.get("TOOLSWEEP_COMMAND_TIMEOUT")
    if env_cmd:
        cfg.command_timeout = _as_float("TOOLSWEEP_COMMAND_TIMEOUT", env_cmd)
    env_adapter = os.environ.get("TOOLSWEEP_ADAPTER_TIMEOUT")
    if env_adapter:
        cfg.adapter_timeout = _as_float("TOOLSWEEP_ADAPTER_TIMEOUT", env_adapter)
    return cfg
