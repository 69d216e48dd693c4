"""Scanners — package-manager adapters plus cache, disk and dotfile accounting."""

from .caches import scan_caches
from .disk import get_dir_details, scan_disk_usage
from .dotfiles import scan_dotfiles
from .registry import build_adapters

__all__ = ["build_adapters", "scan_caches", "scan_disk_usage", "get_dir_details", "scan_dotfiles"]
