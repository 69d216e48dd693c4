"""Orphan rules, one per orphan-capable source."""
