"""
Shared utilities for manubuild.

Common functionality used across contexts:
- Logger setup with provenance
- Build event log
- Timestamps
- PDF inspection
"""

from manubuild.utils.timestamp import format_timestamp, now, now_exact

__all__ = ["format_timestamp", "now", "now_exact"]
