"""
devgod PR Size Guard

Classifies a base..head diff into ideal / warn / blocked.
Blocked is evaluated first; all comparisons are strictly greater-than.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from devgod.config_loader import SizeGuardConfig


class SizeVerdict(str, Enum):
    IDEAL = "ideal"
    WARN = "warn"
    BLOCKED = "blocked"


class DiffStat(BaseModel):
    files_changed: int = 0
    lines_added: int = 0
    lines_deleted: int = 0

    @property
    def total_lines(self) -> int:
        return self.lines_added + self.lines_deleted


def classify(stat: DiffStat, limits: SizeGuardConfig | None = None) -> SizeVerdict:
    limits = limits or SizeGuardConfig()
    total = stat.total_lines

    if stat.files_changed > limits.hard_files_max or total > limits.hard_lines_max:
        return SizeVerdict.BLOCKED
    if stat.files_changed > limits.soft_files_max or total > limits.soft_lines_max:
        return SizeVerdict.WARN
    return SizeVerdict.IDEAL


def _numstat_field(value: str) -> int:
    value = value.strip()
    # Binary files report "-" for both counts
    if not value or value == "-":
        return 0
    try:
        return int(value)
    except ValueError:
        return 0


def parse_numstat(output: str) -> DiffStat:
    """Aggregate `git diff --numstat` output into a DiffStat."""
    stat = DiffStat()
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        parts = line.split("\t", 2)
        if len(parts) < 3:
            continue
        stat.files_changed += 1
        stat.lines_added += _numstat_field(parts[0])
        stat.lines_deleted += _numstat_field(parts[1])
    return stat
