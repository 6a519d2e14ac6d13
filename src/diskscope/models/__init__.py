"""Diskscope data models."""

from diskscope.models.clean_result import CleanResult
from diskscope.models.duplicates import DuplicateGroup, DuplicateResult
from diskscope.models.junk import JunkCategory, JunkItem
from diskscope.models.scan import (
    NO_EXTENSION,
    ExtensionStat,
    FileRecord,
    ScanReport,
    ScanRequest,
    ScanSummary,
)
from diskscope.models.system import DiskUsage, HealthTip, ProcessInfo, StartupItem

__all__ = [
    "NO_EXTENSION",
    "CleanResult",
    "DiskUsage",
    "DuplicateGroup",
    "DuplicateResult",
    "ExtensionStat",
    "FileRecord",
    "HealthTip",
    "JunkCategory",
    "JunkItem",
    "ProcessInfo",
    "ScanReport",
    "ScanRequest",
    "ScanSummary",
    "StartupItem",
]
