"""JSON-ready dictionaries for CLI and D-Bus output."""

from __future__ import annotations

from typing import Any

from diskscope.models import (
    CleanResult,
    DiskUsage,
    DuplicateResult,
    FileRecord,
    HealthTip,
    JunkCategory,
    ProcessInfo,
    ScanReport,
    StartupItem,
)
from diskscope.utils import human_size

_GB = 1024**3


def file_to_dict(record: FileRecord) -> dict[str, Any]:
    return {
        "path": str(record.path),
        "size_bytes": record.size_bytes,
        "size_human": human_size(record.size_bytes),
        "extension": record.extension,
        "modified_at": record.modified_at,
    }


def scan_to_dict(report: ScanReport) -> dict[str, Any]:
    return {
        "root": str(report.root),
        "summary": {
            "total_files": report.summary.total_files,
            "total_bytes": report.summary.total_bytes,
            "total_dirs": report.summary.total_dirs,
        },
        "top_files": [file_to_dict(f) for f in report.top_files],
        "by_extension": [
            {"extension": s.extension, "file_count": s.file_count, "total_bytes": s.total_bytes}
            for s in report.by_extension
        ],
        "stale_files": [file_to_dict(f) for f in report.stale_files],
        "stale_truncated": report.stale_truncated,
    }


def duplicates_to_dict(result: DuplicateResult) -> dict[str, Any]:
    return {
        "groups": [
            {
                "hash": g.fingerprint,
                "size_bytes": g.size_bytes,
                "size_human": human_size(g.size_bytes),
                "wasted_bytes": g.wasted_bytes,
                "files": [str(p) for p in g.files],
            }
            for g in result.groups
        ],
        "total_wasted_bytes": result.total_wasted_bytes,
        "total_wasted_human": human_size(result.total_wasted_bytes),
        "total_groups": result.total_groups,
        "verified": result.verified,
    }


def junk_to_dict(categories: list[JunkCategory]) -> list[dict[str, Any]]:
    return [
        {
            "id": c.id,
            "name": c.name,
            "description": c.description,
            "size_bytes": c.size_bytes,
            "size_human": human_size(c.size_bytes),
            "items": [
                {"path": str(i.path), "size_bytes": i.size_bytes, "size_human": human_size(i.size_bytes)}
                for i in c.items
            ],
        }
        for c in categories
    ]


def clean_to_dict(result: CleanResult) -> dict[str, Any]:
    return {
        "freed_bytes": result.freed_bytes,
        "freed_human": human_size(result.freed_bytes),
        "deleted_count": result.deleted_count,
        "errors": list(result.errors),
    }


def disk_usage_to_dict(usage: DiskUsage) -> dict[str, Any]:
    return {
        "total_bytes": usage.total_bytes,
        "used_bytes": usage.used_bytes,
        "free_bytes": usage.free_bytes,
        "total_gb": usage.total_bytes / _GB,
        "used_gb": usage.used_bytes / _GB,
        "free_gb": usage.free_bytes / _GB,
        "usage_percent": usage.usage_percent,
    }


def processes_to_dict(processes: list[ProcessInfo]) -> list[dict[str, Any]]:
    return [
        {
            "pid": p.pid,
            "name": p.name,
            "cpu_percent": p.cpu_percent,
            "memory_mb": p.memory_mb,
            "command": p.command,
        }
        for p in processes
    ]


def startup_to_dict(items: list[StartupItem]) -> list[dict[str, Any]]:
    return [{"name": i.name, "path": str(i.path), "kind": i.kind, "enabled": i.enabled} for i in items]


def health_to_dict(tips: list[HealthTip]) -> list[dict[str, Any]]:
    return [{"level": t.level, "message": t.message} for t in tips]
