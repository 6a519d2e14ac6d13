"""Thin wrappers around OS telemetry, plus the health summary built from them."""

from __future__ import annotations

import configparser
import logging
import shutil
import subprocess
from pathlib import Path

from diskscope.exceptions import DiskscopeError
from diskscope.models.system import DiskUsage, HealthTip, ProcessInfo, StartupItem
from diskscope.utils import has_command, human_size, xdg_config_home

log = logging.getLogger(__name__)

SYSTEM_AUTOSTART_DIR = Path("/etc/xdg/autostart")

DISK_CRITICAL_PERCENT = 90.0
DISK_WARNING_PERCENT = 75.0
HIGH_CPU_PERCENT = 5.0
MAX_HIGH_CPU_PROCESSES = 5
MAX_STARTUP_ITEMS = 20


def disk_usage(path: Path | str = "/") -> DiskUsage:
    """Total, used and free bytes of the filesystem holding *path*."""
    try:
        usage = shutil.disk_usage(path)
    except OSError as e:
        raise DiskscopeError(f"Cannot read disk usage for {path}: {e}") from e
    return DiskUsage(total_bytes=usage.total, used_bytes=usage.used, free_bytes=usage.free)


def list_processes(limit: int = 20) -> list[ProcessInfo]:
    """Top processes by CPU usage, as reported by ``ps``."""
    if not has_command("ps"):
        raise DiskscopeError("The 'ps' command is not available")
    try:
        proc = subprocess.run(
            ["ps", "-eo", "pid,pcpu,rss,comm", "--sort=-pcpu"],
            capture_output=True, text=True, timeout=10, check=True,
        )
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired) as e:
        raise DiskscopeError(f"Failed to run ps: {e}") from e
    return parse_ps_output(proc.stdout, limit)


def parse_ps_output(output: str, limit: int = 20) -> list[ProcessInfo]:
    """Parse ``ps -eo pid,pcpu,rss,comm`` output, skipping the header."""
    processes: list[ProcessInfo] = []
    for line in output.splitlines()[1:]:
        if len(processes) >= limit:
            break
        parts = line.split()
        if len(parts) < 4:
            continue
        try:
            pid = int(parts[0])
            cpu = float(parts[1])
            rss_kb = float(parts[2])
        except ValueError:
            log.debug("Unparseable ps line: %r", line)
            continue
        command = " ".join(parts[3:])
        processes.append(
            ProcessInfo(
                pid=pid,
                name=command.rsplit("/", 1)[-1],
                cpu_percent=cpu,
                memory_mb=rss_kb / 1024.0,
                command=command,
            )
        )
    return processes


def startup_items(
    user_dir: Path | None = None,
    system_dir: Path | None = SYSTEM_AUTOSTART_DIR,
) -> list[StartupItem]:
    """Enumerate XDG autostart ``.desktop`` entries, user entries first."""
    if user_dir is None:
        user_dir = xdg_config_home() / "autostart"
    items: list[StartupItem] = []
    for directory, kind in ((user_dir, "user"), (system_dir, "system")):
        if directory is None or not directory.is_dir():
            continue
        try:
            desktop_files = sorted(directory.glob("*.desktop"))
        except OSError:
            log.debug("Cannot read autostart directory: %s", directory)
            continue
        for path in desktop_files:
            items.append(_read_desktop_entry(path, kind))
    return items


def _read_desktop_entry(path: Path, kind: str) -> StartupItem:
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    parser.optionxform = str  # keys are case-sensitive
    name = path.stem
    enabled = True
    try:
        parser.read(path, encoding="utf-8")
    except (configparser.Error, OSError, UnicodeDecodeError):
        log.debug("Cannot parse autostart entry: %s", path)
        return StartupItem(name=name, path=path, kind=kind, enabled=enabled)

    if parser.has_section("Desktop Entry"):
        section = parser["Desktop Entry"]
        name = section.get("Name", name)
        if section.get("Hidden", "false").strip().lower() == "true":
            enabled = False
        if section.get("X-GNOME-Autostart-enabled", "true").strip().lower() == "false":
            enabled = False
    return StartupItem(name=name, path=path, kind=kind, enabled=enabled)


def health_report(
    usage: DiskUsage | None,
    processes: list[ProcessInfo] | None,
    startup: list[StartupItem] | None,
) -> list[HealthTip]:
    """Turn disk, process and autostart readings into a short list of tips.

    Any reading may be ``None`` when it could not be collected; its tip is
    then left out.  Rules:

    * disk usage above 90% is critical, above 75% a warning;
    * up to five processes above 5% CPU are named;
    * more than 20 autostart entries is flagged as slowing down login.
    """
    tips: list[HealthTip] = []

    if usage is not None:
        percent = usage.usage_percent
        if percent > DISK_CRITICAL_PERCENT:
            tips.append(HealthTip(
                "critical",
                f"Disk is {percent:.1f}% full ({human_size(usage.used_bytes)} of "
                f"{human_size(usage.total_bytes)}). Free up space now to avoid slowdowns.",
            ))
        elif percent > DISK_WARNING_PERCENT:
            tips.append(HealthTip(
                "warning",
                f"Disk usage is {percent:.1f}%. Consider cleaning junk or reviewing the largest files.",
            ))
        else:
            tips.append(HealthTip("ok", f"Disk health is good at {percent:.1f}% usage."))

    if processes:
        busy = [p for p in processes if p.cpu_percent > HIGH_CPU_PERCENT][:MAX_HIGH_CPU_PROCESSES]
        if busy:
            names = ", ".join(f"{p.name} ({p.cpu_percent:.1f}%)" for p in busy)
            tips.append(HealthTip("warning", f"High CPU processes: {names}."))

    if startup:
        count = len(startup)
        if count > MAX_STARTUP_ITEMS:
            tips.append(HealthTip(
                "warning",
                f"{count} startup items detected. Disabling unused ones will speed up login.",
            ))
        else:
            tips.append(HealthTip("ok", f"{count} startup items, which looks reasonable."))

    return tips


def collect_health(path: Path | str = "/") -> list[HealthTip]:
    """Gather current readings and build the health report; failed readings are skipped."""
    try:
        usage: DiskUsage | None = disk_usage(path)
    except DiskscopeError as e:
        log.warning("%s", e)
        usage = None
    try:
        processes: list[ProcessInfo] | None = list_processes(limit=50)
    except DiskscopeError as e:
        log.warning("%s", e)
        processes = None
    return health_report(usage, processes, startup_items())
