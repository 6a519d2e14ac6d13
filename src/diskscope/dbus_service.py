"""D-Bus service for GUI communication.

D-Bus methods use PascalCase per D-Bus convention, and type signatures
like "as" and "(ss)" are D-Bus protocol types, not Python syntax.

Long-running methods execute the engine in a worker thread so the bus
keeps answering (notably ``Cancel``) while a scan is in progress.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable

from dbus_next.aio import MessageBus
from dbus_next.service import ServiceInterface, method, signal
from dbus_next import BusType

from diskscope import report
from diskscope.config import EngineConfig
from diskscope.core.cancel import CancelToken
from diskscope.core.engine import AnalysisEngine
from diskscope.exceptions import ScanCancelled, DiskscopeError
from diskscope.system import collect_health, disk_usage, list_processes, startup_items

log = logging.getLogger(__name__)

_BUS_NAME = "io.github.diskscope"
_OBJECT_PATH = "/io/github/diskscope"
_INTERFACE = "io.github.diskscope.Analyzer"
_MB = 1024 * 1024


def _min_size(min_size_mb: float) -> int | None:
    """D-Bus has no optional arguments; a negative value means "use the default"."""
    return None if min_size_mb < 0 else int(min_size_mb * _MB)


# noinspection PyPep8Naming,DuplicatedCode
class DiskscopeDBusService(ServiceInterface):
    """D-Bus service interface for Diskscope."""

    def __init__(self, config: EngineConfig) -> None:
        super().__init__(_INTERFACE)
        self._engine = AnalysisEngine(config)
        self._cancel: CancelToken | None = None

    async def _run(self, operation: str, fn: Callable[[CancelToken], Any], render: Callable[[Any], Any]) -> str:
        """Run *fn* off the event loop and return its rendered result as JSON."""
        token = CancelToken()
        self._cancel = token
        self.OperationStatus(operation, "running")
        loop = asyncio.get_running_loop()
        try:
            result = await loop.run_in_executor(None, fn, token)
        except ScanCancelled:
            self.OperationStatus(operation, "cancelled")
            return json.dumps({"error": "cancelled"})
        except DiskscopeError as e:
            self.OperationStatus(operation, "error")
            return json.dumps({"error": str(e)})
        finally:
            if self._cancel is token:
                self._cancel = None
        self.OperationStatus(operation, "done")
        return json.dumps(render(result))

    @method()
    async def Scan(self, path: "s", limit: "i", min_size_mb: "d", stale_days: "i") -> "s":  # type: ignore[override]
        """Scan a directory. Negative numeric arguments select the defaults."""
        return await self._run(
            "scan",
            lambda token: self._engine.scan(
                path,
                limit=None if limit < 0 else limit,
                min_size=_min_size(min_size_mb),
                stale_days=None if stale_days < 0 else stale_days,
                cancel=token,
            ),
            report.scan_to_dict,
        )

    @method()
    async def FindDuplicates(self, path: "s", min_size_mb: "d", verify: "b") -> "s":  # type: ignore[override]
        """Find duplicate files under a directory."""
        return await self._run(
            "find_duplicates",
            lambda token: self._engine.find_duplicates(
                path, min_size=_min_size(min_size_mb), verify=verify, cancel=token
            ),
            report.duplicates_to_dict,
        )

    @method()
    async def ScanJunk(self) -> "s":  # type: ignore[override]
        """Size every junk category."""
        return await self._run("scan_junk", lambda _token: self._engine.scan_junk(), report.junk_to_dict)

    @method()
    async def CleanJunk(self, category_ids: "as") -> "s":  # type: ignore[override]
        """Delete the contents of the given junk categories."""
        ids = list(category_ids)
        return await self._run("clean_junk", lambda _token: self._engine.clean_junk(ids), report.clean_to_dict)

    @method()
    def Cancel(self) -> "b":  # type: ignore[override]
        """Cancel the running scan, if any."""
        if self._cancel is None:
            return False
        self._cancel.cancel()
        return True

    @method()
    def GetDiskUsage(self, path: "s") -> "s":  # type: ignore[override]
        try:
            return json.dumps(report.disk_usage_to_dict(disk_usage(path or "/")))
        except DiskscopeError as e:
            return json.dumps({"error": str(e)})

    @method()
    def GetProcesses(self, limit: "i") -> "s":  # type: ignore[override]
        try:
            return json.dumps(report.processes_to_dict(list_processes(limit if limit > 0 else 20)))
        except DiskscopeError as e:
            return json.dumps({"error": str(e)})

    @method()
    def GetStartupItems(self) -> "s":  # type: ignore[override]
        return json.dumps(report.startup_to_dict(startup_items()))

    @method()
    def GetHealthReport(self, path: "s") -> "s":  # type: ignore[override]
        """Health tips for the filesystem holding *path* (default "/") and the running session."""
        return json.dumps(report.health_to_dict(collect_health(path or "/")))

    @signal()
    def OperationStatus(self, operation: str, status: str) -> "(ss)":  # type: ignore[override]
        return [operation, status]


async def run_service(config: EngineConfig) -> None:
    """Start the D-Bus service."""
    bus = await MessageBus(bus_type=BusType.SESSION).connect()
    service = DiskscopeDBusService(config)
    bus.export(_OBJECT_PATH, service)
    await bus.request_name(_BUS_NAME)
    log.info("D-Bus service started on %s", _BUS_NAME)
    await bus.wait_for_disconnect()


def start_service(config: EngineConfig) -> None:
    """Entry point to start the D-Bus service."""
    asyncio.run(run_service(config))
