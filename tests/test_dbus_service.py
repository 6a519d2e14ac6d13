"""Tests for the D-Bus service plumbing (no bus connection needed)."""

from __future__ import annotations

import asyncio
import json

import pytest

pytest.importorskip("dbus_next")

from diskscope import report
from diskscope.dbus_service import DiskscopeDBusService, _min_size
from diskscope.exceptions import ScanCancelled

from conftest import write_file


@pytest.fixture
def service(config):
    return DiskscopeDBusService(config)


def test_run_renders_result_as_json(service, tmp_path):
    write_file(tmp_path / "data" / "a.txt", content=b"a" * 10)

    raw = asyncio.run(
        service._run("scan", lambda token: service._engine.scan(tmp_path / "data", cancel=token), report.scan_to_dict)
    )

    assert json.loads(raw)["summary"]["total_files"] == 1
    assert service._cancel is None


def test_run_reports_scan_errors(service, tmp_path):
    raw = asyncio.run(
        service._run("scan", lambda token: service._engine.scan(tmp_path / "missing"), report.scan_to_dict)
    )
    assert "does not exist" in json.loads(raw)["error"]


def test_run_reports_cancellation(service):
    def cancelled(token):
        raise ScanCancelled("Scan cancelled")

    raw = asyncio.run(service._run("scan", cancelled, report.scan_to_dict))
    assert json.loads(raw) == {"error": "cancelled"}


def test_min_size_conversion():
    assert _min_size(-1) is None
    assert _min_size(0) == 0
    assert _min_size(1.5) == 1572864
