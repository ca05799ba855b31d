"""Tests for bazapta.services.packages and bazapta.services.preflight."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from bazapta.domain.errors import (
    MalformedListLine,
    PackageNotFound,
    PackageRejected,
    PreflightError,
    ToolFailure,
)
from bazapta.domain.models import ToolResult
from bazapta.services.packages import PackageService, check_rejection, ensure_ok
from bazapta.services.preflight import discover_distributions, run_preflight
from tests.conftest import FakeTool


class TestResultClassification:
    def test_ok_result_passes(self) -> None:
        result = ToolResult(args=["list", "squeeze"], output="", status=0)
        assert ensure_ok(result) is result

    def test_failed_result(self) -> None:
        result = ToolResult(args=["list", "squeeze"], output="boom\n", status=254)
        with pytest.raises(ToolFailure) as exc_info:
            ensure_ok(result)
        assert exc_info.value.status == 254
        assert exc_info.value.command == ["list", "squeeze"]
        assert "boom" in exc_info.value.message

    def test_skip_marker_is_a_rejection(self) -> None:
        result = ToolResult(output="Skipping inclusion of 'x' '1.0' in 'squeeze|main|i386'\n")
        with pytest.raises(PackageRejected):
            check_rejection(result)

    def test_not_found_marker(self) -> None:
        result = ToolResult(output="Exporting indices...\nNot removed as not found: x\n")
        with pytest.raises(PackageNotFound):
            check_rejection(result)

    def test_clean_output(self) -> None:
        result = ToolResult(output="Exporting indices...\n")
        assert check_rejection(result) is result


class TestPackageService:
    def test_list_packages(self, tmp_path: Path) -> None:
        tool = FakeTool()
        tool.respond(["list", "squeeze"], "squeeze|main|i386: hadoop 0.20-1\n")
        entries = asyncio.run(PackageService(tool, tmp_path).list_packages("squeeze"))
        assert [e.name for e in entries] == ["hadoop"]

    def test_list_packages_malformed(self, tmp_path: Path) -> None:
        tool = FakeTool()
        tool.respond(["list", "squeeze"], "squeeze|main|i386: hadoop\n")
        with pytest.raises(MalformedListLine):
            asyncio.run(PackageService(tool, tmp_path).list_packages("squeeze"))

    def test_package_info_picks_component_and_version(self, tmp_path: Path) -> None:
        tool = FakeTool()
        tool.respond(
            ["-A", "i386", "list", "squeeze", "hadoop"],
            "squeeze|contrib|i386: hadoop 0.20-1\nsqueeze|main|i386: hadoop 0.20-1\n",
        )
        service = PackageService(tool, tmp_path)
        entry = asyncio.run(service.package_info("squeeze", "main", "i386", "hadoop", "0.20-1"))
        assert entry.component == "main"
        assert asyncio.run(service.package_info("squeeze", "main", "i386", "hadoop", "0.21-1")) is None

    def test_package_info_without_output(self, tmp_path: Path) -> None:
        service = PackageService(FakeTool(), tmp_path)
        assert asyncio.run(service.package_info("squeeze", "main", "i386", "hadoop", "0.20-1")) is None

    def test_resolve_package_file(self, tmp_path: Path) -> None:
        tool = FakeTool()
        tool.respond(["dumpreferences"], "squeeze|main|i386 pool/main/h/hadoop/hadoop_0.20-1_all.deb\n")
        path = asyncio.run(PackageService(tool, tmp_path).resolve_package_file("squeeze", "hadoop", "0.20-1", "i386"))
        assert path == tmp_path / "pool/main/h/hadoop/hadoop_0.20-1_all.deb"

    def test_remove_failure(self, tmp_path: Path) -> None:
        tool = FakeTool()
        tool.respond(["remove", "squeeze", "hadoop"], "Error: database locked", status=255)
        with pytest.raises(ToolFailure):
            asyncio.run(PackageService(tool, tmp_path).remove_package("squeeze", "hadoop"))


class TestPreflight:
    def test_discovers_sorted_directories(self, tmp_path: Path) -> None:
        for name in ("wheezy", "squeeze", ".git"):
            (tmp_path / "dists" / name).mkdir(parents=True)
        (tmp_path / "dists" / "README").write_text("not a distribution")
        assert discover_distributions(tmp_path) == ["squeeze", "wheezy"]

    def test_empty_dists(self, tmp_path: Path) -> None:
        (tmp_path / "dists").mkdir()
        with pytest.raises(PreflightError, match="could not find any distributions"):
            discover_distributions(tmp_path)

    def test_missing_dists(self, tmp_path: Path) -> None:
        with pytest.raises(PreflightError):
            discover_distributions(tmp_path)

    def test_run_preflight_checks_tool(self, tmp_path: Path) -> None:
        (tmp_path / "dists" / "squeeze").mkdir(parents=True)
        tool = FakeTool()
        assert asyncio.run(run_preflight(tmp_path, tool)) == ["squeeze"]
        assert tool.checked
