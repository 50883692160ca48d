"""全局工具管理单元测试"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from pkgresolver.core.models import PackageRef
from pkgresolver.core.pkg.tools import GlobalToolManager


def _exe(path: Path, content: str = "#!/bin/sh\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    path.chmod(0o755)
    return path


@pytest.fixture
def manager(tmp_path: Path) -> GlobalToolManager:
    return GlobalToolManager(tmp_path / "tools")


class TestInstallPath:
    def test_outside_module_tree(self, manager: GlobalToolManager, tmp_path: Path) -> None:
        ref = PackageRef(uri="https://example.com/tools/protoc", folder=None)
        assert manager.get_install_path(ref) == tmp_path / "tools/example.com_tools_protoc"


@pytest.mark.skipif(os.name == "nt", reason="POSIX 可执行位")
class TestScanAndInstall:
    def test_registers_executables(self, manager: GlobalToolManager, tmp_path: Path) -> None:
        folder = tmp_path / "tools/protoc"
        _exe(folder / "bin/protoc")
        (folder / "README.md").write_text("docs")
        _exe(folder / ".git/hooks/pre-commit")
        _exe(folder / "bin/.hidden")

        names = manager.scan_and_install(folder)

        assert names == ["protoc"]
        assert manager.get_tool_path("protoc") == (folder / "bin/protoc").resolve()
        assert manager.list_tools() == {"protoc": str((folder / "bin/protoc").resolve())}

    def test_windows_suffixes_use_stem(self, manager: GlobalToolManager, tmp_path: Path) -> None:
        folder = tmp_path / "tools/build"
        folder.mkdir(parents=True)
        (folder / "build.bat").write_text("@echo off")
        assert manager.scan_and_install(folder) == ["build"]

    def test_later_install_wins(self, manager: GlobalToolManager, tmp_path: Path) -> None:
        first = _exe(tmp_path / "tools/a/fmt")
        second = _exe(tmp_path / "tools/b/fmt")

        manager.scan_and_install(first.parent)
        manager.scan_and_install(second.parent)

        assert manager.get_tool_path("fmt") == second.resolve()

    def test_missing_file_not_returned(self, manager: GlobalToolManager, tmp_path: Path) -> None:
        tool = _exe(tmp_path / "tools/a/fmt")
        manager.scan_and_install(tool.parent)
        tool.unlink()
        assert manager.get_tool_path("fmt") is None


def test_empty_registry(manager: GlobalToolManager) -> None:
    assert manager.list_tools() == {}
    assert manager.get_tool_path("anything") is None
