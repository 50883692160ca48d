"""子模块子进程执行单元测试"""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from pkgresolver.core.exceptions import ExecutionError
from pkgresolver.core.models import ModuleInfo
from pkgresolver.core.pkg.execution import ModuleExecution
from pkgresolver.utils.shell import CommandResult, get_executor, set_executor


class RecordingExecutor:
    def __init__(self, returncode: int = 0, stderr: str = "") -> None:
        self.returncode = returncode
        self.stderr = stderr
        self.calls: list[tuple[list[str], str]] = []

    def execute(self, cmd, *, cwd=".", env=None, timeout=None):  # noqa: ANN001, ANN201
        self.calls.append((list(cmd), cwd))
        return CommandResult(returncode=self.returncode, stdout="", stderr=self.stderr)


@pytest.fixture
def submodule(tmp_path: Path) -> ModuleInfo:
    return ModuleInfo(name="Engine", path=tmp_path / "Engine")


class TestModuleExecution:
    def test_command_line(self, submodule: ModuleInfo) -> None:
        executor = RecordingExecutor()
        ModuleExecution(executor).run(submodule, ["resolve", "Linux"])

        assert executor.calls == [
            ([sys.executable, "-m", "pkgresolver", "resolve", "Linux"], str(submodule.path)),
        ]

    def test_config_forwarded_when_present(self, tmp_path: Path, submodule: ModuleInfo) -> None:
        cfg = tmp_path / "pkgresolver.yml"
        cfg.write_text("registry: packages.yml\n")
        cmd = ModuleExecution(RecordingExecutor(), config_path=cfg).build_command(["resolve", "Linux"])
        assert cmd[3:5] == ["--config", str(cfg.resolve())]

    def test_missing_config_still_forwarded(self, tmp_path: Path) -> None:
        cmd = ModuleExecution(RecordingExecutor(), config_path=tmp_path / "none.yml").build_command([])
        assert cmd[3:5] == ["--config", str((tmp_path / "none.yml").resolve())]

    def test_no_config_path(self) -> None:
        assert "--config" not in ModuleExecution(RecordingExecutor()).build_command([])

    def test_failure_raises(self, submodule: ModuleInfo) -> None:
        executor = RecordingExecutor(returncode=2, stderr="boom")
        with pytest.raises(ExecutionError, match=r"Engine.*rc=2.*boom"):
            ModuleExecution(executor).run(submodule, ["resolve", "Linux"])

    def test_default_executor(self, submodule: ModuleInfo) -> None:
        original = get_executor()
        executor = RecordingExecutor()
        set_executor(executor)
        try:
            ModuleExecution().run(submodule, ["resolve", "Linux"])
        finally:
            set_executor(original)
        assert len(executor.calls) == 1


def test_environment_inherited(submodule: ModuleInfo) -> None:
    executor = MagicMock()
    executor.execute.return_value = CommandResult(returncode=0, stdout="", stderr="")

    ModuleExecution(executor).run(submodule, ["resolve", "MacOS"])

    _, kwargs = executor.execute.call_args
    assert kwargs == {"cwd": str(submodule.path)}
