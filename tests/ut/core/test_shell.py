"""shell.py LocalExecutor 单元测试"""

from __future__ import annotations

import os
import sys

import pytest

from pkgresolver.utils.shell import CommandResult, LocalExecutor, run_git, set_git_executor


class TestLocalExecutor:
    def test_success(self, tmp_path) -> None:
        r = LocalExecutor().execute([sys.executable, "-c", "pass"], cwd=str(tmp_path))
        assert r.success
        assert r.returncode == 0

    def test_failure_returncode(self, tmp_path) -> None:
        r = LocalExecutor().execute(
            [sys.executable, "-c", "raise SystemExit(3)"], cwd=str(tmp_path),
        )
        assert not r.success
        assert r.returncode == 3

    def test_cwd_and_env_passed(self, tmp_path) -> None:
        env = {**os.environ, "MY_TEST_VAR": "42"}
        script = (
            "import os, pathlib;"
            "pathlib.Path('out.txt').write_text(os.environ['MY_TEST_VAR'])"
        )
        r = LocalExecutor().execute([sys.executable, "-c", script], cwd=str(tmp_path), env=env)
        assert r.success
        assert (tmp_path / "out.txt").read_text() == "42"


@pytest.mark.parametrize(("rc", "ok"), [(0, True), (1, False), (-9, False)])
def test_command_result_success(rc: int, ok: bool) -> None:
    assert CommandResult(returncode=rc, stdout="", stderr="").success is ok


class TestCaptureOutput:
    def test_captured(self, tmp_path) -> None:
        r = LocalExecutor(capture_output=True).execute(
            [sys.executable, "-c", "import sys; print('out'); print('err', file=sys.stderr)"],
            cwd=str(tmp_path),
        )
        assert r.stdout.strip() == "out"
        assert r.stderr.strip() == "err"

    def test_inherited_output_not_captured(self, tmp_path) -> None:
        r = LocalExecutor().execute([sys.executable, "-c", "print('out')"], cwd=str(tmp_path))
        assert r.stdout == ""


def test_run_git_uses_git_executor(tmp_path) -> None:
    calls = []

    class _Recorder:
        def execute(self, cmd, *, cwd=".", env=None, timeout=None):  # noqa: ANN001, ANN201
            calls.append((cmd, cwd))
            return CommandResult(returncode=0, stdout="abc\n", stderr="")

    set_git_executor(_Recorder())
    try:
        r = run_git(["rev-parse", "HEAD"], cwd=str(tmp_path))
    finally:
        set_git_executor(LocalExecutor(capture_output=True))

    assert calls == [(["git", "rev-parse", "HEAD"], str(tmp_path))]
    assert r.stdout == "abc\n"
