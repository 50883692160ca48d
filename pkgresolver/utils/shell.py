"""Shell 命令执行工具 - 统一子进程调用

通过 CommandExecutor 协议抽象子进程执行，方便测试替换。
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


# =========================================================================
# 命令执行结果
# =========================================================================

@dataclass
class CommandResult:
    """命令执行结果（与 subprocess 解耦）"""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


# =========================================================================
# 命令执行器协议
# =========================================================================

class CommandExecutor(Protocol):
    """命令执行器协议 - 抽象子进程调用

    测试时可注入 mock 实现，无需 patch subprocess。
    """

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        """执行命令并等待结束"""
        ...


class LocalExecutor:
    """本地子进程执行器（默认实现）

    capture_output 为 False 时子进程输出直接继承到当前终端，
    子模块解析的日志实时可见；git 等需要读取输出的命令使用 True。
    """

    def __init__(self, capture_output: bool = False) -> None:
        self.capture_output = capture_output

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        r = subprocess.run(
            cmd, cwd=cwd, env=env, check=False, timeout=timeout,
            capture_output=self.capture_output, text=self.capture_output,
        )
        return CommandResult(
            returncode=r.returncode,
            stdout=r.stdout or "",
            stderr=r.stderr or "",
        )


_default_executor: CommandExecutor = LocalExecutor()
_git_executor: CommandExecutor = LocalExecutor(capture_output=True)


def get_executor() -> CommandExecutor:
    """获取全局默认命令执行器"""
    return _default_executor


def set_executor(executor: CommandExecutor) -> None:
    """替换全局默认命令执行器（用于测试）"""
    global _default_executor  # noqa: PLW0603
    _default_executor = executor


def run_git(args: list[str], *, cwd: str = ".", timeout: int | None = None) -> CommandResult:
    """执行 git 子命令并捕获输出，失败时由调用方决定如何处理"""
    cmd = ["git", *args]
    logger.debug("执行: %s (cwd=%s)", " ".join(cmd), cwd)
    return _git_executor.execute(cmd, cwd=cwd, timeout=timeout)


def set_git_executor(executor: CommandExecutor) -> None:
    """替换 git 命令执行器（用于测试）"""
    global _git_executor  # noqa: PLW0603
    _git_executor = executor
