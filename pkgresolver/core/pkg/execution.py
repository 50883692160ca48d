"""子模块执行 - 在子模块目录中启动子进程重新运行本工具

每个子模块由独立进程解析自己的子树，进程间只通过文件系统和退出码协作。
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from pkgresolver.core.exceptions import ExecutionError
from pkgresolver.utils.shell import CommandExecutor, get_executor

if TYPE_CHECKING:
    from pkgresolver.core.models import ModuleInfo

logger = logging.getLogger(__name__)


class ModuleExecution:
    """通过 CommandExecutor 启动子进程并等待结束"""

    def __init__(
        self,
        executor: CommandExecutor | None = None,
        config_path: str | Path | None = None,
    ) -> None:
        self._executor = executor
        self.config_path = Path(config_path).resolve() if config_path else None

    @property
    def executor(self) -> CommandExecutor:
        return self._executor or get_executor()

    def build_command(self, args: list[str]) -> list[str]:
        cmd = [sys.executable, "-m", "pkgresolver"]
        # 配置文件不存在时也传递，子进程据此得到同一个路径基准
        if self.config_path is not None:
            cmd += ["--config", str(self.config_path)]
        return cmd + list(args)

    def run(self, submodule: ModuleInfo, args: list[str]) -> None:
        cmd = self.build_command(args)
        logger.debug("启动子进程: %s (cwd=%s)", " ".join(cmd), submodule.path)
        result = self.executor.execute(cmd, cwd=str(submodule.path))
        if not result.success:
            detail = f": {result.stderr[:500]}" if result.stderr else ""
            raise ExecutionError(
                f"子模块 {submodule.name} 包解析失败 (rc={result.returncode}){detail}"
            )
