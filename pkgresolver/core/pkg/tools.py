"""全局工具管理

全局工具安装在 <tools_dir>/<包名>/ 下，与任何模块目录无关。
安装后扫描目录树，把其中的可执行文件登记到 <tools_dir>/tools.yml，
供 get_tool_path() 按名称查找。
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from pkgresolver.core.pkg.cache import safe_name
from pkgresolver.core.pkg.markers import GIT_MARKER
from pkgresolver.utils.yaml_io import load_yaml, update_yaml

if TYPE_CHECKING:
    from pkgresolver.core.models import PackageRef

logger = logging.getLogger(__name__)

TOOL_REGISTRY_FILE = "tools.yml"

_EXECUTABLE_SUFFIXES = (".exe", ".bat", ".cmd")


def _is_executable(path: Path) -> bool:
    if path.suffix.lower() in _EXECUTABLE_SUFFIXES:
        return True
    return os.name != "nt" and os.access(path, os.X_OK)


class GlobalToolManager:
    """全局工具安装目录与可执行文件登记表"""

    def __init__(self, tools_dir: str | Path) -> None:
        self.tools_dir = Path(tools_dir).expanduser()

    @property
    def registry_path(self) -> Path:
        return self.tools_dir / TOOL_REGISTRY_FILE

    def get_install_path(self, reference: PackageRef) -> Path:
        return self.tools_dir / safe_name(reference.uri)

    def scan_and_install(self, tool_folder: Path) -> list[str]:
        """扫描安装目录，登记全部可执行文件，返回工具名列表

        同名工具以后安装的为准。
        """
        found: dict[str, str] = {}
        for root, dirs, files in os.walk(tool_folder):
            dirs[:] = sorted(d for d in dirs if d != GIT_MARKER)
            for name in sorted(files):
                path = Path(root) / name
                if name.startswith(".") or not _is_executable(path):
                    continue
                tool = path.stem if path.suffix.lower() in _EXECUTABLE_SUFFIXES else name
                found.setdefault(tool, str(path.resolve()))

        def _register(registry: dict) -> None:
            tools = registry.setdefault("tools", {})
            for tool, path in found.items():
                if tool in tools and tools[tool] != path:
                    logger.info("全局工具 %s 被覆盖: %s -> %s", tool, tools[tool], path)
                tools[tool] = path

        update_yaml(self.registry_path, _register)

        for tool in found:
            logger.info("已登记全局工具: %s", tool)
        return sorted(found)

    def get_tool_path(self, name: str) -> Path | None:
        tools = load_yaml(self.registry_path).get("tools") or {}
        path = tools.get(name)
        if path and Path(path).is_file():
            return Path(path)
        return None

    def list_tools(self) -> dict[str, str]:
        return dict(load_yaml(self.registry_path).get("tools") or {})
