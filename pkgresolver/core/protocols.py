"""领域协议定义

集中定义解析器与外部协作者之间的接口契约（Protocol），
解析器只依赖这些抽象，默认实现位于 core/pkg/ 下，测试时可注入替身。

使用 typing.Protocol 而非 ABC，使得现有类无需修改继承关系即可满足协议。
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pkgresolver.core.models import ModuleInfo, PackageRef, ResolvedMetadata


# =========================================================================
# 包查询 / 缓存
# =========================================================================

class Artifact(Protocol):
    """可解压的包制品"""

    def extract_to(self, path: Path) -> None:
        """把制品内容解压到目标目录（目录不存在时自动创建）"""
        ...


class PackageLookup(Protocol):
    """逻辑 URI → 具体来源、包类型、各平台下载信息"""

    def lookup(
        self, uri: str, platform: str, use_commit_cache: bool,
    ) -> ResolvedMetadata:
        ...


class PackageCache(Protocol):
    """按 URI + ref 提供源码或二进制制品"""

    def get_source_package(self, uri: str, git_ref: str) -> Artifact:
        ...

    def get_binary_package(
        self, uri: str, git_ref: str, platform: str,
    ) -> Artifact | None:
        """返回二进制制品；该平台没有二进制包时返回 None"""
        ...


# =========================================================================
# 工作副本定位 / 重定向
# =========================================================================

class PackageLocator(Protocol):
    """查找包引用在构建树其他位置是否已有工作副本"""

    def discover_existing_package_path(
        self, module_path: Path, reference: PackageRef, platform: str,
    ) -> Path | None:
        ...


class PackageRedirector(Protocol):
    """URI 重定向，以及传递给子进程的重定向参数"""

    def redirect(self, uri: str) -> str:
        ...

    def get_redirection_arguments(self) -> list[str]:
        ...


# =========================================================================
# 全局工具
# =========================================================================

class GlobalToolInstaller(Protocol):
    """全局工具包的安装目录计算与可执行文件登记"""

    def get_install_path(self, reference: PackageRef) -> Path:
        ...

    def scan_and_install(self, tool_folder: Path) -> list[str]:
        """扫描安装目录并登记其中的可执行文件，返回登记的工具名"""
        ...


# =========================================================================
# 特性开关 / 子模块执行
# =========================================================================

class FeatureGate(Protocol):
    """整体功能与子模块优化项的开关"""

    def is_enabled(self, feature: str) -> bool:
        ...

    def is_enabled_in_submodule(
        self, module: ModuleInfo, submodule: ModuleInfo, feature: str,
    ) -> bool:
        ...

    def get_feature_arguments(
        self, module: ModuleInfo, submodule: ModuleInfo,
    ) -> list[str]:
        ...


class SubmoduleRunner(Protocol):
    """启动子进程在子模块目录中重新执行本工具，并等待其结束"""

    def run(self, submodule: ModuleInfo, args: list[str]) -> None:
        ...
