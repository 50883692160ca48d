"""服务容器 - 统一装配解析器及其协作者

同一容器内的实例共享状态（重定向表、注册表缓存等）。
CLI 通过 get_container() 获取解析器，而非直接构造。

依赖关系图（→ 表示依赖）:
  resolver → lookup, cache, locator, tools, redirector, features, runner
  lookup   → redirector
  cache    → lookup

用法:
    container = ServiceContainer()
    resolver = container.resolver          # 懒加载

    cfg = Config.from_file("pkgresolver.yml")
    container = ServiceContainer(config=cfg, features=["package-management"])
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pkgresolver.core.config import Config
    from pkgresolver.core.features import FeatureManager
    from pkgresolver.core.pkg.cache import LocalPackageCache
    from pkgresolver.core.pkg.execution import ModuleExecution
    from pkgresolver.core.pkg.locator import AncestorPackageLocator
    from pkgresolver.core.pkg.lookup import YamlPackageLookup
    from pkgresolver.core.pkg.redirector import UriRedirector
    from pkgresolver.core.pkg.resolver import PackageResolver
    from pkgresolver.core.pkg.tools import GlobalToolManager

logger = logging.getLogger(__name__)


class ServiceContainer:
    """懒加载服务容器

    参数:
        config: 显式配置；不提供时使用全局 get_config()
        features: 覆盖配置中的特性列表（来自命令行 --features）
        config_path: 配置文件路径，传递给子模块子进程
        work_dir: 工作目录，模板展开与相对路径以此为基准
    """

    def __init__(
        self,
        config: Config | None = None,
        *,
        features: list[str] | None = None,
        config_path: str | None = None,
        work_dir: str | Path = ".",
    ) -> None:
        self._instances: dict[str, object] = {}
        if config is None:
            from pkgresolver.core.config import get_config
            config = get_config()
        self._config = config
        self._features = features
        self._config_path = config_path
        self._work_dir = Path(work_dir)

    @property
    def config(self) -> Config:
        return self._config

    @property
    def redirector(self) -> UriRedirector:
        if "redirector" not in self._instances:
            from pkgresolver.core.pkg.redirector import UriRedirector
            self._instances["redirector"] = UriRedirector(self._config.redirects)
        return self._instances["redirector"]  # type: ignore[return-value]

    @property
    def features(self) -> FeatureManager:
        if "features" not in self._instances:
            from pkgresolver.core.features import FeatureManager
            enabled = self._features if self._features is not None else self._config.features
            self._instances["features"] = FeatureManager(enabled)
        return self._instances["features"]  # type: ignore[return-value]

    @property
    def lookup(self) -> YamlPackageLookup:
        if "lookup" not in self._instances:
            from pkgresolver.core.pkg.lookup import YamlPackageLookup
            self._instances["lookup"] = YamlPackageLookup(
                registry_path=self._config.registry,
                cache_dir=self._config.cache_dir,
                redirector=self.redirector,
            )
        return self._instances["lookup"]  # type: ignore[return-value]

    @property
    def cache(self) -> LocalPackageCache:
        if "cache" not in self._instances:
            from pkgresolver.core.pkg.cache import LocalPackageCache
            self._instances["cache"] = LocalPackageCache(
                lookup=self.lookup,
                cache_dir=self._config.cache_dir,
            )
        return self._instances["cache"]  # type: ignore[return-value]

    @property
    def locator(self) -> AncestorPackageLocator:
        if "locator" not in self._instances:
            from pkgresolver.core.pkg.locator import AncestorPackageLocator
            self._instances["locator"] = AncestorPackageLocator()
        return self._instances["locator"]  # type: ignore[return-value]

    @property
    def tools(self) -> GlobalToolManager:
        if "tools" not in self._instances:
            from pkgresolver.core.pkg.tools import GlobalToolManager
            self._instances["tools"] = GlobalToolManager(self._config.tools_dir)
        return self._instances["tools"]  # type: ignore[return-value]

    @property
    def runner(self) -> ModuleExecution:
        if "runner" not in self._instances:
            from pkgresolver.core.pkg.execution import ModuleExecution
            self._instances["runner"] = ModuleExecution(config_path=self._config_path)
        return self._instances["runner"]  # type: ignore[return-value]

    @property
    def resolver(self) -> PackageResolver:
        if "resolver" not in self._instances:
            from pkgresolver.core.pkg.resolver import PackageResolver
            self._instances["resolver"] = PackageResolver(
                lookup=self.lookup,
                cache=self.cache,
                locator=self.locator,
                tool_installer=self.tools,
                redirector=self.redirector,
                features=self.features,
                runner=self.runner,
                work_dir=self._work_dir,
                staging_dir=self._config.staging_dir,
                self_executable=self._config.self_executable or None,
            )
        return self._instances["resolver"]  # type: ignore[return-value]


# ---- 全局单例 ----

_global: ServiceContainer | None = None
_global_lock = threading.Lock()


def get_container() -> ServiceContainer:
    """获取全局 ServiceContainer 单例"""
    global _global  # noqa: PLW0603
    if _global is not None:
        return _global
    with _global_lock:
        if _global is None:
            _global = ServiceContainer()
        return _global


def set_container(container: ServiceContainer) -> None:
    """CLI 入口按命令行参数装配好容器后注册为全局单例"""
    global _global  # noqa: PLW0603
    with _global_lock:
        _global = container


def reset_container() -> None:
    """重置全局容器（仅用于测试）"""
    global _global  # noqa: PLW0603
    with _global_lock:
        _global = None
