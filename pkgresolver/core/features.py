"""特性开关

特性集合来自配置文件的 features 列表（未配置时全部启用），
命令行 --features 可覆盖。子模块可在自己的模块文件中声明 features，
父进程据此判断优化项是否适用于该子模块，并把特性列表传递给子进程。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pkgresolver.core.models import ModuleInfo

logger = logging.getLogger(__name__)


class Feature:
    """已知特性名"""

    PACKAGE_MANAGEMENT = "package-management"
    OPTIMIZATION_SKIP_RESOLUTION_ON_NO_PACKAGES_OR_SUBMODULES = (
        "optimization-skip-resolution-on-no-packages-or-submodules"
    )

    ALL = (
        PACKAGE_MANAGEMENT,
        OPTIMIZATION_SKIP_RESOLUTION_ON_NO_PACKAGES_OR_SUBMODULES,
    )


def parse_feature_list(text: str) -> list[str]:
    """解析逗号分隔的特性列表，忽略空项"""
    return [f.strip() for f in text.split(",") if f.strip()]


class FeatureManager:
    """基于显式特性集合的开关实现"""

    def __init__(self, enabled: Iterable[str] | None = None) -> None:
        # None 表示没有显式指定，全部启用
        self._explicit = enabled is not None
        self._enabled = set(enabled) if enabled is not None else set(Feature.ALL)
        unknown = self._enabled - set(Feature.ALL)
        if unknown:
            logger.warning("忽略未知特性: %s", ", ".join(sorted(unknown)))

    @property
    def enabled(self) -> list[str]:
        return sorted(self._enabled & set(Feature.ALL))

    def is_enabled(self, feature: str) -> bool:
        return feature in self._enabled

    def is_enabled_in_submodule(
        self, module: ModuleInfo, submodule: ModuleInfo, feature: str,
    ) -> bool:
        """特性需同时在当前进程和子模块声明中启用"""
        if not self.is_enabled(feature):
            return False
        if submodule.features is None:
            return True
        return feature in submodule.features

    def get_feature_arguments(
        self, module: ModuleInfo, submodule: ModuleInfo,
    ) -> list[str]:
        """传递给子模块子进程的特性参数

        当前进程未显式限定特性、子模块也没有声明时，子进程沿用默认值，无需传参。
        """
        if submodule.features is not None:
            features = [f for f in self.enabled if f in submodule.features]
        elif self._explicit:
            features = self.enabled
        else:
            return []
        return ["--features", ",".join(features)]
