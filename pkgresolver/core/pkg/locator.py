"""工作副本定位

沿模块目录向上查找祖先目录中同名的包目录；
祖先中已经有源码检出或二进制包时，当前模块直接重定向过去，避免重复拉取。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pkgresolver.core.pkg import markers

if TYPE_CHECKING:
    from pkgresolver.core.models import PackageRef

logger = logging.getLogger(__name__)


class AncestorPackageLocator:
    """在祖先目录中查找已解析的同名包目录"""

    def __init__(self, stop_at: str | Path | None = None) -> None:
        self.stop_at = Path(stop_at).resolve() if stop_at else None

    def discover_existing_package_path(
        self, module_path: Path, reference: PackageRef, platform: str,
    ) -> Path | None:
        if not reference.folder or Path(reference.folder).is_absolute():
            return None

        for ancestor in Path(module_path).resolve().parents:
            candidate = ancestor / reference.folder
            if candidate.is_dir() and (markers.has_git(candidate) or markers.has_pkg(candidate)):
                logger.debug("在祖先目录找到 %s: %s", reference.uri, candidate)
                return candidate
            if self.stop_at is not None and ancestor == self.stop_at:
                break
        return None


class NullPackageLocator:
    """从不重定向"""

    def discover_existing_package_path(
        self, module_path: Path, reference: PackageRef, platform: str,
    ) -> Path | None:
        return None
