"""五种包解析策略

按 (包类型, 解析方式) 查表分派:

    library     + source  -> resolve_library_source
    library     + binary  -> resolve_library_binary
    template    + source  -> resolve_template_source
    template    + binary  -> resolve_template_binary
    global-tool + binary  -> resolve_global_tool_binary

二进制包不可用时，库包和模板包整体回退到源码方式；全局工具没有源码方式，
只记录警告并跳过。
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from pkgresolver.core.exceptions import TemplateError, ValidationError
from pkgresolver.core.models import PackageKind, PackageRef, ResolveMode
from pkgresolver.core.pkg import markers
from pkgresolver.core.pkg.template import TemplateInstantiator

if TYPE_CHECKING:
    from pkgresolver.core.models import PackageTransformer
    from pkgresolver.core.protocols import GlobalToolInstaller, PackageCache

logger = logging.getLogger(__name__)

RAW_FOLDER_SCHEME = "folder:"

# 解压出的二进制包若包含这两项，说明它本身是一个自举构建项目
SELF_HOSTED_PROJECTS_DIR = Path("Build") / "Projects"
SELF_HOSTED_MODULE_FILE = Path("Build") / "Module.xml"


# =========================================================================
# 尽力而为步骤的结果
# =========================================================================

@dataclass
class BestEffortResult:
    """尽力而为步骤的执行结果

    失败分两类: 可忽略的普通错误，以及 must_propagate 为 True、
    必须继续向上抛出的信号。
    """

    label: str
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def must_propagate(self) -> bool:
        return bool(getattr(self.error, "must_propagate", False))

    def raise_if_fatal(self) -> None:
        if self.error is not None and self.must_propagate:
            raise self.error


def best_effort(label: str, action: Callable[[], None]) -> BestEffortResult:
    try:
        action()
    except Exception as e:  # noqa: BLE001
        return BestEffortResult(label=label, error=e)
    return BestEffortResult(label=label)


# =========================================================================
# 单次解析请求
# =========================================================================

@dataclass
class ResolveRequest:
    """一次策略调用所需的全部上下文"""

    reference: PackageRef
    platform: str
    source_uri: str = ""
    folder: Path | None = None
    template_name: str | None = None
    tool_folder: Path | None = None
    force_upgrade: bool = False
    transformer: PackageTransformer | None = None

    def require_folder(self) -> Path:
        if self.folder is None:
            raise ValidationError(f"包 {self.reference.uri} 缺少目标目录")
        return self.folder

    def require_tool_folder(self) -> Path:
        if self.tool_folder is None:
            raise ValidationError(f"全局工具 {self.reference.uri} 缺少安装目录")
        return self.tool_folder


class ResolutionStrategies:
    """具体的解析策略实现，状态全部落在磁盘标记文件上"""

    def __init__(
        self,
        cache: PackageCache,
        tool_installer: GlobalToolInstaller,
        *,
        work_dir: Path,
        staging_dir: Path,
        self_executable: Path | None = None,
    ) -> None:
        self.cache = cache
        self.tool_installer = tool_installer
        self.work_dir = work_dir
        self.staging_dir = staging_dir
        self.self_executable = self_executable
        self.templates = TemplateInstantiator(staging_dir)

    def dispatch(self, kind: PackageKind, mode: ResolveMode, req: ResolveRequest) -> None:
        kind, mode = PackageKind(kind), ResolveMode(mode)
        strategy = STRATEGY_TABLE.get((kind, mode))
        if strategy is None:
            logger.warning("包类型 %s 不支持 %s 方式解析，跳过: %s", kind.value, mode.value, req.reference.uri)
            return
        strategy(self, req)

    # ------------------------------------------------------------------
    # 库包
    # ------------------------------------------------------------------

    def resolve_library_source(self, req: ResolveRequest) -> None:
        folder = req.require_folder()
        if markers.has_git(folder) and not req.force_upgrade:
            logger.info("源码仓库已存在: %s", folder)
            return

        markers.aggressive_delete(folder)

        logger.info("检出源码 %s@%s -> %s", req.source_uri, req.reference.git_ref, folder)
        package = self.cache.get_source_package(req.source_uri, req.reference.git_ref)
        package.extract_to(folder)
        self._transform(req, folder)

    def resolve_library_binary(self, req: ResolveRequest) -> None:
        folder = req.require_folder()
        platform_folder = folder / req.platform

        if markers.has_pkg(platform_folder) and not req.force_upgrade:
            logger.info("二进制包已存在: %s", platform_folder)
            return

        logger.info("创建并清空 %s", platform_folder)
        if markers.has_pkg(folder):
            # 顶层已是二进制包，只清理本平台目录，保留其他平台
            markers.aggressive_delete(platform_folder)
        else:
            # 顶层目录原先是源码检出，整体清空
            markers.aggressive_delete(folder)

        platform_folder.mkdir(parents=True, exist_ok=True)

        logger.info("标记 %s 为版本控制忽略", folder)
        markers.mark_ignored(folder)

        package = self.cache.get_binary_package(
            req.reference.uri, req.reference.git_ref, req.platform,
        )
        if package is None:
            logger.info("平台 %s 没有二进制包，回退到源码: %s", req.platform, req.reference.uri)
            self.resolve_library_source(req)
            return

        package.extract_to(platform_folder)
        self._transform(req, platform_folder)

        if (platform_folder / SELF_HOSTED_PROJECTS_DIR).is_dir() and \
                (platform_folder / SELF_HOSTED_MODULE_FILE).is_file():
            result = best_effort(
                "复制可执行文件",
                lambda: self._install_self_executable(platform_folder),
            )
            result.raise_if_fatal()
            if not result.ok:
                logger.warning("%s 失败，忽略: %s", result.label, result.error)

        markers.write_pkg(platform_folder)
        markers.write_pkg(folder)
        logger.info("二进制包解析完成: %s", platform_folder)

    def _install_self_executable(self, platform_folder: Path) -> None:
        exe = self.self_executable or Path(sys.argv[0])
        if not exe.is_file():
            raise FileNotFoundError(f"找不到当前可执行文件: {exe}")
        target = platform_folder / exe.name
        shutil.copyfile(exe, target)
        mode = target.stat().st_mode
        os.chmod(target, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    @staticmethod
    def _transform(req: ResolveRequest, folder: Path) -> None:
        if req.transformer is not None:
            logger.debug("应用包内容转换: %s", folder)
            req.transformer(folder)

    # ------------------------------------------------------------------
    # 模板包
    # ------------------------------------------------------------------

    @staticmethod
    def _check_template_folder(req: ResolveRequest) -> str:
        if req.reference.folder != "":
            raise TemplateError("模板包的目标目录必须为空串")
        if not req.template_name:
            raise TemplateError("模板包必须指定项目名")
        return req.template_name

    def resolve_template_source(self, req: ResolveRequest) -> None:
        name = self._check_template_folder(req)

        if req.source_uri.startswith(RAW_FOLDER_SCHEME):
            # 模板就是磁盘上的目录，直接展开
            raw = Path(req.source_uri[len(RAW_FOLDER_SCHEME):])
            self.templates.apply(raw, self.work_dir, name)
            return

        markers.aggressive_delete(self.staging_dir)
        package = self.cache.get_source_package(req.source_uri, req.reference.git_ref)
        package.extract_to(self.staging_dir)
        self.templates.apply(self.staging_dir, self.work_dir, name)

    def resolve_template_binary(self, req: ResolveRequest) -> None:
        name = self._check_template_folder(req)

        markers.aggressive_delete(self.staging_dir)
        self.staging_dir.mkdir(parents=True, exist_ok=True)

        package = self.cache.get_binary_package(
            req.reference.uri, req.reference.git_ref, req.platform,
        )
        if package is None:
            logger.info("平台 %s 没有二进制模板，回退到源码: %s", req.platform, req.reference.uri)
            self.resolve_template_source(req)
            return

        package.extract_to(self.staging_dir)
        self.templates.apply(self.staging_dir, self.work_dir, name)

    # ------------------------------------------------------------------
    # 全局工具
    # ------------------------------------------------------------------

    def resolve_global_tool_binary(self, req: ResolveRequest) -> None:
        tool_folder = req.require_tool_folder()
        if markers.has_pkg(tool_folder) and not req.force_upgrade:
            logger.info("全局工具已安装: %s", tool_folder)
            return

        logger.info("创建并清空 %s", tool_folder)
        markers.aggressive_delete(tool_folder)
        tool_folder.mkdir(parents=True, exist_ok=True)

        logger.info("安装 %s@%s", req.reference.uri, req.reference.git_ref)
        package = self.cache.get_binary_package(
            req.reference.uri, req.reference.git_ref, req.platform,
        )
        if package is None:
            logger.warning("全局工具 %s 没有平台 %s 的二进制包，跳过", req.reference.uri, req.platform)
            return

        package.extract_to(tool_folder)
        markers.write_pkg(tool_folder)

        tools = self.tool_installer.scan_and_install(tool_folder)
        logger.info("全局工具安装完成: %s (%d 个可执行文件)", tool_folder, len(tools))


STRATEGY_TABLE: dict[
    tuple[PackageKind, ResolveMode], Callable[[ResolutionStrategies, ResolveRequest], None]
] = {
    (PackageKind.LIBRARY, ResolveMode.SOURCE): ResolutionStrategies.resolve_library_source,
    (PackageKind.LIBRARY, ResolveMode.BINARY): ResolutionStrategies.resolve_library_binary,
    (PackageKind.TEMPLATE, ResolveMode.SOURCE): ResolutionStrategies.resolve_template_source,
    (PackageKind.TEMPLATE, ResolveMode.BINARY): ResolutionStrategies.resolve_template_binary,
    (PackageKind.GLOBAL_TOOL, ResolveMode.BINARY): ResolutionStrategies.resolve_global_tool_binary,
}
