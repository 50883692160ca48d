"""依赖包解析器

对单个包引用的处理顺序:
  1. 重定向: 构建树中已有工作副本时，只写 .redirect 指向它
  2. 查询:   逻辑 URI → 来源、包类型、ref → commit 映射
  3. 改写:   符号 ref 替换为解析出的 commit，生成新的 PackageRef
  4. 校验:   按包类型检查目录状态，推断源码 / 二进制
  5. 分派:   按 (包类型, 解析方式) 调用对应策略

对整个模块: 先解析本模块声明的包，再为每个子模块启动子进程递归解析。

用法:
    from pkgresolver.services.container import get_container

    resolver = get_container().resolver
    resolver.resolve_all(load_module("."), "Linux")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pkgresolver.core.exceptions import TemplateError
from pkgresolver.core.features import Feature
from pkgresolver.core.models import PackageKind, ResolveMode
from pkgresolver.core.pkg import markers
from pkgresolver.core.pkg.strategies import ResolutionStrategies, ResolveRequest

if TYPE_CHECKING:
    from pkgresolver.core.models import ModuleInfo, PackageRef
    from pkgresolver.core.protocols import (
        FeatureGate,
        GlobalToolInstaller,
        PackageCache,
        PackageLocator,
        PackageLookup,
        PackageRedirector,
        SubmoduleRunner,
    )

logger = logging.getLogger(__name__)


class PackageResolver:
    """依赖包解析器 - 编排查询、缓存、定位、全局工具与子模块执行"""

    def __init__(
        self,
        *,
        lookup: PackageLookup,
        cache: PackageCache,
        locator: PackageLocator,
        tool_installer: GlobalToolInstaller,
        redirector: PackageRedirector,
        features: FeatureGate,
        runner: SubmoduleRunner,
        work_dir: str | Path = ".",
        staging_dir: str | Path = ".staging",
        self_executable: str | Path | None = None,
    ) -> None:
        self.lookup = lookup
        self.locator = locator
        self.tool_installer = tool_installer
        self.redirector = redirector
        self.features = features
        self.runner = runner
        self.work_dir = Path(work_dir).resolve()
        staging = Path(staging_dir)
        self.strategies = ResolutionStrategies(
            cache,
            tool_installer,
            work_dir=self.work_dir,
            staging_dir=staging if staging.is_absolute() else self.work_dir / staging,
            self_executable=Path(self_executable) if self_executable else None,
        )

    # ------------------------------------------------------------------
    # 模块树
    # ------------------------------------------------------------------

    def resolve_all(self, module: ModuleInfo, platform: str) -> None:
        """解析模块声明的全部包，然后逐个子模块启动子进程递归解析"""
        if not self.features.is_enabled(Feature.PACKAGE_MANAGEMENT):
            return

        logger.info("开始解析平台 %s 的依赖包: %s", platform, module.path)

        for reference in module.packages:
            if reference.is_active_for_platform(platform):
                logger.info("解析: %s", reference.uri)
                self.resolve(module, reference, platform)
            else:
                logger.info("跳过 %s: 对平台 %s 未启用", reference.uri, platform)

        for submodule in module.get_submodules(platform):
            if not submodule.packages and not submodule.get_submodules(platform):
                if self.features.is_enabled_in_submodule(
                    module, submodule,
                    Feature.OPTIMIZATION_SKIP_RESOLUTION_ON_NO_PACKAGES_OR_SUBMODULES,
                ):
                    logger.info("跳过子模块 %s: 没有包也没有下级子模块", submodule.name)
                    continue

            logger.info("在子模块 %s 中执行包解析", submodule.name)
            args = [
                *self.features.get_feature_arguments(module, submodule),
                "resolve", platform,
                *self.redirector.get_redirection_arguments(),
            ]
            self.runner.run(submodule, args)
            logger.info("子模块 %s 包解析完成", submodule.name)

        logger.info("依赖包解析完成")

    def upgrade_all(self, module: ModuleInfo, platform: str) -> None:
        """强制升级模块声明的全部包，符号 ref 重新解析为最新 commit"""
        if not self.features.is_enabled(Feature.PACKAGE_MANAGEMENT):
            return

        for reference in module.packages:
            if not reference.is_active_for_platform(platform):
                logger.info("跳过 %s: 对平台 %s 未启用", reference.uri, platform)
                continue
            logger.info("升级: %s", reference.uri)
            self.resolve(module, reference, platform, force_upgrade=True)

    # ------------------------------------------------------------------
    # 单个包引用
    # ------------------------------------------------------------------

    def resolve(
        self,
        module: ModuleInfo | None,
        reference: PackageRef,
        platform: str,
        template_name: str | None = None,
        source: bool | None = None,
        force_upgrade: bool = False,
    ) -> None:
        """解析单个包引用，结果只体现在文件系统上

        致命错误抛异常；单个引用层面的问题记录警告后直接返回。
        """
        if not self.features.is_enabled(Feature.PACKAGE_MANAGEMENT):
            return

        folder = self._folder_path(module, reference)

        # ---- 1. 重定向到已有工作副本 ----
        if module is not None and folder is not None:
            existing = self.locator.discover_existing_package_path(
                module.path, reference, platform,
            )
            if existing is not None and Path(existing).is_dir():
                logger.info("发现已有工作副本: %s", existing)
                markers.write_redirect(folder, Path(existing))
                return
            markers.remove_redirect(folder)

        if reference.folder is None:
            logger.info("包引用没有目标目录，按全局工具处理: %s", reference.uri)

        # ---- 2. 查询 ----
        meta = self.lookup.lookup(
            reference.uri,
            platform,
            not force_upgrade and bool(reference.is_commit_reference),
        )

        # ---- 3. 符号 ref → commit ----
        reference = reference.with_git_ref(
            meta.resolved_hash.get(reference.git_ref, reference.git_ref),
        )

        # ---- 4. 按包类型校验 ----
        kind = PackageKind(meta.kind)
        tool_folder: Path | None = None
        if kind == PackageKind.TEMPLATE:
            if template_name is None:
                raise TemplateError(
                    f"模板包 {reference.uri} 不能作为模块依赖声明，"
                    "只能通过 start 命令展开"
                )
        elif kind == PackageKind.LIBRARY:
            if folder is None:
                logger.warning("库包 %s 没有目标目录，跳过", reference.uri)
                return
            folder.mkdir(parents=True, exist_ok=True)
            if not markers.is_empty_dir(folder) \
                    and not markers.has_git(folder) and not markers.has_pkg(folder):
                logger.warning(
                    "包目录 '%s' 已存在且非空，但既没有 .pkg 也没有 .git，"
                    "说明其中的数据不受本工具管理。为避免数据丢失，"
                    "解析时不会修改该目录；若其中缺少所需依赖，后续构建可能失败。",
                    folder,
                )
                return
            if source is None:
                if markers.has_git(folder):
                    logger.info("%s 下存在 Git 仓库，保持源码版本", folder)
                    source = True
                else:
                    logger.info("未指定解析方式且 %s 下没有 .git，请求二进制版本", folder)
                    source = False
        elif kind == PackageKind.GLOBAL_TOOL:
            tool_folder = Path(self.tool_installer.get_install_path(reference))
            source = False

        # ---- 5. 分派 ----
        if source and meta.source_uri.strip():
            mode = ResolveMode.SOURCE
        else:
            mode = ResolveMode.BINARY

        req = ResolveRequest(
            reference=reference,
            platform=platform,
            source_uri=meta.source_uri,
            folder=folder,
            template_name=template_name,
            tool_folder=tool_folder,
            force_upgrade=force_upgrade,
            transformer=meta.transformer,
        )
        self.strategies.dispatch(kind, mode, req)

    def _folder_path(self, module: ModuleInfo | None, reference: PackageRef) -> Path | None:
        """库包目录相对模块根目录；没有模块时相对工作目录"""
        if reference.folder is None:
            return None
        if reference.folder == "":
            return self.work_dir
        base = module.path if module is not None else self.work_dir
        return Path(base) / reference.folder
