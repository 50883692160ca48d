"""核心数据模型

包引用、解析元信息、模块树等数据类集中定义，
其他模块统一从此处导入。
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Callable

# =========================================================================
# 枚举
# =========================================================================


class PackageKind(str, Enum):
    """包类型"""
    LIBRARY = "library"
    TEMPLATE = "template"
    GLOBAL_TOOL = "global-tool"


class ArchiveFormat(str, Enum):
    """二进制包归档格式"""
    TAR_LZMA = "tar/lzma"
    TAR_GZIP = "tar/gzip"


class ResolveMode(str, Enum):
    """解析方式: 源码检出 / 二进制解压"""
    SOURCE = "source"
    BINARY = "binary"


# =========================================================================
# 包引用
# =========================================================================

_COMMIT_RE = re.compile(r"^[0-9a-fA-F]{40}$")


def looks_like_commit(ref: str) -> bool:
    """40 位十六进制串视为完整的 commit hash"""
    return bool(_COMMIT_RE.match(ref))


@dataclass(frozen=True)
class PackageRef:
    """模块声明的单个依赖包引用（不可变）

    folder 为包的目标目录:
      - 普通库包: 相对模块根目录的路径
      - 模板包:   必须为空串，模板展开到当前工作目录
      - 全局工具: None，安装目录由全局工具管理器决定

    解析时符号引用（分支/标签）会被替换成 commit hash，
    通过 with_git_ref() 生成新对象，原对象不变。
    """

    uri: str
    folder: str | None = ""
    git_ref: str = "master"
    is_commit_reference: bool | None = None
    platforms: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        if self.is_commit_reference is None:
            object.__setattr__(
                self, "is_commit_reference", looks_like_commit(self.git_ref),
            )
        if self.platforms is not None and not isinstance(self.platforms, tuple):
            object.__setattr__(self, "platforms", tuple(self.platforms))

    def with_git_ref(self, git_ref: str) -> PackageRef:
        """返回 git_ref 被替换后的新引用"""
        return replace(self, git_ref=git_ref, is_commit_reference=None)

    def is_active_for_platform(self, platform: str) -> bool:
        if not self.platforms:
            return True
        return platform.lower() in (p.lower() for p in self.platforms)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PackageRef:
        if "uri" not in data:
            from pkgresolver.core.exceptions import ValidationError
            raise ValidationError(f"包引用缺少 uri 字段: {data}")
        platforms = data.get("platforms")
        if isinstance(platforms, str):
            platforms = [p.strip() for p in platforms.split(",") if p.strip()]
        return cls(
            uri=data["uri"],
            folder=data.get("folder", ""),
            git_ref=str(data.get("ref", "master")),
            platforms=tuple(platforms) if platforms else None,
        )


# =========================================================================
# 查询结果
# =========================================================================

# 包内容转换钩子: 接收解压目录，原地改写内容
PackageTransformer = Callable[[Path], None]


@dataclass
class ResolvedMetadata:
    """包查询服务针对某个 URI + 平台返回的元信息"""

    source_uri: str
    kind: PackageKind
    download_map: dict[str, str] = field(default_factory=dict)
    archive_type_map: dict[str, str] = field(default_factory=dict)
    resolved_hash: dict[str, str] = field(default_factory=dict)
    transformer: PackageTransformer | None = None


# =========================================================================
# 模块树
# =========================================================================


@dataclass
class ModuleInfo:
    """构建树中的一个模块节点

    packages 为本模块直接声明的包引用，submodules 为子模块。
    仅在进程内存活，不做持久化。
    """

    name: str
    path: Path
    packages: list[PackageRef] = field(default_factory=list)
    submodules: list[ModuleInfo] = field(default_factory=list)
    features: list[str] | None = None
    platforms: tuple[str, ...] | None = None

    def get_submodules(self, platform: str | None = None) -> list[ModuleInfo]:
        """返回对指定平台有效的子模块"""
        if platform is None:
            return list(self.submodules)
        return [
            m for m in self.submodules
            if not m.platforms
            or platform.lower() in (p.lower() for p in m.platforms)
        ]


def load_module(path: str | Path, module_file: str = "module.yml") -> ModuleInfo:
    """从模块目录下的描述文件加载模块树

    文件格式:
        name: MyGame
        packages:
          - uri: https://example.com/lib/foo
            folder: Libraries/Foo
            ref: master
            platforms: [Windows, Linux]
        submodules:
          - Engine
        features: [package-management]

    子模块目录各自带有自己的描述文件，按相同规则递归加载；
    没有描述文件的目录视为一个不声明任何包的空模块。
    """
    from pkgresolver.utils.yaml_io import load_yaml

    root = Path(path).resolve()
    data = load_yaml(root / module_file)

    packages = [PackageRef.from_dict(p) for p in data.get("packages") or []]
    submodules = [
        load_module(root / str(sub), module_file)
        for sub in data.get("submodules") or []
    ]
    features = data.get("features")
    platforms = data.get("platforms")
    return ModuleInfo(
        name=data.get("name") or root.name,
        path=root,
        packages=packages,
        submodules=submodules,
        features=list(features) if features is not None else None,
        platforms=tuple(platforms) if platforms else None,
    )
