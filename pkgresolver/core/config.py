"""集中配置管理

提供统一的配置入口，支持从 YAML 文件加载 + 编程式覆盖。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from pkgresolver.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "pkgresolver.yml"

# 所有子模块进程共享的目录，相对路径以配置文件所在目录为基准
_ANCHORED_FIELDS = ("registry", "cache_dir", "tools_dir")


@dataclass
class Config:
    """解析器全局配置"""

    # 包注册表与本地缓存
    registry: str = "packages.yml"
    cache_dir: str = ".pkgresolver/cache"

    # 全局工具安装根目录
    tools_dir: str = "~/.pkgresolver/tools"

    # 模板解压用的临时目录（相对当前工作目录）
    staging_dir: str = ".staging"

    # 每个模块目录下的模块描述文件
    module_file: str = "module.yml"

    # 启用的特性；None 表示全部启用
    features: list[str] | None = None

    # URI 重定向: {原 URI: 替换 URI 或本地路径}
    redirects: dict[str, str] = field(default_factory=dict)

    # 自举项目需要的可执行文件；为空时使用当前进程的入口脚本
    self_executable: str = ""

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_FILE) -> Config:
        """从 YAML 文件加载配置，不存在则使用默认值

        registry / cache_dir / tools_dir 的相对路径以配置文件所在目录为基准，
        子模块子进程在自己的目录中运行时仍指向同一份注册表和缓存。
        """
        data = load_yaml(path)
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        cfg.anchor_paths(Path(path).resolve().parent)
        return cfg

    def anchor_paths(self, base: Path) -> None:
        """把共享目录的相对路径转为以 base 为基准的绝对路径"""
        for name in _ANCHORED_FIELDS:
            p = Path(getattr(self, name)).expanduser()
            if not p.is_absolute():
                p = base / p
            setattr(self, name, str(p))

    def to_dict(self) -> dict:
        from dataclasses import asdict
        return asdict(self)


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = DEFAULT_CONFIG_FILE) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
