"""pkgresolver 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
子模块解析时父进程以如下形式重新调用本入口:

    python -m pkgresolver [--features a,b] resolve <platform> [--redirect uri=target ...]
"""

from __future__ import annotations

import functools
import os
from collections.abc import Callable
from typing import Any

import click

from pkgresolver import __version__
from pkgresolver.core.exceptions import PkgResolverError
from pkgresolver.services.container import ServiceContainer, get_container, set_container
from pkgresolver.utils.logger import setup_logging_from_env

CONFIG_ENV = "PKGRESOLVER_CONFIG"


def _svc() -> ServiceContainer:
    """获取全局服务容器的快捷方式"""
    return get_container()


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """业务异常转为 click 错误提示，退出码为 1"""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except PkgResolverError as e:
            raise click.ClickException(f"[{e.code}] {e}") from e

    return wrapper


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config", "config_path",
    default=lambda: os.getenv(CONFIG_ENV, "pkgresolver.yml"),
    help="配置文件路径",
)
@click.option("--features", default=None, help="启用的特性，逗号分隔（覆盖配置）")
def main(config_path: str, features: str | None) -> None:
    """pkgresolver - 模块化构建树的依赖包解析器"""
    from pkgresolver.core.config import init_config
    from pkgresolver.core.features import parse_feature_list

    setup_logging_from_env()
    cfg = init_config(config_path)
    set_container(ServiceContainer(
        cfg,
        features=parse_feature_list(features) if features is not None else None,
        config_path=config_path,
    ))


# 注册各领域子命令
from pkgresolver.cli.cmd_resolve import register as _reg_resolve  # noqa: E402
from pkgresolver.cli.cmd_packages import register as _reg_packages  # noqa: E402

_reg_resolve(main)
_reg_packages(main)
