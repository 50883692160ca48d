"""CLI - 模块依赖解析命令"""

from __future__ import annotations

import click

from pkgresolver.cli import _svc, handle_errors


def register(group: click.Group) -> None:
    group.add_command(resolve)
    group.add_command(upgrade)


def _load_current_module(path: str):  # noqa: ANN202
    from pkgresolver.core.models import load_module
    return load_module(path, _svc().config.module_file)


@click.command()
@click.argument("platform")
@click.option("--redirect", multiple=True, help="URI 重定向，格式: uri=target（可多次指定）")
@click.option("--module", "module_dir", default=".", help="模块根目录")
@handle_errors
def resolve(platform: str, redirect: tuple[str, ...], module_dir: str) -> None:
    """解析当前模块及其子模块的全部依赖包"""
    svc = _svc()
    svc.redirector.register_all(redirect)
    svc.resolver.resolve_all(_load_current_module(module_dir), platform)


@click.command()
@click.argument("platform")
@click.option("--redirect", multiple=True, help="URI 重定向，格式: uri=target（可多次指定）")
@click.option("--module", "module_dir", default=".", help="模块根目录")
@handle_errors
def upgrade(platform: str, redirect: tuple[str, ...], module_dir: str) -> None:
    """强制升级当前模块的全部依赖包到最新 commit"""
    svc = _svc()
    svc.redirector.register_all(redirect)
    svc.resolver.upgrade_all(_load_current_module(module_dir), platform)
