"""CLI - 模板展开与全局工具命令"""

from __future__ import annotations

import platform as _platform

import click

from pkgresolver.cli import _svc, handle_errors
from pkgresolver.core.models import PackageRef


def register(group: click.Group) -> None:
    group.add_command(start)
    group.add_command(install)
    group.add_command(list_tools)


def default_platform() -> str:
    """当前主机对应的平台名"""
    return {
        "Windows": "Windows",
        "Darwin": "MacOS",
    }.get(_platform.system(), "Linux")


@click.command()
@click.argument("uri")
@click.argument("name")
@click.option("--platform", default=None, help="目标平台（默认当前主机）")
@click.option("--ref", default="master", help="模板的 Git ref")
@click.option("--source/--binary", "source", default=None, help="强制源码 / 二进制方式")
@handle_errors
def start(uri: str, name: str, platform: str | None, ref: str, source: bool | None) -> None:
    """用模板包在当前目录创建新项目"""
    reference = PackageRef(uri=uri, folder="", git_ref=ref)
    _svc().resolver.resolve(
        None, reference, platform or default_platform(),
        template_name=name, source=source,
    )
    click.echo(f"已从模板创建项目: {name}")


@click.command()
@click.argument("uri")
@click.option("--platform", default=None, help="目标平台（默认当前主机）")
@click.option("--ref", default="master", help="工具的 Git ref")
@click.option("--upgrade", is_flag=True, help="已安装时强制重新安装")
@handle_errors
def install(uri: str, platform: str | None, ref: str, upgrade: bool) -> None:
    """安装全局工具包"""
    reference = PackageRef(uri=uri, folder=None, git_ref=ref)
    _svc().resolver.resolve(
        None, reference, platform or default_platform(),
        force_upgrade=upgrade,
    )


@click.command(name="tools")
def list_tools() -> None:
    """列出已登记的全局工具"""
    tools = _svc().tools.list_tools()
    if not tools:
        click.echo("没有已安装的全局工具。")
        return
    for name, path in sorted(tools.items()):
        click.echo(f"  {name:20s} {path}")
