"""磁盘标记文件与目录操作

标记文件是包目录状态的唯一依据:
  - .redirect  UTF-8 文本，一行，指向真正工作副本的绝对路径
  - .pkg       零字节哨兵，表示目录中是已完整解析的二进制包
  - .git       文件或目录，表示目录中是源码检出
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

REDIRECT_MARKER = ".redirect"
PACKAGE_MARKER = ".pkg"
GIT_MARKER = ".git"
GITIGNORE_FILE = ".gitignore"


def has_git(folder: Path) -> bool:
    """.git 可能是目录（普通仓库）也可能是文件（git submodule / worktree）"""
    return (folder / GIT_MARKER).exists()


def has_pkg(folder: Path) -> bool:
    return (folder / PACKAGE_MARKER).is_file()


def write_pkg(folder: Path) -> None:
    (folder / PACKAGE_MARKER).write_bytes(b"")


def write_redirect(folder: Path, target: Path) -> None:
    folder.mkdir(parents=True, exist_ok=True)
    (folder / REDIRECT_MARKER).write_text(
        f"{Path(target).resolve()}\n", encoding="utf-8",
    )


def read_redirect(folder: Path) -> Path | None:
    marker = folder / REDIRECT_MARKER
    if not marker.is_file():
        return None
    text = marker.read_text(encoding="utf-8").strip()
    return Path(text) if text else None


def remove_redirect(folder: Path) -> None:
    """尽力删除过期的 .redirect，失败时忽略"""
    marker = folder / REDIRECT_MARKER
    try:
        marker.unlink(missing_ok=True)
    except OSError as e:
        logger.debug("删除 %s 失败，忽略: %s", marker, e)


def is_empty_dir(folder: Path) -> bool:
    return not any(folder.iterdir())


def _on_rm_error(func, path, exc) -> None:  # noqa: ANN001
    # 只读文件（如 .git/objects 下的对象）先去掉只读位再重试
    try:
        os.chmod(path, stat.S_IWRITE | stat.S_IREAD)
        func(path)
    except OSError:
        logger.debug("删除失败，跳过: %s", path)


def aggressive_delete(folder: Path) -> None:
    """递归删除整个目录（包括只读文件），目录不存在时什么也不做"""
    if folder.is_symlink() or folder.is_file():
        folder.unlink()
        return
    if not folder.exists():
        return
    if sys.version_info >= (3, 12):
        shutil.rmtree(folder, onexc=_on_rm_error)
    else:
        shutil.rmtree(folder, onerror=_on_rm_error)


def mark_ignored(folder: Path) -> None:
    """让版本控制忽略整个包目录的内容"""
    gitignore = folder / GITIGNORE_FILE
    if gitignore.exists():
        return
    folder.mkdir(parents=True, exist_ok=True)
    gitignore.write_text("*\n", encoding="utf-8")
