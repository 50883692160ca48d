"""包缓存 - 提供可解压的源码 / 二进制制品

制品来源:
  - 源码: 本地目录（或 folder: 前缀）直接复制；其余按 Git 仓库 clone 后检出 ref
  - 二进制: 注册表 downloads 中该平台对应的本地归档；
           远程 URL 只查找预先下载到缓存目录中的同名归档，本工具不做网络下载

归档格式:
  - tar/gzip
  - tar/lzma（.lzma 与 .xz 容器均可）
"""

from __future__ import annotations

import logging
import lzma
import re
import shutil
import tarfile
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import unquote, urlparse

from pkgresolver.core.exceptions import DependencyError, ValidationError
from pkgresolver.core.models import ArchiveFormat
from pkgresolver.utils.shell import run_git

if TYPE_CHECKING:
    from pkgresolver.core.protocols import PackageLookup

logger = logging.getLogger(__name__)

_SAFE_REF_RE = re.compile(r"^[a-zA-Z0-9_./@\-]+$")
_UNSAFE_NAME_RE = re.compile(r"[^a-zA-Z0-9_.\-]+")


def safe_name(uri: str) -> str:
    """把 URI 转成可用作目录名的字符串"""
    return _UNSAFE_NAME_RE.sub("_", uri.split("://", 1)[-1]).strip("_") or "package"


# =========================================================================
# 制品
# =========================================================================

class ArchiveArtifact:
    """本地 tar 归档"""

    def __init__(self, path: Path, archive_format: ArchiveFormat) -> None:
        self.path = path
        self.archive_format = archive_format

    def extract_to(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)
        logger.info("解压 %s (%s) -> %s", self.path, self.archive_format.value, path)
        try:
            if self.archive_format == ArchiveFormat.TAR_LZMA:
                with lzma.open(self.path, "rb", format=lzma.FORMAT_AUTO) as raw, \
                        tarfile.open(fileobj=raw, mode="r:") as tf:
                    tf.extractall(path=str(path), filter="data")  # noqa: S202
            else:
                with tarfile.open(self.path, "r:*") as tf:
                    tf.extractall(path=str(path), filter="data")  # noqa: S202
        except (OSError, tarfile.TarError, lzma.LZMAError) as e:
            raise DependencyError(f"解压失败 {self.path}: {e}") from e


class FolderArtifact:
    """本地目录，整棵复制"""

    def __init__(self, path: Path) -> None:
        self.path = path

    def extract_to(self, path: Path) -> None:
        if not self.path.is_dir():
            raise DependencyError(f"源目录不存在: {self.path}")
        logger.info("复制 %s -> %s", self.path, path)
        shutil.copytree(self.path, path, dirs_exist_ok=True)


class GitSourceArtifact:
    """Git 仓库，clone 到目标目录后检出指定 ref"""

    def __init__(self, url: str, git_ref: str) -> None:
        if git_ref and not _SAFE_REF_RE.match(git_ref):
            raise ValidationError(f"ref 包含非法字符: {git_ref}")
        self.url = url
        self.git_ref = git_ref

    def extract_to(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("git clone %s@%s -> %s", self.url, self.git_ref, path)
        r = run_git(["clone", self.url, str(path)], cwd=str(path.parent))
        if not r.success:
            raise DependencyError(
                f"git clone 失败 (rc={r.returncode}): {r.stderr[:300]}"
            )
        if not self.git_ref:
            return
        r = run_git(["checkout", self.git_ref], cwd=str(path))
        if not r.success:
            raise DependencyError(
                f"git checkout {self.git_ref} 失败 (rc={r.returncode}): {r.stderr[:300]}"
            )


# =========================================================================
# 缓存
# =========================================================================

class LocalPackageCache:
    """本地优先的包缓存实现"""

    def __init__(self, lookup: PackageLookup, cache_dir: str | Path) -> None:
        self.lookup = lookup
        self.cache_dir = Path(cache_dir)

    def get_source_package(
        self, uri: str, git_ref: str,
    ) -> FolderArtifact | GitSourceArtifact:
        if uri.startswith("folder:"):
            return FolderArtifact(Path(uri[len("folder:"):]))
        local = self._local_path(uri)
        if local is not None and local.is_dir() and not (local / ".git").exists():
            return FolderArtifact(local)
        return GitSourceArtifact(str(local) if local is not None else uri, git_ref)

    def get_binary_package(
        self, uri: str, git_ref: str, platform: str,
    ) -> ArchiveArtifact | None:
        meta = self.lookup.lookup(uri, platform, True)
        location = meta.download_map.get(platform)
        if not location:
            logger.info("注册表中没有 %s 平台 %s 的二进制包", uri, platform)
            return None

        location = location.replace("{ref}", git_ref).replace("{platform}", platform)
        archive = self._local_path(location)
        if archive is None:
            # 远程地址: 只认预先放入缓存目录的归档
            filename = urlparse(location).path.rstrip("/").split("/")[-1]
            archive = self.cache_dir / "binaries" / safe_name(uri) / git_ref / filename
        if not archive.is_file():
            logger.info("二进制包不可用: %s", archive)
            return None

        fmt = ArchiveFormat(meta.archive_type_map.get(platform, ArchiveFormat.TAR_GZIP.value))
        return ArchiveArtifact(archive, fmt)

    @staticmethod
    def _local_path(location: str) -> Path | None:
        """file:// URL 与普通路径转为 Path；其他 URL 返回 None"""
        parsed = urlparse(location)
        if parsed.scheme == "file":
            return Path(unquote(parsed.path))
        if "://" in location or location.startswith("git@"):
            return None
        return Path(location).expanduser()
