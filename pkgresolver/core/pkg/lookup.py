"""包查询服务 - 从 YAML 注册表解析逻辑 URI

注册表格式:

    packages:
      https://example.com/lib/foo:
        kind: library                # library / template / global-tool
        source: https://git.example.com/foo.git
        downloads:
          Linux: archives/foo-{ref}-linux.tar.gz
          Windows: archives/foo-{ref}-windows.tar.lzma
        archive_types:
          Windows: tar/lzma          # 缺省为 tar/gzip
        refs:
          master: 3f5c0d1e...        # 符号 ref -> commit

注册表中的相对路径以注册表文件所在目录为基准。

ref -> commit 映射另存一份提交缓存 (commits.yml)。
仅在调用方允许时读取缓存，否则以注册表为准并刷新缓存。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pkgresolver.core.exceptions import PackageNotFoundError, ValidationError
from pkgresolver.core.models import ArchiveFormat, PackageKind, ResolvedMetadata
from pkgresolver.utils.yaml_io import load_yaml, update_yaml

if TYPE_CHECKING:
    from pkgresolver.core.protocols import PackageRedirector

logger = logging.getLogger(__name__)

COMMIT_CACHE_FILE = "commits.yml"


def _to_str_map(data: Any, field_name: str, uri: str) -> dict[str, str]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(f"包 {uri} 的 {field_name} 必须是映射")
    return {str(k): str(v) for k, v in data.items()}


class YamlPackageLookup:
    """基于 YAML 注册表的包查询实现"""

    def __init__(
        self,
        registry_path: str | Path,
        cache_dir: str | Path,
        redirector: PackageRedirector | None = None,
    ) -> None:
        self.registry_path = Path(registry_path)
        self.cache_dir = Path(cache_dir)
        self.redirector = redirector
        self._packages: dict[str, dict[str, Any]] | None = None

    @property
    def packages(self) -> dict[str, dict[str, Any]]:
        if self._packages is None:
            self._packages = self._load_registry()
        return self._packages

    def _load_registry(self) -> dict[str, dict[str, Any]]:
        if not self.registry_path.exists():
            logger.warning("包注册表不存在: %s", self.registry_path)
            return {}
        data = load_yaml(self.registry_path)
        packages: dict[str, dict[str, Any]] = {}
        for uri, info in (data.get("packages") or {}).items():
            if info is None:
                continue
            packages[str(uri)] = info
        logger.info("已加载 %d 个包定义", len(packages))
        return packages

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    def lookup(
        self, uri: str, platform: str, use_commit_cache: bool,
    ) -> ResolvedMetadata:
        target = self.redirector.redirect(uri) if self.redirector else uri
        if target != uri:
            logger.info("URI 重定向: %s -> %s", uri, target)

        info = self.packages.get(target)
        if info is None and target != uri:
            info = self.packages.get(uri)
            if info is None:
                # 重定向到注册表之外（通常是本地目录），只能按源码库处理
                return ResolvedMetadata(source_uri=target, kind=PackageKind.LIBRARY)
        if info is None:
            raise PackageNotFoundError(
                f"包 '{uri}' 不在注册表中。可用: {list(self.packages.keys())}"
            )

        try:
            kind = PackageKind(info.get("kind", PackageKind.LIBRARY.value))
        except ValueError as e:
            raise ValidationError(f"包 {uri} 的 kind 无效: {info.get('kind')}") from e

        downloads = {
            p: self._resolve_location(loc)
            for p, loc in _to_str_map(info.get("downloads"), "downloads", uri).items()
        }
        archive_types = _to_str_map(info.get("archive_types"), "archive_types", uri)
        for p in downloads:
            fmt = archive_types.setdefault(p, ArchiveFormat.TAR_GZIP.value)
            if fmt not in {f.value for f in ArchiveFormat}:
                raise ValidationError(f"包 {uri} 平台 {p} 的归档格式无效: {fmt}")

        refs = _to_str_map(info.get("refs"), "refs", uri)
        resolved = self._resolve_commits(target, refs, use_commit_cache)

        source = str(info.get("source") or "")
        if target != uri and not source:
            source = target

        return ResolvedMetadata(
            source_uri=self._resolve_location(source) if source else "",
            kind=kind,
            download_map=downloads,
            archive_type_map=archive_types,
            resolved_hash=resolved,
        )

    def _resolve_location(self, location: str) -> str:
        """注册表中的相对本地路径转为绝对路径，URL 与 folder: 前缀保持不变"""
        if "://" in location or location.startswith("git@"):
            return location
        prefix = ""
        if location.startswith("folder:"):
            prefix, location = "folder:", location[len("folder:"):]
        path = Path(location).expanduser()
        if not path.is_absolute():
            path = (self.registry_path.parent / path).resolve()
        return f"{prefix}{path}"

    # ------------------------------------------------------------------
    # 提交缓存
    # ------------------------------------------------------------------

    @property
    def commit_cache_path(self) -> Path:
        return self.cache_dir / COMMIT_CACHE_FILE

    def _resolve_commits(
        self, uri: str, refs: dict[str, str], use_commit_cache: bool,
    ) -> dict[str, str]:
        cache = load_yaml(self.commit_cache_path)
        if use_commit_cache and uri in cache:
            cached = _to_str_map(cache.get(uri), "commits", uri)
            logger.debug("使用提交缓存: %s", uri)
            return {**refs, **cached}

        if refs:
            def _store(data: dict) -> None:
                data[uri] = dict(refs)

            update_yaml(self.commit_cache_path, _store)
        return dict(refs)
