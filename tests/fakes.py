"""解析器外部协作者的内存替身

  FakeLookup     固定返回构造时给定的 ResolvedMetadata，并记录调用参数
  FakeCache      按需返回源码 / 二进制制品，记录每次请求
  FakeArtifact   extract_to() 时把预置的文件写入目标目录
  FakeLocator    返回预置的已有工作副本路径
  FakeInstaller  全局工具安装目录固定在 tmp_path 下
  FakeRunner     记录子模块子进程调用，不真正启动进程
"""

from __future__ import annotations

from pathlib import Path

from pkgresolver.core.features import FeatureManager
from pkgresolver.core.models import ModuleInfo, PackageKind, ResolvedMetadata
from pkgresolver.core.pkg.redirector import UriRedirector
from pkgresolver.core.pkg.resolver import PackageResolver


class FakeArtifact:
    def __init__(self, files: dict[str, bytes | str] | None = None) -> None:
        self.files = files or {}
        self.extracted_to: list[Path] = []

    def extract_to(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)
        for rel, content in self.files.items():
            target = path / rel
            if rel.endswith("/"):
                target.mkdir(parents=True, exist_ok=True)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            data = content.encode("utf-8") if isinstance(content, str) else content
            target.write_bytes(data)
        self.extracted_to.append(path)


class FakeLookup:
    def __init__(self, meta: ResolvedMetadata) -> None:
        self.meta = meta
        self.calls: list[tuple[str, str, bool]] = []

    def lookup(self, uri: str, platform: str, use_commit_cache: bool) -> ResolvedMetadata:
        self.calls.append((uri, platform, use_commit_cache))
        return self.meta


class FakeCache:
    def __init__(
        self,
        source: FakeArtifact | None = None,
        binary: FakeArtifact | None = None,
    ) -> None:
        self.source = source or FakeArtifact({".git/HEAD": "ref: refs/heads/master\n", "src.txt": "source"})
        self.binary = binary
        self.source_calls: list[tuple[str, str]] = []
        self.binary_calls: list[tuple[str, str, str]] = []

    def get_source_package(self, uri: str, git_ref: str) -> FakeArtifact:
        self.source_calls.append((uri, git_ref))
        return self.source

    def get_binary_package(self, uri: str, git_ref: str, platform: str) -> FakeArtifact | None:
        self.binary_calls.append((uri, git_ref, platform))
        return self.binary


class FakeLocator:
    def __init__(self, existing: Path | None = None) -> None:
        self.existing = existing
        self.calls = 0

    def discover_existing_package_path(self, module_path, reference, platform):  # noqa: ANN001, ANN201
        self.calls += 1
        return self.existing


class FakeInstaller:
    def __init__(self, root: Path) -> None:
        self.root = root
        self.scanned: list[Path] = []

    def get_install_path(self, reference) -> Path:  # noqa: ANN001
        return self.root / "tool"

    def scan_and_install(self, tool_folder: Path) -> list[str]:
        self.scanned.append(tool_folder)
        return ["tool"]


class FakeRunner:
    def __init__(self) -> None:
        self.calls: list[tuple[str, list[str]]] = []

    def run(self, submodule: ModuleInfo, args: list[str]) -> None:
        self.calls.append((submodule.name, list(args)))


def make_meta(
    kind: PackageKind = PackageKind.LIBRARY,
    source_uri: str = "https://git.example.com/foo.git",
    **kwargs,
) -> ResolvedMetadata:
    return ResolvedMetadata(source_uri=source_uri, kind=kind, **kwargs)


class ResolverHarness:
    """解析器 + 全部替身的组合，测试中通过属性访问各替身"""

    def __init__(
        self,
        tmp_path: Path,
        meta: ResolvedMetadata | None = None,
        *,
        binary: FakeArtifact | None = None,
        source: FakeArtifact | None = None,
        existing: Path | None = None,
        features: list[str] | None = None,
        self_executable: Path | None = None,
    ) -> None:
        self.root = tmp_path / "module"
        self.root.mkdir(parents=True, exist_ok=True)
        self.lookup = FakeLookup(meta or make_meta())
        self.cache = FakeCache(source=source, binary=binary)
        self.locator = FakeLocator(existing)
        self.installer = FakeInstaller(tmp_path / "tools")
        self.redirector = UriRedirector()
        self.runner = FakeRunner()
        self.resolver = PackageResolver(
            lookup=self.lookup,
            cache=self.cache,
            locator=self.locator,
            tool_installer=self.installer,
            redirector=self.redirector,
            features=FeatureManager(features),
            runner=self.runner,
            work_dir=self.root,
            staging_dir=".staging",
            self_executable=self_executable,
        )
        self.module = ModuleInfo(name="Root", path=self.root)


def snapshot_tree(root: Path) -> dict[str, bytes | None]:
    """目录树快照: 相对路径 -> 文件内容（目录为 None）"""
    result: dict[str, bytes | None] = {}
    for p in sorted(root.rglob("*")):
        rel = p.relative_to(root).as_posix()
        result[rel] = p.read_bytes() if p.is_file() else None
    return result
