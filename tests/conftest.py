"""测试共享 fixture"""

from __future__ import annotations

from pathlib import Path

import pytest

import pkgresolver.core.config as cfgmod
from pkgresolver.core.models import ResolvedMetadata
from pkgresolver.services.container import reset_container
from tests.fakes import ResolverHarness


@pytest.fixture
def harness_factory(tmp_path: Path):
    """构造解析器 + 全部替身，工作目录在 tmp_path/module 下"""
    def _make(meta: ResolvedMetadata | None = None, **kwargs) -> ResolverHarness:
        return ResolverHarness(tmp_path, meta, **kwargs)
    return _make


@pytest.fixture(autouse=True)
def _isolate_globals(monkeypatch: pytest.MonkeyPatch):
    """每个测试使用独立的全局配置与服务容器"""
    monkeypatch.setattr(cfgmod, "_current", None)
    reset_container()
    yield
    reset_container()
