"""服务容器单元测试"""

from __future__ import annotations

from pathlib import Path

from pkgresolver.core.config import Config
from pkgresolver.core.features import Feature
from pkgresolver.core.pkg.resolver import PackageResolver
from pkgresolver.services.container import (
    ServiceContainer,
    get_container,
    reset_container,
    set_container,
)


class TestServiceContainer:
    def test_lazy_singletons(self, tmp_path: Path) -> None:
        c = ServiceContainer(Config(cache_dir=str(tmp_path / "cache")))
        assert c._instances == {}

        resolver = c.resolver

        assert isinstance(resolver, PackageResolver)
        assert c.resolver is resolver
        assert c.cache.lookup is c.lookup
        assert c.lookup.redirector is c.redirector
        assert resolver.redirector is c.redirector

    def test_redirects_from_config(self) -> None:
        c = ServiceContainer(Config(redirects={"https://example.com/a": "/src/a"}))
        assert c.redirector.redirect("https://example.com/a") == "/src/a"

    def test_command_line_features_override_config(self) -> None:
        cfg = Config(features=[Feature.PACKAGE_MANAGEMENT])
        assert not ServiceContainer(cfg).features.is_enabled(
            Feature.OPTIMIZATION_SKIP_RESOLUTION_ON_NO_PACKAGES_OR_SUBMODULES,
        )
        assert not ServiceContainer(cfg, features=[]).features.is_enabled(
            Feature.PACKAGE_MANAGEMENT,
        )

    def test_staging_relative_to_work_dir(self, tmp_path: Path) -> None:
        c = ServiceContainer(Config(staging_dir=".tmpl"), work_dir=tmp_path)
        assert c.resolver.strategies.staging_dir == tmp_path.resolve() / ".tmpl"

    def test_config_path_forwarded_to_runner(self, tmp_path: Path) -> None:
        cfg = tmp_path / "pkgresolver.yml"
        cfg.write_text("{}\n")
        c = ServiceContainer(Config(), config_path=str(cfg))
        assert c.runner.config_path == cfg.resolve()


class TestGlobalContainer:
    def test_set_and_reset(self) -> None:
        first = get_container()
        assert get_container() is first

        custom = ServiceContainer(Config())
        set_container(custom)
        assert get_container() is custom

        reset_container()
        assert get_container() is not custom
