"""URI 重定向

本地开发时把某个包的 URI 指向本地目录或其他仓库。
重定向规则需要随子模块解析一起传给子进程，形式为:

    --redirect <原 URI>=<目标>
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from pkgresolver.core.exceptions import ValidationError


def parse_redirect(text: str) -> tuple[str, str]:
    """解析 'uri=target'；URI 中可能带 '='，以最后一个 '=' 分割"""
    if "=" not in text:
        raise ValidationError(f"重定向格式应为 uri=target: {text}")
    uri, target = text.rsplit("=", 1)
    uri, target = uri.strip(), target.strip()
    if not uri or not target:
        raise ValidationError(f"重定向格式应为 uri=target: {text}")
    return uri, target


class UriRedirector:
    """基于映射表的 URI 重定向"""

    def __init__(self, redirects: Mapping[str, str] | None = None) -> None:
        self._redirects: dict[str, str] = dict(redirects or {})

    @property
    def redirects(self) -> dict[str, str]:
        return dict(self._redirects)

    def register(self, uri: str, target: str) -> None:
        self._redirects[uri] = target

    def register_all(self, pairs: Iterable[str]) -> None:
        for text in pairs:
            self.register(*parse_redirect(text))

    def redirect(self, uri: str) -> str:
        return self._redirects.get(uri, uri)

    def get_redirection_arguments(self) -> list[str]:
        args: list[str] = []
        for uri, target in self._redirects.items():
            args += ["--redirect", f"{uri}={target}"]
        return args
