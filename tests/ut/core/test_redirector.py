"""URI 重定向单元测试"""

from __future__ import annotations

import pytest

from pkgresolver.core.exceptions import ValidationError
from pkgresolver.core.pkg.redirector import UriRedirector, parse_redirect


class TestParseRedirect:
    def test_splits_on_last_equals(self) -> None:
        assert parse_redirect("https://x.com/p?a=b=/work/p") == ("https://x.com/p?a=b", "/work/p")

    @pytest.mark.parametrize("text", ["no-equals", "=target", "uri=", "  =  "])
    def test_invalid(self, text: str) -> None:
        with pytest.raises(ValidationError):
            parse_redirect(text)


class TestUriRedirector:
    def test_unknown_uri_unchanged(self) -> None:
        assert UriRedirector().redirect("https://example.com/a") == "https://example.com/a"

    def test_register_all_and_arguments(self) -> None:
        r = UriRedirector({"https://example.com/a": "/src/a"})
        r.register_all(["https://example.com/b=/src/b"])

        assert r.redirect("https://example.com/b") == "/src/b"
        assert r.get_redirection_arguments() == [
            "--redirect", "https://example.com/a=/src/a",
            "--redirect", "https://example.com/b=/src/b",
        ]

    def test_arguments_round_trip_through_parser(self) -> None:
        r = UriRedirector({"https://example.com/a": "/src/a"})
        args = r.get_redirection_arguments()
        child = UriRedirector()
        child.register_all(args[1::2])
        assert child.redirects == r.redirects

    def test_redirects_is_a_copy(self) -> None:
        r = UriRedirector()
        r.redirects["x"] = "y"
        assert r.redirects == {}
