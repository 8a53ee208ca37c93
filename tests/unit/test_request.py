"""Unit tests — fastapi_multitenancy.request.RequestView"""

from __future__ import annotations

from pydantic import ValidationError
import pytest

from fastapi_multitenancy.request import RequestView

pytestmark = pytest.mark.unit


def _scope(
    path: str = "/orders",
    query_string: bytes = b"",
    headers: list[tuple[bytes, bytes]] | None = None,
) -> dict:
    return {
        "type": "http",
        "scheme": "http",
        "method": "GET",
        "path": path,
        "root_path": "",
        "query_string": query_string,
        "headers": headers if headers is not None else [(b"host", b"acme.example.com:8000")],
        "server": ("127.0.0.1", 8000),
    }


class TestBuild:
    def test_strips_port(self):
        assert RequestView.build(host="acme.example.com:8080").host == "acme.example.com"

    def test_ipv6_host_kept_intact(self):
        assert RequestView.build(host="[::1]:8080").host == "[::1]"

    def test_headers_are_case_insensitive(self):
        view = RequestView.build(headers={"X-Tenant": "acme"})
        assert view.header("x-tenant") == "acme"
        assert view.header("X-Missing") is None

    def test_query_accepts_string_or_mapping(self):
        assert RequestView.build(query="tenant=acme").query("tenant") == "acme"
        assert RequestView.build(query={"tenant": "beta"}).query("tenant") == "beta"

    def test_display_url_derived(self):
        view = RequestView.build(host="acme.example.com", path="/x", query="a=1")
        assert view.display_url == "http://acme.example.com/x?a=1"
        assert str(view) == view.display_url

    def test_is_immutable(self):
        view = RequestView.build(host="acme.example.com")
        with pytest.raises(ValidationError):
            view.host = "evil.example.com"  # type: ignore[misc]


class TestFromScope:
    def test_reads_host_path_query_and_headers(self):
        view = RequestView.from_scope(
            _scope(
                path="/tenants/acme",
                query_string=b"tenant=beta",
                headers=[(b"host", b"acme.example.com:8000"), (b"x-tenant", b"gamma")],
            )
        )
        assert view.host == "acme.example.com"
        assert view.path == "/tenants/acme"
        assert view.query("tenant") == "beta"
        assert view.header("X-Tenant") == "gamma"
        assert view.display_url == "http://acme.example.com:8000/tenants/acme?tenant=beta"

    def test_falls_back_to_server_without_host_header(self):
        view = RequestView.from_scope(_scope(headers=[]))
        assert view.host == "127.0.0.1"
