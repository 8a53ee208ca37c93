"""Unit tests — request parsers (domain, header, query, host, path)

Parsers are pure functions of a RequestView: no store, no normalisation.
Verified per parser:
* Happy path — raw candidate returned verbatim
* Not applicable → None
* Invalid constructor arguments → ConfigurationError
"""

from __future__ import annotations

import pytest

from fastapi_multitenancy.core.exceptions import ConfigurationError
from fastapi_multitenancy.parsers import (
    BaseRequestParser,
    DomainParser,
    HeaderParser,
    HostParser,
    PathParser,
    QueryParser,
)
from fastapi_multitenancy.request import RequestView

pytestmark = pytest.mark.unit


def _view(**kwargs) -> RequestView:
    return RequestView.build(**kwargs)


class TestDomainParser:
    def test_returns_host(self):
        assert DomainParser().parse(_view(host="shop.acme.com")) == "shop.acme.com"

    def test_strips_port(self):
        assert DomainParser().parse(_view(host="shop.acme.com:8443")) == "shop.acme.com"

    def test_no_host_returns_none(self):
        assert DomainParser().parse(_view(host="")) is None

    def test_name_is_class_name(self):
        assert DomainParser().name == "DomainParser"


class TestHeaderParser:
    def test_reads_header_value_verbatim(self):
        parser = HeaderParser("X-Tenant")
        assert parser.parse(_view(headers={"X-Tenant": "Acme"})) == "Acme"

    def test_header_name_is_case_insensitive(self):
        parser = HeaderParser("X-TENANT")
        assert parser.parse(_view(headers={"x-tenant": "acme"})) == "acme"

    def test_missing_header_returns_none(self):
        parser = HeaderParser("X-Tenant")
        assert parser.parse(_view(headers={"X-Other": "acme"})) is None

    def test_empty_name_raises(self):
        with pytest.raises(ConfigurationError):
            HeaderParser("")

    def test_repr(self):
        assert repr(HeaderParser("X-Tenant")) == "HeaderParser('X-Tenant')"


class TestQueryParser:
    def test_reads_query_value(self):
        parser = QueryParser("tenant")
        assert parser.parse(_view(query="tenant=beta&page=2")) == "beta"

    def test_first_value_wins(self):
        parser = QueryParser("tenant")
        assert parser.parse(_view(query="tenant=beta&tenant=gamma")) == "beta"

    def test_missing_parameter_returns_none(self):
        parser = QueryParser("tenant")
        assert parser.parse(_view(query="page=2")) is None

    def test_empty_name_raises(self):
        with pytest.raises(ConfigurationError):
            QueryParser("")


class TestHostParser:
    def test_pattern_capture_is_candidate(self):
        parser = HostParser(r"^([a-z0-9-]+)\.tenants\.example\.com$")
        assert parser.parse(_view(host="foo.tenants.example.com")) == "foo"

    def test_match_is_case_insensitive(self):
        parser = HostParser.for_parent(".tenants.example.com")
        assert parser.parse(_view(host="ACME.Tenants.Example.com")) == "ACME"

    def test_non_matching_host_returns_none(self):
        parser = HostParser.for_parent(".tenants.example.com")
        assert parser.parse(_view(host="example.com")) is None

    def test_pattern_without_group_returns_none(self):
        parser = HostParser(r"example\.com$")
        assert parser.parse(_view(host="acme.example.com")) is None

    def test_invalid_pattern_raises(self):
        with pytest.raises(ConfigurationError) as exc_info:
            HostParser("([")
        assert exc_info.value.parameter == "host_pattern"

    def test_for_parent_empty_raises(self):
        with pytest.raises(ConfigurationError):
            HostParser.for_parent("")


class TestPathParser:
    def test_for_parent_extracts_segment(self):
        parser = PathParser.for_parent("/tenants/")
        assert parser.parse(_view(path="/tenants/Acme-Corp/dashboard")) == "Acme-Corp"

    def test_custom_pattern(self):
        parser = PathParser(r"^/t/([^/]+)")
        assert parser.parse(_view(path="/t/acme/orders")) == "acme"

    def test_non_matching_path_returns_none(self):
        parser = PathParser.for_parent("/tenants/")
        assert parser.parse(_view(path="/health")) is None

    def test_invalid_pattern_raises(self):
        with pytest.raises(ConfigurationError) as exc_info:
            PathParser("(")
        assert exc_info.value.parameter == "path_pattern"


class TestCustomParser:
    def test_subclass_participates_by_interface(self):
        class CookieParser(BaseRequestParser):
            def parse(self, request: RequestView) -> str | None:
                return request.header("cookie")

        parser = CookieParser()
        assert parser.name == "CookieParser"
        assert parser.parse(_view(headers={"Cookie": "acme"})) == "acme"

    def test_base_class_is_abstract(self):
        with pytest.raises(TypeError):
            BaseRequestParser()  # type: ignore[abstract]
