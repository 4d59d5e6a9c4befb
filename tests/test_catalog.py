"""Tests for catalog decoding and source selection."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest

from otel_checker.catalog import (
    decode_catalog,
    load_catalog,
    load_dotnet_table,
    load_structured_catalog,
    load_tabular_catalog,
)
from otel_checker.catalog.embedded import SNAPSHOTS, read_snapshot
from otel_checker.catalog.loader import (
    JAVA_SOURCE_URL,
    clause_range,
    iter_table_rows,
    parse_requirement_clauses,
    tilde_upper_bound,
)
from otel_checker.catalog.online import CatalogClient
from otel_checker.config import DEFAULT_CATALOG_URLS, CheckerConfig
from otel_checker.core.matcher import InstrumentationMatcher
from otel_checker.core.models import Dependency, InstrumentationType, TargetStyle
from otel_checker.core.versions import VersionRange
from otel_checker.errors import CatalogLoadError, RangeParseError

STRUCTURED_CATALOG = """\
logback:
  instrumentations:
  - name: logback-appender-1.0
    srcPath: instrumentation/logback/logback-appender-1.0
    target_versions:
      javaagent:
      - ch.qos.logback:logback-classic:[0.9.16,)
      library: ch.qos.logback:logback-classic:[1.3.14,)
  - name: logback-linked
    link: https://example.org/logback
    target_versions:
      JavaAgent:
      - ch.qos.logback:logback-classic:[1.0.0,)
internal:
  instrumentations:
  - name: internal-class-loader
    target_versions:
      javaagent:
      - ch.qos.logback:logback-classic:[0.1,)
"""

PYTHON_TABLE = """\
# Instrumentations
| Instrumentation | Supported Packages | Metrics support |
| --------------- | ------------------ | --------------- |
| [opentelemetry-instrumentation-falcon](./opentelemetry-instrumentation-falcon) | falcon >= 1.4.1, < 5.0.0 | Yes
| [opentelemetry-instrumentation-requests](./opentelemetry-instrumentation-requests) | requests ~= 2.0 | Yes
| [opentelemetry-instrumentation-starlette](./opentelemetry-instrumentation-starlette) | starlette >= 0.13, <0.15 | Yes

| [opentelemetry-instrumentation-psycopg2](./opentelemetry-instrumentation-psycopg2) | psycopg2 >= 2.7.3.1,psycopg2-binary >= 2.7.3.1 | No
| [opentelemetry-instrumentation-logging](./opentelemetry-instrumentation-logging) | logging | No
| [opentelemetry-instrumentation-broken](./opentelemetry-instrumentation-broken) | broken >> 1.0 | No
| plain text | nothing | No
"""

DOTNET_TABLE = """\
## Instrumentations
| ID | Instrumented library | Supported versions | Link |
|----|----------------------|--------------------|------|
| ASPNETCORE | Microsoft.AspNetCore.App | * | https://example.org/aspnetcore |
| NPGSQL | Npgsql | [6.0.0,) | https://example.org/npgsql |
| broken |
"""


class TestStructuredCatalog:
    """Test the YAML catalog format."""

    def test_internal_module_is_removed(self):
        catalog = load_structured_catalog(STRUCTURED_CATALOG, TargetStyle.COORDINATES)
        assert list(catalog.modules) == ["logback"]
        assert "internal-class-loader" not in [i.name for _, i in catalog.iter_instrumentations()]

    def test_link_from_source_path(self):
        catalog = load_structured_catalog(STRUCTURED_CATALOG, TargetStyle.COORDINATES)
        appender, linked = catalog.modules["logback"]
        assert appender.link == JAVA_SOURCE_URL.format(src_path="instrumentation/logback/logback-appender-1.0")
        assert linked.link == "https://example.org/logback"

    def test_kind_keys_and_single_expressions(self):
        catalog = load_structured_catalog(STRUCTURED_CATALOG, TargetStyle.COORDINATES)
        appender, linked = catalog.modules["logback"]
        assert appender.expressions(InstrumentationType.LIBRARY) == ["ch.qos.logback:logback-classic:[1.3.14,)"]
        assert linked.expressions(InstrumentationType.AGENT) == ["ch.qos.logback:logback-classic:[1.0.0,)"]
        assert linked.expressions(InstrumentationType.LIBRARY) == []

    def test_named_style_has_no_derived_link(self):
        catalog = load_structured_catalog(STRUCTURED_CATALOG, TargetStyle.NAMED)
        assert catalog.modules["logback"][0].link == ""

    def test_empty_document(self):
        assert load_structured_catalog("").is_empty

    @pytest.mark.parametrize("text", [
        "logback: [unclosed",
        "- a\n- b\n",
        "logback: plain\n",
        "logback:\n  instrumentations:\n  - target_versions: {}\n",
        "logback:\n  instrumentations:\n  - name: x\n    target_versions:\n      shared: ['(,)']\n",
        "jdbc:\n  instrumentations:\n  - name: jdbc\n    target_versions:\n    - javaagent\n",
        "logback:\n  instrumentations:\n  - name: x\n    target_versions:\n      library: {a: b}\n",
    ])
    def test_invalid_catalog_raises(self, text):
        with pytest.raises(CatalogLoadError):
            load_structured_catalog(text)


class TestRequirementClauses:
    """Test the Python requirement clause grammar."""

    def test_compatible_release_is_next_minor(self):
        version_range = clause_range("~=", "1.4")
        assert str(version_range) == "[1.4,1.5)"
        assert version_range.matches("1.4.9")
        assert not version_range.matches("1.5")

    @pytest.mark.parametrize("version,expected", [("1.4", "1.5"), ("1.4.5", "1.5"), ("0.58", "0.59")])
    def test_tilde_upper_bound(self, version, expected):
        assert tilde_upper_bound(version) == expected

    def test_tilde_needs_minor(self):
        with pytest.raises(RangeParseError):
            tilde_upper_bound("2")

    @pytest.mark.parametrize("operator,expected", [
        ("<", "(,2.0)"),
        ("<=", "(,2.0]"),
        (">=", "[2.0,)"),
        ("==", "[2.0,2.0]"),
    ])
    def test_operators(self, operator, expected):
        assert str(clause_range(operator, "2.0")) == expected

    def test_version_must_start_with_digit(self):
        with pytest.raises(RangeParseError):
            clause_range(">=", "x1")

    def test_clauses_continue_current_name(self):
        ranges = parse_requirement_clauses("falcon >= 1.4.1, < 5.0.0")
        assert ranges == {"falcon": VersionRange("1.4.1", True, "5.0.0", False)}

    def test_glued_operator(self):
        ranges = parse_requirement_clauses("starlette >= 0.13, <0.15")
        assert str(ranges["starlette"]) == "[0.13,0.15)"

    def test_name_switches_and_is_lowercased(self):
        ranges = parse_requirement_clauses("kafka-python >= 2.0, < 3.0,kafka-python-ng >= 2.0, < 3.0,PyMySQL < 2")
        assert list(ranges) == ["kafka-python", "kafka-python-ng", "pymysql"]
        assert str(ranges["pymysql"]) == "(,2)"

    def test_name_alone_means_all_versions(self):
        assert parse_requirement_clauses("logging") == {"logging": VersionRange()}

    def test_later_clause_never_overwrites_bound(self):
        ranges = parse_requirement_clauses("celery >= 4.0, >= 5.0, < 6.0")
        assert str(ranges["celery"]) == "[4.0,6.0)"

    @pytest.mark.parametrize("text", [">= 1.0", "broken >> 1.0", "flask >= latest"])
    def test_invalid_clause_raises(self, text):
        with pytest.raises(RangeParseError):
            parse_requirement_clauses(text)


class TestTabularCatalog:
    """Test the Python README table format."""

    def test_rows_become_instrumentations(self):
        catalog = load_tabular_catalog(PYTHON_TABLE)
        assert list(catalog.modules) == ["falcon", "requests", "starlette", "psycopg2", "logging"]
        assert [i.name for i in catalog.modules["psycopg2"]] == ["psycopg2", "psycopg2-binary"]

    def test_both_kinds_share_range(self):
        falcon = load_tabular_catalog(PYTHON_TABLE).modules["falcon"][0]
        assert falcon.expressions(InstrumentationType.AGENT) == ["[1.4.1,5.0.0)"]
        assert falcon.expressions(InstrumentationType.LIBRARY) == ["[1.4.1,5.0.0)"]
        assert falcon.link.endswith("instrumentation/opentelemetry-instrumentation-falcon")

    def test_bad_rows_are_skipped(self):
        catalog = load_tabular_catalog(PYTHON_TABLE)
        assert len(catalog.issues) == 2
        assert catalog.issues[0].startswith("Skipping catalog line 10 (broken)")
        assert catalog.issues[1].startswith("Skipping catalog line 11")

    def test_header_lines_are_skipped(self):
        rows = list(iter_table_rows("title\nheader\n---\n| a | b |\n\n| c | d |"))
        assert rows == [(4, ["", "a", "b", ""]), (6, ["", "c", "d", ""])]


class TestDotNetTable:
    """Test the .NET Markdown table format."""

    def test_rows(self):
        catalog = load_dotnet_table(DOTNET_TABLE)
        assert list(catalog.modules) == ["ASPNETCORE", "NPGSQL"]
        aspnetcore = catalog.modules["ASPNETCORE"][0]
        assert aspnetcore.name == "Microsoft.AspNetCore.App"
        assert aspnetcore.expressions(InstrumentationType.AGENT) == ["(,)"]
        assert catalog.modules["NPGSQL"][0].link == "https://example.org/npgsql"
        assert len(catalog.issues) == 1


class TestCatalogSources:
    """Test embedded snapshots and remote loading."""

    @pytest.mark.parametrize("language", sorted(SNAPSHOTS))
    def test_embedded_snapshot_decodes(self, language):
        catalog = decode_catalog(language, read_snapshot(language), f"embedded:{language}")
        assert not catalog.is_empty
        assert catalog.issues == []
        assert "internal" not in catalog.modules

    def test_java_snapshot_uses_coordinates(self):
        catalog = load_catalog("java", CheckerConfig(language="java"))
        assert catalog.target_style is TargetStyle.COORDINATES
        assert catalog.source == "embedded:java"

    @pytest.mark.parametrize("name,version,supported", [
        ("requests", "2.0.5", True),
        ("requests", "2.31.0", False),
        ("aiohttp", "3.0.1", True),
        ("aiohttp", "3.9.0", False),
        ("asgiref", "3.0.0", True),
        ("asgiref", "3.7.2", False),
    ])
    def test_python_two_component_tilde_stops_at_next_minor(self, name, version, supported):
        catalog = load_catalog("python", CheckerConfig(language="python"))
        matcher = InstrumentationMatcher(catalog, enable_performance_monitoring=False)
        links = matcher.find_links(Dependency(name=name, version=version), InstrumentationType.AGENT)
        assert bool(links) is supported

    def test_unknown_language(self):
        with pytest.raises(CatalogLoadError):
            read_snapshot("ruby")
        with pytest.raises(CatalogLoadError):
            decode_catalog("ruby", "", "")

    def test_remote_catalog(self):
        fetcher = Mock(return_value=STRUCTURED_CATALOG)
        config = CheckerConfig(language="java", catalog_source="remote", fetch_timeout=5.0)
        catalog = load_catalog("java", config, fetcher=fetcher)
        fetcher.assert_called_once_with(DEFAULT_CATALOG_URLS["java"], 5.0)
        assert catalog.source == DEFAULT_CATALOG_URLS["java"]
        assert list(catalog.modules) == ["logback"]

    def test_remote_markdown_for_dotnet(self):
        fetcher = Mock(return_value=DOTNET_TABLE)
        config = CheckerConfig(language="dotnet", catalog_source="remote")
        config.catalog_urls["dotnet"] = "https://example.org/instrumentations.md"
        catalog = load_catalog("dotnet", config, fetcher=fetcher)
        assert list(catalog.modules) == ["ASPNETCORE", "NPGSQL"]

    def test_remote_without_url_falls_back(self):
        fetcher = Mock()
        config = CheckerConfig(language="js", catalog_source="remote")
        catalog = load_catalog("js", config, fetcher=fetcher)
        fetcher.assert_not_called()
        assert catalog.source == "embedded:js"

    def test_fetch_failure_propagates(self):
        fetcher = Mock(side_effect=CatalogLoadError("Failed to fetch"))
        config = CheckerConfig(language="python", catalog_source="remote")
        with pytest.raises(CatalogLoadError):
            load_catalog("python", config, fetcher=fetcher)


def fake_session(status, body=""):
    """Build a session mock whose ``get`` yields one response."""
    response = Mock(status=status)
    response.text = AsyncMock(return_value=body)
    session = MagicMock(closed=False)
    session.get.return_value.__aenter__.return_value = response
    session.get.return_value.__aexit__.return_value = False
    session.close = AsyncMock()
    return session


class TestCatalogClient:
    """Test the async catalog client."""

    def test_fetch_text(self):
        session = fake_session(200, "body")
        client = CatalogClient(session=session)
        assert asyncio.run(client.fetch_text("https://example.org/catalog.yaml")) == "body"
        session.get.assert_called_once_with("https://example.org/catalog.yaml")

    def test_non_200_raises(self):
        client = CatalogClient(session=fake_session(404))
        with pytest.raises(CatalogLoadError, match="HTTP 404"):
            asyncio.run(client.fetch_text("https://example.org/missing"))

    def test_session_closed_on_exit(self):
        session = fake_session(200)

        async def use_client():
            async with CatalogClient(session=session):
                pass

        asyncio.run(use_client())
        session.close.assert_awaited_once()
