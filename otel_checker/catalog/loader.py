"""Decoders for the structured (YAML) and tabular (Markdown) catalog formats."""

import re
from typing import Any, Dict, Iterator, List, Optional, Tuple

import yaml

from ..core.models import Catalog, Instrumentation, InstrumentationType, TargetStyle
from ..core.versions import VersionRange
from ..errors import CatalogLoadError, RangeParseError
from ..utils.logging import get_logger

logger = get_logger("otel_checker.catalog")

# Test-only instrumentations live here and must never match
INTERNAL_MODULE = "internal"

TABLE_HEADER_LINES = 3

JAVA_SOURCE_URL = "https://github.com/open-telemetry/opentelemetry-java-instrumentation/tree/main/{src_path}"
PYTHON_SOURCE_URL = (
    "https://github.com/open-telemetry/opentelemetry-python-contrib/tree/main/"
    "instrumentation/opentelemetry-instrumentation-{name}"
)
PYTHON_LINK_PATTERN = re.compile(r"\[opentelemetry-instrumentation-(.*)]")

# Operator glued to or separated from its version: "< 0.15", "<0.15", ">= 2.0"
CLAUSE_PATTERN = re.compile(r"^(?P<op><=|>=|~=|==|<)\s*(?P<version>\S+)$")


def load_structured_catalog(
    text: str,
    target_style: TargetStyle = TargetStyle.NAMED,
    source: str = "",
) -> Catalog:
    """Decode a YAML catalog keyed by module name.

    Each module holds ``instrumentations``, each with a ``name``, optional
    ``srcPath``/``link`` and ``target_versions`` mapping a kind key
    (``javaagent``, ``library``, case-insensitive) to range expressions.

    Args:
        text: YAML document
        target_style: How entries identify their target library
        source: Description of where the text came from

    Returns:
        Catalog without the ``internal`` module

    Raises:
        CatalogLoadError: If the document is not a valid catalog
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise CatalogLoadError(f"Invalid catalog YAML: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise CatalogLoadError("Catalog must be a mapping of module names")

    catalog = Catalog(target_style=target_style, source=source)
    for module_name, module in data.items():
        if not isinstance(module, dict):
            raise CatalogLoadError(f"Module {module_name} must be a mapping")
        entries = module.get("instrumentations") or []
        if not isinstance(entries, list):
            raise CatalogLoadError(f"Instrumentations of module {module_name} must be a list")
        catalog.modules[str(module_name)] = [
            _decode_instrumentation(str(module_name), entry, target_style) for entry in entries
        ]

    catalog.modules.pop(INTERNAL_MODULE, None)
    logger.debug(f"Loaded {len(catalog)} instrumentations from {source or 'catalog'}")
    return catalog


def _decode_instrumentation(module_name: str, entry: Any, target_style: TargetStyle) -> Instrumentation:
    if not isinstance(entry, dict) or not entry.get("name"):
        raise CatalogLoadError(f"Instrumentation in module {module_name} has no name")

    target_versions: Dict[InstrumentationType, List[str]] = {}
    declared = entry.get("target_versions") or {}
    if not isinstance(declared, dict):
        raise CatalogLoadError(f"target_versions of {entry['name']} in module {module_name} must be a mapping")
    for key, expressions in declared.items():
        try:
            kind = InstrumentationType.from_key(key)
        except ValueError as e:
            raise CatalogLoadError(f"Module {module_name}: {e}") from e
        if isinstance(expressions, str):
            expressions = [expressions]
        elif expressions is None:
            expressions = []
        elif not isinstance(expressions, list):
            raise CatalogLoadError(f"{key} ranges of {entry['name']} in module {module_name} must be a list")
        target_versions.setdefault(kind, []).extend(str(expression) for expression in expressions)

    src_path = str(entry.get("srcPath") or "")
    link = str(entry.get("link") or "")
    if not link and target_style is TargetStyle.COORDINATES and src_path:
        link = JAVA_SOURCE_URL.format(src_path=src_path)

    return Instrumentation(
        name=str(entry["name"]),
        link=link,
        src_path=src_path,
        target_versions=target_versions,
    )


def iter_table_rows(text: str, skip: int = TABLE_HEADER_LINES) -> Iterator[Tuple[int, List[str]]]:
    """Yield the cells of each non-empty Markdown table row.

    The first ``skip`` lines (title, header, separator) are dropped
    unconditionally.

    Yields:
        Tuple of 1-based line number and the pipe-separated cells, leading
        and trailing empty cells included
    """
    for number, line in enumerate(text.split("\n")[skip:], start=skip + 1):
        line = line.strip()
        if not line:
            continue
        yield number, [cell.strip() for cell in line.split("|")]


def tilde_upper_bound(version: str) -> str:
    """Exclusive upper bound of a ``~=`` clause: the next minor version.

    ``1.4`` and ``1.4.5`` both give ``1.5``.

    Raises:
        RangeParseError: If the version has no numeric minor component
    """
    parts = version.split(".")
    if len(parts) < 2 or not parts[0].isdigit() or not parts[1].isdigit():
        raise RangeParseError(f"~={version}", "compatible release needs a numeric major.minor version")
    return f"{parts[0]}.{int(parts[1]) + 1}"


def clause_range(operator: str, version: str) -> VersionRange:
    """Translate one requirement clause into a version range.

    Raises:
        RangeParseError: On an unknown operator or unparsable version
    """
    if not version[:1].isdigit():
        raise RangeParseError(f"{operator}{version}", f"invalid version {version}")
    if operator == "<":
        return VersionRange(upper=version)
    if operator == "<=":
        return VersionRange(upper=version, upper_inclusive=True)
    if operator == ">=":
        return VersionRange(lower=version, lower_inclusive=True)
    if operator == "==":
        return VersionRange(version, True, version, True)
    if operator == "~=":
        return VersionRange(lower=version, lower_inclusive=True, upper=tilde_upper_bound(version))
    raise RangeParseError(f"{operator}{version}", f"invalid version range operation '{operator}'")


def parse_requirement_clauses(text: str) -> Dict[str, VersionRange]:
    """Parse a comma-separated clause list such as ``falcon >= 1.4.1, < 5.0.0``.

    A clause starting with a name switches the current dependency; a clause
    without a name continues the previous one. A name alone means all
    versions. Later clauses only fill bounds earlier ones left unset.

    Raises:
        RangeParseError: If a clause cannot be parsed
    """
    ranges: Dict[str, VersionRange] = {}
    name: Optional[str] = None

    for raw_clause in text.split(","):
        clause = raw_clause.strip()
        if not clause:
            continue

        match = CLAUSE_PATTERN.match(clause)
        if match:
            operator, version = match.group("op"), match.group("version")
        else:
            tokens = clause.split(None, 1)
            name = tokens[0].lower()
            if len(tokens) == 1:
                ranges[name] = VersionRange()
                continue
            match = CLAUSE_PATTERN.match(tokens[1].strip())
            if not match:
                raise RangeParseError(clause, "invalid version range statement")
            operator, version = match.group("op"), match.group("version")

        if name is None:
            raise RangeParseError(clause, "version constraint without a dependency name")
        new_range = clause_range(operator, version)
        previous = ranges.get(name)
        ranges[name] = previous.merge(new_range) if previous is not None else new_range

    return ranges


def load_tabular_catalog(text: str, source: str = "") -> Catalog:
    """Decode the Python contrib instrumentation README table.

    Every dependency named in a row becomes an instrumentation of the row's
    module, registered for both kinds. Rows that cannot be parsed are
    skipped and recorded in ``catalog.issues``.

    Args:
        text: Markdown document
        source: Description of where the text came from

    Returns:
        Catalog keyed by instrumentation name
    """
    catalog = Catalog(target_style=TargetStyle.NAMED, source=source)

    for number, cells in iter_table_rows(text):
        if len(cells) < 3:
            catalog.issues.append(f"Skipping catalog line {number}: not a table row")
            continue
        link_match = PYTHON_LINK_PATTERN.search(cells[1])
        if not link_match:
            catalog.issues.append(f"Skipping catalog line {number}: no instrumentation link in {cells[1]!r}")
            continue
        module_name = link_match.group(1)

        try:
            ranges = parse_requirement_clauses(cells[2])
        except RangeParseError as e:
            catalog.issues.append(f"Skipping catalog line {number} ({module_name}): {e}")
            continue

        link = PYTHON_SOURCE_URL.format(name=module_name)
        catalog.modules.setdefault(module_name, []).extend(
            Instrumentation(
                name=dependency,
                link=link,
                target_versions={
                    InstrumentationType.AGENT: [str(version_range)],
                    InstrumentationType.LIBRARY: [str(version_range)],
                },
            )
            for dependency, version_range in ranges.items()
        )

    catalog.modules.pop(INTERNAL_MODULE, None)
    return catalog


def load_dotnet_table(text: str, source: str = "") -> Catalog:
    """Decode the .NET instrumentation Markdown table.

    Rows read ``| id | NuGet package | range or * | link |``; ``*`` means
    all versions. The instrumentation id is the module name and the
    package id is the identity matched against dependencies.
    """
    catalog = Catalog(target_style=TargetStyle.NAMED, source=source)

    for number, cells in iter_table_rows(text):
        # Leading and trailing pipes produce empty outer cells
        if len(cells) < 5 or not cells[1] or not cells[2]:
            catalog.issues.append(f"Skipping catalog line {number}: not an instrumentation row")
            continue
        module_name, package_id, expression, link = cells[1], cells[2], cells[3], cells[4]
        if expression in ("", "*"):
            expression = str(VersionRange())

        catalog.modules.setdefault(module_name, []).append(
            Instrumentation(
                name=package_id,
                link=link,
                target_versions={
                    InstrumentationType.AGENT: [expression],
                    InstrumentationType.LIBRARY: [expression],
                },
            )
        )

    catalog.modules.pop(INTERNAL_MODULE, None)
    return catalog
