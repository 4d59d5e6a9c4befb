"""Instrumentation catalog loading."""

from .loader import (
    load_dotnet_table,
    load_structured_catalog,
    load_tabular_catalog,
    parse_requirement_clauses,
)
from .sources import decode_catalog, load_catalog

__all__ = [
    "decode_catalog",
    "load_catalog",
    "load_dotnet_table",
    "load_structured_catalog",
    "load_tabular_catalog",
    "parse_requirement_clauses",
]
