"""Catalog snapshots shipped inside the package."""

from importlib import resources

from ..errors import CatalogLoadError

DATA_PACKAGE = "otel_checker.data"

SNAPSHOTS = {
    "java": "java-instrumentation-list.yaml",
    "js": "js-supported-libraries.yaml",
    "dotnet": "dotnet-instrumentations.yaml",
    "python": "python-instrumentation-readme.md",
}


def read_snapshot(language: str) -> str:
    """Return the embedded catalog text for a language.

    Raises:
        CatalogLoadError: If no snapshot exists or it cannot be read
    """
    file_name = SNAPSHOTS.get(language)
    if file_name is None:
        raise CatalogLoadError(f"No embedded catalog for language {language}")
    try:
        return resources.files(DATA_PACKAGE).joinpath(file_name).read_text(encoding="utf-8")
    except (OSError, ModuleNotFoundError) as e:
        raise CatalogLoadError(f"Could not read embedded catalog {file_name}: {e}") from e
