"""Catalog selection per language target."""

from typing import Callable, Dict, Optional

from ..config import CheckerConfig
from ..core.models import Catalog, TargetStyle
from ..errors import CatalogLoadError
from ..utils.logging import get_logger
from ..utils.performance import benchmark
from .embedded import read_snapshot
from .loader import load_dotnet_table, load_structured_catalog, load_tabular_catalog
from .online import fetch_catalog_text

logger = get_logger("otel_checker.catalog")

Fetcher = Callable[[str, Optional[float]], str]

TARGET_STYLES: Dict[str, TargetStyle] = {
    "java": TargetStyle.COORDINATES,
    "js": TargetStyle.NAMED,
    "dotnet": TargetStyle.NAMED,
    "python": TargetStyle.NAMED,
}


@benchmark
def decode_catalog(language: str, text: str, source: str) -> Catalog:
    """Decode catalog text in the format used for a language.

    Python always uses the README table. .NET accepts either the YAML
    snapshot format or the Markdown table when the source is a ``.md``
    document.

    Raises:
        CatalogLoadError: If the language has no catalog or decoding fails
    """
    if language == "python":
        return load_tabular_catalog(text, source=source)
    if language == "dotnet" and source.endswith(".md"):
        return load_dotnet_table(text, source=source)
    if language not in TARGET_STYLES:
        raise CatalogLoadError(f"No instrumentation catalog for language {language}")
    return load_structured_catalog(text, TARGET_STYLES[language], source=source)


def load_catalog(
    language: str,
    config: CheckerConfig,
    fetcher: Fetcher = fetch_catalog_text,
) -> Catalog:
    """Load the catalog for a language once for the current run.

    Args:
        language: Language target
        config: Run configuration selecting embedded or remote source
        fetcher: Function downloading a URL as text

    Returns:
        Decoded catalog

    Raises:
        CatalogLoadError: If the catalog cannot be fetched or decoded
    """
    if config.catalog_source == "remote":
        url = config.catalog_url(language)
        if url:
            logger.info(f"Loading {language} catalog from {url}")
            return decode_catalog(language, fetcher(url, config.fetch_timeout), url)
        logger.warning(f"No remote catalog URL for {language}, using embedded snapshot")

    logger.info(f"Loading embedded {language} catalog")
    return decode_catalog(language, read_snapshot(language), f"embedded:{language}")
