"""Document acquisition exports."""

from .cache_loader import load_document_stores_from_cache
from .cache_writer import (
    DEFAULT_VERSION,
    LATEST_MANIFEST_FILENAME,
    manifest_version,
    write_cached_document,
    write_cached_version,
    write_latest_manifest,
)
from .document_parsing import DocumentParseError, parse_document, read_document
from .document_stores import (
    CONFIG_TYPE_NAMES,
    CONFIG_TYPES,
    ConfigTypeDefinition,
    DocumentLayout,
    DocumentStores,
)
from .github_fetcher import GitHubFetchError, GitHubModFetcher

__all__ = [
    "CONFIG_TYPES",
    "CONFIG_TYPE_NAMES",
    "ConfigTypeDefinition",
    "DocumentLayout",
    "DocumentStores",
    "DocumentParseError",
    "parse_document",
    "read_document",
    "DEFAULT_VERSION",
    "LATEST_MANIFEST_FILENAME",
    "manifest_version",
    "write_cached_document",
    "write_cached_version",
    "write_latest_manifest",
    "load_document_stores_from_cache",
    "GitHubFetchError",
    "GitHubModFetcher",
]
