"""Fetch mod documents from GitHub into the document stores and the local cache."""

from __future__ import annotations

import base64
import binascii
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any
from urllib.parse import quote

import httpx

from mod_config_analyzer.configuration.runtime_settings import GitHubSettings

from .cache_writer import (
    is_safe_path_component,
    is_version_cached,
    manifest_version,
    write_cached_version,
    write_latest_manifest,
)
from .document_parsing import DocumentParseError, decode_document_bytes
from .document_stores import (
    MANIFEST,
    METADATA_CONFIG_TYPES,
    MULTI_DOCUMENT_CONFIG_TYPES,
    ConfigTypeDefinition,
    DocumentLayout,
    DocumentStores,
)

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"

_IGNORED_BUILD_DIRECTORIES = ("/bin/debug/", "/bin/release/")
_UNITY_PACKAGES_DIRECTORY = "packages/"


class GitHubFetchError(Exception):
    """Raised when a GitHub request or its content cannot be used."""


@dataclass(frozen=True)
class ModDatabaseEntry:
    """One mod listed in the mod database."""

    unique_name: str
    repo: str | None


@dataclass(frozen=True)
class _ModSource:
    """Repository location of one mod being fetched."""

    unique_name: str
    owner: str
    repo: str
    branch: str
    version: str
    blob_paths: tuple[str, ...]


@dataclass(frozen=True)
class _FetchedDocument:
    """One downloaded document waiting to be cached and stored."""

    definition: ConfigTypeDefinition
    relative_path: str
    document: Any


class GitHubModFetcher:
    """Read the mod database and pull every listed mod's config documents.

    Documents land both in the given ``DocumentStores`` and in the versioned
    cache under ``cache_dir``. Mods whose version is already cached are skipped
    unless ``refresh_cached`` is set. A mod is cached and stored only after all
    of its documents were downloaded, and then replaces whatever the stores held
    for it before.
    """

    def __init__(
        self,
        *,
        github_settings: GitHubSettings,
        cache_dir: Path,
        refresh_cached: bool = False,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._settings = github_settings
        self._cache_dir = cache_dir
        self._refresh_cached = refresh_cached
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(
            base_url=GITHUB_API_URL,
            timeout=github_settings.timeout_seconds,
            headers=_default_headers(github_settings.token),
        )

    def __enter__(self) -> GitHubModFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def fetch_into(self, stores: DocumentStores) -> int:
        """Fetch every allowed mod and return how many mods were stored."""
        logger.info("Fetching mods from GitHub")
        owner, repo = self._settings.mod_database_repo.split("/")
        database = self.get_json_document(owner, repo, self._settings.mod_database_path)
        entries = parse_mod_database(database)
        allow_list = set(self._settings.allow_list)

        fetched = 0
        for entry in entries:
            if allow_list and entry.unique_name not in allow_list:
                continue
            if not entry.repo:
                logger.info("Skipping mod %s with no repo", entry.unique_name)
                continue
            try:
                if self._fetch_mod(entry, stores):
                    fetched += 1
            except (GitHubFetchError, DocumentParseError, OSError, ValueError) as exc:
                logger.warning(
                    "Error processing mod %s from repo %s: %s", entry.unique_name, entry.repo, exc
                )
        logger.info("Fetched %d mods from GitHub", fetched)
        return fetched

    def _fetch_mod(self, entry: ModDatabaseEntry, stores: DocumentStores) -> bool:
        assert entry.repo is not None
        owner, _, repo = entry.repo.partition("/")
        if not owner or not repo:
            raise GitHubFetchError(f"Repository '{entry.repo}' is not of the form owner/repo")
        logger.info("Fetching mod %s from repo %s", entry.unique_name, entry.repo)
        branch = self.get_default_branch(owner, repo)
        blob_paths = self.get_blob_paths(owner, repo, branch)

        manifest_path = find_single_file(
            blob_paths, MANIFEST.source, unique_name=entry.unique_name, repo=entry.repo
        )
        if manifest_path is None:
            logger.info(
                "No %s found for mod %s in repo %s", MANIFEST.source, entry.unique_name, entry.repo
            )
            return False
        manifest = self.get_json_document(owner, repo, manifest_path, ref=branch)
        version = manifest_version(manifest)
        if not self._refresh_cached and is_version_cached(
            self._cache_dir, entry.unique_name, version
        ):
            logger.info("Mod %s version %s is already cached, skipping", entry.unique_name, version)
            return False

        mod = _ModSource(
            unique_name=entry.unique_name,
            owner=owner,
            repo=repo,
            branch=branch,
            version=version,
            blob_paths=tuple(blob_paths),
        )
        documents = [_FetchedDocument(MANIFEST, MANIFEST.source, manifest)]
        for definition in METADATA_CONFIG_TYPES:
            path = find_single_file(
                mod.blob_paths, definition.source, unique_name=mod.unique_name, repo=entry.repo
            )
            document = self._get_optional_document(mod, path) if path else None
            if document is not None:
                documents.append(_FetchedDocument(definition, definition.source, document))
        for definition in MULTI_DOCUMENT_CONFIG_TYPES:
            documents.extend(self._fetch_directory(mod, definition))

        write_cached_version(
            self._cache_dir,
            mod.unique_name,
            mod.version,
            {fetched.relative_path: fetched.document for fetched in documents},
        )
        write_latest_manifest(self._cache_dir, mod.unique_name, manifest)
        stores.drop_entity(mod.unique_name)
        for fetched in documents:
            if fetched.definition.layout is DocumentLayout.SINGLE:
                stores.put_document(fetched.definition, mod.unique_name, fetched.document)
            else:
                stores.put_file_document(
                    fetched.definition, mod.unique_name, fetched.relative_path, fetched.document
                )
        return True

    def _fetch_directory(
        self, mod: _ModSource, definition: ConfigTypeDefinition
    ) -> list[_FetchedDocument]:
        documents = []
        for path in find_directory_files(mod.blob_paths, definition.source):
            relative_path = relative_to_directory(path, definition.source)
            if relative_path is None:
                continue
            document = self._get_optional_document(mod, path)
            if document is not None:
                documents.append(_FetchedDocument(definition, relative_path, document))
        return documents

    def _get_optional_document(self, mod: _ModSource, path: str) -> Any:
        try:
            return self.get_json_document(mod.owner, mod.repo, path, ref=mod.branch)
        except DocumentParseError as exc:
            logger.warning("Ignoring %s/%s/%s: %s", mod.owner, mod.repo, path, exc)
            return None

    def get_default_branch(self, owner: str, repo: str) -> str:
        payload = self._get(f"/repos/{owner}/{repo}")
        branch = payload.get("default_branch") if isinstance(payload, Mapping) else None
        if not isinstance(branch, str) or not branch:
            raise GitHubFetchError(f"No default branch reported for {owner}/{repo}")
        return branch

    def get_blob_paths(self, owner: str, repo: str, ref: str) -> list[str]:
        """Return every file path of the repository tree at ``ref``."""
        payload = self._get(
            f"/repos/{owner}/{repo}/git/trees/{quote(ref, safe='')}", recursive="1"
        )
        tree = payload.get("tree") if isinstance(payload, Mapping) else None
        if not isinstance(tree, list):
            raise GitHubFetchError(f"Failed to get file tree for {owner}/{repo}@{ref}")
        if payload.get("truncated"):
            logger.warning("File tree for %s/%s@%s is truncated", owner, repo, ref)
        return [
            item["path"]
            for item in tree
            if isinstance(item, Mapping)
            and item.get("type") == "blob"
            and isinstance(item.get("path"), str)
        ]

    def get_json_document(
        self, owner: str, repo: str, path: str, *, ref: str | None = None
    ) -> Any:
        """Download one file through the contents API and parse it as JSON5."""
        params = {"ref": ref} if ref else {}
        payload = self._get(f"/repos/{owner}/{repo}/contents/{quote(path)}", **params)
        if not isinstance(payload, Mapping) or "content" not in payload:
            raise GitHubFetchError(f"Content for {owner}/{repo}/{path} is not a file")
        try:
            raw = base64.b64decode(payload["content"])
        except (binascii.Error, TypeError, ValueError) as exc:
            raise GitHubFetchError(
                f"Content for {owner}/{repo}/{path} is not base64: {exc}"
            ) from exc
        return decode_document_bytes(raw, source=f"{owner}/{repo}/{path}")

    def _get(self, url: str, **params: str) -> Any:
        try:
            response = self._http.get(url, params=params or None)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise GitHubFetchError(
                f"GitHub request {url} failed with status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise GitHubFetchError(f"GitHub request {url} failed: {exc}") from exc
        except ValueError as exc:
            raise GitHubFetchError(f"GitHub response for {url} is not JSON: {exc}") from exc


def parse_mod_database(database: Any) -> list[ModDatabaseEntry]:
    """Read the ``mods`` list of the mod database, dropping unusable entries."""
    mods = database.get("mods") if isinstance(database, Mapping) else None
    if not isinstance(mods, list):
        raise GitHubFetchError("Mod database does not contain a 'mods' list")
    entries = []
    for mod in mods:
        if not isinstance(mod, Mapping):
            continue
        unique_name = mod.get("uniqueName")
        if not isinstance(unique_name, str) or not is_safe_path_component(unique_name):
            logger.warning("Skipping mod database entry with invalid uniqueName: %r", unique_name)
            continue
        repo = mod.get("repo")
        entries.append(
            ModDatabaseEntry(
                unique_name=unique_name, repo=repo if isinstance(repo, str) else None
            )
        )
    return entries


def find_single_file(
    blob_paths: Sequence[str], file_name: str, *, unique_name: str, repo: str
) -> str | None:
    """Return the first file called ``file_name`` (case-insensitive), skipping build outputs."""
    lowered_name = file_name.lower()
    candidates = [path for path in blob_paths if PurePosixPath(path).name.lower() == lowered_name]
    if lowered_name == MANIFEST.source:
        # Unity package manifests share the file name
        candidates = [path for path in candidates if _UNITY_PACKAGES_DIRECTORY not in path.lower()]
    candidates = [
        path
        for path in candidates
        if not any(directory in path.lower() for directory in _IGNORED_BUILD_DIRECTORIES)
    ]
    if not candidates:
        return None
    if len(candidates) > 1:
        logger.warning(
            "Multiple %s files found for mod %s in repo %s, using the first one found: %s",
            file_name,
            unique_name,
            repo,
            ", ".join(candidates),
        )
    return candidates[0]


def find_directory_files(blob_paths: Sequence[str], directory_name: str) -> list[str]:
    """Return the ``.json`` files below any directory called ``directory_name``."""
    return [
        path
        for path in blob_paths
        if path.lower().endswith(".json")
        and relative_to_directory(path, directory_name) is not None
    ]


def relative_to_directory(path: str, directory_name: str) -> str | None:
    """Cut ``path`` so it starts at the first directory called ``directory_name``."""
    parts = PurePosixPath(path.replace("\\", "/")).parts
    lowered_directory = directory_name.lower()
    for index, part in enumerate(parts[:-1]):
        if part.lower() == lowered_directory:
            return "/".join(parts[index:])
    return None


def _default_headers(token: str | None) -> dict[str, str]:
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers
