"""GitHub mod fetcher tests."""

from __future__ import annotations

import base64
import json
import logging
from collections.abc import Iterator
from pathlib import Path

import httpx
import pytest
import respx
from mod_config_analyzer.configuration import GitHubSettings
from mod_config_analyzer.document_acquisition import (
    DocumentStores,
    GitHubFetchError,
    load_document_stores_from_cache,
    write_cached_document,
    write_latest_manifest,
)
from mod_config_analyzer.document_acquisition.document_stores import (
    ADDON_MANIFEST,
    DEFAULT_CONFIG,
    MANIFEST,
    PLANETS,
    SYSTEMS,
    TITLE_SCREEN,
)
from mod_config_analyzer.document_acquisition.github_fetcher import (
    GITHUB_API_URL,
    GitHubModFetcher,
    ModDatabaseEntry,
    find_directory_files,
    find_single_file,
    parse_mod_database,
    relative_to_directory,
)

NH_TREE = [
    {"path": "NewHorizons", "type": "tree"},
    {"path": "NewHorizons/manifest.json", "type": "blob"},
    {"path": "NewHorizons/Packages/manifest.json", "type": "blob"},
    {"path": "NewHorizons/bin/Debug/default-config.json", "type": "blob"},
    {"path": "NewHorizons/default-config.json", "type": "blob"},
    {"path": "NewHorizons/title-screen.json", "type": "blob"},
    {"path": "NewHorizons/planets/earth.json", "type": "blob"},
    {"path": "NewHorizons/planets/readme.md", "type": "blob"},
    {"path": "NewHorizons/systems/sol.json", "type": "blob"},
]


def _settings(**overrides: object) -> GitHubSettings:
    values: dict[str, object] = {
        "token": None,
        "mod_database_repo": "ow-mods/ow-mod-db",
        "mod_database_path": "mods.json",
        "allow_list": (),
        "timeout_seconds": 5,
    }
    values.update(overrides)
    return GitHubSettings(**values)  # type: ignore[arg-type]


def _content(document: object) -> dict[str, str]:
    raw = document if isinstance(document, str) else json.dumps(document)
    return {"encoding": "base64", "content": base64.b64encode(raw.encode("utf-8")).decode()}


def _mock_mod_database(router: respx.MockRouter, mods: list[dict[str, object]]) -> None:
    router.get("/repos/ow-mods/ow-mod-db/contents/mods.json").respond(
        200, json=_content({"mods": mods})
    )


def _mock_new_horizons(
    router: respx.MockRouter, *, version: str = "1.0.0", failing_path: str | None = None
) -> None:
    router.get("/repos/xen-42/nh").respond(200, json={"default_branch": "main"})
    router.get("/repos/xen-42/nh/git/trees/main").respond(
        200, json={"tree": NH_TREE, "truncated": False}
    )
    files = {
        "NewHorizons/manifest.json": {"name": "New Horizons", "version": version},
        "NewHorizons/default-config.json": {"settings": {"debug": False}},
        "NewHorizons/title-screen.json": "{ /* comment */ menuTextTint: {r: 1}, }",
        "NewHorizons/planets/earth.json": {"name": "Earth"},
        "NewHorizons/systems/sol.json": {"entryPosition": {"x": 0}},
    }
    for path, document in files.items():
        route = router.get(f"/repos/xen-42/nh/contents/{path}")
        if path == failing_path:
            route.respond(500, json={"message": "Server Error"})
        else:
            route.respond(200, json=_content(document))


@pytest.fixture
def github() -> Iterator[respx.MockRouter]:
    with respx.mock(base_url=GITHUB_API_URL, assert_all_called=False) as router:
        yield router


def test_fetch_into_stores_and_caches_mod_documents(
    github: respx.MockRouter, tmp_path: Path
) -> None:
    _mock_mod_database(
        github,
        [
            {"uniqueName": "xen.NewHorizons", "repo": "xen-42/nh"},
            {"uniqueName": "No.Repo"},
        ],
    )
    _mock_new_horizons(github)
    stores = DocumentStores()

    with GitHubModFetcher(github_settings=_settings(), cache_dir=tmp_path) as fetcher:
        fetched = fetcher.fetch_into(stores)

    assert fetched == 1
    assert stores.store_for(MANIFEST) == {
        "xen.NewHorizons": {"name": "New Horizons", "version": "1.0.0"}
    }
    assert stores.store_for(DEFAULT_CONFIG) == {"xen.NewHorizons": {"settings": {"debug": False}}}
    assert stores.store_for(TITLE_SCREEN) == {"xen.NewHorizons": {"menuTextTint": {"r": 1}}}
    assert stores.store_for(PLANETS) == {
        "xen.NewHorizons": {"planets/earth.json": {"name": "Earth"}}
    }
    assert stores.store_for(SYSTEMS) == {
        "xen.NewHorizons": {"systems/sol.json": {"entryPosition": {"x": 0}}}
    }
    version_dir = tmp_path / "xen.NewHorizons" / "1.0.0"
    assert (tmp_path / "xen.NewHorizons" / "manifest.json").is_file()
    assert (version_dir / "planets" / "earth.json").is_file()
    assert json.loads((version_dir / "title-screen.json").read_text(encoding="utf-8")) == {
        "menuTextTint": {"r": 1}
    }


def test_fetch_into_respects_allow_list(github: respx.MockRouter, tmp_path: Path) -> None:
    _mock_mod_database(
        github,
        [
            {"uniqueName": "xen.NewHorizons", "repo": "xen-42/nh"},
            {"uniqueName": "Other.Mod", "repo": "other/mod"},
        ],
    )
    _mock_new_horizons(github)
    other_repo = github.get("/repos/other/mod").respond(200, json={"default_branch": "main"})
    stores = DocumentStores()

    with GitHubModFetcher(
        github_settings=_settings(allow_list=("xen.NewHorizons",)), cache_dir=tmp_path
    ) as fetcher:
        fetched = fetcher.fetch_into(stores)

    assert fetched == 1
    assert not other_repo.called
    assert stores.entity_ids() == {"xen.NewHorizons"}


def test_cached_version_is_skipped_unless_refreshing(
    github: respx.MockRouter, tmp_path: Path
) -> None:
    _mock_mod_database(github, [{"uniqueName": "xen.NewHorizons", "repo": "xen-42/nh"}])
    _mock_new_horizons(github)
    (tmp_path / "xen.NewHorizons" / "1.0.0").mkdir(parents=True)

    stores = DocumentStores()
    with GitHubModFetcher(github_settings=_settings(), cache_dir=tmp_path) as fetcher:
        assert fetcher.fetch_into(stores) == 0
    assert stores.entity_ids() == set()

    refreshed = DocumentStores()
    with GitHubModFetcher(
        github_settings=_settings(), cache_dir=tmp_path, refresh_cached=True
    ) as fetcher:
        assert fetcher.fetch_into(refreshed) == 1
    assert "xen.NewHorizons" in refreshed.store_for(PLANETS)


def test_failing_mod_is_logged_and_next_mod_is_processed(
    github: respx.MockRouter, tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    _mock_mod_database(
        github,
        [
            {"uniqueName": "Gone.Mod", "repo": "gone/mod"},
            {"uniqueName": "xen.NewHorizons", "repo": "xen-42/nh"},
        ],
    )
    github.get("/repos/gone/mod").respond(404, json={"message": "Not Found"})
    _mock_new_horizons(github)
    stores = DocumentStores()

    with caplog.at_level(logging.WARNING):
        with GitHubModFetcher(github_settings=_settings(), cache_dir=tmp_path) as fetcher:
            fetched = fetcher.fetch_into(stores)

    assert fetched == 1
    assert "Gone.Mod" in caplog.text
    assert "404" in caplog.text
    assert stores.entity_ids() == {"xen.NewHorizons"}


def test_failed_download_leaves_no_partial_mod_behind(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    mods = [{"uniqueName": "xen.NewHorizons", "repo": "xen-42/nh"}]
    with respx.mock(base_url=GITHUB_API_URL, assert_all_called=False) as failing:
        _mock_mod_database(failing, mods)
        _mock_new_horizons(failing, failing_path="NewHorizons/planets/earth.json")
        stores = DocumentStores()
        with caplog.at_level(logging.WARNING):
            with GitHubModFetcher(github_settings=_settings(), cache_dir=tmp_path) as fetcher:
                assert fetcher.fetch_into(stores) == 0

    assert "status 500" in caplog.text
    assert stores.entity_ids() == set()
    assert not (tmp_path / "xen.NewHorizons").exists()

    with respx.mock(base_url=GITHUB_API_URL, assert_all_called=False) as healthy:
        _mock_mod_database(healthy, mods)
        _mock_new_horizons(healthy)
        retried = DocumentStores()
        load_document_stores_from_cache(tmp_path, retried)
        with GitHubModFetcher(github_settings=_settings(), cache_dir=tmp_path) as fetcher:
            assert fetcher.fetch_into(retried) == 1

    assert retried.store_for(PLANETS) == {
        "xen.NewHorizons": {"planets/earth.json": {"name": "Earth"}}
    }
    assert (tmp_path / "xen.NewHorizons" / "1.0.0" / "planets" / "earth.json").is_file()


def test_new_version_replaces_documents_loaded_from_older_version(
    github: respx.MockRouter, tmp_path: Path
) -> None:
    old_manifest = {"name": "New Horizons", "version": "0.9.0"}
    write_cached_document(tmp_path, "xen.NewHorizons", "0.9.0", "manifest.json", old_manifest)
    write_cached_document(
        tmp_path, "xen.NewHorizons", "0.9.0", "addon-manifest.json", {"addonField": True}
    )
    write_cached_document(
        tmp_path, "xen.NewHorizons", "0.9.0", "planets/removed.json", {"oldField": 1}
    )
    write_latest_manifest(tmp_path, "xen.NewHorizons", old_manifest)
    _mock_mod_database(github, [{"uniqueName": "xen.NewHorizons", "repo": "xen-42/nh"}])
    _mock_new_horizons(github)

    stores = DocumentStores()
    load_document_stores_from_cache(tmp_path, stores)
    with GitHubModFetcher(github_settings=_settings(), cache_dir=tmp_path) as fetcher:
        assert fetcher.fetch_into(stores) == 1

    assert stores.store_for(PLANETS) == {
        "xen.NewHorizons": {"planets/earth.json": {"name": "Earth"}}
    }
    assert stores.store_for(ADDON_MANIFEST) == {}
    assert stores.store_for(MANIFEST)["xen.NewHorizons"]["version"] == "1.0.0"

    reloaded = DocumentStores()
    load_document_stores_from_cache(tmp_path, reloaded)
    assert reloaded == stores


def test_refreshing_a_cached_version_drops_files_no_longer_published(
    github: respx.MockRouter, tmp_path: Path
) -> None:
    write_cached_document(
        tmp_path, "xen.NewHorizons", "1.0.0", "planets/stale.json", {"stale": True}
    )
    _mock_mod_database(github, [{"uniqueName": "xen.NewHorizons", "repo": "xen-42/nh"}])
    _mock_new_horizons(github)

    with GitHubModFetcher(
        github_settings=_settings(), cache_dir=tmp_path, refresh_cached=True
    ) as fetcher:
        assert fetcher.fetch_into(DocumentStores()) == 1

    planets_dir = tmp_path / "xen.NewHorizons" / "1.0.0" / "planets"
    assert sorted(path.name for path in planets_dir.iterdir()) == ["earth.json"]


def test_unparsable_document_is_left_out(
    github: respx.MockRouter, tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    _mock_mod_database(github, [{"uniqueName": "Broken.Mod", "repo": "broken/mod"}])
    github.get("/repos/broken/mod").respond(200, json={"default_branch": "dev"})
    github.get("/repos/broken/mod/git/trees/dev").respond(
        200,
        json={
            "tree": [
                {"path": "manifest.json", "type": "blob"},
                {"path": "planets/bad.json", "type": "blob"},
                {"path": "planets/good.json", "type": "blob"},
            ]
        },
    )
    github.get("/repos/broken/mod/contents/manifest.json").respond(
        200, json=_content({"version": "0.1"})
    )
    github.get("/repos/broken/mod/contents/planets/bad.json").respond(
        200, json=_content('{"name": ')
    )
    github.get("/repos/broken/mod/contents/planets/good.json").respond(
        200, json=_content({"name": "Good"})
    )
    stores = DocumentStores()

    with caplog.at_level(logging.WARNING):
        with GitHubModFetcher(github_settings=_settings(), cache_dir=tmp_path) as fetcher:
            fetched = fetcher.fetch_into(stores)

    assert fetched == 1
    assert stores.store_for(PLANETS) == {"Broken.Mod": {"planets/good.json": {"name": "Good"}}}
    assert not (tmp_path / "Broken.Mod" / "0.1" / "planets" / "bad.json").exists()
    assert "planets/bad.json" in caplog.text


def test_mod_without_manifest_is_skipped(github: respx.MockRouter, tmp_path: Path) -> None:
    _mock_mod_database(github, [{"uniqueName": "Bare.Mod", "repo": "bare/mod"}])
    github.get("/repos/bare/mod").respond(200, json={"default_branch": "main"})
    github.get("/repos/bare/mod/git/trees/main").respond(
        200, json={"tree": [{"path": "planets/a.json", "type": "blob"}]}
    )
    stores = DocumentStores()

    with GitHubModFetcher(github_settings=_settings(), cache_dir=tmp_path) as fetcher:
        fetched = fetcher.fetch_into(stores)

    assert fetched == 0
    assert stores.entity_ids() == set()


def test_unavailable_mod_database_raises(github: respx.MockRouter, tmp_path: Path) -> None:
    github.get("/repos/ow-mods/ow-mod-db/contents/mods.json").respond(500)

    with GitHubModFetcher(github_settings=_settings(), cache_dir=tmp_path) as fetcher:
        with pytest.raises(GitHubFetchError, match="500"):
            fetcher.fetch_into(DocumentStores())


def test_transport_errors_are_wrapped(github: respx.MockRouter, tmp_path: Path) -> None:
    github.get("/repos/ow-mods/ow-mod-db/contents/mods.json").mock(
        side_effect=httpx.ConnectError("offline")
    )

    with GitHubModFetcher(github_settings=_settings(), cache_dir=tmp_path) as fetcher:
        with pytest.raises(GitHubFetchError, match="offline"):
            fetcher.fetch_into(DocumentStores())


def test_token_is_sent_as_bearer_authorization(github: respx.MockRouter, tmp_path: Path) -> None:
    route = github.get("/repos/ow-mods/ow-mod-db/contents/mods.json").respond(
        200, json=_content({"mods": []})
    )

    with GitHubModFetcher(
        github_settings=_settings(token="secret"), cache_dir=tmp_path
    ) as fetcher:
        fetcher.fetch_into(DocumentStores())

    request = route.calls.last.request
    assert request.headers["authorization"] == "Bearer secret"
    assert request.headers["accept"] == "application/vnd.github+json"


def test_injected_client_is_not_closed(tmp_path: Path) -> None:
    client = httpx.Client(base_url=GITHUB_API_URL)

    with GitHubModFetcher(github_settings=_settings(), cache_dir=tmp_path, http_client=client):
        pass

    assert not client.is_closed
    client.close()


def test_parse_mod_database_drops_unusable_entries() -> None:
    entries = parse_mod_database(
        {
            "mods": [
                {"uniqueName": "Alek.OWML", "repo": "amazingalek/owml"},
                {"uniqueName": "No.Repo", "repo": None},
                {"uniqueName": "../escape", "repo": "a/b"},
                {"name": "missing unique name"},
                "not a mapping",
            ]
        }
    )

    assert entries == [
        ModDatabaseEntry(unique_name="Alek.OWML", repo="amazingalek/owml"),
        ModDatabaseEntry(unique_name="No.Repo", repo=None),
    ]


def test_parse_mod_database_requires_mods_list() -> None:
    with pytest.raises(GitHubFetchError, match="'mods' list"):
        parse_mod_database({"mods": {}})


def test_find_single_file_ignores_build_outputs_and_unity_packages() -> None:
    blob_paths = [
        "Mod/Packages/manifest.json",
        "Mod/bin/Release/manifest.json",
        "Mod/MANIFEST.json",
    ]

    assert (
        find_single_file(blob_paths, "manifest.json", unique_name="m", repo="o/r")
        == "Mod/MANIFEST.json"
    )


def test_find_single_file_takes_first_of_several_matches(
    caplog: pytest.LogCaptureFixture,
) -> None:
    blob_paths = ["a/title-screen.json", "b/title-screen.json"]

    with caplog.at_level(logging.WARNING):
        found = find_single_file(blob_paths, "title-screen.json", unique_name="m", repo="o/r")

    assert found == "a/title-screen.json"
    assert "Multiple title-screen.json files" in caplog.text


def test_find_single_file_returns_none_without_match() -> None:
    assert find_single_file(["x/other.json"], "manifest.json", unique_name="m", repo="o/r") is None


def test_directory_files_match_whole_path_segments() -> None:
    blob_paths = [
        "Mod/planets/earth.json",
        "Mod/Planets/sub/moon.JSON",
        "Mod/myplanets/not-matched.json",
        "Mod/planets/readme.md",
        "planets",
    ]

    assert find_directory_files(blob_paths, "planets") == [
        "Mod/planets/earth.json",
        "Mod/Planets/sub/moon.JSON",
    ]


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("Mod/planets/earth.json", "planets/earth.json"),
        ("planets/a/b.json", "planets/a/b.json"),
        ("Mod\\Planets\\x.json", "Planets/x.json"),
        ("Mod/earth.json", None),
        ("Mod/planets", None),
    ],
)
def test_relative_to_directory(path: str, expected: str | None) -> None:
    assert relative_to_directory(path, "planets") == expected
