"""Analysis run use-case service."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import replace
from pathlib import Path

from mod_config_analyzer.configuration import (
    Configuration,
    ConfigurationError,
    GitHubSettings,
    load_configuration,
)
from mod_config_analyzer.document_acquisition import (
    CONFIG_TYPE_NAMES,
    DocumentParseError,
    DocumentStores,
    GitHubFetchError,
    GitHubModFetcher,
    load_document_stores_from_cache,
)
from mod_config_analyzer.results_writing import (
    WORKBOOK_FILENAME,
    render_html_report,
    write_analysis_summaries,
    write_field_usage_workbook,
)

from .analysis_driver import analyze_document_stores
from .run_contracts import AnalysisOutcome, AnalysisRequest

logger = logging.getLogger(__name__)

FetcherFactory = Callable[..., GitHubModFetcher]


class AnalysisRunError(Exception):
    """Raised when an analysis run cannot be completed."""


def execute_analysis_run(
    request: AnalysisRequest,
    *,
    fetcher_factory: FetcherFactory | None = None,
    environ: Mapping[str, str] | None = None,
) -> AnalysisOutcome:
    """Acquire documents, analyze every config type, and write all outputs."""
    resolved_fetcher_factory = fetcher_factory or GitHubModFetcher
    configuration = _load_run_configuration(request, environ)
    stores = _acquire_documents(configuration, resolved_fetcher_factory)
    entity_count = len(stores.entity_ids())
    logger.info("Analyzing config files of %d mods", entity_count)

    analyses = analyze_document_stores(stores, parallelism=configuration.analysis.parallelism)
    output_dir = configuration.analysis.output_directory
    workbook_path: Path | None = None
    try:
        for analysis in analyses:
            write_analysis_summaries(analysis, output_dir)
        report_path = render_html_report(output_dir, CONFIG_TYPE_NAMES)
        if configuration.analysis.write_workbook:
            workbook_path = write_field_usage_workbook(analyses, output_dir / WORKBOOK_FILENAME)
    except OSError as exc:
        raise AnalysisRunError(f"Failed to write analysis results: {exc}") from exc

    return AnalysisOutcome(
        output_dir=output_dir,
        report_path=report_path,
        workbook_path=workbook_path,
        entity_count=entity_count,
        analyses=analyses,
    )


def _load_run_configuration(
    request: AnalysisRequest, environ: Mapping[str, str] | None
) -> Configuration:
    try:
        configuration = load_configuration(request.config_path, environ=environ)
    except (ConfigurationError, OSError) as exc:
        raise AnalysisRunError(str(exc)) from exc

    cache = configuration.cache
    if request.skip_local_cache or request.local_cache_only:
        cache = replace(
            cache,
            skip_local_cache=cache.skip_local_cache or request.skip_local_cache,
            local_cache_only=cache.local_cache_only or request.local_cache_only,
        )
    if cache.skip_local_cache and cache.local_cache_only:
        raise AnalysisRunError("skip_local_cache and local_cache_only cannot both be enabled.")

    github = configuration.github
    if request.allow_list:
        github = replace(github, allow_list=tuple(request.allow_list))

    analysis = configuration.analysis
    if request.output_dir:
        analysis = replace(analysis, output_directory=Path(request.output_dir).resolve())
    if request.write_workbook is not None:
        analysis = replace(analysis, write_workbook=request.write_workbook)

    return replace(configuration, cache=cache, github=github, analysis=analysis)


def _acquire_documents(
    configuration: Configuration, fetcher_factory: FetcherFactory
) -> DocumentStores:
    stores = DocumentStores()
    cache = configuration.cache
    try:
        if not cache.skip_local_cache:
            load_document_stores_from_cache(cache.directory, stores)
        if not cache.local_cache_only:
            _fetch_from_github(
                configuration.github,
                cache.directory,
                stores,
                fetcher_factory,
                refresh_cached=cache.skip_local_cache,
            )
    except (GitHubFetchError, DocumentParseError, OSError) as exc:
        raise AnalysisRunError(str(exc)) from exc
    return stores


def _fetch_from_github(
    github_settings: GitHubSettings,
    cache_dir: Path,
    stores: DocumentStores,
    fetcher_factory: FetcherFactory,
    *,
    refresh_cached: bool,
) -> None:
    with fetcher_factory(
        github_settings=github_settings, cache_dir=cache_dir, refresh_cached=refresh_cached
    ) as fetcher:
        fetcher.fetch_into(stores)
