"""
Session loading pipeline.

Stages run in a fixed order: refresh metadata, the four small tables
fetched in parallel, the streamed block index, then the reference join.
Any failure in a required stage raises ``DataLoadError`` and no session
is returned.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

import pandas as pd
import requests

from catalog_governance.core.config import SourceConfig
from catalog_governance.core.constants import (
    ASSET_TABLE,
    BLOCK_TABLE,
    CATALOG_TABLE,
    DEPENDENCY_TABLE,
    REFERENCE_TABLE,
    SMALL_TABLES,
)
from catalog_governance.core.exceptions import DataLoadError
from catalog_governance.core.logging import with_log_context
from catalog_governance.core.perf import PerformanceTracker
from catalog_governance.data.block_index import BlockIndexBuilder
from catalog_governance.data.parsing import (
    assets_from_frame,
    catalog_from_frame,
    dependencies_from_frame,
    references_from_frame,
)
from catalog_governance.data.sources import HttpTableSource, TableSource, make_source
from catalog_governance.session import GovernanceSession


def fetch_small_tables(
    source: TableSource, max_workers: int, logger: logging.Logger | logging.LoggerAdapter
) -> dict[str, pd.DataFrame]:
    """Fetch the catalog, asset, reference and dependency tables in parallel.

    The first failure is re-raised once every fetch has finished.
    """
    frames: dict[str, pd.DataFrame] = {}
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(SMALL_TABLES)))) as executor:
        futures = {name: executor.submit(source.read_table, name) for name in SMALL_TABLES}
        errors: list[DataLoadError] = []
        for name, future in futures.items():
            try:
                frames[name] = future.result()
                logger.debug(f"Loaded {name} ({len(frames[name])} rows)")
            except DataLoadError as e:
                logger.error(f"Failed to load {name}: {e}")
                errors.append(e)
    if errors:
        raise errors[0]
    return frames


def load_session(
    config: SourceConfig,
    logger: logging.Logger | logging.LoggerAdapter | None = None,
    quiet: bool = False,
    http: requests.Session | None = None,
    perf_tracker: PerformanceTracker | None = None,
) -> GovernanceSession:
    """Run the full load pipeline and return a ready session.

    Args:
        config: Source configuration
        logger: Logger instance (defaults to the package logger)
        quiet: Suppress the block indexing progress bar
        http: Optional requests session for HTTP sources
        perf_tracker: Optional tracker receiving per-stage timings

    Raises:
        DataLoadError: If any required table or the block index fails to load
        ConfigurationError: If no data source is configured
    """
    base_logger = logger or logging.getLogger("catalog_governance")
    source = make_source(config, http=http)
    log = with_log_context(base_logger, source=source.location)
    perf = perf_tracker or PerformanceTracker(log)

    log.info(f"Loading governance tables from {source.location}")
    log.debug(f"Source settings: {config.to_dict()}")

    with perf.track("Refresh metadata"):
        refresh = source.fetch_refresh_metadata()
    if refresh.available:
        log.info(f"Data last refreshed at {refresh.refreshed_at}")
        # The refresh timestamp doubles as a stable cache buster unless a version was pinned
        if isinstance(source, HttpTableSource) and not config.data_version:
            source.data_version = refresh.refreshed_at

    with perf.track("Small tables"):
        frames = fetch_small_tables(source, config.fetch_workers, log)
        catalog = catalog_from_frame(frames[CATALOG_TABLE], CATALOG_TABLE)
        assets = assets_from_frame(frames[ASSET_TABLE], ASSET_TABLE)
        references = references_from_frame(frames[REFERENCE_TABLE], REFERENCE_TABLE)
        dependencies = dependencies_from_frame(frames[DEPENDENCY_TABLE], DEPENDENCY_TABLE)
    log.info(
        f"Tables loaded: {len(catalog)} catalog fields, {len(assets)} assets, "
        f"{len(references)} references, {len(dependencies)} dependencies"
    )

    with perf.track("Block index"):
        builder = BlockIndexBuilder(logger=log)
        block_index = builder.build(source.iter_table_chunks(BLOCK_TABLE, config.block_chunk_size), quiet=quiet)

    with perf.track("Reference join"):
        session = GovernanceSession.from_tables(
            catalog=catalog,
            assets=assets,
            references=references,
            dependencies=dependencies,
            block_index=block_index,
            refresh=refresh,
            source=source.location,
        )

    unresolved = session.unresolved_reference_count
    if unresolved:
        log.warning(f"{unresolved} of {len(session.joined)} references could not be resolved to an asset")
    log.info("Ready")
    log.debug(perf.get_summary())
    return session
