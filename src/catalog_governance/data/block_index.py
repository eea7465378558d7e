"""
Block index construction.

Builds the ``block_id -> asset_id`` mapping from the content-block table.
The table is expected to be orders of magnitude larger than the other
tables, so rows are consumed chunk by chunk and the index grows as rows
arrive. Later rows for the same block overwrite earlier ones.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

import pandas as pd
from tqdm import tqdm

from catalog_governance.core.constants import BLOCK_PROGRESS_INTERVAL

TQDM_BAR_FORMAT = "{desc}: {n_fmt} rows [{elapsed}, {rate_fmt}]"


class BlockIndexBuilder:
    """Incrementally build the block-to-asset index.

    ``rows_processed`` counts every row seen, including skipped ones, and
    only ever increases.

    Args:
        logger: Logger for progress messages (defaults to the module logger)
        progress_interval: Log progress every N rows
    """

    def __init__(
        self,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
        progress_interval: int = BLOCK_PROGRESS_INTERVAL,
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.progress_interval = progress_interval
        self.rows_processed = 0
        self.rows_skipped = 0
        self._index: dict[str, str] = {}
        self._next_report = progress_interval

    @property
    def index(self) -> dict[str, str]:
        return self._index

    def _advance(self, row_count: int, skipped: int) -> int:
        self.rows_processed += row_count
        self.rows_skipped += skipped
        while self.progress_interval > 0 and self.rows_processed >= self._next_report:
            self.logger.debug(f"Indexing content blocks... ({self._next_report})")
            self._next_report += self.progress_interval
        return self.rows_processed

    def add_chunk(self, chunk: pd.DataFrame) -> int:
        """Index one frame of rows; returns the running row count.

        A chunk without a ``block_id`` or ``asset_id`` column contributes
        no entries; its rows count as skipped.
        """
        if "block_id" not in chunk.columns or "asset_id" not in chunk.columns:
            return self._advance(len(chunk), len(chunk))

        block_ids = chunk["block_id"].fillna("").astype(str).str.strip()
        asset_ids = chunk["asset_id"].fillna("").astype(str).str.strip()
        usable = (block_ids != "") & (asset_ids != "")
        # dict.update over zip keeps row order, so the last duplicate wins
        self._index.update(zip(block_ids[usable], asset_ids[usable], strict=True))
        return self._advance(len(chunk), int((~usable).sum()))

    def add_rows(self, rows: Iterable[Mapping[str, Any]]) -> int:
        """Index plain mapping rows; returns the running row count."""
        for row in rows:
            block_id = str(row.get("block_id") or "").strip()
            asset_id = str(row.get("asset_id") or "").strip()
            if block_id and asset_id:
                self._index[block_id] = asset_id
                self._advance(1, 0)
            else:
                self._advance(1, 1)
        return self.rows_processed

    def build(self, chunks: Iterable[pd.DataFrame], quiet: bool = False) -> dict[str, str]:
        """Consume every chunk and return the finished index."""
        with tqdm(desc="Indexing content blocks", unit="rows", bar_format=TQDM_BAR_FORMAT, disable=quiet) as pbar:
            for chunk in chunks:
                before = self.rows_processed
                self.add_chunk(chunk)
                pbar.update(self.rows_processed - before)

        self.logger.info(
            f"Indexing content blocks... done ({self.rows_processed} rows, "
            f"{len(self._index)} blocks, {self.rows_skipped} skipped)"
        )
        return self._index


def build_block_index(
    chunks: Iterable[pd.DataFrame],
    logger: logging.Logger | logging.LoggerAdapter | None = None,
    quiet: bool = True,
) -> dict[str, str]:
    """Build a block index from an iterable of row frames."""
    return BlockIndexBuilder(logger=logger).build(chunks, quiet=quiet)
