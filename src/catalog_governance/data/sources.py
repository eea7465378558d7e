"""
Source table access.

A table source serves the CSV tables either from an HTTP(S) base URL or a
local directory. Small tables are read whole; the block table is read as a
stream of pandas chunks so the full file is never held in memory.
"""

from __future__ import annotations

import io
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO
from urllib.parse import quote

import pandas as pd
import requests

from catalog_governance.core.config import SourceConfig
from catalog_governance.core.constants import DEFAULT_FETCH_TIMEOUT, REFRESH_META_FILE
from catalog_governance.core.exceptions import ConfigurationError, DataLoadError
from catalog_governance.data.models import RefreshMetadata
from catalog_governance.data.parsing import parse_refresh_metadata

logger = logging.getLogger(__name__)

# Every column is read as text; typing happens in data.parsing.
# Rows with too many fields are skipped rather than failing the table.
CSV_READ_OPTIONS = {
    "dtype": str,
    "keep_default_na": False,
    "skip_blank_lines": True,
    "on_bad_lines": "skip",
    "encoding": "utf-8-sig",
}


class TableSource(ABC):
    """Read-only access to the governance source tables."""

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable source location."""

    @abstractmethod
    def fetch_text(self, name: str) -> str:
        """Return the full text of a table. Raises DataLoadError on failure."""

    @abstractmethod
    @contextmanager
    def open_stream(self, name: str) -> Iterator[IO[bytes]]:
        """Open a table as a binary stream. Raises DataLoadError on failure."""

    @abstractmethod
    def fetch_refresh_metadata(self) -> RefreshMetadata:
        """Return refresh metadata, or an empty record when unavailable. Never raises."""

    def read_table(self, name: str) -> pd.DataFrame:
        """Read a small table into a frame of string columns."""
        text = self.fetch_text(name)
        if not text.strip():
            logger.warning(f"Table {name} is empty")
            return pd.DataFrame()
        try:
            return pd.read_csv(io.StringIO(text), **CSV_READ_OPTIONS)
        except pd.errors.EmptyDataError:
            return pd.DataFrame()
        except (pd.errors.ParserError, ValueError) as e:
            raise DataLoadError(
                f"Unable to parse {name}", source=self.location, details=str(e), original_error=e
            ) from e

    def iter_table_chunks(self, name: str, chunksize: int) -> Iterator[pd.DataFrame]:
        """Yield a large table as successive frames of at most ``chunksize`` rows."""
        with self.open_stream(name) as stream:
            try:
                with pd.read_csv(stream, chunksize=chunksize, **CSV_READ_OPTIONS) as reader:
                    yield from reader
            except pd.errors.EmptyDataError:
                logger.warning(f"Table {name} is empty")
            except DataLoadError:
                raise
            except Exception as e:
                # Transport errors surface here while the stream is consumed
                raise DataLoadError(
                    f"Failed while streaming {name}", source=self.location, details=str(e), original_error=e
                ) from e


class HttpTableSource(TableSource):
    """Tables served under an HTTP(S) base URL.

    Args:
        base_url: URL of the directory holding the tables
        data_version: Cache-busting token appended as ``?v=`` to table URLs
        timeout: Per-request timeout in seconds
        http: Optional requests session (a new one is created by default)
    """

    def __init__(
        self,
        base_url: str,
        data_version: str = "",
        timeout: float = DEFAULT_FETCH_TIMEOUT,
        http: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.data_version = data_version
        self.timeout = timeout
        self.http = http or requests.Session()

    @property
    def location(self) -> str:
        return self.base_url

    def table_url(self, name: str) -> str:
        url = f"{self.base_url}/{name}"
        if not self.data_version:
            return url
        join = "&" if "?" in url else "?"
        return f"{url}{join}v={quote(self.data_version, safe='')}"

    def _get(self, url: str, stream: bool = False) -> requests.Response:
        try:
            response = self.http.get(url, timeout=self.timeout, stream=stream)
        except requests.RequestException as e:
            raise DataLoadError("Fetch failed", source=url, details=str(e), original_error=e) from e
        if not response.ok:
            response.close()
            raise DataLoadError("Fetch failed", source=url, status_code=response.status_code)
        return response

    def fetch_text(self, name: str) -> str:
        url = self.table_url(name)
        logger.debug(f"Fetching {url}")
        response = self._get(url)
        # Tables are UTF-8 regardless of the charset the server advertises
        try:
            return response.content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise DataLoadError("Unable to decode table", source=url, details=str(e), original_error=e) from e

    @contextmanager
    def open_stream(self, name: str) -> Iterator[IO[bytes]]:
        url = self.table_url(name)
        logger.debug(f"Streaming {url}")
        response = self._get(url, stream=True)
        response.raw.decode_content = True
        try:
            yield response.raw
        finally:
            response.close()

    def fetch_refresh_metadata(self) -> RefreshMetadata:
        # The metadata document bypasses intermediate caches with a timestamp buster
        url = f"{self.base_url}/{REFRESH_META_FILE}?t={int(time.time() * 1000)}"
        try:
            response = self._get(url)
        except DataLoadError as e:
            logger.debug(f"Refresh metadata unavailable: {e}")
            return RefreshMetadata()
        return parse_refresh_metadata(response.content.decode("utf-8-sig", errors="replace"))


class LocalTableSource(TableSource):
    """Tables stored as files in a local directory."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    @property
    def location(self) -> str:
        return str(self.directory)

    def _path(self, name: str) -> Path:
        path = self.directory / name
        if not path.is_file():
            raise DataLoadError("Table not found", source=str(path))
        return path

    def fetch_text(self, name: str) -> str:
        path = self._path(name)
        try:
            return path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise DataLoadError("Unable to read table", source=str(path), details=str(e), original_error=e) from e

    @contextmanager
    def open_stream(self, name: str) -> Iterator[IO[bytes]]:
        path = self._path(name)
        try:
            stream = open(path, "rb")
        except OSError as e:
            raise DataLoadError("Unable to open table", source=str(path), details=str(e), original_error=e) from e
        with stream:
            yield stream

    def fetch_refresh_metadata(self) -> RefreshMetadata:
        path = self.directory / REFRESH_META_FILE
        try:
            text = path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Refresh metadata unavailable: {e}")
            return RefreshMetadata()
        return parse_refresh_metadata(text)


def make_source(config: SourceConfig, http: requests.Session | None = None) -> TableSource:
    """Create the table source described by ``config`` (URL takes precedence)."""
    if config.data_base_url:
        return HttpTableSource(
            config.data_base_url, data_version=config.data_version, timeout=config.timeout_seconds, http=http
        )
    if config.data_dir:
        return LocalTableSource(config.data_dir)
    raise ConfigurationError("No data source configured", field="data_base_url")
