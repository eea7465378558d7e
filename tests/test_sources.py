"""Tests for table sources and the session loading pipeline"""
import io
from unittest.mock import Mock

import pytest
import requests

from catalog_governance.core.config import SourceConfig
from catalog_governance.core.exceptions import ConfigurationError, DataLoadError
from catalog_governance.data.sources import HttpTableSource, LocalTableSource, make_source
from catalog_governance.loader import load_session
from conftest import ASSETS_CSV, BLOCKS_CSV, CATALOG_CSV, DEPENDENCIES_CSV, REFERENCES_CSV

BASE_URL = "https://data.example.com/governance"

TABLES = {
    "catalog_schema.csv": CATALOG_CSV,
    "asset_inventory.csv": ASSETS_CSV,
    "field_references.csv": REFERENCES_CSV,
    "dependencies.csv": DEPENDENCIES_CSV,
    "content_blocks.csv": BLOCKS_CSV,
    "refresh_meta.json": '{"refreshed_at_utc": "2024-06-12T10:00:00Z"}',
}


class _RawStream(io.BytesIO):
    """Stand-in for a urllib3 response body"""

    decode_content = False


def _response(body="", ok=True, status_code=200, encoding="ISO-8859-1"):
    """Mock response; requests reports ISO-8859-1 for text/csv without a charset"""
    content = body if isinstance(body, bytes) else body.encode("utf-8")
    response = Mock()
    response.ok = ok
    response.status_code = status_code
    response.content = content
    response.encoding = encoding
    response.text = content.decode(encoding, errors="replace")
    response.raw = _RawStream(content)
    return response


def _fake_http(tables=TABLES):
    """Mock requests session serving ``tables`` by file name"""
    http = Mock()

    def get(url, timeout=None, stream=False):
        name = url.split("?")[0].rsplit("/", 1)[1]
        if name not in tables:
            return _response(ok=False, status_code=404)
        return _response(tables[name])

    http.get.side_effect = get
    return http


class TestLocalTableSource:
    """Test reading tables from a directory"""

    def test_read_table(self, data_dir):
        frame = LocalTableSource(data_dir).read_table("catalog_schema.csv")
        assert list(frame["field_name"]) == ["f1", "f2", "f3"]
        assert frame.loc[1, "last_seen"] == ""

    def test_missing_table_raises(self, data_dir):
        with pytest.raises(DataLoadError) as exc_info:
            LocalTableSource(data_dir).read_table("nope.csv")
        assert "nope.csv" in str(exc_info.value)

    def test_empty_table_is_empty_frame(self, data_dir):
        (data_dir / "empty.csv").write_text("", encoding="utf-8")
        assert LocalTableSource(data_dir).read_table("empty.csv").empty

    def test_iter_table_chunks(self, data_dir):
        chunks = list(LocalTableSource(data_dir).iter_table_chunks("content_blocks.csv", chunksize=2))
        assert [len(c) for c in chunks] == [2, 1]
        assert list(chunks[1]["block_id"]) == ["B3"]

    def test_iter_missing_table_raises(self, data_dir):
        with pytest.raises(DataLoadError):
            list(LocalTableSource(data_dir).iter_table_chunks("missing.csv", chunksize=2))

    def test_refresh_metadata(self, data_dir):
        assert LocalTableSource(data_dir).fetch_refresh_metadata().refreshed_at == "2024-06-12T10:00:00Z"

    def test_refresh_metadata_missing_is_empty(self, tmp_path):
        """Absent metadata never fails the load"""
        assert not LocalTableSource(tmp_path).fetch_refresh_metadata().available


class TestHttpTableSource:
    """Test reading tables over HTTP"""

    def test_table_url_without_version(self):
        assert HttpTableSource(BASE_URL + "/").table_url("a.csv") == f"{BASE_URL}/a.csv"

    def test_table_url_with_version(self):
        source = HttpTableSource(BASE_URL, data_version="2024-06-12T10:00:00Z")
        assert source.table_url("a.csv") == f"{BASE_URL}/a.csv?v=2024-06-12T10%3A00%3A00Z"

    def test_fetch_text(self):
        http = Mock()
        http.get.return_value = _response("a,b\n1,2\n")
        source = HttpTableSource(BASE_URL, timeout=5.0, http=http)
        frame = source.read_table("a.csv")
        assert list(frame.columns) == ["a", "b"]
        http.get.assert_called_once_with(f"{BASE_URL}/a.csv", timeout=5.0, stream=False)

    def test_utf8_table_without_charset(self):
        """A BOM is dropped and non-ASCII names survive whatever charset the server reports"""
        http = Mock()
        http.get.return_value = _response("\ufefffield_name,field_type\nprénom,string\n")
        frame = HttpTableSource(BASE_URL, http=http).read_table("catalog_schema.csv")
        assert list(frame.columns) == ["field_name", "field_type"]
        assert frame.loc[0, "field_name"] == "prénom"

    def test_streamed_table_with_bom(self):
        http = Mock()
        http.get.return_value = _response("\ufeffblock_id,asset_id\nB1,Café\n")
        (chunk,) = HttpTableSource(BASE_URL, http=http).iter_table_chunks("content_blocks.csv", chunksize=10)
        assert list(chunk.columns) == ["block_id", "asset_id"]
        assert chunk.loc[0, "asset_id"] == "Café"

    def test_undecodable_table_raises(self):
        http = Mock()
        http.get.return_value = _response(b"field_name\n\xff\xfe\n")
        with pytest.raises(DataLoadError) as exc_info:
            HttpTableSource(BASE_URL, http=http).fetch_text("catalog_schema.csv")
        assert "Unable to decode table" in str(exc_info.value)

    def test_http_error_raises(self):
        http = Mock()
        failed = _response(ok=False, status_code=404)
        http.get.return_value = failed
        with pytest.raises(DataLoadError) as exc_info:
            HttpTableSource(BASE_URL, http=http).fetch_text("a.csv")
        assert exc_info.value.status_code == 404
        assert "HTTP 404" in str(exc_info.value)
        failed.close.assert_called_once()

    def test_network_error_raises(self):
        http = Mock()
        http.get.side_effect = requests.ConnectionError("connection refused")
        with pytest.raises(DataLoadError) as exc_info:
            HttpTableSource(BASE_URL, http=http).fetch_text("a.csv")
        assert "connection refused" in str(exc_info.value)
        assert isinstance(exc_info.value.original_error, requests.ConnectionError)

    def test_stream_chunks(self):
        http = _fake_http()
        source = HttpTableSource(BASE_URL, http=http)
        chunks = list(source.iter_table_chunks("content_blocks.csv", chunksize=2))
        assert sum(len(c) for c in chunks) == 3
        assert http.get.call_args.kwargs["stream"] is True

    def test_refresh_metadata_uses_timestamp_buster(self):
        http = _fake_http()
        meta = HttpTableSource(BASE_URL, http=http).fetch_refresh_metadata()
        assert meta.refreshed_at == "2024-06-12T10:00:00Z"
        url = http.get.call_args.args[0]
        assert url.startswith(f"{BASE_URL}/refresh_meta.json?t=")

    def test_refresh_metadata_failure_is_swallowed(self):
        http = _fake_http(tables={})
        assert not HttpTableSource(BASE_URL, http=http).fetch_refresh_metadata().available


class TestMakeSource:
    """Test source selection"""

    def test_url_takes_precedence(self, tmp_path):
        source = make_source(SourceConfig(data_base_url=BASE_URL, data_dir=str(tmp_path), timeout_seconds=7))
        assert isinstance(source, HttpTableSource)
        assert source.timeout == 7

    def test_directory(self, tmp_path):
        assert isinstance(make_source(SourceConfig(data_dir=str(tmp_path))), LocalTableSource)

    def test_nothing_configured(self):
        with pytest.raises(ConfigurationError):
            make_source(SourceConfig())


class TestLoadSession:
    """Test the full load pipeline"""

    def test_load_from_directory(self, data_dir):
        session = load_session(SourceConfig(data_dir=str(data_dir), block_chunk_size=2), quiet=True)
        assert session.catalog_size == 3
        assert [a.asset_id for a in session.assets] == ["A1", "A2", "A3"]
        assert len(session.references) == 4
        assert dict(session.block_index) == {"B1": "A1", "B2": "A2", "B3": "A3"}
        assert session.unresolved_reference_count == 1
        assert session.refresh.refreshed_at == "2024-06-12T10:00:00Z"
        assert session.source == str(data_dir)

    def test_risk_flag_normalized(self, data_dir):
        session = load_session(SourceConfig(data_dir=str(data_dir)), quiet=True)
        ghost = [r for r in session.joined if r.field_name == "ghost_y"]
        assert ghost[0].is_risk is True
        assert ghost[0].asset_id == "A2"

    def test_missing_small_table_fails(self, data_dir):
        """Any required table failing aborts the load"""
        (data_dir / "dependencies.csv").unlink()
        with pytest.raises(DataLoadError):
            load_session(SourceConfig(data_dir=str(data_dir)), quiet=True)

    def test_missing_block_table_fails(self, data_dir):
        (data_dir / "content_blocks.csv").unlink()
        with pytest.raises(DataLoadError):
            load_session(SourceConfig(data_dir=str(data_dir)), quiet=True)

    def test_missing_refresh_metadata_is_not_fatal(self, data_dir):
        (data_dir / "refresh_meta.json").unlink()
        session = load_session(SourceConfig(data_dir=str(data_dir)), quiet=True)
        assert not session.refresh.available

    def test_load_over_http_uses_refresh_as_version(self):
        """Without a pinned version, table URLs carry the refresh timestamp"""
        http = _fake_http()
        session = load_session(SourceConfig(data_base_url=BASE_URL), quiet=True, http=http)
        assert session.catalog_size == 3
        table_urls = [c.args[0] for c in http.get.call_args_list if "refresh_meta" not in c.args[0]]
        assert len(table_urls) == 5
        assert all(url.endswith("?v=2024-06-12T10%3A00%3A00Z") for url in table_urls)

    def test_pinned_version_is_kept(self):
        http = _fake_http()
        load_session(SourceConfig(data_base_url=BASE_URL, data_version="v7"), quiet=True, http=http)
        table_urls = [c.args[0] for c in http.get.call_args_list if "refresh_meta" not in c.args[0]]
        assert all(url.endswith("?v=v7") for url in table_urls)

    def test_http_failure_aborts(self):
        tables = dict(TABLES)
        del tables["asset_inventory.csv"]
        with pytest.raises(DataLoadError) as exc_info:
            load_session(SourceConfig(data_base_url=BASE_URL), quiet=True, http=_fake_http(tables))
        assert exc_info.value.status_code == 404
