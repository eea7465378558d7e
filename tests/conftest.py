"""Pytest configuration and fixtures for catalog governance tests"""
import logging
import os
import time
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pytest

from catalog_governance.data.models import Asset, CatalogField, Dependency, FieldReference
from catalog_governance.session import GovernanceSession

# Wednesday; the current week starts Monday 2024-06-10
NOW = datetime(2024, 6, 12, 15, 30)
TODAY = NOW.date()


def days_ago(days: int, hour: int = 9) -> datetime:
    """Timestamp ``days`` calendar days before TODAY, at ``hour``."""
    day = TODAY - timedelta(days=days)
    return datetime(day.year, day.month, day.day, hour)


def make_session(
    catalog=(),
    assets=(),
    references=(),
    block_index=None,
    dependencies=(),
    refresh=None,
):
    """Build a session from plain values.

    ``catalog`` is a list of field names, ``references`` a list of
    (block_id, field_name, is_risk) tuples.
    """
    return GovernanceSession.from_tables(
        catalog=[CatalogField(field_name=name) for name in catalog],
        assets=assets,
        references=[
            FieldReference(ref_id=f"R{i}", block_id=block_id, field_name=field_name, is_risk=is_risk)
            for i, (block_id, field_name, is_risk) in enumerate(references, start=1)
        ],
        dependencies=dependencies,
        block_index=block_index or {},
        refresh=refresh,
        source="test",
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def sample_assets():
    """Five assets covering every scope edge case"""
    return [
        Asset("A1", "Welcome Campaign", "Campaign", last_active=days_ago(0)),
        Asset("A2", "Onboarding Canvas", "Canvas", last_active=days_ago(10)),
        Asset("A3", "Old Promo", "Campaign", last_active=days_ago(200)),
        Asset("A4", "Draft Canvas", "Canvas", last_active=None),
        Asset("A5", "Untyped Asset", "", last_active=days_ago(40)),
    ]


@pytest.fixture
def sample_session(sample_assets):
    """Session with 10 catalog fields, ghost fields, the sentinel and an unresolved block.

    All Time in-scope assets: A1, A2, A3, A5 (A4 has no activity).
    Non-risk in-scope usage: f1 x3, f2 x1, f3 x1, f6 x1.
    """
    return make_session(
        catalog=[f"f{i}" for i in range(10)],
        assets=sample_assets,
        block_index={"B1": "A1", "B2": "A2", "B3": "A3", "B4": "A4", "B5": "A5"},
        references=[
            ("B1", "f1", "false"),
            ("B1", "f1", ""),
            ("B2", "f1", "no"),
            ("B2", "f2", "0"),
            ("B3", "f3", "FALSE"),
            ("B1", "ghost_x", "true"),
            ("B2", "ghost_x", "1"),
            ("B3", "location_guid", "yes"),
            ("B9", "f4", "false"),
            ("B4", "f5", "false"),
            ("B5", "f6", "false"),
        ],
        dependencies=[Dependency("A1", "A2", "canvas_step")],
    )


@pytest.fixture
def all_time_ids(sample_session):
    return frozenset({"A1", "A2", "A3", "A5"})


@pytest.fixture
def test_logger():
    return logging.getLogger("test")


CATALOG_CSV = """field_name,field_type,is_custom,last_seen
f1,string,true,2024-06-01
f2,number,false,
f3,string,yes,2024-05-01
"""

ASSETS_CSV = """asset_id,asset_name,asset_type,subtype,status,last_edited,last_active,tags
A1,Welcome,Campaign,email,active,2024-06-01,2024-06-12T08:00:00Z,onboarding
A2,Journey,Canvas,,active,,2024-06-03,
A3,Dormant,Campaign,push,stopped,,,legacy
"""

REFERENCES_CSV = """ref_id,block_id,field_name,match_type,context_snippet,is_risk
R1,B1,f1,liquid,{{f1}},false
R2,B2,f2,liquid,{{f2}},false
R3,B2,ghost_y,liquid,{{ghost_y}},true
R4,B404,f3,liquid,{{f3}},false
"""

DEPENDENCIES_CSV = """source_asset_id,target_asset_id,dependency_type
A1,A2,triggers
"""

BLOCKS_CSV = """block_id,asset_id
B1,A1
B2,A2
B3,A3
"""


@pytest.fixture
def data_dir(tmp_path):
    """Directory holding a complete set of small CSV tables"""
    directory = tmp_path / "exports"
    directory.mkdir()
    (directory / "catalog_schema.csv").write_text(CATALOG_CSV, encoding="utf-8")
    (directory / "asset_inventory.csv").write_text(ASSETS_CSV, encoding="utf-8")
    (directory / "field_references.csv").write_text(REFERENCES_CSV, encoding="utf-8")
    (directory / "dependencies.csv").write_text(DEPENDENCIES_CSV, encoding="utf-8")
    (directory / "content_blocks.csv").write_text(BLOCKS_CSV, encoding="utf-8")
    (directory / "refresh_meta.json").write_text('{"refreshed_at_utc": "2024-06-12T10:00:00Z"}', encoding="utf-8")
    return directory


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Drop handlers installed by setup_logging so later tests log normally"""
    saved = logging.root.handlers[:]
    level = logging.root.level
    yield
    for handler in logging.root.handlers[:]:
        if handler not in saved:
            handler.close()
            logging.root.removeHandler(handler)
    logging.root.setLevel(level)


def set_local_timezone(name: str) -> None:
    """Switch the process-local timezone (POSIX only)"""
    os.environ["TZ"] = name
    if hasattr(time, "tzset"):
        time.tzset()


def _zone_available(name: str) -> bool:
    try:
        ZoneInfo(name)
    except ZoneInfoNotFoundError:
        return False
    return True


requires_pacific_tz = pytest.mark.skipif(
    not hasattr(time, "tzset") or not _zone_available("America/Los_Angeles"),
    reason="needs time.tzset and the tz database",
)


@pytest.fixture(autouse=True)
def utc_local_time():
    """Run every test with UTC as the local timezone"""
    saved = os.environ.get("TZ")
    set_local_timezone("UTC")
    yield
    if saved is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = saved
    if hasattr(time, "tzset"):
        time.tzset()
