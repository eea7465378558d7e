"""
Catalog Governance - governance analytics for messaging content catalogs

Loads catalog, asset, field-reference and content-block tables, joins them
into a single reference table, and computes KPIs, field usage rankings and
governance insights for a selected activity period.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

__all__ = ["__version__", "main"]

if TYPE_CHECKING:
    from catalog_governance.cli.main import main
    from catalog_governance.core.version import __version__

_LAZY_EXPORTS = {
    "__version__": "catalog_governance.core.version",
    "main": "catalog_governance.cli.main",
}


def __getattr__(name: str) -> Any:
    if name in _LAZY_EXPORTS:
        import importlib

        return getattr(importlib.import_module(_LAZY_EXPORTS[name]), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
