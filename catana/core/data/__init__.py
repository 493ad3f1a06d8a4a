"""
Static data shipped with the package.

Catalog files live in ``catana/core/data/catalogs/``; the built-in
catalog is ``default.yml``.
"""

from __future__ import annotations

from pathlib import Path

_DATA_DIR = Path(__file__).parent
CATALOGS_DIR = _DATA_DIR / "catalogs"


def default_catalog_path() -> Path:
    """Path of the catalog used when no override is configured."""
    return CATALOGS_DIR / "default.yml"
