"""
Catalog loader — builds a sealed StepCatalog from a YAML file.

Expected structure::

    version: 1
    catalog:
      - id: nmap
        key: "A"
        description: Install Nmap
        precondition: {binary_on_path: nmap}
        action: {kind: package, packages: [nmap]}
      - id: base-tools          # a bundle: has `steps`
        key: "3"
        steps: [nmap, ...]

``${name}`` placeholders in any string are filled from
ProvisionConfig.variables(); unknown placeholders (e.g. ``$HOME``) are
left for the shell.
"""

from __future__ import annotations

import logging
from pathlib import Path
from string import Template
from typing import Any

import yaml
from pydantic import ValidationError

from catana.core.config.loader import ProvisionConfig
from catana.core.data import default_catalog_path
from catana.core.engine.catalog import StepCatalog
from catana.core.errors import CatalogError
from catana.core.models.step import Bundle, Step

logger = logging.getLogger(__name__)


def substitute(value: Any, variables: dict[str, str]) -> Any:
    """Recursively fill ``${name}`` placeholders in strings."""
    if isinstance(value, str):
        return Template(value).safe_substitute(variables)
    if isinstance(value, list):
        return [substitute(v, variables) for v in value]
    if isinstance(value, dict):
        return {k: substitute(v, variables) for k, v in value.items()}
    return value


def build_catalog(entries: list[dict[str, Any]]) -> StepCatalog:
    """Register raw catalog entries in order and seal the result.

    Raises:
        CatalogError: On any invalid entry, duplicate or bad reference.
    """
    catalog = StepCatalog()

    for index, entry in enumerate(entries, start=1):
        if not isinstance(entry, dict):
            raise CatalogError(f"Catalog entry #{index} is not a mapping")
        label = entry.get("id", f"#{index}")
        try:
            if "steps" in entry:
                catalog.register_bundle(Bundle.model_validate(entry))
            else:
                catalog.register(Step.model_validate(entry))
        except ValidationError as e:
            raise CatalogError(f"Invalid catalog entry '{label}': {e}") from e

    return catalog.seal()


def load_catalog(
    path: Path | None = None,
    config: ProvisionConfig | None = None,
) -> StepCatalog:
    """Load, validate and seal a catalog file.

    Args:
        path: Catalog file. None uses config.catalog_file, then the
            built-in catalog.
        config: Source of placeholder values.

    Raises:
        CatalogError: If the file is missing, unreadable or invalid.
    """
    config = config or ProvisionConfig()
    path = path or config.catalog_file or default_catalog_path()

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogError(f"Cannot read catalog {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise CatalogError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("catalog"), list):
        raise CatalogError(f"Expected a mapping with a 'catalog' list in {path}")

    entries = substitute(data["catalog"], config.variables())
    catalog = build_catalog(entries)
    logger.info("Loaded %d steps and %d bundles from %s", len(catalog), len(catalog.bundles()), path)
    return catalog
