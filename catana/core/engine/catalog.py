"""
Step catalog — the static, ordered registry of provisioning steps.

The catalog is filled once at start-up and then sealed. Registration
order is a user-facing contract: menu keys and ``all()`` follow it.
Any inconsistency (duplicate id or key, bundle naming an unknown
step, registration after sealing) is a CatalogError raised while the
catalog is being built, never later at use time.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from catana.core.errors import CatalogError
from catana.core.models.step import Bundle, Step

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MenuEntry:
    """One selectable line of the menu."""

    key: str
    id: str
    description: str
    is_bundle: bool = False


class StepCatalog:
    """Ordered registry of steps and bundles."""

    def __init__(self) -> None:
        self._steps: dict[str, Step] = {}
        self._bundles: dict[str, Bundle] = {}
        self._menu: list[MenuEntry] = []
        self._sealed = False

    # ── Construction ────────────────────────────────────────────

    def register(self, step: Step) -> None:
        self._check_new(step.id, step.key)
        self._steps[step.id] = step
        if step.key:
            self._menu.append(MenuEntry(key=step.key, id=step.id, description=step.description))
        logger.debug("Registered step: %s", step.id)

    def register_bundle(self, bundle: Bundle) -> None:
        self._check_new(bundle.id, bundle.key)
        self._bundles[bundle.id] = bundle
        if bundle.key:
            self._menu.append(
                MenuEntry(key=bundle.key, id=bundle.id, description=bundle.description, is_bundle=True)
            )
        logger.debug("Registered bundle: %s (%d steps)", bundle.id, len(bundle.steps))

    def seal(self) -> StepCatalog:
        """Validate bundle references and freeze the catalog."""
        for bundle in self._bundles.values():
            missing = [s for s in bundle.steps if s not in self._steps]
            if missing:
                raise CatalogError(
                    f"Bundle '{bundle.id}' references unknown step(s): {', '.join(missing)}"
                )
        self._sealed = True
        return self

    def _check_new(self, entry_id: str, key: str | None) -> None:
        if self._sealed:
            raise CatalogError(f"Catalog is sealed; cannot register '{entry_id}'")
        if entry_id in self._steps or entry_id in self._bundles:
            raise CatalogError(f"Duplicate catalog id: '{entry_id}'")
        if key and self._find_key(key) is not None:
            raise CatalogError(f"Duplicate menu key '{key}' for '{entry_id}'")

    # ── Queries ─────────────────────────────────────────────────

    @property
    def sealed(self) -> bool:
        return self._sealed

    def get(self, step_id: str) -> Step | None:
        return self._steps.get(step_id)

    def get_bundle(self, bundle_id: str) -> Bundle | None:
        return self._bundles.get(bundle_id)

    def all(self) -> list[Step]:
        """All steps in registration order."""
        return list(self._steps.values())

    def bundles(self) -> list[Bundle]:
        return list(self._bundles.values())

    def menu(self) -> list[MenuEntry]:
        """Keyed entries in registration order."""
        return list(self._menu)

    def resolve_key(self, key: str) -> str | None:
        """Map a menu key (case-insensitive) to its step or bundle id."""
        entry = self._find_key(key)
        return entry.id if entry else None

    def expand(self, ids: Iterable[str]) -> list[str]:
        """Replace bundle ids by their member step ids, in order.

        Unknown ids are passed through unchanged so the batch can
        record them as unknown steps.
        """
        expanded: list[str] = []
        for entry_id in ids:
            bundle = self._bundles.get(entry_id)
            if bundle is not None:
                expanded.extend(bundle.steps)
            else:
                expanded.append(entry_id)
        return expanded

    def _find_key(self, key: str) -> MenuEntry | None:
        wanted = key.strip().lower()
        for entry in self._menu:
            if entry.key.lower() == wanted:
                return entry
        return None

    def __len__(self) -> int:
        return len(self._steps)

    def __contains__(self, step_id: object) -> bool:
        return step_id in self._steps
