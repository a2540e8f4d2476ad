"""Abstract read-only access to the two catalog tables.

Defined in the domain layer so the domain never depends on
infrastructure.  Writes belong to catalog management, not to this core.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ordercore.domain.model.catalog import CatalogItem


class CatalogRepository(ABC):

    @abstractmethod
    def get_current_item(self, item_id: str) -> CatalogItem | None:
        """Return a row of the current catalog (``menu_items``), or None."""

    @abstractmethod
    def get_legacy_item(self, item_id: str) -> CatalogItem | None:
        """Return a row of the legacy catalog (``dishes``), or None."""
