"""Domain service: Catalog Resolver.

The only component allowed to read price and availability for pricing.
Each reference is looked up in its own table; a legacy id that happens to
exist in the current catalog (or the other way round) is still not found.
Nothing is cached between calls so every checkout sees live prices.
"""

from __future__ import annotations

from ordercore.domain.exceptions import ItemNotFound, ItemUnavailable
from ordercore.domain.model.catalog import CatalogItem, CurrentItemRef, ItemRef, LegacyItemRef
from ordercore.domain.repository.catalog_repository import CatalogRepository


class CatalogResolver:

    def __init__(self, catalog_repo: CatalogRepository) -> None:
        self._catalog_repo = catalog_repo

    def resolve(self, ref: ItemRef) -> CatalogItem:
        if isinstance(ref, CurrentItemRef):
            item = self._catalog_repo.get_current_item(ref.id)
        elif isinstance(ref, LegacyItemRef):
            item = self._catalog_repo.get_legacy_item(ref.id)
        else:
            raise TypeError(f"Not an item reference: {ref!r}")

        if item is None:
            raise ItemNotFound(f"{ref.kind.value.capitalize()} item {ref.id} not found")
        if not item.is_purchasable:
            raise ItemUnavailable(f"{item.name or ref} is not available")
        return item
