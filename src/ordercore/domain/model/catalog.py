"""Catalog items, as seen by checkout.

The store is part-way through a catalog migration: new items live in the
``menu_items`` table, older ones in the legacy ``dishes`` table.  A line item
points at exactly one of them, so the reference is a tagged union rather
than a pair of nullable ids.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from ordercore.domain.exceptions import InvalidLineItem
from ordercore.domain.model.value_objects import Money


class ItemKind(Enum):
    CURRENT = "current"
    LEGACY = "legacy"


@dataclass(frozen=True)
class CurrentItemRef:
    """Reference into the current catalog (``menu_items``)."""

    id: str
    kind = ItemKind.CURRENT

    def __str__(self) -> str:
        return f"menu item {self.id}"


@dataclass(frozen=True)
class LegacyItemRef:
    """Reference into the legacy catalog (``dishes``)."""

    id: str
    kind = ItemKind.LEGACY

    def __str__(self) -> str:
        return f"legacy item {self.id}"


ItemRef = Union[CurrentItemRef, LegacyItemRef]


def item_ref(kind: ItemKind | str, item_id: str) -> ItemRef:
    """Build a reference from an explicit kind tag."""
    if not item_id or not str(item_id).strip():
        raise InvalidLineItem("Each item must include an item id")
    try:
        kind = ItemKind(kind) if not isinstance(kind, ItemKind) else kind
    except ValueError as exc:
        raise InvalidLineItem(f"Unknown item kind: {kind!r}") from exc
    if kind is ItemKind.CURRENT:
        return CurrentItemRef(str(item_id).strip())
    return LegacyItemRef(str(item_id).strip())


def item_ref_from_ids(menu_item_id: str | None, product_id: str | None) -> ItemRef:
    """Build a reference from the two nullable ids a cart row carries.

    Exactly one must be set.
    """
    has_current = bool(menu_item_id and str(menu_item_id).strip())
    has_legacy = bool(product_id and str(product_id).strip())
    if has_current and has_legacy:
        raise InvalidLineItem(
            "Each item must reference either a menu item or a legacy product, not both"
        )
    if not has_current and not has_legacy:
        raise InvalidLineItem("Each item must include a menu_item_id or product_id")
    if has_current:
        return CurrentItemRef(str(menu_item_id).strip())
    return LegacyItemRef(str(product_id).strip())


@dataclass(frozen=True)
class CatalogItem:
    """Live price and availability of one catalog row.

    Read-only from this core's point of view; catalog management owns writes.
    """

    ref: ItemRef
    name: str
    price: Money
    available: bool = True

    @property
    def is_purchasable(self) -> bool:
        return self.available and self.price.amount > 0
