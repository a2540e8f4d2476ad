"""Unit tests for item references and the Catalog Resolver."""

import pytest

from ordercore.domain.exceptions import InvalidLineItem, ItemNotFound, ItemUnavailable
from ordercore.domain.model.catalog import (
    CatalogItem,
    CurrentItemRef,
    ItemKind,
    LegacyItemRef,
    item_ref,
    item_ref_from_ids,
)
from ordercore.domain.model.value_objects import Money
from ordercore.domain.service.catalog_resolver import CatalogResolver
from tests.fakes import FakeCatalogRepository


class TestItemRefFromIds:

    def test_menu_item_id_gives_current_ref(self):
        assert item_ref_from_ids("m1", None) == CurrentItemRef("m1")

    def test_product_id_gives_legacy_ref(self):
        assert item_ref_from_ids(None, "d1") == LegacyItemRef("d1")

    def test_neither_rejected(self):
        with pytest.raises(InvalidLineItem, match="menu_item_id or product_id"):
            item_ref_from_ids(None, "  ")

    def test_both_rejected(self):
        with pytest.raises(InvalidLineItem, match="not both"):
            item_ref_from_ids("m1", "d1")

    def test_refs_with_same_id_are_not_equal_across_kinds(self):
        assert CurrentItemRef("7") != LegacyItemRef("7")


class TestItemRefFromKind:

    def test_kind_string(self):
        ref = item_ref("legacy", "d1")
        assert ref.kind is ItemKind.LEGACY

    def test_unknown_kind_rejected(self):
        with pytest.raises(InvalidLineItem, match="Unknown item kind"):
            item_ref("product", "d1")


def _resolver(items: list[CatalogItem]) -> tuple[CatalogResolver, FakeCatalogRepository]:
    repo = FakeCatalogRepository(items)
    return CatalogResolver(repo), repo


class TestCatalogResolver:

    def test_resolves_current_item(self):
        resolver, _ = _resolver([CatalogItem(CurrentItemRef("x"), "Latte", Money.of("4.50"))])
        assert resolver.resolve(CurrentItemRef("x")).price == Money.of("4.50")

    def test_resolves_legacy_item(self):
        resolver, _ = _resolver([CatalogItem(LegacyItemRef("y"), "Old Soup", Money.of("5.50"))])
        assert resolver.resolve(LegacyItemRef("y")).name == "Old Soup"

    def test_does_not_cross_match_tables(self):
        resolver, _ = _resolver([CatalogItem(CurrentItemRef("z"), "Tea", Money.of("2.00"))])
        with pytest.raises(ItemNotFound):
            resolver.resolve(LegacyItemRef("z"))

    def test_missing_item(self):
        resolver, _ = _resolver([])
        with pytest.raises(ItemNotFound, match="not found"):
            resolver.resolve(CurrentItemRef("nope"))

    def test_unavailable_item(self):
        resolver, _ = _resolver(
            [CatalogItem(CurrentItemRef("x"), "Latte", Money.of("4.50"), available=False)]
        )
        with pytest.raises(ItemUnavailable, match="Latte is not available"):
            resolver.resolve(CurrentItemRef("x"))

    def test_zero_price_is_unavailable(self):
        resolver, _ = _resolver([CatalogItem(CurrentItemRef("x"), "Free", Money.of("0"))])
        with pytest.raises(ItemUnavailable):
            resolver.resolve(CurrentItemRef("x"))

    def test_reads_live_data_every_time(self):
        resolver, repo = _resolver([CatalogItem(CurrentItemRef("x"), "Latte", Money.of("4.50"))])
        resolver.resolve(CurrentItemRef("x"))
        repo.put(CatalogItem(CurrentItemRef("x"), "Latte", Money.of("4.75")))
        assert resolver.resolve(CurrentItemRef("x")).price == Money.of("4.75")
        assert repo.reads == 2
