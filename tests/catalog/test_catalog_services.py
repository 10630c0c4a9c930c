"""
Tests for catalog loading, filtering and sorting
"""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from apps.api_client.services import StoreDataError
from apps.catalog.schemas import Product
from apps.catalog.serializers import create_product_from_api
from apps.catalog.services import CatalogFilters, HeroSectionService, ProductCatalogService, filter_products
from tests.fakes import InMemoryStore, product_row


def _product(product_id: str, name: str, price: str, category_id: str | None = None,
             created_at: datetime | None = None, description: str | None = None) -> Product:
    return Product(id=product_id, name=name, price=Decimal(price), category_id=category_id,
                   created_at=created_at, description=description)


@pytest.fixture
def products() -> list[Product]:
    return [
        _product('p1', 'banana stand', '30', 'c1', datetime(2026, 1, 3, tzinfo=UTC), 'Fresh fruit display'),
        _product('p2', 'Apple Crate', '10', 'c2', datetime(2026, 1, 1, tzinfo=UTC)),
        _product('p3', 'cherry Box', '20', 'c1', datetime(2026, 1, 2, tzinfo=UTC)),
        _product('p4', 'Durian Tin', '20', 'c2', None),
    ]


class TestFilterProducts:
    def test_defaults_to_newest_first(self, products) -> None:
        ids = [p.id for p in filter_products(products)]
        # Products without a creation time sort after dated ones
        assert ids == ['p1', 'p3', 'p2', 'p4']

    def test_name_sort_is_case_insensitive(self, products) -> None:
        ids = [p.id for p in filter_products(products, sort_by='name', sort_order='asc')]
        assert ids == ['p2', 'p1', 'p3', 'p4']

    def test_price_sort_is_stable_for_ties(self, products) -> None:
        ids = [p.id for p in filter_products(products, sort_by='price', sort_order='asc')]
        assert ids == ['p2', 'p3', 'p4', 'p1']

    def test_category_and_price_range_combine(self, products) -> None:
        filters = CatalogFilters(category_id='c1', min_price=Decimal('25'))
        assert [p.id for p in filter_products(products, filters)] == ['p1']

    def test_search_matches_description(self, products) -> None:
        filters = CatalogFilters(search='FRUIT')
        assert [p.id for p in filter_products(products, filters)] == ['p1']

    def test_max_price_is_inclusive(self, products) -> None:
        filters = CatalogFilters(max_price=Decimal('20'))
        assert {p.id for p in filter_products(products, filters)} == {'p2', 'p3', 'p4'}

    def test_unknown_sort_falls_back_to_defaults(self, products) -> None:
        assert filter_products(products, sort_by='rating', sort_order='sideways') == filter_products(products)

    def test_input_is_not_mutated(self, products) -> None:
        before = [p.id for p in products]
        filter_products(products, sort_by='price', sort_order='desc')
        assert [p.id for p in products] == before


class TestProductRows:
    def test_negative_price_rejected(self) -> None:
        with pytest.raises(StoreDataError):
            create_product_from_api(product_row('bad', 'Broken', '-1.00'))

    def test_missing_name_rejected(self) -> None:
        row = product_row('bad', 'x', '1.00')
        del row['name']
        with pytest.raises(StoreDataError):
            create_product_from_api(row)

    def test_low_stock_and_discount(self) -> None:
        product = create_product_from_api(
            product_row('p', 'Mug', '75.00', inventory_count=5, compare_price='100.00'),
        )
        assert product.is_low_stock
        assert product.discount_percent == 25


class TestProductCatalogService:
    def test_loads_only_active_with_category_names(self, store) -> None:
        products = ProductCatalogService(store).load_products()

        assert {p.id for p in products} == {'prod-a', 'prod-b'}
        assert all(p.category_name == 'Audio' for p in products)

    def test_malformed_rows_are_skipped(self, store) -> None:
        store.tables['products'].append({'id': 'broken', 'price': 'n/a', 'is_active': True})

        products = ProductCatalogService(store).load_products()

        assert 'broken' not in {p.id for p in products}

    def test_inactive_product_detail_is_hidden(self, store) -> None:
        service = ProductCatalogService(store)

        assert service.get_product('prod-c') is None
        assert service.get_product('prod-a').category_name == 'Audio'

    def test_products_by_ids_can_include_inactive(self, store) -> None:
        found = ProductCatalogService(store).get_products_by_ids(['prod-a', 'prod-c'], active_only=False)
        assert set(found) == {'prod-a', 'prod-c'}

    def test_hero_sections_ordered_and_active(self) -> None:
        store = InMemoryStore({'hero_sections': [
            {'id': 'h2', 'title': 'Second', 'order_index': 2, 'is_active': True},
            {'id': 'h1', 'title': 'First', 'order_index': 1, 'is_active': True},
            {'id': 'h0', 'title': 'Hidden', 'order_index': 0, 'is_active': False},
        ]})

        sections = HeroSectionService(store).load_active()

        assert [s.id for s in sections] == ['h1', 'h2']
