import types
from decimal import Decimal

import pytest
from pydantic import ValidationError

from core.errors import ReferentialIntegrityError, StorageError
from models import Product as ProductRow
from repos.storage import StorageAccessor
from schemas.order import LineItemOut, OrderOut
from schemas.product import ProductOut
from schemas.shop import ShopOut
from services.loader import EntityLoader
from services.relationships import SHOP_PRODUCTS, LINE_ITEM_PRODUCT


@pytest.fixture
def loader(acme):
    return EntityLoader(StorageAccessor(acme))


class TestRootLoads:
    """Point lookups and the shop collection"""

    def test_load_shop(self, loader):
        assert loader.load_shop(1) == ShopOut(id=1, name="Acme")

    def test_unknown_shop_is_none(self, loader):
        assert loader.load_shop(999) is None

    def test_load_all_shops(self, loader):
        shops = loader.load_all_shops()
        assert sorted(shop.name for shop in shops) == ["Acme", "Bare"]

    def test_load_product_keeps_decimal_value(self, loader):
        product = loader.load_product(10)
        assert product == ProductOut(id=10, shop_id=1, name="Widget", value=Decimal("2.50"))

    def test_load_order_and_line_item(self, loader):
        assert loader.load_order(100) == OrderOut(id=100, shop_id=1)
        assert loader.load_line_item(1000) == LineItemOut(id=1000, product_id=10, order_id=100, quantity=3)
        assert loader.load_line_item(1) is None

    def test_entities_are_immutable(self, loader):
        shop = loader.load_shop(1)
        with pytest.raises(ValidationError):
            shop.name = "Renamed"

    def test_loading_a_shop_loads_nothing_else(self, loader, statements):
        loader.load_shop(1)
        assert len(statements) == 1


class TestOneToMany:
    """Children are filtered by their foreign key"""

    def test_products_of_shop(self, loader):
        assert [p.id for p in loader.load_products_of_shop(1)] == [10]
        assert [p.id for p in loader.load_products_of_shop(2)] == [20]

    def test_products_filter_ignores_scan_order(self, acme, loader):
        acme.add(ProductRow(id=5, shop_id=2, name="Early", value=Decimal("0.50")))
        acme.add(ProductRow(id=30, shop_id=1, name="Late", value=Decimal("9.00")))
        acme.commit()
        assert sorted(p.id for p in loader.load_products_of_shop(1)) == [10, 30]
        assert all(p.shop_id == 1 for p in loader.load_products_of_shop(1))

    def test_orders_of_shop_without_orders(self, loader):
        assert loader.load_orders_of_shop(2) == []

    def test_line_items_of_order_and_product(self, loader):
        assert [li.id for li in loader.load_line_items_of_order(100)] == [1000]
        assert [li.id for li in loader.load_line_items_of_product(10)] == [1000]
        assert loader.load_line_items_of_product(20) == []

    def test_generic_load_children(self, loader):
        assert loader.load_children(SHOP_PRODUCTS, 1) == loader.load_products_of_shop(1)


class TestBackReferences:
    """Required parents; a missing one is a referential integrity error"""

    def test_shop_of_product(self, loader):
        product = loader.load_product(10)
        assert loader.load_shop_of_product(product) == ShopOut(id=1, name="Acme")

    def test_shop_of_order(self, loader):
        assert loader.load_shop_of_order(OrderOut(id=100, shop_id=1)).name == "Acme"

    def test_product_and_order_of_line_item(self, loader):
        line_item = loader.load_line_item(1000)
        assert loader.load_product_of_line_item(line_item).id == 10
        assert loader.load_order_of_line_item(line_item).id == 100

    def test_dangling_product(self, dangling_line_item):
        loader = EntityLoader(StorageAccessor(dangling_line_item))
        line_item = loader.load_line_item(2000)
        with pytest.raises(ReferentialIntegrityError) as exc_info:
            loader.load_product_of_line_item(line_item)
        assert exc_info.value.relation == "products"
        assert exc_info.value.missing_id == 999

    def test_dangling_shop(self, loader):
        orphan = OrderOut(id=500, shop_id=42)
        with pytest.raises(ReferentialIntegrityError):
            loader.load_shop_of_order(orphan)

    def test_generic_load_parent(self, loader):
        line_item = loader.load_line_item(1000)
        assert loader.load_parent(LINE_ITEM_PRODUCT, line_item).name == "Widget"


class TestRowMapping:
    """Rows that do not fit the entity are storage failures"""

    def test_malformed_row(self):
        class FakeStorage:
            def scan_all(self, relation):
                return [types.SimpleNamespace(_mapping={"id": "not-a-number", "name": "Acme"})]

        with pytest.raises(StorageError):
            EntityLoader(FakeStorage()).load_all_shops()

