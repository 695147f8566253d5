# services/loader.py
import logging
from typing import List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy import Row

from core.errors import ReferentialIntegrityError, StorageError
from repos.storage import StorageAccessor
from schemas.order import LineItemOut, OrderOut
from schemas.product import ProductOut
from schemas.shop import ShopOut
from services.relationships import (
    BelongsTo, HasMany,
    LINE_ITEM_ORDER, LINE_ITEM_PRODUCT, ORDER_LINE_ITEMS, ORDER_SHOP,
    PRODUCT_LINE_ITEMS, PRODUCT_SHOP, SHOP_ORDERS, SHOP_PRODUCTS,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=BaseModel)


class EntityLoader:
    """
    Maps storage rows to entities and resolves relationships on demand.

    Nothing is loaded eagerly: every relationship is a separate lookup issued
    only when asked for. Root lookups map a missing row to ``None``; required
    back-references raise ``ReferentialIntegrityError`` instead.
    """

    def __init__(self, storage: StorageAccessor):
        self.storage = storage

    # Root lookups

    def load_shop(self, id: int) -> Optional[ShopOut]:
        return self._load_one("shops", ShopOut, id)

    def load_all_shops(self) -> List[ShopOut]:
        return [_to_entity(ShopOut, row) for row in self.storage.scan_all("shops")]

    def load_product(self, id: int) -> Optional[ProductOut]:
        return self._load_one("products", ProductOut, id)

    def load_order(self, id: int) -> Optional[OrderOut]:
        return self._load_one("orders", OrderOut, id)

    def load_line_item(self, id: int) -> Optional[LineItemOut]:
        return self._load_one("line_items", LineItemOut, id)

    # One-to-many

    def load_products_of_shop(self, shop_id: int) -> List[ProductOut]:
        return self.load_children(SHOP_PRODUCTS, shop_id)

    def load_orders_of_shop(self, shop_id: int) -> List[OrderOut]:
        return self.load_children(SHOP_ORDERS, shop_id)

    def load_line_items_of_product(self, product_id: int) -> List[LineItemOut]:
        return self.load_children(PRODUCT_LINE_ITEMS, product_id)

    def load_line_items_of_order(self, order_id: int) -> List[LineItemOut]:
        return self.load_children(ORDER_LINE_ITEMS, order_id)

    # Many-to-one

    def load_shop_of_product(self, product: ProductOut) -> ShopOut:
        return self.load_parent(PRODUCT_SHOP, product)

    def load_shop_of_order(self, order: OrderOut) -> ShopOut:
        return self.load_parent(ORDER_SHOP, order)

    def load_product_of_line_item(self, line_item: LineItemOut) -> ProductOut:
        return self.load_parent(LINE_ITEM_PRODUCT, line_item)

    def load_order_of_line_item(self, line_item: LineItemOut) -> OrderOut:
        return self.load_parent(LINE_ITEM_ORDER, line_item)

    # Generic relationship resolution

    def load_children(self, rel: HasMany[E], parent_id: int) -> List[E]:
        rows = self.storage.scan_by_foreign_key(rel.relation, rel.fk_column, parent_id)
        return [_to_entity(rel.entity, row) for row in rows]

    def load_parent(self, rel: BelongsTo[E], child: BaseModel) -> E:
        parent_id = getattr(child, rel.fk_attr)
        parent = self._load_one(rel.relation, rel.entity, parent_id)
        if parent is None:
            referenced_by = f"{type(child).__name__}({child.id}).{rel.fk_attr}"
            logger.warning(
                f"Dangling reference to {rel.relation} {parent_id} from {referenced_by}",
                extra={"relation": rel.relation, "error_code": "REFERENTIAL_INTEGRITY"},
            )
            raise ReferentialIntegrityError(rel.relation, parent_id, referenced_by)
        return parent

    def _load_one(self, relation: str, entity: Type[E], id: int) -> Optional[E]:
        row = self.storage.find_by_id(relation, id)
        if row is None:
            return None
        return _to_entity(entity, row)


def _to_entity(entity: Type[E], row: Row) -> E:
    try:
        return entity.model_validate(dict(row._mapping))
    except ValidationError as e:
        raise StorageError(f"malformed {entity.__name__} row: {e}", "map_row") from e
