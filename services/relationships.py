"""Relationship capabilities between entity pairs.

Each direction is declared once, explicitly: ``HasMany`` for one-to-many
scans and ``BelongsTo`` for many-to-one back-references. The loader resolves
both generically from these declarations.
"""

from dataclasses import dataclass
from typing import Generic, Type, TypeVar

from pydantic import BaseModel

from schemas.order import LineItemOut, OrderOut
from schemas.product import ProductOut
from schemas.shop import ShopOut

E = TypeVar("E", bound=BaseModel)


@dataclass(frozen=True)
class HasMany(Generic[E]):
    relation: str
    fk_column: str
    entity: Type[E]


@dataclass(frozen=True)
class BelongsTo(Generic[E]):
    relation: str
    fk_attr: str
    entity: Type[E]


SHOP_PRODUCTS = HasMany("products", "shop_id", ProductOut)
SHOP_ORDERS = HasMany("orders", "shop_id", OrderOut)
PRODUCT_LINE_ITEMS = HasMany("line_items", "product_id", LineItemOut)
ORDER_LINE_ITEMS = HasMany("line_items", "order_id", LineItemOut)

PRODUCT_SHOP = BelongsTo("shops", "shop_id", ShopOut)
ORDER_SHOP = BelongsTo("shops", "shop_id", ShopOut)
LINE_ITEM_PRODUCT = BelongsTo("products", "product_id", ProductOut)
LINE_ITEM_ORDER = BelongsTo("orders", "order_id", OrderOut)
