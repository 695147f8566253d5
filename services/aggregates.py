# services/aggregates.py
from decimal import Decimal

from core.errors import ReferentialIntegrityError
from repos.storage import StorageAccessor
from schemas.order import LineItemOut


def _to_decimal(value: float | int | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class AggregateEngine:
    """Values derived across two entities.

    Arithmetic stays in the store's decimal type; the result is widened to
    float once, after the last addition.
    """

    def __init__(self, storage: StorageAccessor):
        self.storage = storage

    def order_total(self, order_id: int) -> float:
        return float(self.order_total_native(order_id))

    def order_total_native(self, order_id: int) -> Decimal:
        total = Decimal("0")
        for quantity, price in self.storage.scan_joined_aggregate(order_id):
            if price is None:
                raise ReferentialIntegrityError("products", None, f"a line item of order {order_id}")
            total += _to_decimal(price) * quantity
        return total

    def line_item_value(self, line_item: LineItemOut) -> float:
        return float(self.line_item_value_native(line_item))

    def line_item_value_native(self, line_item: LineItemOut) -> Decimal:
        row = self.storage.find_by_id("products", line_item.product_id)
        if row is None:
            raise ReferentialIntegrityError(
                "products", line_item.product_id, f"LineItemOut({line_item.id}).product_id",
            )
        return _to_decimal(row.value) * line_item.quantity
