# repos/storage.py
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import Row, Select, Table, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.errors import StorageError
from models import LineItem, Order, Product, Shop

logger = logging.getLogger(__name__)

RELATIONS: Dict[str, Table] = {
    model.__tablename__: model.__table__
    for model in (Shop, Product, Order, LineItem)
}


class StorageAccessor:
    """Read-only parameterized lookups against the four relations.

    Rows come back as SQLAlchemy ``Row`` tuples in column order. Any driver
    failure is raised as ``StorageError``; a missing row is not a failure.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, relation: str, id: int) -> Optional[Row]:
        table = _table(relation)
        stmt = select(table).where(table.c.id == id)
        rows = self._execute(stmt, "find_by_id", relation)
        return rows[0] if rows else None

    def scan_all(self, relation: str) -> List[Row]:
        table = _table(relation)
        return list(self._execute(select(table), "scan_all", relation))

    def scan_by_foreign_key(self, relation: str, fk_column: str, parent_id: int) -> List[Row]:
        table = _table(relation)
        if fk_column not in table.c:
            raise ValueError(f"Relation '{relation}' has no column '{fk_column}'")
        stmt = select(table).where(table.c[fk_column] == parent_id)
        return list(self._execute(stmt, "scan_by_foreign_key", relation))

    def scan_joined_aggregate(self, order_id: int) -> List[Tuple[int, Any]]:
        """(quantity, price) for each line item of an order, in one query.

        Outer join so a line item with a dangling product_id still shows up,
        with a ``None`` price.
        """
        line_items = RELATIONS["line_items"]
        products = RELATIONS["products"]
        stmt = (
            select(line_items.c.quantity, products.c.value)
            .select_from(line_items.outerjoin(products, line_items.c.product_id == products.c.id))
            .where(line_items.c.order_id == order_id)
        )
        return [(row[0], row[1]) for row in self._execute(stmt, "scan_joined_aggregate", "line_items")]

    def _execute(self, stmt: Select, operation: str, relation: str) -> Sequence[Row]:
        logger.debug(f"{operation} on {relation}", extra={"relation": relation})
        try:
            return self.db.execute(stmt).all()
        except SQLAlchemyError as e:
            logger.error(f"{operation} on {relation} failed: {e}", extra={"relation": relation})
            # A failed statement aborts the transaction on PostgreSQL; later lookups need a fresh one
            self.db.rollback()
            raise StorageError(str(e), operation) from e


class CachingStorageAccessor(StorageAccessor):
    """Coalesces duplicate point lookups within one resolution pass.

    Keyed by (relation, id). Scans are never cached. One instance must not
    outlive the request that created it.
    """

    def __init__(self, db: Session):
        super().__init__(db)
        self._rows: Dict[Tuple[str, int], Optional[Row]] = {}

    def find_by_id(self, relation: str, id: int) -> Optional[Row]:
        key = (relation, id)
        if key not in self._rows:
            self._rows[key] = super().find_by_id(relation, id)
        return self._rows[key]


def _table(relation: str) -> Table:
    try:
        return RELATIONS[relation]
    except KeyError:
        raise ValueError(f"Unknown relation: {relation}") from None
