"""Load a small demo graph into an empty development database.

    python -m core.seed
"""
import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from core.config import settings
from core.db import Base, db_session, engine
from core.observability import setup_logging
from models import LineItem, Order, Product, Shop

logger = logging.getLogger(__name__)


def seed(db: Session) -> bool:
    """Insert the demo rows. Returns False when shops already exist."""
    # not forcing: only seed if empty
    if db.query(Shop).first():
        return False

    db.add(Shop(id=1, name="Acme"))
    db.add(Shop(id=2, name="Empty Shelf"))
    db.flush()
    db.add_all([
        Product(id=10, shop_id=1, name="Widget", value=Decimal("2.50")),
        Product(id=11, shop_id=1, name="Gadget", value=Decimal("4.25")),
        Order(id=100, shop_id=1),
        Order(id=101, shop_id=1),
    ])
    db.flush()
    db.add_all([
        LineItem(id=1000, product_id=10, order_id=100, quantity=3),
        LineItem(id=1001, product_id=11, order_id=101, quantity=2),
        LineItem(id=1002, product_id=10, order_id=101, quantity=1),
    ])
    return True


if __name__ == "__main__":
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    Base.metadata.create_all(bind=engine)
    with db_session() as db:
        if seed(db):
            logger.info("Seeded demo data")
        else:
            logger.info("Database already has shops, nothing seeded")
