# Import models so that SQLAlchemy metadata includes them on app startup
from .shop import Shop  # noqa: F401
from .product import Product  # noqa: F401
from .order import Order  # noqa: F401
from .line_item import LineItem  # noqa: F401
