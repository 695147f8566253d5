from decimal import Decimal

from pydantic import BaseModel


class ProductOut(BaseModel):
    id: int
    shop_id: int
    name: str
    # Kept in the store's native decimal precision; widened to float on output
    value: Decimal

    class Config:
        from_attributes = True
        frozen = True
