from pydantic import BaseModel


class OrderOut(BaseModel):
    id: int
    shop_id: int

    class Config:
        from_attributes = True
        frozen = True


class LineItemOut(BaseModel):
    id: int
    product_id: int
    order_id: int
    quantity: int

    class Config:
        from_attributes = True
        frozen = True
