from pydantic import BaseModel


class ShopOut(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True
        frozen = True
