from pydantic import BaseModel, Field, StrictInt

from app.schemas.product import ProductOut


# StrictInt: JSON true or "2" must not be coerced into a quantity
class CartItemIn(BaseModel):
    productId: int
    size: str = Field(min_length=1)
    color: str = Field(min_length=1)
    quantity: StrictInt = 1


class CartItemUpdate(BaseModel):
    size: str = Field(min_length=1)
    color: str = Field(min_length=1)
    # Zero or negative removes the line item
    quantity: StrictInt


class CartItemOut(BaseModel):
    product: ProductOut
    quantity: int
    size: str
    color: str


class CartCleared(BaseModel):
    success: bool = True
    message: str = "Cart cleared"
