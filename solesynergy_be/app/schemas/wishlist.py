from pydantic import BaseModel
from datetime import datetime

from app.schemas.product import ProductOut


class WishlistItemIn(BaseModel):
    productId: int


class WishlistItemOut(BaseModel):
    product: ProductOut
    dateAdded: datetime
