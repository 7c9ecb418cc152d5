import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.errors import NotFound, InvalidRequest, ERROR_PRODUCT_NOT_FOUND
from app.models.product import Product

logger = logging.getLogger(__name__)


class Catalog:
    """Read-only product lookups used by the cart/wishlist store."""

    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def product_exists(self, product_id: int) -> bool:
        # Column query so a stale identity-map entry is not trusted
        return self.db.query(Product.id).filter(Product.id == product_id).first() is not None

    def resolve_product(self, product_id: int) -> Product:
        product = self.get_product(product_id)
        if not product:
            logger.warning("Product %s not found in catalog", product_id)
            raise NotFound(ERROR_PRODUCT_NOT_FOUND)
        return product

    def validate_variant(self, product: Product, size: str, color: str) -> None:
        """Raise InvalidRequest unless size and color are offered by the product."""
        sizes: List[str] = list(product.sizes or [])
        colors: List[str] = list(product.colors or [])
        if size not in sizes:
            raise InvalidRequest(f"Size {size!r} is not available for this product")
        if color not in colors:
            raise InvalidRequest(f"Color {color!r} is not available for this product")
