"""
Store error taxonomy.

Raised synchronously by the cart/wishlist store and the catalog; app.main maps
them to HTTP responses of the shape {"success": false, "message": ...}.
"""

ERROR_PRODUCT_NOT_FOUND = "Product not found"
ERROR_CATEGORY_NOT_FOUND = "Category not found"
ERROR_CART_ITEM_NOT_FOUND = "Item not found in cart"
ERROR_INVALID_QUANTITY = "Quantity must be greater than 0"
ERROR_INVALID_REQUEST = "Invalid request"


class StoreError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(StoreError):
    """Referenced product, cart item or container does not exist."""
    status_code = 404
    default_message = "Not found"


class InvalidRequest(StoreError):
    """Malformed or out-of-range input (bad quantity, size/color not offered)."""
    status_code = 400
    default_message = ERROR_INVALID_REQUEST


class Conflict(StoreError):
    """A concurrent mutation could not be reconciled."""
    status_code = 409
    default_message = "Cart was modified concurrently, please retry"
