import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import update, delete, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import (
    Conflict,
    InvalidRequest,
    NotFound,
    ERROR_CART_ITEM_NOT_FOUND,
    ERROR_INVALID_QUANTITY,
    ERROR_PRODUCT_NOT_FOUND,
)
from app.models.cart import Cart, CartItem
from app.models.wishlist import Wishlist, WishlistItem
from app.services.catalog import Catalog
from app.utils.locks import UserLocks, user_locks

logger = logging.getLogger(__name__)

CART = "cart"
WISHLIST = "wishlist"


def _ensure_int(value, field: str = "quantity") -> int:
    # bool is an int subclass; True must not sneak in as quantity 1
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRequest(f"{field} must be an integer")
    return value


class CartWishlistStore:
    """
    Per-user cart and wishlist.

    Cart line items are keyed by (product_id, size, color); adding an existing
    key accumulates quantity. Wishlist entries are keyed by product_id; adding
    an existing product is a no-op. Both containers are created lazily on
    first access and are never deleted, only emptied.

    Every read-modify-write runs under the user's lock, and the storage
    writes themselves are conditional (UPDATE ... WHERE <identity key>) so a
    second process racing on the same row cannot drop an increment. A unique
    constraint violation from such a race is resolved by retrying once.
    """

    def __init__(self, db: Session, catalog: Optional[Catalog] = None, locks: Optional[UserLocks] = None):
        self.db = db
        self.catalog = catalog or Catalog(db)
        self.locks = locks or user_locks

    # ---- containers ----

    def _get_or_create_cart(self, user_id: int) -> Cart:
        cart = self.db.query(Cart).filter(Cart.user_id == user_id).first()
        if not cart:
            cart = Cart(user_id=user_id)
            self.db.add(cart)
            self.db.flush()
            logger.info("Created cart %s for user %s", cart.id, user_id)
        return cart

    def _get_or_create_wishlist(self, user_id: int) -> Wishlist:
        wl = self.db.query(Wishlist).filter(Wishlist.user_id == user_id).first()
        if not wl:
            wl = Wishlist(user_id=user_id)
            self.db.add(wl)
            self.db.flush()
            logger.info("Created wishlist %s for user %s", wl.id, user_id)
        return wl

    def _cart_items(self, cart: Cart) -> List[CartItem]:
        self.db.refresh(cart)
        return list(cart.items)

    def _wishlist_items(self, wl: Wishlist) -> List[WishlistItem]:
        self.db.refresh(wl)
        return list(wl.items)

    # ---- line item statements ----

    def _match(self, stmt, cart_id: int, product_id: int, size: str, color: str):
        return stmt.where(
            CartItem.cart_id == cart_id,
            CartItem.product_id == product_id,
            CartItem.size == size,
            CartItem.color == color,
        )

    def _increment_item(self, cart_id: int, product_id: int, size: str, color: str, quantity: int) -> bool:
        stmt = self._match(update(CartItem), cart_id, product_id, size, color).values(
            quantity=CartItem.quantity + quantity,
            updated_at=datetime.utcnow(),
        )
        result = self.db.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount > 0

    def _set_item_quantity(self, cart_id: int, product_id: int, size: str, color: str, quantity: int) -> bool:
        stmt = self._match(update(CartItem), cart_id, product_id, size, color).values(
            quantity=quantity,
            updated_at=datetime.utcnow(),
        )
        result = self.db.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount > 0

    def _delete_item(self, cart_id: int, product_id: int, size: str, color: str) -> bool:
        stmt = self._match(delete(CartItem), cart_id, product_id, size, color)
        result = self.db.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount > 0

    def _ensure_still_listed(self, product_id: int) -> None:
        # The product may have been deleted after it was resolved; a foreign key
        # failure then means NotFound rather than a write race
        if not self.catalog.product_exists(product_id):
            logger.warning("Product %s disappeared during write", product_id)
            raise NotFound(ERROR_PRODUCT_NOT_FOUND)

    # ---- cart ----

    def get_cart(self, user_id: int) -> List[CartItem]:
        with self.locks.hold(CART, user_id):
            try:
                cart = self._get_or_create_cart(user_id)
                self.db.commit()
            except IntegrityError:
                # Another process materialized the cart first
                self.db.rollback()
                cart = self._get_or_create_cart(user_id)
            except Exception:
                self.db.rollback()
                raise
            return self._cart_items(cart)

    def add_to_cart(self, user_id: int, product_id: int, size: str, color: str, quantity: int) -> List[CartItem]:
        quantity = _ensure_int(quantity)
        if quantity < 1:
            raise InvalidRequest(ERROR_INVALID_QUANTITY)

        product = self.catalog.resolve_product(product_id)
        self.catalog.validate_variant(product, size, color)

        with self.locks.hold(CART, user_id):
            for attempt in range(2):
                try:
                    cart = self._get_or_create_cart(user_id)
                    if self._increment_item(cart.id, product_id, size, color, quantity):
                        logger.info(
                            "Incremented product %s (%s/%s) by %s in cart of user %s",
                            product_id, size, color, quantity, user_id,
                        )
                    else:
                        self.db.add(
                            CartItem(
                                cart_id=cart.id,
                                product_id=product_id,
                                size=size,
                                color=color,
                                quantity=quantity,
                            )
                        )
                        logger.info(
                            "Added product %s (%s/%s) x%s to cart of user %s",
                            product_id, size, color, quantity, user_id,
                        )
                    self.db.commit()
                    break
                except IntegrityError:
                    # A concurrent insert of the same key won; merge by incrementing on retry
                    self.db.rollback()
                    if attempt:
                        self._ensure_still_listed(product_id)
                        logger.error("Could not merge cart item for user %s after retry", user_id)
                        raise Conflict()
                    logger.warning("Cart insert race for user %s, retrying as increment", user_id)
                except Exception:
                    self.db.rollback()
                    raise
            return self._cart_items(cart)

    def update_cart_item(self, user_id: int, product_id: int, size: str, color: str, quantity: int) -> List[CartItem]:
        """Set a line item's quantity; zero or negative removes it."""
        quantity = _ensure_int(quantity)

        with self.locks.hold(CART, user_id):
            try:
                cart = self._get_or_create_cart(user_id)
                if quantity <= 0:
                    removed = self._delete_item(cart.id, product_id, size, color)
                    if removed:
                        logger.info(
                            "Removed product %s (%s/%s) from cart of user %s via update",
                            product_id, size, color, user_id,
                        )
                elif not self._set_item_quantity(cart.id, product_id, size, color, quantity):
                    raise NotFound(ERROR_CART_ITEM_NOT_FOUND)
                else:
                    logger.info(
                        "Set product %s (%s/%s) to x%s in cart of user %s",
                        product_id, size, color, quantity, user_id,
                    )
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                raise Conflict()
            except Exception:
                self.db.rollback()
                raise
            return self._cart_items(cart)

    def remove_from_cart(self, user_id: int, product_id: int, size: str, color: str) -> List[CartItem]:
        with self.locks.hold(CART, user_id):
            try:
                cart = self._get_or_create_cart(user_id)
                if self._delete_item(cart.id, product_id, size, color):
                    logger.info(
                        "Removed product %s (%s/%s) from cart of user %s",
                        product_id, size, color, user_id,
                    )
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                raise Conflict()
            except Exception:
                self.db.rollback()
                raise
            return self._cart_items(cart)

    def clear_cart(self, user_id: int) -> bool:
        with self.locks.hold(CART, user_id):
            try:
                cart = self._get_or_create_cart(user_id)
                result = self.db.execute(
                    delete(CartItem)
                    .where(CartItem.cart_id == cart.id)
                    .execution_options(synchronize_session=False)
                )
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                raise Conflict()
            except Exception:
                self.db.rollback()
                raise
            logger.info("Cleared %s item(s) from cart of user %s", result.rowcount, user_id)
            return True

    # ---- wishlist ----

    def get_wishlist(self, user_id: int) -> List[WishlistItem]:
        with self.locks.hold(WISHLIST, user_id):
            try:
                wl = self._get_or_create_wishlist(user_id)
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                wl = self._get_or_create_wishlist(user_id)
            except Exception:
                self.db.rollback()
                raise
            return self._wishlist_items(wl)

    def add_to_wishlist(self, user_id: int, product_id: int) -> Tuple[List[WishlistItem], bool]:
        """Add a product once. Returns the entries and whether a new one was created."""
        self.catalog.resolve_product(product_id)

        with self.locks.hold(WISHLIST, user_id):
            for attempt in range(2):
                created = False
                try:
                    wl = self._get_or_create_wishlist(user_id)
                    exists = (
                        self.db.query(WishlistItem.id)
                        .filter(WishlistItem.wishlist_id == wl.id, WishlistItem.product_id == product_id)
                        .first()
                    )
                    if not exists:
                        self.db.add(
                            WishlistItem(
                                wishlist_id=wl.id,
                                product_id=product_id,
                                date_added=datetime.utcnow(),
                            )
                        )
                        created = True
                    self.db.commit()
                    break
                except IntegrityError:
                    # Same product inserted concurrently; the retry sees it as existing
                    self.db.rollback()
                    if attempt:
                        self._ensure_still_listed(product_id)
                        raise Conflict()
                    logger.warning("Wishlist insert race for user %s, retrying", user_id)
                except Exception:
                    self.db.rollback()
                    raise
            if created:
                logger.info("Added product %s to wishlist of user %s", product_id, user_id)
            return self._wishlist_items(wl), created

    def remove_from_wishlist(self, user_id: int, product_id: int) -> List[WishlistItem]:
        with self.locks.hold(WISHLIST, user_id):
            try:
                wl = self._get_or_create_wishlist(user_id)
                result = self.db.execute(
                    delete(WishlistItem)
                    .where(WishlistItem.wishlist_id == wl.id, WishlistItem.product_id == product_id)
                    .execution_options(synchronize_session=False)
                )
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                raise Conflict()
            except Exception:
                self.db.rollback()
                raise
            if result.rowcount:
                logger.info("Removed product %s from wishlist of user %s", product_id, user_id)
            return self._wishlist_items(wl)

    # ---- catalog maintenance ----

    def purge_product(self, product_id: int) -> None:
        """Drop cart lines and wishlist entries pointing at a product about to be deleted.

        Runs inside the caller's transaction; the caller commits.
        """
        self.db.execute(
            delete(CartItem).where(CartItem.product_id == product_id).execution_options(synchronize_session=False)
        )
        self.db.execute(
            delete(WishlistItem)
            .where(WishlistItem.product_id == product_id)
            .execution_options(synchronize_session=False)
        )

    def purge_variants(self, product_id: int, sizes: List[str], colors: List[str]) -> int:
        """Drop cart lines whose size or color the product no longer offers.

        Runs inside the caller's transaction; the caller commits.
        """
        result = self.db.execute(
            delete(CartItem)
            .where(
                CartItem.product_id == product_id,
                or_(CartItem.size.notin_(list(sizes)), CartItem.color.notin_(list(colors))),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            logger.info("Dropped %s stale cart line(s) for product %s", result.rowcount, product_id)
        return result.rowcount
