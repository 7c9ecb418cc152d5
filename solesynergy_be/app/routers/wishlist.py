from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from typing import List

from app.models.user import User, get_db
from app.models.wishlist import WishlistItem
from app.routers.products import to_product_out
from app.schemas.wishlist import WishlistItemIn, WishlistItemOut
from app.services.cart_store import CartWishlistStore
from app.utils.security import get_current_user


router = APIRouter()


def get_store(db: Session = Depends(get_db)) -> CartWishlistStore:
    return CartWishlistStore(db)


def _serialize_wishlist(items: List[WishlistItem]) -> List[WishlistItemOut]:
    return [WishlistItemOut(product=to_product_out(i.product), dateAdded=i.date_added) for i in items]


@router.get("/", response_model=List[WishlistItemOut])
def get_wishlist(store: CartWishlistStore = Depends(get_store), user: User = Depends(get_current_user)):
    return _serialize_wishlist(store.get_wishlist(user.id))


@router.post("/", response_model=List[WishlistItemOut], status_code=201)
def add_wishlist_item(
    payload: WishlistItemIn,
    response: Response,
    store: CartWishlistStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    items, created = store.add_to_wishlist(user.id, payload.productId)
    if not created:
        # Already present: unchanged list, not a new resource
        response.status_code = 200
    return _serialize_wishlist(items)


@router.delete("/{productId}", response_model=List[WishlistItemOut])
def remove_wishlist_item(
    productId: int,
    store: CartWishlistStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    return _serialize_wishlist(store.remove_from_wishlist(user.id, productId))
