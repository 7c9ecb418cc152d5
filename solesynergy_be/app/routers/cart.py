from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List

from app.models.cart import CartItem
from app.models.user import User, get_db
from app.routers.products import to_product_out
from app.schemas.cart import CartItemIn, CartItemUpdate, CartItemOut, CartCleared
from app.services.cart_store import CartWishlistStore
from app.utils.security import get_current_user


router = APIRouter()


def get_store(db: Session = Depends(get_db)) -> CartWishlistStore:
    return CartWishlistStore(db)


def _serialize_cart(items: List[CartItem]) -> List[CartItemOut]:
    return [
        CartItemOut(product=to_product_out(i.product), quantity=i.quantity, size=i.size, color=i.color)
        for i in items
    ]


@router.get("/", response_model=List[CartItemOut])
def get_cart(store: CartWishlistStore = Depends(get_store), user: User = Depends(get_current_user)):
    return _serialize_cart(store.get_cart(user.id))


@router.post("/", response_model=List[CartItemOut], status_code=201)
def add_cart_item(
    payload: CartItemIn,
    store: CartWishlistStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    items = store.add_to_cart(user.id, payload.productId, payload.size, payload.color, payload.quantity)
    return _serialize_cart(items)


@router.put("/{productId}", response_model=List[CartItemOut])
def update_cart_item(
    productId: int,
    payload: CartItemUpdate,
    store: CartWishlistStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    items = store.update_cart_item(user.id, productId, payload.size, payload.color, payload.quantity)
    return _serialize_cart(items)


@router.delete("/{productId}", response_model=List[CartItemOut])
def remove_cart_item(
    productId: int,
    size: str = Query(...),
    color: str = Query(...),
    store: CartWishlistStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    return _serialize_cart(store.remove_from_cart(user.id, productId, size, color))


@router.delete("/", response_model=CartCleared)
def clear_cart(store: CartWishlistStore = Depends(get_store), user: User = Depends(get_current_user)):
    store.clear_cart(user.id)
    return CartCleared()
