from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from app.models.category import Category
from app.models.product import Product
from app.models.user import User, get_db
from app.schemas.product import CategoryRef, ProductCreate, ProductOut, ProductUpdate
from app.services.cart_store import CartWishlistStore
from app.utils.security import require_admin

logger = logging.getLogger(__name__)

router = APIRouter()

# Request field -> model column
_FIELD_MAP = {
    "name": "name",
    "price": "price",
    "originalPrice": "original_price",
    "description": "description",
    "images": "images",
    "sizes": "sizes",
    "colors": "colors",
    "category": "category_id",
    "featured": "featured",
    "bestseller": "bestseller",
    "new": "is_new",
    "rating": "rating",
    "reviews": "reviews",
}


def _to_float(value) -> Optional[float]:
    return float(value) if value is not None else None


def to_product_out(p: Product) -> ProductOut:
    return ProductOut(
        id=p.id,
        name=p.name,
        price=_to_float(p.price),
        originalPrice=_to_float(p.original_price),
        description=p.description,
        images=p.images or [],
        sizes=p.sizes or [],
        colors=p.colors or [],
        category=CategoryRef.model_validate(p.category) if p.category else None,
        featured=bool(p.featured),
        bestseller=bool(p.bestseller),
        new=bool(p.is_new),
        rating=p.rating or 0.0,
        reviews=p.reviews or 0,
    )


def _ensure_category(db: Session, category_id: int) -> None:
    if not db.get(Category, category_id):
        raise HTTPException(status_code=400, detail="Category does not exist")


@router.get("/", response_model=List[ProductOut])
def get_all_products(db: Session = Depends(get_db)):
    products = db.query(Product).order_by(Product.id.asc()).all()
    return [to_product_out(p) for p in products]


@router.get("/featured", response_model=List[ProductOut])
def get_featured_products(db: Session = Depends(get_db)):
    products = db.query(Product).filter(Product.featured.is_(True)).order_by(Product.id.asc()).all()
    return [to_product_out(p) for p in products]


@router.get("/{id}", response_model=ProductOut)
def get_product_by_id(id: int, db: Session = Depends(get_db)):
    product = db.get(Product, id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return to_product_out(product)


@router.post("/", response_model=ProductOut, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    _ensure_category(db, payload.category)
    data = payload.model_dump()
    product = Product(**{_FIELD_MAP[k]: v for k, v in data.items()})
    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info("Product %s created by %s", product.id, admin.email)
    return to_product_out(product)


@router.put("/{id}", response_model=ProductOut)
def update_product(
    id: int,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    product = db.get(Product, id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "category" in data:
        _ensure_category(db, data["category"])
    for field, value in data.items():
        setattr(product, _FIELD_MAP[field], value)
    if "sizes" in data or "colors" in data:
        CartWishlistStore(db).purge_variants(product.id, product.sizes, product.colors)
    db.commit()
    db.refresh(product)
    logger.info("Product %s updated by %s", product.id, admin.email)
    return to_product_out(product)


@router.delete("/{id}")
def delete_product(id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    product = db.get(Product, id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    # Carts and wishlists must not keep pointing at a product that no longer exists
    CartWishlistStore(db).purge_product(product.id)
    db.delete(product)
    db.commit()
    logger.info("Product %s deleted by %s", id, admin.email)
    return {"success": True, "message": "Product removed"}
