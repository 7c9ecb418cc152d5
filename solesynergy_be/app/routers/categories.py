from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
import logging

from app.models.category import Category
from app.models.product import Product
from app.models.user import User, get_db
from app.routers.products import to_product_out
from app.schemas.category import CategoryIn, CategoryOut, CategoryUpdate
from app.schemas.product import ProductOut
from app.utils.security import require_admin

logger = logging.getLogger(__name__)

router = APIRouter()


def _slug_taken(db: Session, slug: str, exclude_id: int = None) -> bool:
    q = db.query(Category).filter(Category.slug == slug)
    if exclude_id is not None:
        q = q.filter(Category.id != exclude_id)
    return q.first() is not None


@router.get("/", response_model=List[CategoryOut])
def get_categories(db: Session = Depends(get_db)):
    return db.query(Category).order_by(Category.id.asc()).all()


@router.get("/{slug}", response_model=CategoryOut)
def get_category_by_slug(slug: str, db: Session = Depends(get_db)):
    category = db.query(Category).filter(Category.slug == slug).first()
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.get("/{id}/products", response_model=List[ProductOut])
def get_products_by_category(id: int, db: Session = Depends(get_db)):
    products = db.query(Product).filter(Product.category_id == id).order_by(Product.id.asc()).all()
    return [to_product_out(p) for p in products]


@router.post("/", response_model=CategoryOut, status_code=201)
def create_category(payload: CategoryIn, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    if _slug_taken(db, payload.slug):
        raise HTTPException(status_code=400, detail="Slug already in use")
    category = Category(name=payload.name, image=payload.image, slug=payload.slug)
    db.add(category)
    db.commit()
    db.refresh(category)
    logger.info("Category %s (%s) created by %s", category.id, category.slug, admin.email)
    return category


@router.put("/{id}", response_model=CategoryOut)
def update_category(
    id: int,
    payload: CategoryUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    category = db.get(Category, id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    if payload.slug and _slug_taken(db, payload.slug, exclude_id=id):
        raise HTTPException(status_code=400, detail="Slug already in use")
    category.name = payload.name or category.name
    category.image = payload.image or category.image
    category.slug = payload.slug or category.slug
    db.commit()
    db.refresh(category)
    return category


@router.delete("/{id}")
def delete_category(id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    category = db.get(Category, id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    product_count = db.query(Product).filter(Product.category_id == id).count()
    if product_count > 0:
        raise HTTPException(status_code=400, detail="Cannot delete category that has products")
    db.delete(category)
    db.commit()
    logger.info("Category %s deleted by %s", id, admin.email)
    return {"success": True, "message": "Category removed"}
