# Sample catalog and accounts for local development.
#   python -m app.data.seed           only seeds empty tables
#   python -m app.data.seed --reset   wipes catalog, carts, wishlists and users first
import argparse
import logging

from app.main import init_db
from app.models.cart import Cart, CartItem
from app.models.category import Category
from app.models.product import Product
from app.models.user import SessionLocal, User
from app.models.wishlist import Wishlist, WishlistItem
from app.utils.security import hash_password

logger = logging.getLogger(__name__)

USERS = [
    {"name": "Admin User", "email": "admin@example.com", "password": "password123", "is_admin": True},
    {"name": "Demo User", "email": "user@example.com", "password": "password", "is_admin": False},
]

CATEGORIES = [
    {
        "name": "Running",
        "slug": "running",
        "image": "https://static.nike.com/a/images/f_auto/dpr_1.0,cs_srgb/w_600,c_limit/dc1a8cca-f1c7-4804-b540-c53c832c5762/how-to-find-the-right-running-shoes.jpg",
    },
    {"name": "Casual", "slug": "casual", "image": "https://cdn.flightclub.com/TEMPLATE/806141/1.jpg"},
    {
        "name": "Basketball",
        "slug": "basketball",
        "image": "https://static.nike.com/a/images/c_limit,w_592,f_auto/t_product_v1/c7cf0de2-0517-4339-a9a5-8fbaa89ac4d8/lebron-xx-basketball-shoes-ct1qVm.png",
    },
    {
        "name": "Skateboarding",
        "slug": "skateboarding",
        "image": "https://static.nike.com/a/images/t_PDP_1728_v1/f_auto,q_auto:eco/37d1b989-2e8d-4859-8e30-2e9a8be8ec42/sb-force-58-skate-shoes-LJNW5L.png",
    },
]

# "category" refers to a slug above
PRODUCTS = [
    {
        "name": "Air Max Pulse",
        "price": 149.99,
        "description": "Textile-wrapped midsole and a heel Air unit for responsive, all-day cushioning.",
        "images": ["https://static.nike.com/a/images/t_PDP_1728_v1/f_auto,q_auto:eco/1d8e1a76-7f43-4b7e-a811-44c249e2a604/air-max-pulse-shoes-QShhG8.png"],
        "sizes": ["7", "8", "9", "10", "11", "12"],
        "colors": ["Black", "White", "Grey"],
        "category": "running",
        "featured": True,
        "bestseller": True,
        "rating": 4.8,
        "reviews": 124,
    },
    {
        "name": "UltraBoost 22",
        "price": 189.99,
        "description": "Boost cushioning with a sock-like knit upper for natural movement.",
        "images": ["https://assets.adidas.com/images/h_840,f_auto,q_auto,fl_lossy,c_fill,g_auto/3bd09e4d40b744cbaf56ae9600d1a133_9366/Ultraboost_22_Shoes_Black_GZ0127_01_standard.jpg"],
        "sizes": ["7", "8", "9", "10", "11"],
        "colors": ["Black", "Blue", "Red"],
        "category": "running",
        "featured": True,
        "rating": 4.7,
        "reviews": 89,
    },
    {
        "name": "Classic Leather",
        "price": 79.99,
        "description": "Soft leather upper and cushioned midsole with a timeless look.",
        "images": ["https://classic.cdn.reebok.com/dw/image/v2/AAJP_PRD/on/demandware.static/-/Sites-reebok-products/default/dw6a283969/zoom/49799_01.jpg"],
        "sizes": ["6", "7", "8", "9", "10", "11", "12"],
        "colors": ["White", "Black", "Cream"],
        "category": "casual",
        "bestseller": True,
        "rating": 4.6,
        "reviews": 206,
    },
    {
        "name": "Stan Smith",
        "price": 89.99,
        "original_price": 110.00,
        "description": "A tennis shoe legacy with a clean leather build, reborn for everyday style.",
        "images": ["https://assets.adidas.com/images/h_840,f_auto,q_auto,fl_lossy,c_fill,g_auto/90f85768e0244eeebec7aba0014a3379_9366/Stan_Smith_Shoes_White_FX5502_01_standard.jpg"],
        "sizes": ["6", "7", "8", "9", "10", "11", "12"],
        "colors": ["White/Green", "White/Navy", "Black/White"],
        "category": "casual",
        "is_new": True,
        "rating": 4.9,
        "reviews": 312,
    },
    {
        "name": "Jordan 1 Retro High",
        "price": 169.99,
        "description": "The legendary high-top with premium construction and the Wings logo.",
        "images": ["https://secure-images.nike.com/is/image/DotCom/555088_134_A_PREM"],
        "sizes": ["7", "8", "9", "10", "11", "12", "13"],
        "colors": ["University Blue", "Chicago", "Shadow"],
        "category": "basketball",
        "featured": True,
        "bestseller": True,
        "rating": 4.9,
        "reviews": 428,
    },
    {
        "name": "Old Skool",
        "price": 69.99,
        "description": "The classic side-stripe skate shoe in durable suede and canvas.",
        "images": ["https://images.vans.com/is/image/VansBrand/HO19_OLD%20SKOOL_ECOM_BLACK_SIDE"],
        "sizes": ["6", "7", "8", "9", "10", "11", "12"],
        "colors": ["Black/White", "Navy/White", "Red/White"],
        "category": "skateboarding",
        "is_new": True,
        "rating": 4.7,
        "reviews": 254,
    },
]


def clear(db) -> None:
    # Children first; SQLite does not enforce ON DELETE CASCADE by default
    for model in (CartItem, Cart, WishlistItem, Wishlist, Product, Category, User):
        db.query(model).delete()
    db.commit()
    logger.info("Previous data cleared")


def seed(db, reset: bool = False) -> bool:
    """Insert sample data. Returns False when data already exists and reset is off."""
    if reset:
        clear(db)
    elif db.query(Product).first() or db.query(User).first():
        logger.info("Database already has data, skipping seed (use --reset to reseed)")
        return False

    for u in USERS:
        db.add(User(name=u["name"], email=u["email"], password=hash_password(u["password"]), is_admin=u["is_admin"]))
    logger.info("Users seeded")

    by_slug = {}
    for c in CATEGORIES:
        category = Category(**c)
        db.add(category)
        by_slug[c["slug"]] = category
    db.flush()
    logger.info("Categories seeded")

    for p in PRODUCTS:
        data = dict(p)
        data["category_id"] = by_slug[data.pop("category")].id
        db.add(Product(**data))
    db.commit()
    logger.info("Products seeded")
    return True


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Seed the storefront database with sample data")
    parser.add_argument("--reset", action="store_true", help="delete existing data before seeding")
    args = parser.parse_args(argv)

    init_db()
    db = SessionLocal()
    try:
        seed(db, reset=args.reset)
    finally:
        db.close()


if __name__ == "__main__":
    main()
