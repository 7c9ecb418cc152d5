"""Pytest configuration and fixtures"""
import os
import tempfile

import pytest

# Point the app at a throwaway SQLite file before anything under app/ is imported
_db_dir = tempfile.mkdtemp(prefix="solesynergy-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["SECRET_KEY"] = "test_secret"
os.environ["ALGORITHM"] = "HS256"
os.environ["ADMIN_EMAIL"] = "admin@example.com"

from fastapi.testclient import TestClient  # noqa: E402

from app.main import app, init_db  # noqa: E402
from app.models.category import Category  # noqa: E402
from app.models.product import Product  # noqa: E402
from app.models.user import Base, SessionLocal, User, engine  # noqa: E402
from app.services.cart_store import CartWishlistStore  # noqa: E402
from app.utils.security import create_access_token, hash_password  # noqa: E402


@pytest.fixture(autouse=True)
def _schema():
    """Fresh tables for every test"""
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(_schema):
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def category(db):
    c = Category(name="Running", slug="running", image="https://img.example.com/running.jpg")
    db.add(c)
    db.commit()
    db.refresh(c)
    return c


@pytest.fixture
def product(db, category):
    """Sample product with sizes 9/10/11 and colors Black/White"""
    p = Product(
        name="Air Max Pulse",
        price=149.99,
        description="Responsive cushioning",
        images=["https://img.example.com/air-max.png"],
        sizes=["9", "10", "11"],
        colors=["Black", "White"],
        category_id=category.id,
        featured=True,
    )
    db.add(p)
    db.commit()
    db.refresh(p)
    return p


@pytest.fixture
def other_product(db, category):
    p = Product(
        name="UltraBoost 22",
        price=189.99,
        description="Boost cushioning",
        images=["https://img.example.com/ultraboost.png"],
        sizes=["8", "9"],
        colors=["Blue"],
        category_id=category.id,
    )
    db.add(p)
    db.commit()
    db.refresh(p)
    return p


def _make_user(db, email, name, is_admin=False):
    u = User(name=name, email=email, password=hash_password("password"), is_admin=is_admin)
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture
def user(db):
    return _make_user(db, "user@example.com", "Demo User")


@pytest.fixture
def other_user(db):
    return _make_user(db, "other@example.com", "Other User")


@pytest.fixture
def admin(db):
    return _make_user(db, "admin@example.com", "Admin User", is_admin=True)


@pytest.fixture
def store(db):
    return CartWishlistStore(db)


@pytest.fixture
def client(_schema):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.email)}"}


@pytest.fixture
def admin_headers(admin):
    return {"Authorization": f"Bearer {create_access_token(admin.email)}"}
