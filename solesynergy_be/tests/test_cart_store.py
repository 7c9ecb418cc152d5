"""
Tests for the cart side of CartWishlistStore
"""
import threading

import pytest
from sqlalchemy.exc import IntegrityError

from app.errors import Conflict, InvalidRequest, NotFound
from app.models.cart import Cart, CartItem
from app.models.product import Product
from app.models.user import SessionLocal
from app.services.cart_store import CartWishlistStore


def _rows(items):
    return [(i.product_id, i.size, i.color, i.quantity) for i in items]


class TestGetCart:
    """Lazy creation and reads."""

    def test_first_read_creates_empty_cart(self, store, db, user):
        assert db.query(Cart).filter(Cart.user_id == user.id).first() is None

        assert store.get_cart(user.id) == []
        assert db.query(Cart).filter(Cart.user_id == user.id).count() == 1

    def test_repeated_reads_do_not_duplicate_cart(self, store, db, user):
        store.get_cart(user.id)
        store.get_cart(user.id)
        assert db.query(Cart).filter(Cart.user_id == user.id).count() == 1

    def test_carts_are_per_user(self, store, user, other_user, product):
        store.add_to_cart(user.id, product.id, "9", "Black", 1)
        assert store.get_cart(other_user.id) == []


class TestAddToCart:
    """Accumulate-on-repeat semantics and validation."""

    def test_same_key_accumulates(self, store, user, product):
        store.add_to_cart(user.id, product.id, "9", "Black", 1)
        items = store.add_to_cart(user.id, product.id, "9", "Black", 1)

        assert _rows(items) == [(product.id, "9", "Black", 2)]

    def test_scenario_quantities_sum(self, store, user, product):
        store.add_to_cart(user.id, product.id, "9", "Black", 1)
        store.add_to_cart(user.id, product.id, "9", "Black", 2)

        assert _rows(store.get_cart(user.id)) == [(product.id, "9", "Black", 3)]

    def test_different_size_is_a_separate_line(self, store, user, product):
        store.add_to_cart(user.id, product.id, "9", "Black", 1)
        store.add_to_cart(user.id, product.id, "10", "Black", 1)

        assert _rows(store.get_cart(user.id)) == [
            (product.id, "9", "Black", 1),
            (product.id, "10", "Black", 1),
        ]

    def test_different_color_is_a_separate_line(self, store, user, product):
        store.add_to_cart(user.id, product.id, "9", "Black", 1)
        items = store.add_to_cart(user.id, product.id, "9", "White", 1)
        assert len(items) == 2

    def test_insertion_order_is_kept_after_increment(self, store, user, product, other_product):
        store.add_to_cart(user.id, product.id, "9", "Black", 1)
        store.add_to_cart(user.id, other_product.id, "8", "Blue", 1)
        items = store.add_to_cart(user.id, product.id, "9", "Black", 4)

        assert _rows(items) == [
            (product.id, "9", "Black", 5),
            (other_product.id, "8", "Blue", 1),
        ]

    def test_unknown_size_is_invalid(self, store, user, product):
        with pytest.raises(InvalidRequest):
            store.add_to_cart(user.id, product.id, "42", "Black", 1)
        assert store.get_cart(user.id) == []

    def test_unknown_color_is_invalid(self, store, user, product):
        with pytest.raises(InvalidRequest):
            store.add_to_cart(user.id, product.id, "9", "Purple", 1)

    def test_unknown_product_is_not_found(self, store, user):
        with pytest.raises(NotFound):
            store.add_to_cart(user.id, 9999, "9", "Black", 1)

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity_is_invalid(self, store, user, product, quantity):
        with pytest.raises(InvalidRequest):
            store.add_to_cart(user.id, product.id, "9", "Black", quantity)

    @pytest.mark.parametrize("quantity", ["2", 1.5, True, None])
    def test_non_integer_quantity_is_invalid(self, store, user, product, quantity):
        with pytest.raises(InvalidRequest):
            store.add_to_cart(user.id, product.id, "9", "Black", quantity)

    def test_concurrent_adds_do_not_lose_increments(self, db, user, product):
        user_id, product_id = user.id, product.id
        errors = []

        def worker():
            session = SessionLocal()
            try:
                CartWishlistStore(session).add_to_cart(user_id, product_id, "9", "Black", 1)
            except Exception as e:  # surfaced through the assertion below
                errors.append(e)
            finally:
                session.close()

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        assert errors == []
        items = CartWishlistStore(db).get_cart(user_id)
        assert _rows(items) == [(product_id, "9", "Black", 8)]


class TestUpdateCartItem:
    """Set semantics, removal on non-positive quantity."""

    def test_sets_quantity(self, store, user, product):
        store.add_to_cart(user.id, product.id, "9", "Black", 3)
        items = store.update_cart_item(user.id, product.id, "9", "Black", 7)
        assert _rows(items) == [(product.id, "9", "Black", 7)]

    def test_is_idempotent(self, store, user, product):
        store.add_to_cart(user.id, product.id, "9", "Black", 3)
        store.update_cart_item(user.id, product.id, "9", "Black", 2)
        items = store.update_cart_item(user.id, product.id, "9", "Black", 2)
        assert _rows(items) == [(product.id, "9", "Black", 2)]

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_non_positive_quantity_removes(self, store, user, product, quantity):
        store.add_to_cart(user.id, product.id, "9", "Black", 1)
        store.add_to_cart(user.id, product.id, "10", "Black", 1)

        items = store.update_cart_item(user.id, product.id, "9", "Black", quantity)
        assert _rows(items) == [(product.id, "10", "Black", 1)]

    def test_zero_on_missing_item_is_noop(self, store, user, product):
        store.add_to_cart(user.id, product.id, "10", "Black", 1)
        items = store.update_cart_item(user.id, product.id, "9", "Black", 0)
        assert _rows(items) == [(product.id, "10", "Black", 1)]

    def test_positive_on_missing_item_is_not_found(self, store, user, product):
        store.add_to_cart(user.id, product.id, "10", "Black", 1)
        with pytest.raises(NotFound):
            store.update_cart_item(user.id, product.id, "9", "Black", 2)
        assert _rows(store.get_cart(user.id)) == [(product.id, "10", "Black", 1)]

    def test_non_integer_quantity_is_invalid(self, store, user, product):
        store.add_to_cart(user.id, product.id, "9", "Black", 1)
        with pytest.raises(InvalidRequest):
            store.update_cart_item(user.id, product.id, "9", "Black", "5")


class TestRemoveAndClear:
    """Idempotent removal and clearing."""

    def test_remove_matches_full_key(self, store, user, product):
        store.add_to_cart(user.id, product.id, "9", "Black", 1)
        store.add_to_cart(user.id, product.id, "9", "White", 1)

        items = store.remove_from_cart(user.id, product.id, "9", "Black")
        assert _rows(items) == [(product.id, "9", "White", 1)]

    def test_remove_twice_is_idempotent(self, store, user, product):
        store.add_to_cart(user.id, product.id, "9", "Black", 1)
        store.add_to_cart(user.id, product.id, "10", "Black", 1)

        first = _rows(store.remove_from_cart(user.id, product.id, "9", "Black"))
        second = _rows(store.remove_from_cart(user.id, product.id, "9", "Black"))
        assert first == second == [(product.id, "10", "Black", 1)]

    def test_remove_from_never_used_cart(self, store, user, product):
        assert store.remove_from_cart(user.id, product.id, "9", "Black") == []

    def test_clear_empties_but_keeps_cart(self, store, db, user, product):
        store.add_to_cart(user.id, product.id, "9", "Black", 1)
        store.add_to_cart(user.id, product.id, "10", "White", 2)

        assert store.clear_cart(user.id) is True
        assert store.clear_cart(user.id) is True
        assert store.get_cart(user.id) == []
        assert db.query(Cart).filter(Cart.user_id == user.id).count() == 1

    def test_clear_only_touches_own_cart(self, store, user, other_user, product):
        store.add_to_cart(user.id, product.id, "9", "Black", 1)
        store.add_to_cart(other_user.id, product.id, "9", "Black", 1)

        store.clear_cart(user.id)
        assert len(store.get_cart(other_user.id)) == 1

    def test_purge_product_drops_lines(self, store, db, user, product, other_product):
        store.add_to_cart(user.id, product.id, "9", "Black", 1)
        store.add_to_cart(user.id, other_product.id, "8", "Blue", 1)

        store.purge_product(product.id)
        db.commit()

        assert db.query(CartItem).filter(CartItem.product_id == product.id).count() == 0
        assert _rows(store.get_cart(user.id)) == [(other_product.id, "8", "Blue", 1)]

    def test_purge_variants_drops_lines_no_longer_offered(self, store, db, user, product, other_product):
        store.add_to_cart(user.id, product.id, "9", "Black", 1)
        store.add_to_cart(user.id, product.id, "10", "Black", 2)
        store.add_to_cart(user.id, product.id, "10", "White", 3)
        store.add_to_cart(user.id, other_product.id, "9", "Blue", 1)

        dropped = store.purge_variants(product.id, ["10", "11"], ["Black"])
        db.commit()

        assert dropped == 2
        assert _rows(store.get_cart(user.id)) == [
            (product.id, "10", "Black", 2),
            (other_product.id, "9", "Blue", 1),
        ]


def _integrity_error():
    return IntegrityError("INSERT INTO cart_items", {}, Exception("constraint failed"))


class TestWriteRaces:
    """Writes racing with another process on the same rows."""

    def test_row_inserted_elsewhere_is_merged_as_increment(self, store, db, user, product, monkeypatch):
        product_id = product.id
        store.get_cart(user.id)
        cart_id = db.query(Cart.id).filter(Cart.user_id == user.id).scalar()

        original = store._increment_item
        calls = []

        def increment_after_foreign_insert(*args):
            calls.append(args)
            if len(calls) == 1:
                # Another worker inserts the same line between our UPDATE and INSERT
                other = SessionLocal()
                try:
                    other.add(CartItem(cart_id=cart_id, product_id=product_id, size="9", color="Black", quantity=1))
                    other.commit()
                finally:
                    other.close()
                return False
            return original(*args)

        monkeypatch.setattr(store, "_increment_item", increment_after_foreign_insert)

        items = store.add_to_cart(user.id, product_id, "9", "Black", 2)

        assert len(calls) == 2
        assert _rows(items) == [(product_id, "9", "Black", 3)]
        assert db.query(CartItem).count() == 1

    def test_repeated_constraint_failure_is_conflict(self, store, db, user, product, monkeypatch):
        def always_fails(*args):
            raise _integrity_error()

        monkeypatch.setattr(store, "_increment_item", always_fails)

        with pytest.raises(Conflict):
            store.add_to_cart(user.id, product.id, "9", "Black", 1)

    def test_product_deleted_mid_write_is_not_found(self, store, db, user, product, monkeypatch):
        product_id = product.id
        store.get_cart(user.id)

        def delete_product_then_fail(*args):
            other = SessionLocal()
            try:
                other.query(Product).filter(Product.id == product_id).delete()
                other.commit()
            finally:
                other.close()
            raise _integrity_error()

        monkeypatch.setattr(store, "_increment_item", delete_product_then_fail)

        with pytest.raises(NotFound):
            store.add_to_cart(user.id, product_id, "9", "Black", 1)
