import unittest
import uuid
from unittest import mock

from fastapi import HTTPException
from sqlmodel import Session

from helpers import add_product, add_user, make_engine

from storefront.core.errors import InsufficientStock, InvalidQuantity, ProductNotFound
from storefront.models.cart import Cart
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.cart import CartItemCreate, CartItemUpdate
from storefront.services.cart_service import CartOwner, CartService


class CartServiceTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = make_engine()
        self.session = Session(self.engine)
        self.cart_repo = CartRepository()
        self.service = CartService(self.cart_repo, ProductRepository(), tax_rate=0.10)

        self.user = add_user(self.session, "carol@example.com")
        self.owner = CartOwner(user_id=self.user.id)
        self.p1 = add_product(self.session, "Croissant", 3.99, stock=10)
        self.p2 = add_product(self.session, "Baguette", 2.49, stock=10)

    def tearDown(self):
        self.session.close()
        self.engine.dispose()

    def add(self, product, quantity, owner=None):
        return self.service.add_to_cart(
            self.session,
            owner or self.owner,
            CartItemCreate(product_id=product.id, quantity=quantity),
        )

    # ---------- Owners ----------

    def test_owner_is_user_or_session(self):
        with self.assertRaises(ValueError):
            CartOwner()
        with self.assertRaises(ValueError):
            CartOwner(user_id=self.user.id, session_id="abc")

    def test_summary_without_cart_is_empty(self):
        summary = self.service.get_cart_summary(self.session, self.owner)
        self.assertIsNone(summary.id)
        self.assertEqual(summary.items, [])
        self.assertEqual(summary.total_price, 0.0)

    # ---------- Add ----------

    def test_adding_same_product_merges_into_one_line(self):
        self.add(self.p1, 2)
        summary = self.add(self.p1, 3)

        self.assertEqual(len(summary.items), 1)
        self.assertEqual(summary.items[0].quantity, 5)
        self.assertEqual(summary.total_quantity, 5)

    def test_distinct_products_get_separate_lines_and_totals(self):
        self.add(self.p1, 2)
        summary = self.add(self.p2, 3)

        self.assertEqual(
            {it.product_name: it.quantity for it in summary.items},
            {"Croissant": 2, "Baguette": 3},
        )
        self.assertEqual(summary.items_price, 15.45)
        self.assertEqual(summary.tax_price, 1.55)
        self.assertEqual(summary.total_price, 17.00)

    def test_invalid_quantity_is_rejected(self):
        for quantity in (0, -2):
            with self.subTest(quantity=quantity):
                with self.assertRaises(InvalidQuantity):
                    self.add(self.p1, quantity)
        summary = self.service.get_cart_summary(self.session, self.owner)
        self.assertEqual(summary.items, [])

    def test_unknown_product(self):
        with self.assertRaises(ProductNotFound):
            self.service.add_to_cart(
                self.session,
                self.owner,
                CartItemCreate(product_id=uuid.uuid4(), quantity=1),
            )

    def test_resulting_quantity_is_checked_against_stock(self):
        self.add(self.p1, 6)
        with self.assertRaises(InsufficientStock):
            self.add(self.p1, 5)
        self.session.rollback()

        summary = self.service.get_cart_summary(self.session, self.owner)
        self.assertEqual(summary.items[0].quantity, 6)

    # ---------- Update / remove / clear ----------

    def test_update_replaces_quantity(self):
        self.add(self.p1, 2)
        summary = self.service.update_quantity(
            self.session, self.owner, self.p1.id, CartItemUpdate(quantity=7)
        )
        self.assertEqual(summary.items[0].quantity, 7)

    def test_update_of_line_not_in_cart(self):
        self.add(self.p1, 2)
        with self.assertRaises(HTTPException) as ctx:
            self.service.update_quantity(
                self.session, self.owner, self.p2.id, CartItemUpdate(quantity=1)
            )
        self.assertEqual(ctx.exception.status_code, 404)

    def test_update_to_zero_is_rejected(self):
        self.add(self.p1, 2)
        with self.assertRaises(InvalidQuantity):
            self.service.update_quantity(
                self.session, self.owner, self.p1.id, CartItemUpdate(quantity=0)
            )

    def test_remove_item(self):
        self.add(self.p1, 2)
        self.add(self.p2, 1)
        summary = self.service.remove_item(self.session, self.owner, self.p1.id)
        self.assertEqual([it.product_id for it in summary.items], [self.p2.id])

        with self.assertRaises(HTTPException) as ctx:
            self.service.remove_item(self.session, self.owner, self.p1.id)
        self.assertEqual(ctx.exception.status_code, 404)

    def test_clear_keeps_the_cart(self):
        first = self.add(self.p1, 2)
        summary = self.service.clear_cart(self.session, self.owner)

        self.assertEqual(summary.id, first.id)
        self.assertEqual(summary.items, [])
        self.assertEqual(summary.total_price, 0.0)

    def test_lines_are_priced_from_live_catalog(self):
        self.add(self.p1, 2)
        self.p1.price = 5.00
        self.session.add(self.p1)
        self.session.commit()

        summary = self.service.get_cart_summary(self.session, self.owner)
        self.assertEqual(summary.items[0].line_total, 10.00)

    def test_cart_created_concurrently_is_reused(self):
        # another request creates the cart between our lookup and our insert
        existing = Cart(user_id=self.user.id)
        self.session.add(existing)
        self.session.commit()
        existing_id = existing.id

        real_lookup = self.cart_repo.get_for_user
        calls = []

        def stale_first_lookup(session, user_id, lock=False):
            calls.append(user_id)
            if len(calls) == 1:
                return None
            return real_lookup(session, user_id, lock=lock)

        with mock.patch.object(
            self.cart_repo, "get_for_user", side_effect=stale_first_lookup
        ):
            summary = self.add(self.p1, 2)

        self.assertEqual(len(calls), 2)
        self.assertEqual(summary.id, existing_id)
        self.assertEqual(summary.items[0].quantity, 2)

    # ---------- Guest carts ----------

    def test_guest_cart_is_separate_from_user_cart(self):
        guest = CartOwner(session_id="guest-1")
        self.add(self.p1, 1, owner=guest)

        self.assertEqual(len(self.service.get_cart_summary(self.session, guest).items), 1)
        self.assertEqual(self.service.get_cart_summary(self.session, self.owner).items, [])

    def test_merge_guest_cart_into_user_cart(self):
        guest = CartOwner(session_id="guest-2")
        self.add(self.p1, 1)
        self.add(self.p1, 2, owner=guest)
        self.add(self.p2, 1, owner=guest)

        summary = self.service.merge_guest_cart(self.session, self.user.id, "guest-2")

        self.assertEqual(
            {it.product_id: it.quantity for it in summary.items},
            {self.p1.id: 3, self.p2.id: 1},
        )
        self.assertEqual(self.service.get_cart_summary(self.session, guest).items, [])

    def test_merge_without_guest_cart_returns_user_cart(self):
        self.add(self.p1, 1)
        summary = self.service.merge_guest_cart(self.session, self.user.id, "nobody")
        self.assertEqual(summary.total_quantity, 1)

    def test_merge_respects_stock(self):
        guest = CartOwner(session_id="guest-3")
        self.add(self.p1, 6)
        self.add(self.p1, 6, owner=guest)
        with self.assertRaises(InsufficientStock):
            self.service.merge_guest_cart(self.session, self.user.id, "guest-3")


if __name__ == "__main__":
    unittest.main()
