import unittest

from fastapi.testclient import TestClient
from sqlmodel import Session

from helpers import PASSWORD, add_product, add_user, make_engine

from storefront.database import get_session
from storefront.main import app

API = "/api/v1"


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = make_engine()

        def override_get_session():
            with Session(self.engine) as session:
                yield session

        app.dependency_overrides[get_session] = override_get_session
        self.client = TestClient(app)

        with Session(self.engine) as session:
            add_user(session, "admin@example.com", role="admin")
            add_user(session, "root@example.com", role="superadmin")
            add_user(session, "helen@example.com")
            self.product_id = add_product(session, "Croissant", 3.99, stock=5).id
            self.other_id = add_product(session, "Baguette", 2.49, stock=5).id

    def tearDown(self):
        app.dependency_overrides.clear()
        self.engine.dispose()

    def auth(self, email):
        resp = self.client.post(
            f"{API}/auth/login", json={"email": email, "password": PASSWORD}
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}

    # ---------- Health & auth ----------

    def test_health(self):
        self.assertEqual(self.client.get("/").json()["status"], "ok")

    def test_register_login_and_profile(self):
        resp = self.client.post(
            f"{API}/auth/register",
            json={"email": "ivan@example.com", "password": "hunter22", "name": "Ivan"},
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        self.assertEqual(resp.json()["role"], "client")

        me = self.client.get(f"{API}/users/me", headers=self.auth("ivan@example.com"))
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["name"], "Ivan")
        self.assertIn("manage_cart", me.json()["permissions"])

    def test_bad_token(self):
        resp = self.client.get(
            f"{API}/users/me", headers={"Authorization": "Bearer not-a-token"}
        )
        self.assertEqual(resp.status_code, 401)

    def test_protected_route_without_token(self):
        self.assertEqual(self.client.get(f"{API}/orders/me").status_code, 401)

    # ---------- Authorization ----------

    def test_client_cannot_manage_products(self):
        resp = self.client.post(
            f"{API}/products",
            json={"name": "Eclair", "category": "pastry", "price": 2.0},
            headers=self.auth("helen@example.com"),
        )
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["detail"], "Not authorized, requires manage_products")

    def test_admin_manages_products(self):
        headers = self.auth("admin@example.com")
        resp = self.client.post(
            f"{API}/products",
            json={"name": "Eclair", "category": "pastry", "price": 2.0, "stock_on_hand": 3},
            headers=headers,
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        product_id = resp.json()["id"]

        resp = self.client.patch(
            f"{API}/products/{product_id}", json={"price": 2.5}, headers=headers
        )
        self.assertEqual(resp.json()["price"], 2.5)

        resp = self.client.delete(f"{API}/products/{product_id}", headers=headers)
        self.assertEqual(resp.status_code, 204)
        self.assertEqual(self.client.get(f"{API}/products/{product_id}").status_code, 404)

    def test_non_finite_price_is_rejected(self):
        headers = self.auth("admin@example.com")
        resp = self.client.post(
            f"{API}/products",
            json={"name": "Eclair", "category": "pastry", "price": "Infinity"},
            headers=headers,
        )
        self.assertEqual(resp.status_code, 422)

        resp = self.client.patch(
            f"{API}/products/{self.product_id}",
            content='{"price": NaN}',
            headers={**headers, "Content-Type": "application/json"},
        )
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(self.client.get(f"{API}/products/{self.product_id}").json()["price"], 3.99)

    def test_catalog_search_and_categories(self):
        with Session(self.engine) as session:
            add_product(session, "Rye loaf", 4.0, stock=0, category="bread")

        names = [p["name"] for p in self.client.get(f"{API}/products").json()]
        self.assertEqual(names, ["Baguette", "Croissant", "Rye loaf"])

        resp = self.client.get(f"{API}/products", params={"q": "LOAF"})
        self.assertEqual([p["name"] for p in resp.json()], ["Rye loaf"])

        resp = self.client.get(f"{API}/products", params={"category": "bread", "in_stock": "true"})
        self.assertEqual(resp.json(), [])

        self.assertEqual(
            self.client.get(f"{API}/products/categories").json(), ["bread", "pastry"]
        )

    def test_analytics_needs_superadmin(self):
        self.assertEqual(
            self.client.get(f"{API}/admin/stats", headers=self.auth("admin@example.com")).status_code,
            403,
        )
        resp = self.client.get(f"{API}/admin/stats", headers=self.auth("root@example.com"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["total_customers"], 1)

    def test_unknown_role_on_role_change(self):
        helen = self.client.get(f"{API}/users/me", headers=self.auth("helen@example.com")).json()
        resp = self.client.patch(
            f"{API}/users/{helen['id']}/role",
            json={"role": "owner"},
            headers=self.auth("root@example.com"),
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Unknown role: owner")

    # ---------- Delivery options ----------

    def test_delivery_options(self):
        payload = {
            "name": "Express",
            "description": "Next day",
            "provider": "Courier",
            "price": 9.5,
            "estimated_days": {"min": 1, "max": 1},
        }
        resp = self.client.post(
            f"{API}/delivery-options", json=payload, headers=self.auth("helen@example.com")
        )
        self.assertEqual(resp.status_code, 403)

        headers = self.auth("admin@example.com")
        resp = self.client.post(f"{API}/delivery-options", json=payload, headers=headers)
        self.assertEqual(resp.status_code, 201, resp.text)
        option_id = resp.json()["id"]

        listed = self.client.get(f"{API}/delivery-options").json()
        self.assertEqual([o["name"] for o in listed], ["Express"])

        resp = self.client.patch(
            f"{API}/delivery-options/{option_id}",
            json={"is_available": False},
            headers=headers,
        )
        self.assertFalse(resp.json()["is_available"])
        self.assertEqual(self.client.get(f"{API}/delivery-options").json(), [])

        bad = dict(payload, estimated_days={"min": 3, "max": 1})
        resp = self.client.post(f"{API}/delivery-options", json=bad, headers=headers)
        self.assertEqual(resp.status_code, 422)

        bad = dict(payload, price="Infinity")
        resp = self.client.post(f"{API}/delivery-options", json=bad, headers=headers)
        self.assertEqual(resp.status_code, 422)

    # ---------- Cart ----------

    def test_guest_cart_uses_session_header(self):
        guest = TestClient(app)
        first = guest.post(f"{API}/cart", json={"product_id": str(self.product_id), "quantity": 2})
        self.assertEqual(first.status_code, 200, first.text)
        session_id = first.headers["X-Cart-Session"]

        # a different client with the same header sees the same cart
        other = TestClient(app)
        second = other.post(
            f"{API}/cart",
            json={"product_id": str(self.product_id), "quantity": 3},
            headers={"X-Cart-Session": session_id},
        )
        self.assertEqual(len(second.json()["items"]), 1)
        self.assertEqual(second.json()["items"][0]["quantity"], 5)

    def test_invalid_quantity(self):
        resp = self.client.post(
            f"{API}/cart",
            json={"product_id": str(self.product_id), "quantity": 0},
            headers=self.auth("helen@example.com"),
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Quantity must be a positive integer")

    def test_non_integer_quantity_fails_validation(self):
        headers = self.auth("helen@example.com")
        for quantity in (2.5, "abc"):
            with self.subTest(quantity=quantity):
                resp = self.client.post(
                    f"{API}/cart",
                    json={"product_id": str(self.product_id), "quantity": quantity},
                    headers=headers,
                )
                self.assertEqual(resp.status_code, 422)

    def test_not_enough_stock(self):
        resp = self.client.post(
            f"{API}/cart",
            json={"product_id": str(self.product_id), "quantity": 6},
            headers=self.auth("helen@example.com"),
        )
        self.assertEqual(resp.status_code, 400)

    def test_merge_guest_cart_after_login(self):
        guest = TestClient(app)
        resp = guest.post(f"{API}/cart", json={"product_id": str(self.other_id), "quantity": 1})
        session_id = resp.headers["X-Cart-Session"]

        headers = self.auth("helen@example.com")
        resp = self.client.post(
            f"{API}/cart/merge", headers={**headers, "X-Cart-Session": session_id}
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["items"][0]["product_name"], "Baguette")

    # ---------- Reviews & wishlist ----------

    def test_reviews_flow(self):
        url = f"{API}/reviews/product/{self.product_id}"
        body = {"rating": 4, "comment": "Lovely"}
        self.assertEqual(self.client.post(url, json=body).status_code, 401)

        headers = self.auth("helen@example.com")
        resp = self.client.post(url, json=body, headers=headers)
        self.assertEqual(resp.status_code, 201, resp.text)
        review_id = resp.json()["id"]

        self.assertEqual(self.client.post(url, json=body, headers=headers).status_code, 400)
        self.assertEqual([r["rating"] for r in self.client.get(url).json()], [4])

        product = self.client.get(f"{API}/products/{self.product_id}").json()
        self.assertEqual(product["review_count"], 1)
        self.assertEqual(product["average_rating"], 4.0)

        with Session(self.engine) as session:
            add_user(session, "ivy@example.com")
        resp = self.client.delete(
            f"{API}/reviews/{review_id}", headers=self.auth("ivy@example.com")
        )
        self.assertEqual(resp.status_code, 403)

        resp = self.client.delete(
            f"{API}/reviews/{review_id}", headers=self.auth("admin@example.com")
        )
        self.assertEqual(resp.status_code, 204)
        product = self.client.get(f"{API}/products/{self.product_id}").json()
        self.assertEqual(product["average_rating"], 0.0)

    def test_wishlist(self):
        self.assertEqual(self.client.get(f"{API}/wishlist").status_code, 401)

        headers = self.auth("helen@example.com")
        body = {"product_id": str(self.product_id)}
        resp = self.client.post(f"{API}/wishlist", json=body, headers=headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual([it["product_name"] for it in resp.json()], ["Croissant"])

        resp = self.client.post(f"{API}/wishlist", json=body, headers=headers)
        self.assertEqual(resp.status_code, 400)

        resp = self.client.delete(f"{API}/wishlist/{self.product_id}", headers=headers)
        self.assertEqual(resp.json(), [])

    # ---------- Checkout ----------

    def test_checkout_flow(self):
        headers = self.auth("helen@example.com")
        self.client.post(
            f"{API}/cart",
            json={"product_id": str(self.product_id), "quantity": 2},
            headers=headers,
        )
        self.client.post(
            f"{API}/cart",
            json={"product_id": str(self.other_id), "quantity": 3},
            headers=headers,
        )

        resp = self.client.post(
            f"{API}/orders/checkout",
            json={
                "address": "1 Main St",
                "city": "Springfield",
                "postal_code": "12345",
                "country": "US",
                "payment_method": "card",
            },
            headers=headers,
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        order = resp.json()
        self.assertEqual(order["items_price"], 15.45)
        self.assertEqual(order["tax_price"], 1.55)
        self.assertEqual(order["total_price"], 17.0)

        mine = self.client.get(f"{API}/orders/me", headers=headers).json()
        self.assertEqual([o["id"] for o in mine], [order["id"]])

        # clients cannot drive status transitions
        resp = self.client.patch(
            f"{API}/orders/{order['id']}/status",
            json={"status": "processing"},
            headers=headers,
        )
        self.assertEqual(resp.status_code, 403)

        resp = self.client.patch(
            f"{API}/orders/{order['id']}/status",
            json={"status": "processing"},
            headers=self.auth("admin@example.com"),
        )
        self.assertEqual(resp.json()["status"], "processing")


if __name__ == "__main__":
    unittest.main()
