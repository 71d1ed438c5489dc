import unittest
import uuid

from fastapi import HTTPException
from sqlmodel import Session

from helpers import PASSWORD, add_user, make_engine

from storefront.core.auth import decode_access_token, require_permission, require_role
from storefront.core.errors import AccessDenied, UnknownRole
from storefront.core.permissions import SUPERADMIN_PERMISSIONS
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.user import (
    UserLogin,
    UserPermissionsUpdate,
    UserRegister,
    UserRoleUpdate,
    UserStatusUpdate,
)
from storefront.services.user_service import UserService


class UserServiceTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = make_engine()
        self.session = Session(self.engine)
        self.service = UserService(UserRepository())

        self.admin = add_user(self.session, "admin@example.com", role="admin")
        self.root = add_user(self.session, "root@example.com", role="superadmin")
        self.client_user = add_user(self.session, "frank@example.com")

    def tearDown(self):
        self.session.close()
        self.engine.dispose()

    # ---------- Registration & login ----------

    def test_register_creates_client(self):
        user = self.service.register(
            self.session, UserRegister(email="Grace@Example.com", password="hunter22")
        )
        self.assertEqual(user.role, "client")
        self.assertEqual(user.email, "grace@example.com")
        self.assertEqual(user.name, "grace")
        self.assertNotEqual(user.password_hash, "hunter22")

    def test_register_duplicate_email(self):
        with self.assertRaises(HTTPException) as ctx:
            self.service.register(
                self.session, UserRegister(email="frank@example.com", password="whatever")
            )
        self.assertEqual(ctx.exception.status_code, 400)

    def test_login_issues_token_for_user(self):
        token = self.service.login(
            self.session, UserLogin(email="frank@example.com", password=PASSWORD)
        )
        claims = decode_access_token(token.access_token)
        self.assertEqual(uuid.UUID(claims["sub"]), self.client_user.id)

    def test_login_wrong_password(self):
        with self.assertRaises(HTTPException) as ctx:
            self.service.login(
                self.session, UserLogin(email="frank@example.com", password="nope")
            )
        self.assertEqual(ctx.exception.status_code, 401)

    def test_login_deactivated_account(self):
        self.service.set_active(
            self.session, self.admin, self.client_user.id, UserStatusUpdate(is_active=False)
        )
        with self.assertRaises(HTTPException) as ctx:
            self.service.login(
                self.session, UserLogin(email="frank@example.com", password=PASSWORD)
            )
        self.assertEqual(ctx.exception.status_code, 401)

    # ---------- Role management ----------

    def test_to_read_lists_role_permissions(self):
        read = self.service.to_read(self.client_user)
        self.assertIn("place_orders", read.permissions)
        self.assertNotIn("manage_products", read.permissions)

    def test_admin_cannot_create_staff(self):
        with self.assertRaises(AccessDenied):
            self.service.update_role(
                self.session, self.admin, self.client_user.id, UserRoleUpdate(role="admin")
            )

    def test_superadmin_promotes_client(self):
        user = self.service.update_role(
            self.session, self.root, self.client_user.id, UserRoleUpdate(role="admin")
        )
        self.assertEqual(user.role, "admin")

    def test_unknown_role(self):
        with self.assertRaises(UnknownRole):
            self.service.update_role(
                self.session, self.root, self.client_user.id, UserRoleUpdate(role="owner")
            )

    def test_cannot_change_own_role(self):
        with self.assertRaises(HTTPException) as ctx:
            self.service.update_role(
                self.session, self.root, self.root.id, UserRoleUpdate(role="client")
            )
        self.assertEqual(ctx.exception.status_code, 400)

    def test_admin_cannot_deactivate_superadmin(self):
        with self.assertRaises(AccessDenied):
            self.service.set_active(
                self.session, self.admin, self.root.id, UserStatusUpdate(is_active=False)
            )

    def test_list_users_by_role(self):
        users = self.service.list_users(self.session, skip=0, limit=10, role="admin")
        self.assertEqual([u.email for u in users], ["admin@example.com"])
        with self.assertRaises(UnknownRole):
            self.service.list_users(self.session, skip=0, limit=10, role="guest")

    def test_list_users_filters(self):
        self.service.set_active(
            self.session, self.admin, self.client_user.id, UserStatusUpdate(is_active=False)
        )
        inactive = self.service.list_users(self.session, is_active=False)
        self.assertEqual([u.email for u in inactive], ["frank@example.com"])

        found = self.service.list_users(self.session, email_contains="ROOT")
        self.assertEqual([u.email for u in found], ["root@example.com"])

    # ---------- Permission overrides ----------

    def test_permission_override(self):
        user = self.service.set_permissions(
            self.session,
            self.admin.id,
            UserPermissionsUpdate(permissions=["view_analytics", "manage_products"]),
        )
        self.assertEqual(
            self.service.to_read(user).permissions, ["manage_products", "view_analytics"]
        )

        reset = self.service.set_permissions(
            self.session, self.admin.id, UserPermissionsUpdate(permissions=None)
        )
        self.assertIsNone(reset.permissions)
        self.assertNotIn("view_analytics", self.service.to_read(reset).permissions)

    def test_superadmin_override_still_reports_every_permission(self):
        user = self.service.set_permissions(
            self.session, self.root.id, UserPermissionsUpdate(permissions=["view_products"])
        )
        self.assertEqual(
            self.service.to_read(user).permissions, sorted(SUPERADMIN_PERMISSIONS)
        )

    def test_unknown_permission_in_override(self):
        with self.assertRaises(HTTPException) as ctx:
            self.service.set_permissions(
                self.session, self.admin.id, UserPermissionsUpdate(permissions=["teleport"])
            )
        self.assertEqual(ctx.exception.status_code, 400)

    def test_role_change_resets_override(self):
        self.service.set_permissions(
            self.session, self.client_user.id, UserPermissionsUpdate(permissions=["place_orders"])
        )
        user = self.service.update_role(
            self.session, self.root, self.client_user.id, UserRoleUpdate(role="admin")
        )
        self.assertIsNone(user.permissions)

    # ---------- Route guards ----------

    def test_require_role_guard(self):
        guard = require_role("admin")
        self.assertIs(guard(user=self.admin), self.admin)
        self.assertIs(guard(user=self.root), self.root)
        with self.assertRaises(AccessDenied):
            guard(user=self.client_user)

    def test_require_permission_guard_honours_override(self):
        guard = require_permission("view_analytics")
        with self.assertRaises(AccessDenied):
            guard(user=self.admin)

        self.service.set_permissions(
            self.session, self.admin.id, UserPermissionsUpdate(permissions=["view_analytics"])
        )
        self.assertIs(guard(user=self.admin), self.admin)


if __name__ == "__main__":
    unittest.main()
