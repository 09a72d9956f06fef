"""Tests for /api/users routes: status codes and error mapping."""

import unittest
from unittest.mock import AsyncMock, MagicMock, patch
import sys
from pathlib import Path

# Add src to path
# test_users_route.py is at /app/src/api/tests/test_users_route.py
# src is at /app/src, so we go up 3 levels
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from fastapi.testclient import TestClient

from adapter.fake.audit_log import FakeAuditLog
from adapter.fake.user_repository import FakeUserRepository
from api.dependencies import get_user_service
from api.main import app
from domain.model.errors import RepositoryError
from domain.model.user import UserRole
from services.user_service import UserService
from services.validators import registration_validators, update_validators

REGISTER_BODY = {
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": " Ada@Example.com ",
    "phoneNumber": "01711112222",
    "password": "Secret123",
    "dateOfBirth": "1990-12-10",
}


class UsersRouteTestCase(unittest.TestCase):

    def setUp(self):
        self.repo = FakeUserRepository()
        self.audit_log = FakeAuditLog()
        self.service = UserService(
            self.repo,
            registration_validators=registration_validators(self.repo),
            update_validators=update_validators(self.repo),
            audit_log=self.audit_log,
            bcrypt_rounds=4,
        )
        app.dependency_overrides[get_user_service] = lambda: self.service
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def _register(self, **overrides) -> dict:
        body = {**REGISTER_BODY, **overrides}
        response = self.client.post("/api/users/register", json=body)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()


class TestRegisterRoute(UsersRouteTestCase):

    def test_register_returns_201_with_location(self):
        response = self.client.post("/api/users/register", json=REGISTER_BODY)

        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(response.headers["location"], f"/api/users/{data['id']}")
        self.assertEqual(data["email"], "ada@example.com")
        self.assertEqual(data["phoneNumber"], "+8801711112222")
        self.assertEqual(data["fullName"], "Ada Lovelace")
        self.assertEqual(data["displayName"], "Ada Lovelace")
        self.assertEqual(data["role"], "User")
        self.assertEqual(data["status"], "Active")
        self.assertIn("createdAt", data)
        self.assertNotIn("passwordHash", data)
        self.assertNotIn("isDeleted", data)

    def test_duplicate_email_returns_400_with_message(self):
        self._register()

        response = self.client.post("/api/users/register", json={**REGISTER_BODY, "phoneNumber": None})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Email is already in use.")

    def test_invalid_name_is_rejected_by_request_model(self):
        response = self.client.post("/api/users/register", json={**REGISTER_BODY, "firstName": "R2-D2"})
        self.assertEqual(response.status_code, 422)

        response = self.client.post("/api/users/register", json={**REGISTER_BODY, "lastName": " L "})
        self.assertEqual(response.status_code, 422)

    def test_apostrophes_and_hyphens_are_allowed(self):
        data = self._register(firstName="Mary-Jane", lastName="O'Neil")
        self.assertEqual(data["fullName"], "Mary-Jane O'Neil")

    def test_password_over_72_bytes_returns_400(self):
        response = self.client.post("/api/users/register", json={**REGISTER_BODY, "password": "Aa1" + "x" * 80})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Password must be at most 72 bytes")
        self.assertEqual(self.repo.store, {})

    def test_repository_failure_returns_503(self):
        self.repo.add = AsyncMock(side_effect=RepositoryError("down"))

        response = self.client.post("/api/users/register", json=REGISTER_BODY)

        self.assertEqual(response.status_code, 503)


class TestUpdateRoute(UsersRouteTestCase):

    def test_update_returns_200(self):
        user = self._register()

        response = self.client.put(f"/api/users/{user['id']}", json={
            "firstName": "Augusta",
            "lastName": "King",
            "phoneNumber": "01711112222",
        })

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["fullName"], "Augusta King")

    def test_update_missing_user_returns_404(self):
        response = self.client.put("/api/users/missing", json={"firstName": "Ada", "lastName": "Lovelace"})
        self.assertEqual(response.status_code, 404)

    def test_update_to_taken_phone_returns_400(self):
        self._register()
        other = self._register(email="bob@example.com", phoneNumber="+15550100")

        response = self.client.put(f"/api/users/{other['id']}", json={
            "firstName": "Bob", "lastName": "Jones", "phoneNumber": "01711112222",
        })

        self.assertEqual(response.status_code, 400)


class TestRoleStatusRoute(UsersRouteTestCase):

    def setUp(self):
        super().setUp()
        self.admin = self._register(email="root@example.com", phoneNumber=None)
        self.repo.store[self.admin["id"]].role = UserRole.ADMIN
        self.target = self._register()

    def test_admin_changes_status(self):
        response = self.client.put(
            f"/api/users/{self.target['id']}/role-status",
            json={"status": "Suspended"},
            headers={"X-User-Id": self.admin["id"]},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "Suspended")
        self.assertEqual(response.json()["role"], "User")
        self.assertEqual(len(self.audit_log.events), 1)

    def test_audit_sink_failure_still_returns_200(self):
        self.audit_log.fail = True

        response = self.client.put(
            f"/api/users/{self.target['id']}/role-status",
            json={"role": "Admin"},
            headers={"X-User-Id": self.admin["id"]},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["role"], "Admin")
        self.assertEqual(self.repo.store[self.target["id"]].role, UserRole.ADMIN)

    def test_non_admin_returns_403(self):
        response = self.client.put(
            f"/api/users/{self.target['id']}/role-status",
            json={"role": "Admin"},
            headers={"X-User-Id": self.target["id"]},
        )

        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.repo.store[self.target["id"]].role, UserRole.USER)

    def test_missing_header_returns_403(self):
        response = self.client.put(f"/api/users/{self.target['id']}/role-status", json={"role": "Admin"})
        self.assertEqual(response.status_code, 403)

    def test_missing_target_returns_404(self):
        response = self.client.put(
            "/api/users/missing/role-status",
            json={"role": "Admin"},
            headers={"X-User-Id": self.admin["id"]},
        )
        self.assertEqual(response.status_code, 404)

    def test_unknown_role_is_rejected(self):
        response = self.client.put(
            f"/api/users/{self.target['id']}/role-status",
            json={"role": "Superuser"},
            headers={"X-User-Id": self.admin["id"]},
        )
        self.assertEqual(response.status_code, 422)


class TestGetRoutes(UsersRouteTestCase):

    def test_get_by_id(self):
        user = self._register()

        response = self.client.get(f"/api/users/{user['id']}")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), user)

    def test_get_missing_and_deleted_return_404(self):
        user = self._register()
        self.repo.store[user["id"]].delete()

        self.assertEqual(self.client.get(f"/api/users/{user['id']}").status_code, 404)
        self.assertEqual(self.client.get("/api/users/missing").status_code, 404)

    def test_list_users_excludes_deleted(self):
        kept = self._register()
        gone = self._register(email="bob@example.com", phoneNumber=None)
        self.repo.store[gone["id"]].delete()

        response = self.client.get("/api/users")

        self.assertEqual(response.status_code, 200)
        self.assertEqual([u["id"] for u in response.json()], [kept["id"]])


class TestHealthRoute(unittest.TestCase):

    def setUp(self):
        self.client = TestClient(app)

    @patch('api.routes.health.get_mongodb_client', new_callable=AsyncMock)
    def test_healthy_when_mongodb_pings(self, mock_get_client):
        client = MagicMock()
        client.admin.command = AsyncMock(return_value={'ok': 1})
        mock_get_client.return_value = client

        response = self.client.get("/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["services"]["mongodb"]["status"], "healthy")

    @patch('api.routes.health.get_mongodb_client', new_callable=AsyncMock)
    def test_degraded_without_mongodb(self, mock_get_client):
        mock_get_client.return_value = None

        response = self.client.get("/health")

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["status"], "degraded")


if __name__ == '__main__':
    unittest.main()
