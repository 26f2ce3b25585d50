"""Integration tests for the user administration endpoints."""

import uuid

from httpx import AsyncClient

from portal_api.models.role import Role
from portal_api.models.user import User


def _headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class TestListUsers:
    """Tests for GET /api/v1/users."""

    async def test_requires_permission(self, client: AsyncClient, student_token: str) -> None:
        response = await client.get("/api/v1/users", headers=_headers(student_token))
        assert response.status_code == 403
        assert response.json()["detail"] == "Missing permission: users:read"

    async def test_requires_authentication(self, client: AsyncClient) -> None:
        assert (await client.get("/api/v1/users")).status_code == 401

    async def test_list_and_search(self, client: AsyncClient, admin_token: str, student_user: User) -> None:
        response = await client.get("/api/v1/users", headers=_headers(admin_token))
        assert response.status_code == 200
        body = response.json()
        assert body["pagination"]["total"] == 2
        assert {u["email"] for u in body["items"]} == {"admin@example.com", "student@example.com"}

        body = (await client.get("/api/v1/users", params={"search": "ana"}, headers=_headers(admin_token))).json()
        assert [u["email"] for u in body["items"]] == ["student@example.com"]

    async def test_page_size_bounds(self, client: AsyncClient, admin_token: str) -> None:
        response = await client.get("/api/v1/users", params={"page_size": 101}, headers=_headers(admin_token))
        assert response.status_code == 422


class TestGetUser:
    """Tests for GET /api/v1/users/{id}."""

    async def test_get(self, client: AsyncClient, admin_token: str, student_user: User) -> None:
        response = await client.get(f"/api/v1/users/{student_user.id}", headers=_headers(admin_token))
        assert response.status_code == 200
        body = response.json()
        assert body["_id"] == str(student_user.id)
        assert body["sexo"] == "F"
        assert body["ci"] == "1234567"
        assert "hashed_password" not in body

    async def test_not_found(self, client: AsyncClient, admin_token: str) -> None:
        response = await client.get(f"/api/v1/users/{uuid.uuid4()}", headers=_headers(admin_token))
        assert response.status_code == 404
        assert response.json()["code"] == "user_not_found"


class TestUpdateUser:
    """Tests for PATCH /api/v1/users/{id}."""

    async def test_replace_roles_and_verify(
        self, client: AsyncClient, admin_token: str, student_user: User, admin_role: Role
    ) -> None:
        response = await client.patch(
            f"/api/v1/users/{student_user.id}",
            json={"roles": ["Admin"], "verified": True},
            headers=_headers(admin_token),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["roles"] == ["Admin"]
        assert body["verified"] is True

    async def test_role_change_applies_to_existing_token(
        self, client: AsyncClient, admin_token: str, student_token: str, student_user: User, admin_role: Role
    ) -> None:
        assert (await client.get("/api/v1/users", headers=_headers(student_token))).status_code == 403
        await client.patch(
            f"/api/v1/users/{student_user.id}", json={"roles": ["Admin"]}, headers=_headers(admin_token)
        )
        assert (await client.get("/api/v1/users", headers=_headers(student_token))).status_code == 200

    async def test_unknown_role(self, client: AsyncClient, admin_token: str, student_user: User) -> None:
        response = await client.patch(
            f"/api/v1/users/{student_user.id}", json={"roles": ["Wizard"]}, headers=_headers(admin_token)
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Role not found: Wizard"

    async def test_student_cannot_update(self, client: AsyncClient, student_token: str, student_user: User) -> None:
        response = await client.patch(
            f"/api/v1/users/{student_user.id}", json={"verified": True}, headers=_headers(student_token)
        )
        assert response.status_code == 403


class TestPasswordHistory:
    """Tests for GET /api/v1/users/{id}/password-history."""

    async def test_entries_have_no_hashes(self, client: AsyncClient, admin_token: str, student_user: User) -> None:
        response = await client.get(
            f"/api/v1/users/{student_user.id}/password-history", headers=_headers(admin_token)
        )
        assert response.status_code == 200
        entries = response.json()
        assert len(entries) == 1
        assert set(entries[0]) == {"id", "created_at"}
