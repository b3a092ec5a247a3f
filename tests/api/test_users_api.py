"""
HTTP tests for the user routes, through the application with the user
service replaced by a mock.
"""

import jwt
import pytest
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from main import app
from natours.core.config import config
from natours.core.errors import ErrorResponse
from natours.core.rate_limit import limiter
from natours.dependencies.services import get_user_service
from natours.schemas.user import UserResponse
from tests.conftest import ADMIN_ID, USER_ID


def auth_header(user_id=USER_ID, role="user"):
    token = jwt.encode({"id": user_id, "role": role}, config.jwt_secret, algorithm=config.jwt_algorithm)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def mock_user_service():
    return AsyncMock()


@pytest.fixture
def client(mock_user_service, monkeypatch):
    monkeypatch.setattr(limiter, "enabled", False)
    app.dependency_overrides[get_user_service] = lambda: mock_user_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def profile():
    return UserResponse(id=USER_ID, name="Laura Wilson", email="laura@example.com", photo="user-2.jpg")


class TestCurrentUserRoutes:

    def test_authentication_required(self, client):
        response = client.get("/api/v1/users/getMe")
        assert response.status_code == 401

    def test_get_me(self, client, mock_user_service, profile):
        mock_user_service.get_me.return_value = profile

        response = client.get("/api/v1/users/getMe", headers=auth_header())

        assert response.status_code == 200
        assert response.json()["data"]["data"]["email"] == "laura@example.com"
        assert mock_user_service.get_me.call_args[0][0].id == USER_ID

    def test_update_me(self, client, mock_user_service, profile):
        mock_user_service.update_me.return_value = profile

        response = client.patch("/api/v1/users/updateMe", json={"name": "Laura Wilson"}, headers=auth_header())

        assert response.status_code == 200
        data = mock_user_service.update_me.call_args[0][1]
        assert data.name == "Laura Wilson"

    def test_update_me_password_rejected(self, client, mock_user_service):
        mock_user_service.update_me.side_effect = ErrorResponse(
            "This route is not for password updates. Please use /updateMyPassword.", status_code=400
        )

        response = client.patch("/api/v1/users/updateMe", json={"password": "pass1234"}, headers=auth_header())

        assert response.status_code == 400
        assert response.json()["status"] == "fail"

    def test_delete_me(self, client, mock_user_service):
        response = client.delete("/api/v1/users/deleteMe", headers=auth_header())

        assert response.status_code == 204
        mock_user_service.delete_me.assert_awaited_once()

    def test_get_me_not_captured_by_id_route(self, client, mock_user_service, profile):
        mock_user_service.get_me.return_value = profile

        client.get("/api/v1/users/getMe", headers=auth_header())

        mock_user_service.get_user.assert_not_called()


class TestAdminRoutes:

    @pytest.mark.parametrize("method, path", [
        ("get", "/api/v1/users"),
        ("get", f"/api/v1/users/{USER_ID}"),
        ("delete", f"/api/v1/users/{USER_ID}"),
    ])
    def test_admin_only(self, client, method, path):
        response = getattr(client, method)(path, headers=auth_header(role="lead-guide"))

        assert response.status_code == 403
        assert response.json()["error"] == "You do not have permission to perform this action"

    def test_list_users(self, client, mock_user_service, profile):
        mock_user_service.list_users.return_value = [profile]

        response = client.get("/api/v1/users?role=user", headers=auth_header(ADMIN_ID, "admin"))

        assert response.status_code == 200
        body = response.json()
        assert body["results"] == 1
        assert mock_user_service.list_users.call_args[0][0]["role"] == "user"

    def test_create_user(self, client, mock_user_service, profile):
        mock_user_service.create_user.return_value = profile

        response = client.post(
            "/api/v1/users",
            json={"name": "Laura Wilson", "email": "laura@example.com"},
            headers=auth_header(ADMIN_ID, "admin"),
        )

        assert response.status_code == 201
        assert mock_user_service.create_user.call_args.kwargs["created_by"] == ADMIN_ID

    def test_create_user_unknown_role(self, client, mock_user_service):
        response = client.post(
            "/api/v1/users",
            json={"name": "Laura Wilson", "email": "laura@example.com", "role": "superuser"},
            headers=auth_header(ADMIN_ID, "admin"),
        )

        assert response.status_code == 422
        mock_user_service.create_user.assert_not_called()

    def test_update_user(self, client, mock_user_service, profile):
        mock_user_service.update_user.return_value = profile

        response = client.patch(
            f"/api/v1/users/{USER_ID}", json={"role": "guide"}, headers=auth_header(ADMIN_ID, "admin")
        )

        assert response.status_code == 200
        assert mock_user_service.update_user.call_args[0][0] == USER_ID

    def test_delete_user(self, client, mock_user_service):
        response = client.delete(f"/api/v1/users/{USER_ID}", headers=auth_header(ADMIN_ID, "admin"))

        assert response.status_code == 204
        mock_user_service.delete_user.assert_awaited_once_with(USER_ID, deleted_by=ADMIN_ID)

    def test_missing_user(self, client, mock_user_service):
        mock_user_service.get_user.side_effect = ErrorResponse("No user found with that ID", status_code=404)

        response = client.get(f"/api/v1/users/{USER_ID}", headers=auth_header(ADMIN_ID, "admin"))

        assert response.status_code == 404
