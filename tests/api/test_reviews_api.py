"""
HTTP tests for the review routes, through the application with the review
service replaced by a mock.
"""

from datetime import datetime, timezone

import jwt
import pytest
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from main import app
from natours.core.config import config
from natours.core.errors import ErrorResponse
from natours.core.rate_limit import limiter
from natours.dependencies.services import get_review_service
from natours.models.review import Review
from natours.schemas.review import ReviewAuthor, ReviewResponse
from tests.conftest import REVIEW_ID, TOUR_ID, USER_ID


def auth_header(user_id=USER_ID, role="user"):
    token = jwt.encode({"id": user_id, "role": role}, config.jwt_secret, algorithm=config.jwt_algorithm)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def mock_review_service():
    return AsyncMock()


@pytest.fixture
def client(mock_review_service, monkeypatch):
    monkeypatch.setattr(limiter, "enabled", False)
    app.dependency_overrides[get_review_service] = lambda: mock_review_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def stored_review():
    return Review(
        id=REVIEW_ID,
        review="Great tour",
        rating=5,
        created_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
        tour=TOUR_ID,
        user=USER_ID,
    )


class TestReviewRoutes:

    def test_authentication_required(self, client):
        response = client.get("/api/v1/reviews")

        assert response.status_code == 401
        assert response.json()["status"] == "fail"

    def test_list_reviews(self, client, mock_review_service):
        mock_review_service.list_reviews.return_value = [
            ReviewResponse(
                id=REVIEW_ID,
                review="Great tour",
                rating=5,
                created_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
                tour=TOUR_ID,
                user=ReviewAuthor(id=USER_ID, name="Laura Wilson", photo="user-2.jpg"),
            )
        ]

        response = client.get("/api/v1/reviews", headers=auth_header())

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["results"] == 1
        assert body["data"]["data"][0]["user"]["name"] == "Laura Wilson"

    def test_nested_list(self, client, mock_review_service):
        mock_review_service.list_reviews.return_value = []

        response = client.get(f"/api/v1/tours/{TOUR_ID}/reviews", headers=auth_header())

        assert response.status_code == 200
        mock_review_service.list_reviews.assert_awaited_once_with(TOUR_ID)

    def test_nested_create_uses_path_tour_and_token_user(self, client, mock_review_service, stored_review):
        mock_review_service.create_review.return_value = stored_review

        response = client.post(
            f"/api/v1/tours/{TOUR_ID}/reviews",
            json={"review": "Great tour", "rating": 5, "user": "someone-else"},
            headers=auth_header(),
        )

        assert response.status_code == 201
        tour_id, data, author = mock_review_service.create_review.call_args[0]
        assert tour_id == TOUR_ID
        assert author.id == USER_ID
        assert response.json()["data"]["data"]["id"] == REVIEW_ID

    def test_only_users_create_reviews(self, client, mock_review_service):
        response = client.post(
            "/api/v1/reviews",
            json={"review": "Great", "rating": 5, "tour": TOUR_ID},
            headers=auth_header(role="guide"),
        )

        assert response.status_code == 403
        mock_review_service.create_review.assert_not_called()

    def test_invalid_rating(self, client, mock_review_service):
        response = client.post(
            "/api/v1/reviews",
            json={"review": "Great", "rating": 9, "tour": TOUR_ID},
            headers=auth_header(),
        )

        assert response.status_code == 422
        assert response.json()["status"] == "fail"

    def test_duplicate_review(self, client, mock_review_service):
        mock_review_service.create_review.side_effect = ErrorResponse(
            "You have already reviewed this tour", status_code=400
        )

        response = client.post(
            "/api/v1/reviews",
            json={"review": "Again", "rating": 1, "tour": TOUR_ID},
            headers=auth_header(),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "You have already reviewed this tour"

    def test_update_review(self, client, mock_review_service, stored_review):
        mock_review_service.update_review.return_value = stored_review

        response = client.patch(f"/api/v1/reviews/{REVIEW_ID}", json={"rating": 4}, headers=auth_header())

        assert response.status_code == 200
        review_id, data, user = mock_review_service.update_review.call_args[0]
        assert review_id == REVIEW_ID
        assert data.rating == 4

    def test_guides_cannot_delete(self, client, mock_review_service):
        response = client.delete(f"/api/v1/reviews/{REVIEW_ID}", headers=auth_header(role="guide"))

        assert response.status_code == 403
        mock_review_service.delete_review.assert_not_called()

    def test_delete_review(self, client, mock_review_service):
        mock_review_service.delete_review.return_value = None

        response = client.delete(f"/api/v1/reviews/{REVIEW_ID}", headers=auth_header(role="admin"))

        assert response.status_code == 204
        assert response.content == b""

    def test_review_not_found(self, client, mock_review_service):
        mock_review_service.get_review.side_effect = ErrorResponse("No review found with that ID", status_code=404)

        response = client.get(f"/api/v1/reviews/{REVIEW_ID}", headers=auth_header())

        assert response.status_code == 404
        assert response.json() == {"status": "fail", "error": "No review found with that ID", "details": {}}

    def test_unknown_route(self, client):
        response = client.get("/api/v1/bookings")

        assert response.status_code == 404
        assert response.json()["error"] == "Can't find /api/v1/bookings on this server!"
