"""
HTTP API tests through FastAPI's TestClient.

Callers authenticate with development tokens ("dev_<email>"), which the
Firebase middleware accepts when ENV=development.

Run: pytest tests/test_api_routes.py -v
"""

import pytest
from bson import ObjectId
from unittest.mock import patch
from firebase_admin import auth as firebase_auth

from src.database.db_manager import DBManager
from src.models.user_models import UserRole

READER = "reader@example.com"
OTHER_READER = "other@example.com"
ADMIN = "admin@example.com"


@pytest.fixture
def admin_user(make_user):
    return make_user(ADMIN, role=UserRole.ADMIN)


@pytest.fixture
def reader(make_user):
    return make_user(READER)


@pytest.fixture
def book_id(client, auth, admin_user):
    response = client.post(
        "/books",
        headers=auth(ADMIN),
        json={"title": "Dune", "author": "Frank Herbert", "genre": "Sci-Fi", "total_pages": 300},
    )
    assert response.status_code == 201
    return response.json()["id"]


class TestAuthentication:
    def test_missing_token(self, client):
        response = client.get("/users/me")
        assert response.status_code == 401

    def test_unregistered_user(self, client, auth):
        response = client.get("/users/me", headers=auth(READER))
        assert response.status_code == 401

    def test_dev_tokens_rejected_outside_development(self, client, auth, monkeypatch):
        monkeypatch.setenv("ENV", "production")
        with patch(
            "src.middleware.firebase_auth.firebase_config.verify_token",
            side_effect=firebase_auth.InvalidIdTokenError("bad token"),
        ):
            response = client.post("/users", headers=auth(READER))

        assert response.status_code == 401

    def test_firebase_identity_is_used(self, client, monkeypatch):
        monkeypatch.setenv("ENV", "production")
        claims = {"uid": "firebase-uid", "email": "Reader@Example.com", "name": "Reader"}
        with patch(
            "src.middleware.firebase_auth.firebase_config.verify_token",
            return_value=claims,
        ):
            response = client.post(
                "/users", headers={"Authorization": "Bearer real-firebase-token"}
            )

        assert response.status_code == 200
        assert response.json()["user"]["email"] == READER


class TestUsers:
    def test_register_then_login(self, client, auth):
        first = client.post("/users", headers=auth(READER))
        second = client.post("/users", headers=auth(READER))

        assert first.json()["created"] is True
        assert second.json()["created"] is False
        user = second.json()["user"]
        assert user["role"] == "user"
        assert user["books_read_this_year"] == 0

    def test_set_goal(self, client, auth, reader):
        response = client.patch("/users/me/goal", headers=auth(READER), json={"annual_goal": 12})

        assert response.status_code == 200
        assert response.json()["annual_goal"] == 12

    def test_negative_goal_rejected(self, client, auth, reader):
        response = client.patch("/users/me/goal", headers=auth(READER), json={"annual_goal": -1})
        assert response.status_code == 422

    def test_role_lookup(self, client, auth, reader, admin_user):
        response = client.get(f"/users/role/{ADMIN}", headers=auth(READER))

        assert response.status_code == 200
        assert response.json()["role"] == "admin"

    def test_role_lookup_unknown_user(self, client, auth, reader):
        response = client.get("/users/role/ghost@example.com", headers=auth(READER))

        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"

    def test_blocked_user_is_rejected(self, client, auth, reader, admin_user):
        response = client.patch(
            f"/admin/users/{reader['_id']}/status",
            headers=auth(ADMIN),
            json={"status": "blocked"},
        )
        assert response.status_code == 200

        assert client.get("/users/me", headers=auth(READER)).status_code == 403
        assert client.post("/users", headers=auth(READER)).status_code == 403

    def test_admin_cannot_block_self(self, client, auth, admin_user):
        response = client.patch(
            f"/admin/users/{admin_user['_id']}/status",
            headers=auth(ADMIN),
            json={"status": "blocked"},
        )
        assert response.status_code == 400

    def test_admin_routes_require_admin(self, client, auth, reader):
        assert client.get("/admin/users", headers=auth(READER)).status_code == 403

    def test_list_users_with_search(self, client, auth, reader, admin_user):
        response = client.get("/admin/users?search=reader", headers=auth(ADMIN))

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["users"][0]["email"] == READER


class TestBooks:
    def test_reader_cannot_create_book(self, client, auth, reader):
        response = client.post(
            "/books",
            headers=auth(READER),
            json={"title": "X", "author": "Y", "genre": "Z"},
        )
        assert response.status_code == 403

    def test_created_book_starts_with_zero_aggregates(self, client, book_id):
        book = client.get(f"/books/{book_id}").json()

        assert book["average_rating"] == 0.0
        assert book["total_reviews"] == 0
        assert book["shelved_count"] == 0

    def test_search_is_case_insensitive_and_escaped(self, client, auth, book_id):
        assert client.get("/books?search=herbert").json()["total"] == 1
        assert client.get("/books?search=dun").json()["total"] == 1
        assert client.get("/books?search=.*").json()["total"] == 0

    def test_filter_by_genre(self, client, book_id):
        assert client.get("/books?genre=Sci-Fi").json()["total"] == 1
        assert client.get("/books?genre=Poetry").json()["total"] == 0

    def test_invalid_book_id(self, client):
        response = client.get("/books/not-an-id")

        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_INPUT"

    def test_missing_book(self, client):
        response = client.get(f"/books/{ObjectId()}")
        assert response.status_code == 404

    def test_update_book(self, client, auth, book_id):
        response = client.patch(
            f"/books/{book_id}", headers=auth(ADMIN), json={"total_pages": 412}
        )

        assert response.status_code == 200
        assert response.json()["total_pages"] == 412

    def test_delete_book_cascades(self, client, auth, reader, book_id, user_doc):
        client.post(
            "/shelves", headers=auth(READER), json={"book_id": book_id, "shelf_type": "read"}
        )
        client.post("/reviews", headers=auth(READER), json={"book_id": book_id, "rating": 4})

        response = client.delete(f"/books/{book_id}", headers=auth(ADMIN))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data == {"book_deleted": True, "reviews_deleted": 1, "shelf_entries_deleted": 1}
        assert user_doc(READER)["books_read_this_year"] == 0
        assert client.get("/shelves/me", headers=auth(READER)).json()["total"] == 0

    def test_delete_missing_book_is_noop(self, client, auth, admin_user):
        response = client.delete(f"/books/{ObjectId()}", headers=auth(ADMIN))

        assert response.status_code == 200
        assert response.json()["data"]["book_deleted"] is False


class TestReviews:
    def test_review_moderation_flow(self, client, auth, reader, book_id):
        submitted = client.post(
            "/reviews",
            headers=auth(READER),
            json={"book_id": book_id, "rating": 5, "comment": "Loved it"},
        )
        assert submitted.status_code == 200
        review = submitted.json()
        assert review["status"] == "pending"
        assert review["user_email"] == READER

        # Pending reviews are not public
        assert client.get(f"/books/{book_id}/reviews").json()["total"] == 0

        queue = client.get("/admin/reviews?status=pending", headers=auth(ADMIN)).json()
        assert [r["id"] for r in queue["reviews"]] == [review["id"]]

        approved = client.patch(
            f"/admin/reviews/{review['id']}/approve", headers=auth(ADMIN)
        )
        assert approved.status_code == 200
        assert approved.json()["status"] == "approved"

        assert client.get(f"/books/{book_id}/reviews").json()["total"] == 1
        book = client.get(f"/books/{book_id}").json()
        assert book["average_rating"] == 5.0
        assert book["total_reviews"] == 1

    def test_rating_out_of_range(self, client, auth, reader, book_id):
        response = client.post(
            "/reviews", headers=auth(READER), json={"book_id": book_id, "rating": 7}
        )
        assert response.status_code == 422

    def test_my_reviews(self, client, auth, reader, book_id):
        client.post("/reviews", headers=auth(READER), json={"book_id": book_id, "rating": 3})

        data = client.get("/reviews/me", headers=auth(READER)).json()

        assert data["total"] == 1
        assert data["reviews"][0]["status"] == "pending"

    def test_only_author_or_admin_can_delete(self, client, auth, reader, make_user, book_id):
        make_user(OTHER_READER)
        review = client.post(
            "/reviews", headers=auth(READER), json={"book_id": book_id, "rating": 3}
        ).json()

        forbidden = client.delete(f"/reviews/{review['id']}", headers=auth(OTHER_READER))
        allowed = client.delete(f"/reviews/{review['id']}", headers=auth(ADMIN))

        assert forbidden.status_code == 403
        assert allowed.status_code == 200
        assert client.get("/reviews/me", headers=auth(READER)).json()["total"] == 0


class TestShelves:
    def test_shelve_and_finish_book(self, client, auth, reader, book_id, user_doc):
        entry = client.post(
            "/shelves",
            headers=auth(READER),
            json={"book_id": book_id, "shelf_type": "reading", "progress": 10},
        ).json()
        assert entry["title"] == "Dune"
        assert entry["progress"] == 10
        assert client.get(f"/books/{book_id}").json()["shelved_count"] == 1

        finished = client.patch(
            f"/shelves/{entry['id']}/progress", headers=auth(READER), json={"progress": 300}
        )

        assert finished.status_code == 200
        assert finished.json()["shelf_type"] == "read"
        assert finished.json()["finished_at"] is not None
        assert user_doc(READER)["books_read_this_year"] == 1

    def test_filter_my_shelves(self, client, auth, reader, book_id):
        client.post(
            "/shelves", headers=auth(READER), json={"book_id": book_id, "shelf_type": "want-to-read"}
        )

        wanted = client.get("/shelves/me?shelf_type=want-to-read", headers=auth(READER)).json()
        read = client.get("/shelves/me?shelf_type=read", headers=auth(READER)).json()

        assert wanted["total"] == 1
        assert read["total"] == 0

    def test_unknown_shelf_type(self, client, auth, reader, book_id):
        response = client.post(
            "/shelves", headers=auth(READER), json={"book_id": book_id, "shelf_type": "favourites"}
        )
        assert response.status_code == 422

    def test_shelving_missing_book(self, client, auth, reader):
        response = client.post(
            "/shelves",
            headers=auth(READER),
            json={"book_id": str(ObjectId()), "shelf_type": "reading"},
        )
        assert response.status_code == 404

    def test_only_owner_can_change_entry(self, client, auth, reader, make_user, book_id):
        make_user(OTHER_READER)
        entry = client.post(
            "/shelves", headers=auth(READER), json={"book_id": book_id, "shelf_type": "reading"}
        ).json()

        progress = client.patch(
            f"/shelves/{entry['id']}/progress", headers=auth(OTHER_READER), json={"progress": 5}
        )
        removal = client.delete(f"/shelves/{entry['id']}", headers=auth(OTHER_READER))

        assert progress.status_code == 403
        assert removal.status_code == 403

    def test_remove_entry_twice(self, client, auth, reader, book_id):
        entry = client.post(
            "/shelves", headers=auth(READER), json={"book_id": book_id, "shelf_type": "reading"}
        ).json()

        first = client.delete(f"/shelves/{entry['id']}", headers=auth(READER))
        second = client.delete(f"/shelves/{entry['id']}", headers=auth(READER))

        assert first.json()["data"]["deleted"] is True
        assert second.status_code == 200
        assert second.json()["data"]["deleted"] is False
        assert client.get(f"/books/{book_id}").json()["shelved_count"] == 0


class TestGenresAndTutorials:
    def test_duplicate_genre_name_conflicts(self, client, auth, admin_user):
        first = client.post("/genres", headers=auth(ADMIN), json={"name": "Poetry"})
        second = client.post("/genres", headers=auth(ADMIN), json={"name": "poetry"})

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["error"] == "CONFLICT"
        assert [g["name"] for g in client.get("/genres").json()] == ["Poetry"]

    def test_delete_missing_genre(self, client, auth, admin_user):
        response = client.delete(f"/genres/{ObjectId()}", headers=auth(ADMIN))
        assert response.status_code == 404

    def test_tutorial_crud(self, client, auth, admin_user):
        created = client.post(
            "/tutorials",
            headers=auth(ADMIN),
            json={"title": "How to read faster", "video_url": "https://youtu.be/abc"},
        ).json()

        updated = client.patch(
            f"/tutorials/{created['id']}", headers=auth(ADMIN), json={"title": "Speed reading"}
        )
        assert updated.json()["title"] == "Speed reading"
        assert len(client.get("/tutorials").json()) == 1

        client.delete(f"/tutorials/{created['id']}", headers=auth(ADMIN))
        assert client.get("/tutorials").json() == []


class TestStatsAndHealth:
    def test_my_stats(self, client, auth, reader, book_id):
        client.patch("/users/me/goal", headers=auth(READER), json={"annual_goal": 2})
        client.post(
            "/shelves", headers=auth(READER), json={"book_id": book_id, "shelf_type": "read"}
        )

        data = client.get("/stats/me", headers=auth(READER)).json()

        assert data["books_read_this_year"] == 1
        assert data["goal_progress"] == 50.0
        assert data["shelves"]["read"] == 1

    def test_admin_stats_requires_admin(self, client, auth, reader):
        assert client.get("/admin/stats", headers=auth(READER)).status_code == 403

    def test_admin_stats(self, client, auth, reader, book_id):
        data = client.get("/admin/stats", headers=auth(ADMIN)).json()

        assert data["total_books"] == 1
        assert data["total_users"] == 2

    def test_ping(self, client):
        assert client.get("/ping").json()["message"] == "pong"

    def test_health_reports_database(self, client):
        with patch.object(DBManager, "ping", return_value=True):
            healthy = client.get("/health")
        with patch.object(DBManager, "ping", return_value=False):
            degraded = client.get("/health")

        assert healthy.status_code == 200
        assert healthy.json()["database"]["status"] == "connected"
        assert degraded.status_code == 503
        assert degraded.json()["status"] == "degraded"
