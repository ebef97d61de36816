"""Self-service profile routes under /api/users."""

import uuid
from unittest.mock import patch

from fitcoach.repositories.user_repo import UserRepository
from fitcoach.routers import users as users_router


repo = UserRepository()


class TestProfile:

    def test_read_me_hides_tokens(self, client, make_user, auth_headers) -> None:
        user = make_user(password_reset_token="r" * 64)

        response = client.get("/api/users/me", headers=auth_headers(user))

        assert response.status_code == 200
        body = response.json()
        assert body["email"] == user.email
        assert "password_reset_token" not in body
        assert "email_verification_token" not in body

    def test_unverified_user_is_rejected(self, client, make_user, auth_headers) -> None:
        user = make_user(email_verified=False)

        response = client.get("/api/users/me", headers=auth_headers(user))

        assert response.status_code == 403

    def test_partial_update(self, client, make_user, auth_headers) -> None:
        user = make_user(first_name="Alex", last_name="Old")

        response = client.patch(
            "/api/users/me", headers=auth_headers(user), json={"last_name": "New"}
        )

        assert response.status_code == 200
        assert response.json()["first_name"] == "Alex"
        assert response.json()["last_name"] == "New"

    def test_username_must_be_unique(self, client, make_user, auth_headers) -> None:
        make_user(email="first@example.com", username="taken")
        user = make_user(email="second@example.com", username="mine")

        response = client.patch(
            "/api/users/me", headers=auth_headers(user), json={"username": "taken"}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Username is already taken"

    def test_null_username_rejected(self, client, session, make_user, auth_headers) -> None:
        user = make_user(username="keepme")

        response = client.patch(
            "/api/users/me", headers=auth_headers(user), json={"username": None}
        )

        assert response.status_code == 400
        session.refresh(user)
        assert user.username == "keepme"

    def test_null_optional_field_clears_it(self, client, make_user, auth_headers) -> None:
        user = make_user(phone="555-0100")

        response = client.patch(
            "/api/users/me", headers=auth_headers(user), json={"phone": None}
        )

        assert response.status_code == 200
        assert response.json()["phone"] is None

    def test_username_race_lost_at_commit(self, client, session, make_user, auth_headers) -> None:
        """Another request takes the username between the check and the commit."""
        make_user(email="winner@example.com", username="popular")
        user = make_user(email="loser@example.com", username="mine")

        with patch.object(users_router.repo, "get_by_username", return_value=None):
            response = client.patch(
                "/api/users/me", headers=auth_headers(user), json={"username": "popular"}
            )

        assert response.status_code == 400
        assert response.json()["detail"] == "Username is already taken"
        session.refresh(user)
        assert user.username == "mine"

    def test_email_is_not_editable(self, client, make_user, auth_headers) -> None:
        user = make_user()

        response = client.patch(
            "/api/users/me", headers=auth_headers(user), json={"email": "new@example.com"}
        )

        assert response.status_code == 400

    def test_soft_delete_locks_account(self, client, session, make_user, auth_headers) -> None:
        user = make_user()
        headers = auth_headers(user)

        response = client.delete("/api/users/me", headers=headers)
        assert response.status_code == 204

        session.refresh(user)
        assert user.deleted_at is not None

        after = client.get("/api/users/me", headers=headers)
        assert after.status_code == 403
        assert after.json()["detail"] == "Account is disabled"


class TestSync:
    """POST /api/users/sync"""

    def test_creates_unverified_row_for_new_identity(self, client, session, auth_headers, notifier) -> None:
        sub = str(uuid.uuid4())

        response = client.post(
            "/api/users/sync", headers=auth_headers(sub=sub, email="Oauth@Example.com")
        )

        assert response.status_code == 200
        body = response.json()
        assert body["email"] == "oauth@example.com"
        assert body["email_verified"] is False
        assert repo.get_by_supabase_id(session, sub).id == body["id"]
        assert notifier.of_kind("verification")[-1][1] == "oauth@example.com"

    def test_returns_existing_row(self, client, make_user, auth_headers, notifier) -> None:
        user = make_user()

        response = client.post("/api/users/sync", headers=auth_headers(user))

        assert response.status_code == 200
        assert response.json()["id"] == user.id
        assert notifier.sent == []
