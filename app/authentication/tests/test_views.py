"""
Tests for authentication API endpoints.

Covers:
- Register and login envelopes
- Authentication requirements
- Actor checks on avatar selection
"""

from authentication.tests.factories import DEFAULT_PASSWORD, UserFactory

BASE = "/api/v1/auth"


class TestRegisterView:
    """Tests for POST /api/v1/auth/register/."""

    def test_register_returns_session(self, db, api_client):
        response = api_client.post(
            f"{BASE}/register/",
            {"username": "ada", "email": "ada@example.com", "password": "s3cretpass"},
            format="json",
        )

        assert response.status_code == 201
        assert response.data["status"] is True
        assert response.data["user"]["name"] == "ada"
        assert response.data["user"]["isAvatarImageSet"] is False
        assert response.data["access"]

    def test_duplicate_username_uses_failure_envelope(self, db, api_client, user):
        response = api_client.post(
            f"{BASE}/register/",
            {"username": user.name, "email": "new@example.com", "password": "s3cretpass"},
            format="json",
        )

        assert response.status_code == 400
        assert response.data == {
            "status": False,
            "msg": "Username already used",
            "error_code": "USERNAME_TAKEN",
        }


class TestLoginView:
    """Tests for POST /api/v1/auth/login/."""

    def test_login_returns_tokens(self, db, api_client, user):
        response = api_client.post(
            f"{BASE}/login/",
            {"email": user.email, "password": DEFAULT_PASSWORD},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["user"]["id"] == user.id
        assert response.data["refresh"]

    def test_bad_password_is_rejected(self, db, api_client, user):
        response = api_client.post(
            f"{BASE}/login/",
            {"email": user.email, "password": "wrong-password"},
            format="json",
        )

        assert response.status_code == 400
        assert response.data["error_code"] == "INVALID_CREDENTIALS"

    def test_issued_access_token_authenticates_api_calls(self, db, api_client, user):
        """
        Why it matters: The same JWT is used for REST and the chat socket.
        """
        login = api_client.post(
            f"{BASE}/login/",
            {"email": user.email, "password": DEFAULT_PASSWORD},
            format="json",
        )
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['access']}")

        response = api_client.get(f"{BASE}/users/{user.id}/")

        assert response.status_code == 200


class TestAllUsersView:
    """Tests for GET /api/v1/auth/users/<id>/."""

    def test_requires_authentication(self, db, api_client, user):
        response = api_client.get(f"{BASE}/users/{user.id}/")

        assert response.status_code == 401

    def test_lists_everyone_else(self, db, authenticated_client, user, other_user):
        response = authenticated_client.get(f"{BASE}/users/{user.id}/")

        assert [u["id"] for u in response.data] == [other_user.id]
        assert "password" not in response.data[0]


class TestSearchUserView:
    """Tests for GET /api/v1/auth/search/<email>/."""

    def test_found(self, db, authenticated_client, other_user):
        response = authenticated_client.get(f"{BASE}/search/{other_user.email}/")

        assert response.status_code == 200
        assert response.data["user"]["email"] == other_user.email

    def test_not_found(self, db, authenticated_client):
        response = authenticated_client.get(f"{BASE}/search/nobody@example.com/")

        assert response.status_code == 404
        assert response.data["msg"] == "User does not exist"


class TestSetAvatarView:
    """Tests for POST /api/v1/auth/avatar/<id>/."""

    def test_sets_own_avatar(self, db, authenticated_client, user):
        response = authenticated_client.post(
            f"{BASE}/avatar/{user.id}/", {"image": "data:image/png;base64,AAAA"}, format="json"
        )

        assert response.status_code == 200
        assert response.data == {"isSet": True, "image": "data:image/png;base64,AAAA"}

    def test_cannot_set_someone_elses_avatar(self, db, authenticated_client, other_user):
        """
        Why it matters: The id in the URL must be the authenticated user.
        """
        response = authenticated_client.post(
            f"{BASE}/avatar/{other_user.id}/", {"image": "x"}, format="json"
        )

        assert response.status_code == 403
        assert response.data["error_code"] == "ACTOR_MISMATCH"
        other_user.refresh_from_db()
        assert other_user.avatar == ""
