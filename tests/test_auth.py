import pytest
from django.contrib.auth import get_user_model
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken
from rest_framework_simplejwt.tokens import RefreshToken

User = get_user_model()


def _login(client, email, password="password123"):
    return client.post("/api/auth/login/", {"email": email, "password": password}, format="json")


def _is_blacklisted(raw_refresh):
    # Outstanding rows predate the custom claims; match on jti
    jti = RefreshToken(raw_refresh, verify=False)["jti"]
    return BlacklistedToken.objects.filter(token__jti=jti).exists()


@pytest.mark.django_db
class TestRegister:

    def test_register_creates_exam_taker(self, api_client):
        response = api_client.post("/api/auth/register/", {
            "email": "New.Student@Example.com",
            "password": "secret123",
            "first_name": "Aiko",
            "role": "admin",
        }, format="json")

        assert response.status_code == 201
        user = User.objects.get(email="new.student@example.com")
        assert user.role == User.Role.USER
        assert user.check_password("secret123")
        assert "password" not in response.data

    def test_duplicate_email_rejected(self, api_client, taker):
        response = api_client.post(
            "/api/auth/register/", {"email": taker.email.upper(), "password": "secret123"}, format="json",
        )

        assert response.status_code == 400
        assert "already exists" in str(response.data["email"][0])

    def test_short_password_rejected(self, api_client):
        response = api_client.post("/api/auth/register/", {"email": "a@example.com", "password": "123"}, format="json")

        assert response.status_code == 400


@pytest.mark.django_db
class TestCookieSession:

    def test_login_sets_cookies(self, api_client, taker):
        response = _login(api_client, taker.email)

        assert response.status_code == 200
        assert response.data["success"] is True
        assert response.data["user"]["email"] == taker.email
        assert "access" not in response.data
        assert response.cookies["access_token"]["httponly"]
        assert response.cookies["refresh_token"].value

        me = api_client.get("/api/users/me/")
        assert me.status_code == 200
        assert me.data["role"] == User.Role.USER

    def test_bad_password(self, api_client, taker):
        response = _login(api_client, taker.email, password="wrong-password")

        assert response.status_code == 401
        assert "access_token" not in response.cookies

    def test_refresh_without_cookie(self, api_client):
        response = api_client.post("/api/auth/refresh/")

        assert response.status_code == 401

    def test_refresh_rotates(self, api_client, taker):
        _login(api_client, taker.email)
        old_refresh = api_client.cookies["refresh_token"].value

        response = api_client.post("/api/auth/refresh/")

        assert response.status_code == 200
        assert response.cookies["access_token"].value
        assert response.cookies["refresh_token"].value != old_refresh
        assert _is_blacklisted(old_refresh)

    def test_rotated_refresh_cannot_be_reused(self, api_client, taker):
        _login(api_client, taker.email)
        old_refresh = api_client.cookies["refresh_token"].value
        api_client.post("/api/auth/refresh/")
        api_client.cookies["refresh_token"] = old_refresh

        response = api_client.post("/api/auth/refresh/")

        assert response.status_code == 401

    def test_garbage_refresh_cookie(self, api_client):
        api_client.cookies["refresh_token"] = "not-a-token"

        assert api_client.post("/api/auth/refresh/").status_code == 401

    def test_logout_clears_cookies(self, api_client, taker):
        _login(api_client, taker.email)
        refresh = api_client.cookies["refresh_token"].value

        response = api_client.post("/api/auth/logout/")

        assert response.status_code == 200
        assert response.cookies["access_token"].value == ""
        assert response.cookies["refresh_token"].value == ""
        assert _is_blacklisted(refresh)
        assert api_client.get("/api/users/me/").status_code == 401

    def test_logout_all(self, api_client, taker):
        _login(api_client, taker.email)
        _login(api_client, taker.email)

        response = api_client.post("/api/auth/logout-all/")

        assert response.status_code == 200
        assert response.data["revoked"] == 2
        assert BlacklistedToken.objects.filter(token__user=taker).count() == 2

    def test_bearer_header_is_accepted(self, api_client, taker):
        access = _login(api_client, taker.email).cookies["access_token"].value
        api_client.cookies.clear()
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")

        assert api_client.get("/api/users/me/").status_code == 200
