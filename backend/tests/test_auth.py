"""
Family Cookbook Backend — Authentication Tests
================================================

What:  Password hashing, cookie signing, the login/logout/check-auth
       endpoints and the auth gate on protected routes.
"""

from datetime import timedelta
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy import update
from starlette.concurrency import run_in_threadpool

from cookbook.database import utcnow
from cookbook.models.user import UserSession
from cookbook.services.auth_service import AuthService, hash_password, verify_password

from conftest import ADMIN_NAME, ADMIN_PASSWORD, ADMIN_USERNAME


class TestPasswordHashing:

    def test_hash_then_verify(self):
        hashed = hash_password("s3cret", rounds=4)
        assert hashed != "s3cret"
        assert verify_password("s3cret", hashed)
        assert not verify_password("wrong", hashed)

    def test_malformed_hash_never_matches(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False

    def test_password_over_72_bytes_never_matches(self):
        hashed = hash_password("a" * 72, rounds=4)
        assert verify_password("a" * 72, hashed)
        assert verify_password("a" * 100, hashed) is False

    def test_hashing_over_72_bytes_raises(self):
        with pytest.raises(ValueError, match="72-byte"):
            hash_password("\u00e9" * 40, rounds=4)


class TestCookieSigning:

    def setup_method(self):
        self.auth = AuthService(secret_key="k1", max_age=3600, bcrypt_rounds=4)

    def test_sign_and_unsign(self):
        assert self.auth.unsign(self.auth.sign("token-abc")) == "token-abc"

    def test_tampered_value_rejected(self):
        signed = self.auth.sign("token-abc")
        assert self.auth.unsign(signed[:-2] + "xx") is None

    def test_other_key_rejected(self):
        other = AuthService(secret_key="k2", max_age=3600)
        assert self.auth.unsign(other.sign("token-abc")) is None


class TestLoginEndpoints:

    @pytest.mark.asyncio
    async def test_login_success_sets_cookie(self, client, app):
        response = await client.post(
            "/api/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "name": ADMIN_NAME}
        set_cookie = response.headers["set-cookie"].lower()
        assert app.state.settings.session_cookie_name in set_cookie
        assert "httponly" in set_cookie
        assert "samesite=lax" in set_cookie

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client):
        response = await client.post(
            "/api/login", json={"username": ADMIN_USERNAME, "password": "nope"}
        )
        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "invalid_credentials"
        assert body["request_id"]

    @pytest.mark.asyncio
    async def test_login_unknown_user_same_error(self, client):
        response = await client.post(
            "/api/login", json={"username": "nobody", "password": ADMIN_PASSWORD}
        )
        assert response.status_code == 401
        assert response.json()["error"] == "invalid_credentials"

    @pytest.mark.asyncio
    async def test_password_checks_run_in_threadpool(self, client):
        spy = AsyncMock(wraps=run_in_threadpool)
        with patch("cookbook.services.auth_service.run_in_threadpool", spy):
            known = await client.post(
                "/api/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}
            )
            unknown = await client.post(
                "/api/login", json={"username": "nobody", "password": ADMIN_PASSWORD}
            )

        assert known.status_code == 200
        assert unknown.status_code == 401
        verify_calls = [c for c in spy.await_args_list if c.args[0] is verify_password]
        assert len(verify_calls) == 2
        # Unknown usernames are checked against a throwaway hash, not skipped
        assert verify_calls[1].args[1] == ADMIN_PASSWORD

    @pytest.mark.asyncio
    async def test_login_missing_fields_is_422(self, client):
        response = await client.post("/api/login", json={"username": ADMIN_USERNAME})
        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_check_auth_anonymous(self, client):
        response = await client.get("/api/check-auth")
        assert response.status_code == 200
        assert response.json() == {"authenticated": False}

    @pytest.mark.asyncio
    async def test_check_auth_logged_in(self, auth_client):
        response = await auth_client.get("/api/check-auth")
        assert response.json() == {"authenticated": True, "name": ADMIN_NAME}

    @pytest.mark.asyncio
    async def test_logout_ends_session(self, auth_client):
        response = await auth_client.post("/api/logout")
        assert response.status_code == 200
        assert response.json() == {"success": True}

        response = await auth_client.get("/api/check-auth")
        assert response.json() == {"authenticated": False}

    @pytest.mark.asyncio
    async def test_logout_requires_session(self, client):
        response = await client.post("/api/logout")
        assert response.status_code == 401
        assert response.json()["error"] == "authentication_required"

    @pytest.mark.asyncio
    async def test_forged_cookie_is_anonymous(self, client, app):
        client.cookies.set(app.state.settings.session_cookie_name, "forged.value.here")
        response = await client.get("/api/check-auth")
        assert response.json() == {"authenticated": False}

    @pytest.mark.asyncio
    async def test_expired_session_is_anonymous(self, auth_client, app):
        async with app.state.database.session() as db:
            await db.execute(
                update(UserSession).values(expires_at=utcnow() - timedelta(seconds=1))
            )
            await db.commit()

        response = await auth_client.get("/api/check-auth")
        assert response.json() == {"authenticated": False}


class TestAuthGate:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method, path",
        [
            ("GET", "/api/pending-recipes"),
            ("GET", "/api/pending-recipes/count"),
            ("GET", "/api/pending-recipes/1"),
            ("DELETE", "/api/pending-recipes/1"),
        ],
    )
    async def test_protected_routes_reject_anonymous(self, client, method, path):
        response = await client.request(method, path)
        assert response.status_code == 401
        assert response.json()["error"] == "authentication_required"

    @pytest.mark.asyncio
    async def test_create_recipe_rejects_anonymous(self, client):
        response = await client.post("/api/recipes", json={"title": "Sneaky"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_publish_rejects_anonymous(self, client):
        response = await client.post("/api/pending-recipes/1/publish", json={"title": "Sneaky"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_upload_rejects_anonymous(self, client, test_settings):
        response = await client.post(
            "/api/upload-document",
            files={"document": ("r.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 401
        assert list(Path(test_settings.storage_root).iterdir()) == []


class TestAdminSeed:

    @pytest.mark.asyncio
    async def test_seed_only_when_table_empty(self, app):
        auth: AuthService = app.state.auth_service
        async with app.state.database.session() as db:
            created = await auth.seed_admin(db, "second", "pw", "Second")
        assert created is False

    @pytest.mark.asyncio
    async def test_seed_skipped_without_password(self, mock_db_session):
        result = MagicMock()
        result.scalar.return_value = 0
        mock_db_session.execute.return_value = result
        auth = AuthService(secret_key="k", max_age=60, bcrypt_rounds=4)

        created = await auth.seed_admin(mock_db_session, "admin", "", "Admin")

        assert created is False
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_seed_skipped_for_overlong_password(self, mock_db_session):
        result = MagicMock()
        result.scalar.return_value = 0
        mock_db_session.execute.return_value = result
        auth = AuthService(secret_key="k", max_age=60, bcrypt_rounds=4)

        created = await auth.seed_admin(mock_db_session, "admin", "p" * 73, "Admin")

        assert created is False
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_seed_hashes_in_threadpool(self, mock_db_session):
        result = MagicMock()
        result.scalar.return_value = 0
        mock_db_session.execute.return_value = result
        auth = AuthService(secret_key="k", max_age=60, bcrypt_rounds=4)

        with patch(
            "cookbook.services.auth_service.run_in_threadpool",
            AsyncMock(return_value="$2b$04$hashed"),
        ) as pool:
            created = await auth.seed_admin(mock_db_session, "admin", "pw", "Admin")

        assert created is True
        pool.assert_awaited_once_with(hash_password, "pw", 4)
        user = mock_db_session.add.call_args.args[0]
        assert user.password_hash == "$2b$04$hashed"
        mock_db_session.commit.assert_awaited_once()
