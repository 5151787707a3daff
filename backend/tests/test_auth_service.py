"""
LeetNotes Backend — Auth Service Unit Tests
=============================================

What:  Bearer header parsing and Supabase Auth token verification.
How:   httpx.MockTransport stands in for Supabase; no network access.

What we test:
    ✅ Header parsing (missing, wrong scheme, empty token)
    ✅ Valid token → AuthenticatedUser, anon key + token forwarded
    ✅ Rejected token → AuthenticationError (401)
    ✅ Supabase unreachable / 5xx → 500
    ✅ Not configured → ConfigurationError
    ✅ get_current_user dependency end-to-end (401 body shape)
"""

from unittest.mock import patch

import httpx
import pytest

from leetnotes.exceptions import AuthenticationError, ConfigurationError, LeetNotesError
from leetnotes.services.auth_service import SupabaseAuthService, extract_bearer_token

USER_JSON = {
    "id": "7d0c1c9e-2f4b-4b7e-9a52-3a1f6f0c9b11",
    "email": "coder@example.com",
    "aud": "authenticated",
    "role": "authenticated",
}


class TestExtractBearerToken:
    def test_valid_header(self):
        assert extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"

    @pytest.mark.parametrize("header", [None, "", "Basic abc", "bearer abc", "Token abc"])
    def test_missing_or_malformed(self, header):
        with pytest.raises(AuthenticationError) as exc_info:
            extract_bearer_token(header)
        assert exc_info.value.message == "Authorization header missing or malformed"

    def test_empty_token(self):
        with pytest.raises(AuthenticationError) as exc_info:
            extract_bearer_token("Bearer    ")
        assert exc_info.value.message == "No token provided"


class TestVerifyToken:
    @pytest.mark.asyncio
    async def test_valid_token(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["apikey"] = request.headers.get("apikey")
            seen["authorization"] = request.headers.get("authorization")
            return httpx.Response(200, json=USER_JSON)

        service = SupabaseAuthService(transport=httpx.MockTransport(handler))
        user = await service.verify_token("good-token")

        assert str(user.id) == USER_JSON["id"]
        assert user.email == "coder@example.com"
        assert seen["url"] == "https://test-project.supabase.co/auth/v1/user"
        assert seen["apikey"] == "test-anon-key"
        assert seen["authorization"] == "Bearer good-token"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_rejected_token(self, status):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(status, json={"msg": "invalid JWT"})
        )
        service = SupabaseAuthService(transport=transport)

        with pytest.raises(AuthenticationError) as exc_info:
            await service.verify_token("expired")
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Invalid or expired token"

    @pytest.mark.asyncio
    async def test_answer_without_user_id(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"email": "x"}))
        service = SupabaseAuthService(transport=transport)

        with pytest.raises(AuthenticationError):
            await service.verify_token("token")

    @pytest.mark.asyncio
    async def test_supabase_server_error(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(503))
        service = SupabaseAuthService(transport=transport)

        with pytest.raises(LeetNotesError) as exc_info:
            await service.verify_token("token")
        assert exc_info.value.status_code == 500
        assert not isinstance(exc_info.value, AuthenticationError)

    @pytest.mark.asyncio
    async def test_supabase_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        service = SupabaseAuthService(transport=httpx.MockTransport(handler))
        with pytest.raises(LeetNotesError) as exc_info:
            await service.verify_token("token")
        assert exc_info.value.message == "Internal server error during authentication"

    @pytest.mark.asyncio
    async def test_not_configured(self):
        service = SupabaseAuthService()
        with patch("leetnotes.services.auth_service.settings") as mock_settings:
            mock_settings.supabase_url = ""
            mock_settings.supabase_anon_key = ""
            with pytest.raises(ConfigurationError):
                await service.verify_token("token")


class TestAuthDependency:
    @pytest.mark.asyncio
    async def test_missing_header_returns_401(self, anonymous_client):
        response = await anonymous_client.get("/api/problems")

        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "Authorization header missing or malformed"
        assert body["code"] == "unauthorized"
        assert body["request_id"]

    @pytest.mark.asyncio
    async def test_rejected_token_returns_401(self, anonymous_client):
        async def reject(token):
            raise AuthenticationError()

        with patch("leetnotes.dependencies.auth_service.verify_token", side_effect=reject):
            response = await anonymous_client.post(
                "/api/generate-notes/42",
                headers={"Authorization": "Bearer expired"},
            )

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid or expired token"
