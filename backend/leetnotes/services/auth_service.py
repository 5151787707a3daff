"""
LeetNotes Backend — Supabase Auth Token Verification
======================================================

What:  Maps a bearer token to the Supabase user it was issued for.
How:   GET {SUPABASE_URL}/auth/v1/user with the project's anon key and the
       user's token, using an httpx AsyncClient. Supabase returns the user
       object (200) or an error (401/403) for invalid or expired tokens.
Who:   Called once per request by the `get_current_user` dependency, which
       hands the resulting AuthenticatedUser to route handlers explicitly.

Token values are never logged.
"""

import logging
import uuid
from typing import Optional

import httpx
from pydantic import BaseModel, ValidationError as PydanticValidationError

from leetnotes.config import settings
from leetnotes.exceptions import AuthenticationError, ConfigurationError, LeetNotesError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class AuthenticatedUser(BaseModel):
    """Verified identity for one request."""
    id: uuid.UUID
    email: Optional[str] = None

    model_config = {"frozen": True, "extra": "ignore"}


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an `Authorization: Bearer <token>` header.

    Raises:
        AuthenticationError: Header missing, wrong scheme, or empty token.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise AuthenticationError(message="Authorization header missing or malformed")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthenticationError(message="No token provided")
    return token


class SupabaseAuthService:
    """
    Verifies access tokens against Supabase Auth.

    Args:
        transport: Optional httpx transport; tests pass httpx.MockTransport.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport

    def is_configured(self) -> bool:
        return bool(settings.supabase_url and settings.supabase_anon_key)

    async def verify_token(self, token: str) -> AuthenticatedUser:
        """
        Resolve a token to its user.

        Raises:
            ConfigurationError: SUPABASE_URL / SUPABASE_ANON_KEY not set.
            AuthenticationError: Token rejected, or no usable user in the answer.
            LeetNotesError: Supabase unreachable (500).
        """
        if not self.is_configured():
            raise ConfigurationError(details="Supabase credentials are not configured.")

        url = f"{settings.supabase_url}/auth/v1/user"
        headers = {
            "apikey": settings.supabase_anon_key,
            "Authorization": f"{BEARER_PREFIX}{token}",
        }

        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=settings.auth_timeout,
            ) as client:
                response = await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            logger.error("Supabase Auth request failed: %s: %s", type(e).__name__, str(e))
            raise LeetNotesError(
                message="Internal server error during authentication",
                context={"error_type": type(e).__name__},
            )

        if response.status_code in (400, 401, 403, 404):
            logger.warning("Token rejected by Supabase Auth (status %d)", response.status_code)
            raise AuthenticationError()
        if response.status_code >= 400:
            logger.error("Supabase Auth returned status %d", response.status_code)
            raise LeetNotesError(
                message="Internal server error during authentication",
                context={"status": response.status_code},
            )

        try:
            user = AuthenticatedUser.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            logger.warning("Supabase Auth answer has no usable user: %s", str(e))
            raise AuthenticationError()

        logger.debug("User authenticated, user_id=%s", user.id)
        return user


auth_service = SupabaseAuthService()
