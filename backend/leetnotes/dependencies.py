"""
LeetNotes Backend — Request Dependencies
==========================================

`get_current_user` resolves the bearer token once per request and hands the
verified identity to the route, which passes `user.id` into every service
call. Nothing about the caller is stored on the request or in globals.
"""

from typing import Optional

from fastapi import Header

from leetnotes.services.auth_service import AuthenticatedUser, auth_service, extract_bearer_token


async def get_current_user(
    authorization: Optional[str] = Header(default=None),
) -> AuthenticatedUser:
    """
    Raises:
        AuthenticationError: Missing/malformed header or rejected token (→ 401).
        ConfigurationError: Supabase Auth not configured (→ 500).
    """
    token = extract_bearer_token(authorization)
    return await auth_service.verify_token(token)
