"""
Mock bearer-token authentication for the inbox API.

Replace with real OAuth token validation in production.
"""
import hmac
from dataclasses import dataclass, field
from typing import List, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import Settings, get_settings
from .responses import unauthorized

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class AuthUser:
    user_id: str
    role: str
    creator_access: List[str] = field(default_factory=list)


# Every valid token maps to the same chatter account until sessions exist.
MOCK_USER = AuthUser(user_id="usr_chatter_001", role="chatter", creator_access=["cr_001"])


def verify_token(token: str, settings: Settings) -> Optional[AuthUser]:
    """Return the user for a token, or None if the token is not accepted."""
    if hmac.compare_digest(token.encode(), settings.api_token.encode()):
        return MOCK_USER
    return None


def get_required_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> AuthUser:
    """Get the current user, raising 401 if not authenticated."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        unauthorized("Missing or invalid authorization token")

    user = verify_token(credentials.credentials, settings)
    if user is None:
        unauthorized("Invalid authorization token", code="INVALID_TOKEN")
    return user
