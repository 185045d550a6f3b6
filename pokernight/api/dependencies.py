from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from pokernight.utils.exceptions import AuthenticationError

bearer_scheme = HTTPBearer(auto_error=False)


def get_server(request: Request):
    return request.app.state.server


async def require_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> str:
    """Reject the request unless it carries a live admin bearer token"""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Unauthorized")

    token = credentials.credentials
    if not get_server(request).admin_sessions.validate(token):
        raise AuthenticationError("Invalid token")
    return token
