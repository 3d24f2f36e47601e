from typing import Annotated, cast

from fastapi import Depends, Request
from fastapi.security import APIKeyCookie, HTTPAuthorizationCredentials, HTTPBearer

from authgate.app import App
from authgate.config import Config
from authgate.core.modules.credential.models import SESSION_COOKIE
from authgate.errors import AuthenticationError

# Security schemes
bearer_scheme = HTTPBearer(auto_error=False)
cookie_scheme = APIKeyCookie(name=SESSION_COOKIE, auto_error=False)


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_config(request: Request) -> Config:
    return cast(Config, request.app.state.config)


async def get_session_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
    token_cookie: Annotated[str | None, Depends(cookie_scheme)] = None,
) -> str:
    """Session token from the session cookie, or an Authorization Bearer header for non-browser clients.

    Only extracts the token; App operations check it against the session registry.
    """
    if token_cookie:
        return token_cookie
    if credentials and credentials.scheme == "Bearer":
        return credentials.credentials
    raise AuthenticationError


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
ConfigDep = Annotated[Config, Depends(get_config)]
SessionTokenDep = Annotated[str, Depends(get_session_token)]
