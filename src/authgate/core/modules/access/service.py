from authgate.core.core import Service
from authgate.core.modules.user.models import Role, User
from authgate.errors import AccessDeniedError, AuthenticationError


class AccessService(Service):
    async def ensure_authenticated(self, token: str) -> User:
        """Resolve the session token to a trusted user or fail with a generic error."""
        user = await self.core.services.session.check_session(token)
        if user is None:
            raise AuthenticationError
        return user

    async def ensure_admin(self, token: str) -> User:
        """Ensure the authenticated user is admin, raise AccessDeniedError if not."""
        user = await self.ensure_authenticated(token)
        if user.role != Role.ADMIN:
            raise AccessDeniedError("Admin privileges required")
        return user
