import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from contenthub.config import settings
from contenthub.database import get_db
from contenthub.exceptions import AuthenticationError, ResourceNotFoundError
from contenthub.models.user import User

logger = logging.getLogger(__name__)

# Tokens are issued by the external auth provider; this service only verifies them
bearer_scheme = HTTPBearer(auto_error=False)


def decode_access_token(token: str) -> int:
    """Return the user id carried in the token's ``sub`` claim."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        logger.warning("Token expired")
        raise AuthenticationError("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT decoding failed: {str(e)}")
        raise AuthenticationError("Invalid token")

    subject = payload.get("sub")
    if subject is None:
        logger.warning("Token is missing 'sub' claim")
        raise AuthenticationError("Token does not contain 'sub' field.")

    try:
        return int(subject)
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token subject")


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Resolve the caller from a bearer token, or None when anonymous."""
    if credentials is None or not credentials.credentials:
        return None

    user_id = decode_access_token(credentials.credentials)
    user = await db.get(User, user_id)
    if user is None:
        logger.warning(f"Token subject {user_id} has no profile")
        raise AuthenticationError("User not found")

    # picked up by the access log after the session is gone
    request.state.user_id = user.id
    return user


async def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise AuthenticationError()
    return user


async def require_admin(user: Optional[User] = Depends(get_optional_user)) -> User:
    """Admin-only routes answer everyone else as if the route did not exist."""
    if user is None or not user.is_admin:
        logger.warning(f"Non-admin access to admin route (user={user.id if user else None})")
        raise ResourceNotFoundError("Page")
    return user
