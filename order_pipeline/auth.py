"""
Authentication and authorization for the Orders pipeline API.

Validates HS256 JWT bearer tokens signed with the configured SECRET_KEY.
"""
import logging
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from .config import SECRET_KEY, ALGORITHM

logger = logging.getLogger(__name__)

security = HTTPBearer()


class CurrentUser(BaseModel):
    """Authenticated caller taken from the token claims."""
    id: int
    email: str
    role: str


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> CurrentUser:
    """
    FastAPI dependency returning the caller identified by the bearer token.

    The token must carry ``sub`` (user id), ``email`` and ``role`` claims.

    Raises:
        HTTPException: 401 if token is invalid
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(credentials.credentials, SECRET_KEY, algorithms=[ALGORITHM])
        user_id_str = payload.get("sub")
        email = payload.get("email")
        role = payload.get("role")

        if user_id_str is None or email is None or role is None:
            raise credentials_exception

        return CurrentUser(id=int(user_id_str), email=email, role=role)
    except (JWTError, ValueError) as e:
        logger.error(f"JWT validation error: {e}")
        raise credentials_exception


def require_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """
    FastAPI dependency that only lets admins through.

    Raises:
        HTTPException: 403 if user is not an admin
    """
    if current_user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required"
        )
    return current_user
