import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from .exceptions import Forbidden, Unauthenticated
from .models import User
from .security_utils import verify_access_token

logger = logging.getLogger(__name__)

# auto_error=False so that a cookie-only request is not rejected before we look at it
security = HTTPBearer(auto_error=False)

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"


def extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    """Access token from the accessToken cookie or the Bearer Authorization header"""
    cookie_token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if cookie_token:
        return cookie_token
    if credentials and credentials.credentials:
        return credentials.credentials
    return None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the authenticated user from the access token"""
    token = extract_token(request, credentials)
    if not token:
        raise Unauthenticated("Unauthorized - No Token Provided")

    payload = verify_access_token(token)
    if not payload or payload.get("id") is None:
        raise Forbidden("Invalid or Expired Token")

    user = db.query(User).filter(User.id == payload["id"]).first()
    if not user:
        logger.warning(f"⚠️ Token references unknown user id {payload.get('id')}")
        raise Unauthenticated("Unauthorized - User no longer exists")

    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Staff-only endpoints"""
    if not current_user.is_admin:
        logger.warning(f"🚫 User {current_user.id} attempted a staff-only operation")
        raise Forbidden()
    return current_user
