"""
Authentication utilities - JWT, password hashing, and ownership checks
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict
import bcrypt
from jose import JWTError, jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from formcraft.config.settings import settings
from formcraft.utils.errors import AuthError, OwnershipError

logger = logging.getLogger(__name__)

# JWT Bearer token; missing headers are reported by get_current_user as 401
security = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt directly"""
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its bcrypt hash"""
    try:
        return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))
    except (ValueError, TypeError):
        return False


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token naming user_id"""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode: Dict = {"sub": str(user_id), "exp": expire}
    return jwt.encode(to_encode, settings.SIGNING_SECRET, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> str:
    """Verify signature and expiry, returning the user id"""
    try:
        payload = jwt.decode(token, settings.SIGNING_SECRET, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.info("JWT verification failed: %s", e)
        raise AuthError()
    user_id = payload.get("sub")
    if not user_id:
        raise AuthError("Invalid authentication credentials")
    return user_id


async def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> str:
    """Get the authenticated user id from the bearer token"""
    if credentials is None or not credentials.credentials:
        raise AuthError("No token provided")
    return decode_access_token(credentials.credentials)


def require_owner(document: Dict, user_id: str) -> Dict:
    """Raise OwnershipError unless user_id owns the form"""
    if str(document.get("userId")) != str(user_id):
        raise OwnershipError()
    return document
