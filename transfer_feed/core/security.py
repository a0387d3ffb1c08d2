"""JWT helpers and principal dependencies."""
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from transfer_feed.core.config import get_settings
from transfer_feed.schemas import TokenData

ADMIN_ROLES = {"admin", "super_admin"}

security = HTTPBearer(auto_error=False)


def create_access_token(subject: str, username: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    expire_delta = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": subject,
        "username": username,
        "role": role,
        "exp": datetime.now(timezone.utc) + expire_delta,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> TokenData:
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not validate credentials") from exc

    subject = payload.get("sub")
    username = payload.get("username")
    role = payload.get("role")
    if not all([subject, username, role]):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not validate credentials")
    return TokenData(subject=subject, username=username, role=role)


async def get_optional_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    token: Optional[str] = Query(default=None),
) -> Optional[TokenData]:
    """Resolve the caller from a bearer header or a ``token`` query parameter.

    Browsers cannot attach headers to an ``EventSource`` request, so stream
    clients pass the token in the query string instead. Returns ``None`` when
    no credentials were supplied at all; a malformed token is still a 401.
    """
    raw = credentials.credentials if credentials else token
    if not raw:
        return None
    return decode_access_token(raw)


async def get_current_principal(principal: Optional[TokenData] = Depends(get_optional_principal)) -> TokenData:
    if principal is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return principal


async def get_current_admin(principal: TokenData = Depends(get_current_principal)) -> TokenData:
    if principal.role not in ADMIN_ROLES:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin privileges required")
    return principal
