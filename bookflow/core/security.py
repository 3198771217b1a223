"""
Bearer token verification

Users sign in with the external identity provider; its access tokens are
signed with the shared SECRET_KEY and carry the user id in `sub`.
"""
from datetime import datetime, timedelta
from typing import Optional
from jose import jwt, JWTError
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from bookflow.core.database import get_db
from bookflow.core.config import settings
from bookflow.models.user import User

# HTTP Bearer authentication
security = HTTPBearer()


# -------------------------
# TOKEN CREATION
# -------------------------
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token (used by the identity provider bridge and tests)"""
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


# -------------------------
# TOKEN VERIFICATION
# -------------------------
def verify_token(token: str, token_type: str = "access") -> dict:
    """
    Verify and decode a JWT token

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("type") and payload.get("type") != token_type:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token type. Expected {token_type}"
        )

    return payload


# -------------------------
# DEPENDENCY FUNCTIONS
# -------------------------
def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Extract current user from JWT token

    Raises:
        HTTPException: If token is invalid or user not found
    """
    payload = verify_token(credentials.credentials, token_type="access")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: user ID missing"
        )

    user = db.query(User).filter(
        User.id == str(user_id),
        User.is_active == True  # noqa: E712
    ).first()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive"
        )

    return user


# -------------------------
# ROLE-BASED ACCESS CONTROL
# -------------------------
def require_role(*allowed_roles: str):
    """
    Dependency factory for role-based access control

    Usage:
        @router.post("/reset", dependencies=[Depends(require_role("owner"))])
    """
    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required roles: {', '.join(allowed_roles)}"
            )
        return current_user

    return role_checker
