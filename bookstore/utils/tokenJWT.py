# utils/tokenJWT.py
import uuid
from datetime import datetime, timedelta
from typing import Optional

from jose import jwt, JWTError
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from sqlalchemy.orm import Session

from bookstore.config import settings
from bookstore.database import get_db
from bookstore.models.users import User, UserSession, Role
from bookstore.utils.errors import UnauthorizedError, ForbiddenError

SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES

# Missing headers are reported as 401 by get_current_user, not by the scheme
bearer_scheme = HTTPBearer(auto_error=False)


# Identity carried inside an access token
class TokenData(BaseModel):
    user_id: int
    email: Optional[str] = None
    role: Role


# Generate a new JWT access token
def create_access_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    # jti keeps two tokens issued in the same second distinct
    to_encode.update({"exp": expire, "jti": uuid.uuid4().hex})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def token_for_user(user: User, expires_delta: timedelta = None) -> str:
    return create_access_token(
        {"sub": str(user.id), "email": user.email, "role": user.role.value},
        expires_delta,
    )


# Resolve a token back to its identity; raises UnauthorizedError when invalid
def decode_access_token(token: str) -> TokenData:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        sub = payload.get("sub")
        role = payload.get("role")
        if sub is None or role is None:
            raise UnauthorizedError("Could not validate credentials")
        return TokenData(user_id=int(sub), email=payload.get("email"), role=Role(role))
    except (JWTError, ValueError):
        raise UnauthorizedError("Could not validate credentials")


# Retrieve the currently authenticated user based on the JWT token and its session
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Token not found")
    token = credentials.credentials
    data = decode_access_token(token)

    session = db.query(UserSession).filter(UserSession.token == token).first()
    if session is None or session.expires_at < datetime.utcnow():
        raise UnauthorizedError("Session not found or has been terminated")

    user = db.query(User).filter(User.id == data.user_id).first()
    if user is None:
        raise UnauthorizedError("Could not validate credentials")
    return user


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Token not found")
    return credentials.credentials


def has_role(user: User, *allowed_roles: Role) -> bool:
    return user is not None and user.role in allowed_roles


# Explicit role check, called by each operation that needs one
def require_role(user: User, *allowed_roles: Role) -> None:
    if not has_role(user, *allowed_roles):
        raise ForbiddenError("Forbidden")
