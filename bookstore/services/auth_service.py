# bookstore/services/auth_service.py
import uuid
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from bookstore.config import settings
from bookstore.models.users import User, UserSession, RefreshToken, Role
from bookstore.utils.audit import write_log
from bookstore.utils.errors import ConflictError, UnauthorizedError
from bookstore.utils.hashing import get_password_hash, verify_password
from bookstore.utils.tokenJWT import decode_access_token, token_for_user


def _open_session(db: Session, user: User) -> str:
    # Issue an access token and record it; get_current_user only accepts recorded tokens
    expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = token_for_user(user, expires)
    db.add(UserSession(user_id=user.id, token=access_token, expires_at=datetime.utcnow() + expires))
    return access_token


def sign_up(db: Session, *, email: str, password: str, first_name: str, last_name: str,
            ip: Optional[str] = None) -> dict:
    # Normalize email input
    normalized_email = email.strip().lower()

    # Check for existing user
    existing = db.query(User).filter(func.lower(User.email) == normalized_email).first()
    if existing:
        write_log(db, user_id=None, action="REGISTER", resource="auth", status="FAIL", ip=ip,
                  meta={"email": normalized_email, "reason": "Email exists"})
        raise ConflictError("User with this email already exists")

    user = User(
        email=normalized_email,
        password_hash=get_password_hash(password),
        role=Role.CLIENT,
        first_name=first_name,
        last_name=last_name,
    )
    db.add(user)
    db.flush()
    access_token = _open_session(db, user)
    db.commit()

    write_log(db, user_id=user.id, action="REGISTER", resource="auth", status="SUCCESS", ip=ip,
              meta={"email": user.email})
    return {"message": "User successfully registered", "access_token": access_token}


def login(db: Session, *, email: str, password: str, ip: Optional[str] = None) -> dict:
    user = db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()

    # Validate credentials and log failure on error
    if not user or not verify_password(password, user.password_hash):
        write_log(db, user_id=(user.id if user else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=ip, meta={"email": email})
        raise UnauthorizedError("Invalid credentials")

    access_token = _open_session(db, user)
    refresh_token = str(uuid.uuid4())
    db.add(RefreshToken(
        user_id=user.id,
        token=refresh_token,
        expires_at=datetime.utcnow() + timedelta(hours=settings.REFRESH_TOKEN_EXPIRE_HOURS),
    ))
    db.commit()

    write_log(db, user_id=user.id, action="LOGIN", resource="auth", status="SUCCESS", ip=ip,
              meta={"email": user.email})
    return {"access_token": access_token, "refresh_token": refresh_token}


def sign_out(db: Session, token: str, ip: Optional[str] = None) -> dict:
    data = decode_access_token(token)

    session = db.query(UserSession).filter(UserSession.token == token).first()
    if not session:
        raise UnauthorizedError("Session not found")

    # Refresh tokens die with the sign-out so no new session can be opened from them
    db.delete(session)
    db.query(RefreshToken).filter(RefreshToken.user_id == data.user_id).delete(synchronize_session=False)
    db.commit()

    write_log(db, user_id=data.user_id, action="LOGOUT", resource="auth", status="SUCCESS", ip=ip)
    return {"message": "Successfully signed out"}


def refresh(db: Session, refresh_token: str) -> dict:
    row = db.query(RefreshToken).filter(RefreshToken.token == refresh_token).first()
    if not row or row.expires_at < datetime.utcnow():
        raise UnauthorizedError("Invalid refresh token")

    access_token = _open_session(db, row.user)
    db.commit()
    return {"access_token": access_token, "refresh_token": refresh_token}
