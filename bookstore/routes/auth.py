# bookstore/routes/auth.py
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from bookstore.database import get_db
from bookstore.models.users import User
from bookstore.schemas import user as schemas
from bookstore.services import auth_service
from bookstore.utils.audit import client_ip
from bookstore.utils.tokenJWT import get_bearer_token, get_current_user

router = APIRouter(prefix="/auth", tags=["Auth"])

# Register a new CLIENT account and open a session for it
@router.post("/signup", response_model=schemas.SignUpResponse, status_code=status.HTTP_201_CREATED)
def sign_up(payload: schemas.UserCreate, request: Request, db: Session = Depends(get_db)):
    return auth_service.sign_up(
        db,
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        ip=client_ip(request),
    )


# Authenticate user and issue access + refresh tokens
@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    return auth_service.login(db, email=payload.email, password=payload.password, ip=client_ip(request))


# Terminate the session behind the presented bearer token
@router.post("/signout", response_model=schemas.MessageResponse)
def sign_out(
    request: Request,
    token: str = Depends(get_bearer_token),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return auth_service.sign_out(db, token, ip=client_ip(request))


# Exchange a refresh token for a new access token
@router.post("/refresh", response_model=schemas.Token)
def refresh(payload: schemas.RefreshRequest, db: Session = Depends(get_db)):
    return auth_service.refresh(db, payload.refresh_token)


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
