from pydantic import BaseModel, EmailStr, Field
from typing import Optional

from bookstore.models.users import Role

# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr

# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str = Field(min_length=1)

# Schema for user registration requests; every signup is a CLIENT
class UserCreate(UserBase):
    password: str = Field(min_length=6)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)

# Output schema for user profile details
class UserResponse(UserBase):
    id: int
    role: Role
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    class Config:
        from_attributes = True

# Response to a successful signup
class SignUpResponse(BaseModel):
    message: str
    access_token: str
    token_type: str = "bearer"

# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"

class RefreshRequest(BaseModel):
    refresh_token: str

class MessageResponse(BaseModel):
    message: str
