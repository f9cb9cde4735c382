from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr, field_validator
from app.models.user import UserRole, UserStatus

# shared fields
class UserBase(BaseModel):
    username: Optional[str] = None
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None
    telegram_username: Optional[str] = None
    team_lead_id: Optional[UUID] = None

class UserCreate(UserBase):
    username: str
    email: EmailStr
    password: str
    role: UserRole
    status: UserStatus = UserStatus.active

    @field_validator("password")
    @classmethod
    def password_length(cls, v):
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v

class UserUpdate(UserBase):
    password: Optional[str] = None

class UserInDBBase(UserBase):
    id: UUID
    email: Optional[str] = None
    full_name: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# API response
class User(UserInDBBase):
    pass

class UserLogin(BaseModel):
    username: str
    password: str

class PasswordChange(BaseModel):
    current_password: str
    new_password: str

class Token(BaseModel):
    access_token: str
    token_type: str

class LoginResponse(Token):
    expires_in: int
    user: User
