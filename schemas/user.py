from pydantic import BaseModel, EmailStr, field_validator, Field
from typing import Optional
from datetime import datetime
import re

USERNAME_PATTERN = re.compile(r'^[a-zA-Z0-9_]+$')


def _check_password_strength(v: str) -> str:
    if not any(c.islower() for c in v):
        raise ValueError('Password must contain at least one lowercase letter')
    if not any(c.isupper() for c in v):
        raise ValueError('Password must contain at least one uppercase letter')
    if not any(c.isdigit() for c in v):
        raise ValueError('Password must contain at least one number')
    return v

# User Registration Schema
class UserRegister(BaseModel):
    username: str = Field(..., min_length=3, max_length=30)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    full_name: Optional[str] = Field(None, min_length=2, max_length=100)

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        if not USERNAME_PATTERN.match(v):
            raise ValueError('Username can only contain letters, numbers, and underscores')
        return v

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower()

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        return _check_password_strength(v)

# User Login Schema
class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower()

class UserProfileUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=3, max_length=30)
    full_name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=500)
    onboarded: Optional[bool] = None

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        if v is not None and not USERNAME_PATTERN.match(v):
            raise ValueError('Username can only contain letters, numbers, and underscores')
        return v

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        if v is None:
            return v
        # Remove all non-digit characters
        clean_phone = re.sub(r'\D', '', v)
        if len(clean_phone) < 9 or len(clean_phone) > 15:
            raise ValueError('Phone number must be between 9 and 15 digits')
        return v

class PasswordChange(BaseModel):
    currentPassword: str = Field(..., min_length=1)
    newPassword: str = Field(..., min_length=6, max_length=128)

    @field_validator('newPassword')
    @classmethod
    def validate_new_password(cls, v):
        return _check_password_strength(v)

# Response Schemas
class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    avatar_url: Optional[str] = None
    eco_points: int
    onboarded: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
