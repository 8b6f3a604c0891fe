from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
import logging

from database.connection import get_db
from services.auth import (
    authenticate_user,
    create_user,
    create_access_token,
    create_refresh_token,
    verify_access_token,
    get_user_by_id,
    update_profile,
    change_password
)
from schemas.user import UserLogin, UserRegister, UserProfileUpdate, PasswordChange, UserResponse
from core.exceptions import AuthenticationError, BaseCustomException, InternalError
from core.response import success_response

logger = logging.getLogger(__name__)

router = APIRouter()
security = HTTPBearer(auto_error=False)

# Dependency to get current user
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> UserResponse:
    """Resolve the bearer token to a user, or fail with 401."""
    if not credentials or not credentials.credentials:
        raise AuthenticationError("Access token required")

    user_id = verify_access_token(credentials.credentials)

    user = get_user_by_id(db, user_id)
    if user is None:
        logger.warning(f"Token valid but user not found: {user_id}")
        raise AuthenticationError("Invalid token - user not found")

    return UserResponse.model_validate(user)

def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Optional[UserResponse]:
    """Like get_current_user, but anonymous (None) instead of 401."""
    if not credentials or not credentials.credentials:
        return None

    try:
        return get_current_user(credentials=credentials, db=db)
    except AuthenticationError:
        return None

def _auth_payload(user) -> dict:
    return {
        "user": UserResponse.model_validate(user).model_dump(mode="json"),
        "token": create_access_token(user.id),
        "refreshToken": create_refresh_token(user.id)
    }

@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(user_data: UserRegister, db: Session = Depends(get_db)):
    """Register a new user and sign them in."""
    logger.info(f"Registration attempt for email: {user_data.email}")
    try:
        user = create_user(db, user_data)
        return success_response(data=_auth_payload(user), message="User registered successfully")

    except BaseCustomException:
        raise
    except Exception as e:
        logger.error(f"Registration error: {str(e)}")
        raise InternalError("Registration failed") from e

@router.post("/login")
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """Exchange email and password for tokens."""
    try:
        user = authenticate_user(db, credentials.email, credentials.password)
        return success_response(data=_auth_payload(user), message="Login successful")

    except BaseCustomException:
        raise
    except Exception as e:
        logger.error(f"Login error: {str(e)}")
        raise InternalError("Login failed") from e

@router.get("/me")
def get_me(current_user: UserResponse = Depends(get_current_user)):
    return success_response(data={"user": current_user.model_dump(mode="json")})

@router.put("/me")
def update_me(
    profile_data: UserProfileUpdate,
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        user = update_profile(db, current_user.id, profile_data)
        return success_response(
            data={"user": UserResponse.model_validate(user).model_dump(mode="json")},
            message="Profile updated successfully"
        )

    except BaseCustomException:
        raise
    except Exception as e:
        logger.error(f"Update profile error: {str(e)}")
        raise InternalError("Failed to update profile") from e

@router.post("/change-password")
def change_my_password(
    passwords: PasswordChange,
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        change_password(db, current_user.id, passwords.currentPassword, passwords.newPassword)
        return success_response(message="Password changed successfully")

    except BaseCustomException:
        raise
    except Exception as e:
        logger.error(f"Change password error: {str(e)}")
        raise InternalError("Failed to change password") from e

@router.post("/logout")
def logout(current_user: UserResponse = Depends(get_current_user)):
    # Tokens are stateless; the client discards them
    return success_response(message="Logged out successfully")
