from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, ExpiredSignatureError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session
from sqlalchemy import or_, and_
from sqlalchemy.exc import IntegrityError
from models.user import User
from schemas.user import UserRegister, UserProfileUpdate
from services.rewards import SIGNUP_ECO_POINTS
from core.config import settings
from core.exceptions import (
    AuthenticationError,
    BusinessLogicError,
    ConflictError,
    ResourceNotFoundError
)
import logging

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS
)

# JWT settings
ALGORITHM = "HS256"
TOKEN_ISSUER = "ecofinds"

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)

def _create_token(user_id: int, token_type: str, secret: str, expires_delta: timedelta) -> str:
    now = datetime.utcnow()
    to_encode = {
        "sub": str(user_id),
        "exp": now + expires_delta,
        "iat": now,
        "iss": TOKEN_ISSUER,
        "type": token_type
    }
    return jwt.encode(to_encode, secret, algorithm=ALGORITHM)

def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token for a user id."""
    return _create_token(
        user_id,
        "access",
        settings.SECRET_KEY,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )

def create_refresh_token(user_id: int) -> str:
    """Create a longer-lived refresh token."""
    return _create_token(
        user_id,
        "refresh",
        settings.REFRESH_SECRET_KEY,
        timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    )

def verify_access_token(token: str) -> int:
    """Decode an access token and return its user id.

    Raises AuthenticationError for expired, malformed or non-access tokens.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except JWTError as e:
        logger.warning(f"JWT verification failed: {str(e)}")
        raise AuthenticationError("Invalid token")

    if payload.get("type") != "access":
        raise AuthenticationError("Invalid token")

    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token")

def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get a user by email."""
    email = email.lower().strip()
    return db.query(User).filter(User.email == email).first()

def authenticate_user(db: Session, email: str, password: str) -> User:
    """Authenticate a user with email and password."""
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        logger.warning(f"Failed authentication attempt for: {email}")
        raise AuthenticationError("Invalid email or password")

    logger.info(f"Successful authentication for user: {email}")
    return user

def create_user(db: Session, user_data: UserRegister) -> User:
    """Register a new user; new accounts start with the signup eco points bonus."""
    existing_user = db.query(User).filter(
        or_(User.email == user_data.email, User.username == user_data.username)
    ).first()
    if existing_user:
        logger.warning(f"Registration attempt with existing email or username: {user_data.email}")
        raise ConflictError("User with this email or username already exists")

    try:
        db_user = User(
            username=user_data.username,
            email=user_data.email,
            password_hash=get_password_hash(user_data.password),
            full_name=user_data.full_name or "",
            eco_points=SIGNUP_ECO_POINTS,
            onboarded=False
        )

        db.add(db_user)
        db.commit()
        db.refresh(db_user)

        logger.info(f"User created successfully: {db_user.email}")
        return db_user

    except IntegrityError as e:
        db.rollback()
        logger.error(f"Database integrity error creating user {user_data.email}: {str(e)}")
        raise ConflictError("User with this email or username already exists")
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error creating user {user_data.email}: {str(e)}")
        raise

def update_profile(db: Session, user_id: int, profile_data: UserProfileUpdate) -> User:
    """Apply the supplied profile fields."""
    changes = profile_data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise BusinessLogicError("No fields to update")

    user = get_user_by_id(db, user_id)
    if not user:
        raise ResourceNotFoundError("User", message="User not found")

    if "username" in changes:
        taken = db.query(User).filter(
            and_(User.username == changes["username"], User.id != user_id)
        ).first()
        if taken:
            raise ConflictError("Username is already taken")

    try:
        for field, value in changes.items():
            setattr(user, field, value)
        user.updated_at = datetime.utcnow()

        db.commit()
        db.refresh(user)
        return user

    except IntegrityError:
        db.rollback()
        raise ConflictError("Username is already taken")
    except Exception as e:
        db.rollback()
        logger.error(f"Error updating profile for user {user_id}: {str(e)}")
        raise

def change_password(db: Session, user_id: int, current_password: str, new_password: str) -> None:
    user = get_user_by_id(db, user_id)
    if not user:
        raise ResourceNotFoundError("User", message="User not found")

    if not verify_password(current_password, user.password_hash):
        raise AuthenticationError("Current password is incorrect")

    try:
        user.password_hash = get_password_hash(new_password)
        user.updated_at = datetime.utcnow()
        db.commit()
        logger.info(f"Password changed for user: {user.email}")

    except Exception as e:
        db.rollback()
        logger.error(f"Error changing password for user {user_id}: {str(e)}")
        raise
