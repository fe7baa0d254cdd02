"""
Auth Service
Password hashing, signed identity tokens and account creation
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

import bcrypt
from jose import JWTError, jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import models
from config import settings
from services.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidTokenError,
)


logger = logging.getLogger(__name__)


# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    secret = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(secret, bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        secret = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.checkpw(secret, password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


class AuthService:
    """
    Issues and verifies identity tokens.

    Tokens carry the user id as ``sub`` plus a few denormalized profile
    fields (email, name, reminder_sound, language) so a client can render
    without an extra round trip.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        expire_minutes: Optional[int] = None
    ):
        self.secret_key = secret_key or settings.SECRET_KEY
        self.algorithm = algorithm or settings.JWT_ALGORITHM
        self.expire_minutes = expire_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES

    def create_token(self, user: models.User) -> str:
        """Sign a token for the given user"""
        expire = datetime.now(timezone.utc) + timedelta(minutes=self.expire_minutes)
        claims = {
            "sub": str(user.id),
            "email": user.email,
            "name": user.name,
            "reminder_sound": user.reminder_sound,
            "language": user.language,
            "exp": expire,
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> Dict[str, Any]:
        """
        Verify a token and return its claims

        Raises:
            InvalidTokenError: bad signature, expired, or no subject
        """
        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise InvalidTokenError(str(e)) from e

        if not claims.get("sub"):
            raise InvalidTokenError("Token has no subject")
        return claims

    async def signup(
        self,
        email: str,
        password: str,
        name: str,
        db: Session
    ) -> Tuple[models.User, str]:
        """Create an account and return it with a fresh token"""
        email = email.strip().lower()
        if db.query(models.User).filter(models.User.email == email).first():
            raise DuplicateEmailError(email)

        user = models.User(
            email=email,
            password_hash=hash_password(password),
            name=name,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise DuplicateEmailError(email) from e
        db.refresh(user)

        logger.info("Created user %s", user.id)
        return user, self.create_token(user)

    async def login(self, email: str, password: str, db: Session) -> Tuple[models.User, str]:
        """Check credentials and return the user with a fresh token"""
        user = db.query(models.User).filter(
            models.User.email == email.strip().lower()
        ).first()

        if not user or not verify_password(password, user.password_hash):
            logger.info("Failed login attempt for %s", email)
            raise InvalidCredentialsError()

        return user, self.create_token(user)


auth_service = AuthService()
