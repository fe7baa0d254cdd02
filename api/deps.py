"""
API Dependencies
Common dependencies for FastAPI endpoints
"""

import logging
from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from database import get_db
from models import User
from services.auth_service import auth_service
from services.exceptions import InvalidTokenError
from services.llm_service import LLMService


logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Resolve the bearer token to a user

    Missing token -> 401, bad or expired token -> 403,
    token for a user that no longer exists -> 401
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        claims = auth_service.decode_token(credentials.credentials)
        user_id = int(claims["sub"])
    except (InvalidTokenError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired token",
        )

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.info("Token presented for missing user %s", user_id)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User no longer exists",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_llm_service(request: Request) -> LLMService:
    """
    Language model client built in the application lifespan
    """
    llm = getattr(request.app.state, "llm_service", None)
    if llm is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Language assistant is not initialized",
        )
    return llm


class ServiceDependency:
    """
    Dependency injection for services
    """

    @staticmethod
    def get_auth_service():
        return auth_service

    @staticmethod
    def get_user_service():
        from services.user_service import user_service
        return user_service

    @staticmethod
    def get_medicine_service():
        from services.medicine_service import medicine_service
        return medicine_service

    @staticmethod
    def get_dose_log_service():
        from services.dose_log_service import dose_log_service
        return dose_log_service

    @staticmethod
    def get_analytics_service():
        from services.analytics_service import analytics_service
        return analytics_service


# Service dependency instances
services = ServiceDependency()
