"""
Auth API Router
Endpoints for signup and login
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from api.deps import get_db, services
from api.schemas.user import SignupRequest, LoginRequest, AuthResponse
from services.exceptions import DuplicateEmailError, InvalidCredentialsError


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=AuthResponse)
async def signup(
    payload: SignupRequest,
    db: Session = Depends(get_db)
):
    """
    Create an account and return a token for it

    - **email**: Unique email address
    - **password**: Plain-text password (stored as a bcrypt hash)
    - **name**: Display name
    """
    auth_service = services.get_auth_service()

    try:
        user, token = await auth_service.signup(payload.email, payload.password, payload.name, db)
    except DuplicateEmailError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    return AuthResponse(token=token, user=user)


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Exchange credentials for a token
    """
    auth_service = services.get_auth_service()

    try:
        user, token = await auth_service.login(payload.email, payload.password, db)
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e)
        )
    return AuthResponse(token=token, user=user)
