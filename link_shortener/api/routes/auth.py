"""Account registration, login and profile endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from link_shortener.api import schemas
from link_shortener.api.dependencies import get_auth_service, get_current_user
from link_shortener.db.session import get_db
from link_shortener.models.user import User
from link_shortener.services.auth import AuthService
from link_shortener.services.exceptions import InvalidCredentialsError, UserAlreadyExistsError

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=schemas.AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": schemas.ErrorResponse, "description": "Email or username taken"}}
)
async def register(
    payload: schemas.RegisterRequest,
    db: AsyncSession = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service)
):
    try:
        user, token = await auth_service.register(
            db,
            username=payload.username,
            email=payload.email,
            password=payload.password
        )
    except UserAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return schemas.AuthResponse(user=schemas.UserResponse.model_validate(user), token=token)


@router.post(
    "/login",
    response_model=schemas.AuthResponse,
    responses={401: {"model": schemas.ErrorResponse, "description": "Invalid credentials"}}
)
async def login(
    payload: schemas.LoginRequest,
    db: AsyncSession = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service)
):
    try:
        user, token = await auth_service.login(db, email=payload.email, password=payload.password)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))

    return schemas.AuthResponse(user=schemas.UserResponse.model_validate(user), token=token)


@router.get("/profile", response_model=schemas.UserResponse)
async def profile(current_user: User = Depends(get_current_user)):
    return schemas.UserResponse.model_validate(current_user)
