"""Auth API routes — login, register, me."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.infrastructure.database import get_db
from app.application.services.auth_service import (
    authenticate_user,
    create_user,
    token_for_user,
)
from app.domain.schemas.auth import LoginRequest, TokenResponse, UserCreate, UserRead
from app.interfaces.api.deps import get_current_user
from app.domain.models.user import User

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate_user(db, body.email, body.password)
    return TokenResponse(
        access_token=token_for_user(user),
        user=UserRead.model_validate(user),
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(body: UserCreate, db: Session = Depends(get_db)):
    user = create_user(
        db=db,
        name=body.name,
        email=body.email,
        password=body.password,
        role=body.role,
    )
    return TokenResponse(
        message="User registered successfully",
        access_token=token_for_user(user),
        user=UserRead.model_validate(user),
    )


@router.get("/me", response_model=UserRead)
def get_me(user: User = Depends(get_current_user)):
    return UserRead.model_validate(user)
