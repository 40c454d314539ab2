from fastapi import APIRouter, Depends, Request, status

from shared.utils import SuccessResponse, settings
from shared.security_config import limiter
from qkart.deps import get_db
from qkart.schemas import UserRegister, UserLogin, AuthResponse, UserResponse
from qkart.services import auth_service, token_service, user_service

router = APIRouter()


@router.post("/register", response_model=SuccessResponse[AuthResponse], status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def register(user: UserRegister, request: Request, db=Depends(get_db)):
    created = await user_service.create_user(db, user)
    tokens = token_service.generate_auth_tokens(created)
    return SuccessResponse(
        data=AuthResponse(user=UserResponse(**created.dict()), tokens=tokens),
        message="User registered successfully"
    )


@router.post("/login", response_model=SuccessResponse[AuthResponse])
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def login(credentials: UserLogin, request: Request, db=Depends(get_db)):
    user = await auth_service.login_user_with_email_and_password(db, credentials.email, credentials.password)
    tokens = token_service.generate_auth_tokens(user)
    return SuccessResponse(data=AuthResponse(user=UserResponse(**user.dict()), tokens=tokens))
