# medreminder/api/routers/auth.py

from fastapi import APIRouter, Depends, HTTPException, status

from medreminder.api.auth.auth_service import AuthService
from medreminder.api.models.user import AuthOut, LoginIn, SignupIn
from medreminder.core.deps import get_auth_service
from medreminder.core.errors import AuthError, ValidationError

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/signup", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
def signup(body: SignupIn, auth_service: AuthService = Depends(get_auth_service)):
    try:
        user, token = auth_service.sign_up_user(body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    return AuthOut(user=user, token=token)


@router.post("/login", response_model=AuthOut)
def login(body: LoginIn, auth_service: AuthService = Depends(get_auth_service)):
    try:
        user, token = auth_service.sign_in_user(body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=e.message, headers={"WWW-Authenticate": "Bearer"})
    return AuthOut(user=user, token=token)
