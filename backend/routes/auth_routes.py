from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from backend.auth.dependencies import get_auth_service, get_current_claims
from backend.auth.jwt_handler import Claims
from backend.auth.service import AuthService

router = APIRouter(tags=['auth'])


# Fields are optional so that missing values reach the service and produce
# its 400 message instead of a schema error.
class RegisterRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class MessageResponse(BaseModel):
    message: str


class LoginResponse(BaseModel):
    token: str
    id: int
    email: str
    name: str
    role: str
    message: str


class SessionResponse(BaseModel):
    id: int
    email: str
    name: str
    role: str
    expires_at: str


@router.post('/register', response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    result = service.register(data.name, data.email, data.password, data.role)
    return MessageResponse(message=result.message)


@router.post('/login', response_model=LoginResponse)
def login(data: LoginRequest, service: AuthService = Depends(get_auth_service)):
    return service.login(data.email, data.password).as_dict()


@router.get('/me', response_model=SessionResponse)
def me(claims: Claims = Depends(get_current_claims)):
    return claims.as_dict()
