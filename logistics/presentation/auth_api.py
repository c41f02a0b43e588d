from fastapi import APIRouter, Depends, status

from logistics.domain.models import Principal
from logistics.domain.exceptions import DomainException
from logistics.presentation.schemas import (
    SignupRequest, LoginRequest, TokenResponse, UserResponse, ErrorResponse
)
from logistics.presentation.dependencies import (
    get_uow, get_principal, get_password_hasher, get_token_service
)
from logistics.presentation.errors import to_http_exception
from logistics.application.auth import (
    SignupUseCase, SignupDTO, LoginUseCase, LoginDTO, GetCurrentUserUseCase
)

router = APIRouter(prefix="/auth", tags=["auth"])


def get_signup_use_case(uow=Depends(get_uow), hasher=Depends(get_password_hasher), tokens=Depends(get_token_service)):
    return SignupUseCase(uow, hasher, tokens)


def get_login_use_case(uow=Depends(get_uow), hasher=Depends(get_password_hasher), tokens=Depends(get_token_service)):
    return LoginUseCase(uow, hasher, tokens)


def get_current_user_use_case(uow=Depends(get_uow)):
    return GetCurrentUserUseCase(uow)


@router.post(
    "/signup",
    response_model=TokenResponse,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    status_code=status.HTTP_201_CREATED
)
async def signup(request: SignupRequest, use_case: SignupUseCase = Depends(get_signup_use_case)):
    """Register a user and return an access token"""
    try:
        token = await use_case(SignupDTO(email=request.email, password=request.password, name=request.name))
        return TokenResponse(access_token=token.access_token, token_type=token.token_type)
    except DomainException as e:
        raise to_http_exception(e)


@router.post("/login", response_model=TokenResponse, responses={401: {"model": ErrorResponse}})
async def login(request: LoginRequest, use_case: LoginUseCase = Depends(get_login_use_case)):
    try:
        token = await use_case(LoginDTO(email=request.email, password=request.password))
        return TokenResponse(access_token=token.access_token, token_type=token.token_type)
    except DomainException as e:
        raise to_http_exception(e)


@router.get("/me", response_model=UserResponse, responses={401: {"model": ErrorResponse}})
async def me(
    principal: Principal = Depends(get_principal),
    use_case: GetCurrentUserUseCase = Depends(get_current_user_use_case)
):
    try:
        return UserResponse.from_domain(await use_case(principal))
    except DomainException as e:
        raise to_http_exception(e)
