# =============================================================================
# app/routers/users.py - User Endpoints
# =============================================================================
# Registration, login and user listing. None of these require a token.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Query

from app.dependencies import UserServiceDep
from app.envelope import EnvelopeRoute
from core.models.response import ApiResponse
from core.models.user import LoginRequest, LoginResult, RegisterRequest, RegisterResponse, UserResponse

router = APIRouter(prefix="/user", tags=["User"], route_class=EnvelopeRoute)

REGISTER_SUCCESS_MESSAGE = "注册成功"


@router.post("/register")
def register(request: RegisterRequest, service: UserServiceDep) -> ApiResponse[RegisterResponse]:
    """
    Register a new user.

    Returns the created user together with a token, so the client is
    signed in straight away. A second registration with the same email
    fails with code 502 (BUSINESS_ERROR).
    """
    user = service.register(request.email, request.password, name=request.name)
    token = service.issue_token(user)

    payload = RegisterResponse(
        **UserResponse.model_validate(user).model_dump(),
        token=token,
    )
    return ApiResponse.success(payload, message=REGISTER_SUCCESS_MESSAGE)


@router.post("/login")
def login(request: LoginRequest, service: UserServiceDep) -> ApiResponse[LoginResult]:
    """
    Log in with email and password.

    On success `data` is {success: true, message, token}. Bad credentials
    produce code 401 with data null.
    """
    result = service.authenticate(request.email, request.password)

    if not result.success:
        return ApiResponse.unauthorized(result.message)

    return ApiResponse.success(result, message=result.message)


@router.post("/getUsers")
def get_users(service: UserServiceDep) -> list[UserResponse]:
    """List every registered user."""
    return [UserResponse.model_validate(user) for user in service.list_users()]


@router.get("/list")
def list_users(
    service: UserServiceDep,
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    page_size: Annotated[int, Query(ge=1, le=100, alias="pageSize", description="Items per page")] = 10,
) -> ApiResponse:
    """List users one page at a time."""
    users, total = service.list_users_page(page=page, page_size=page_size)

    return ApiResponse.pagination(
        [UserResponse.model_validate(user) for user in users],
        total=total,
        page=page,
        page_size=page_size,
    )
