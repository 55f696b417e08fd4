import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from user_account_svc.dependencies import AppContext, body_openapi, get_context, parsed_body
from user_account_svc.exceptions import DuplicateEmailError
from user_account_svc.models.user import User

router = APIRouter(tags=["Users"])

# Same text for unknown email and wrong password so callers cannot probe for accounts.
INVALID_CREDENTIALS = "Invalid email or password"
USER_NOT_FOUND = "User not found"
EMAIL_IN_USE = "Email is already in use"
INTERNAL_ERROR = "Internal server error"


class MessageResponse(BaseModel):
    message: str


class LoginRequest(BaseModel):
    """Credentials submitted to `/login`."""
    email: str = Field(min_length=1, examples=["jhon@gmail.com"])
    password: str = Field(min_length=1, examples=["Jhon@123"])


class LoginUser(BaseModel):
    id: str
    name: str
    profile: str


class LoginResponse(BaseModel):
    """Bearer token plus the id, name and profile of the user who logged in."""
    token: str
    user: LoginUser


class RegisterRequest(BaseModel):
    """
    Fields accepted by `/register`.

    `profile` and `description` are accepted for compatibility with existing
    clients but are not stored: new accounts always start with both empty.
    """
    name: str = Field(min_length=1, examples=["Jhon"])
    email: str = Field(min_length=1, examples=["jhon@gmail.com"])
    password: str = Field(min_length=1, examples=["Jhon@123"])
    profile: Optional[str] = None
    description: Optional[str] = None


class UserUpdate(BaseModel):
    """
    Partial update of a user's editable fields. Absent and empty values leave the stored value unchanged.
    """
    name: Optional[str] = None
    description: Optional[str] = None
    profile: Optional[str] = None


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    password: Optional[str] = None
    profile: str
    description: str


def to_user_response(user: User, expose_password_digest: bool) -> UserResponse:
    return UserResponse(
        id=str(user.id),
        name=user.name,
        email=user.email,
        password=user.password if expose_password_digest else None,
        profile=user.profile,
        description=user.description,
    )


def internal_error(e: Exception) -> HTTPException:
    logging.error(e, exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=INTERNAL_ERROR
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={400: {"model": MessageResponse}, 500: {"model": MessageResponse}},
    openapi_extra=body_openapi(LoginRequest),
)
async def login(
    request: LoginRequest = Depends(parsed_body(LoginRequest)),
    ctx: AppContext = Depends(get_context),
):
    """
    Authenticate a user with email and password.

    On success returns a signed bearer token and the user's id, name and profile.
    Unknown email and wrong password both answer 400 with the same message.
    """
    try:
        user = await ctx.store.find_by_email(request.email)

        if not user or not await run_in_threadpool(ctx.hasher.verify, request.password, user.password):
            logging.warning("Failed login attempt for %s", request.email)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=INVALID_CREDENTIALS
            )

        user_id = str(user.id)
        token = ctx.tokens.issue(user_id)
        return LoginResponse(token=token, user=LoginUser(id=user_id, name=user.name, profile=user.profile))
    except HTTPException:
        raise
    except Exception as e:
        raise internal_error(e)


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": MessageResponse}, 500: {"model": MessageResponse}},
    openapi_extra=body_openapi(RegisterRequest),
)
async def register(
    request: RegisterRequest = Depends(parsed_body(RegisterRequest)),
    ctx: AppContext = Depends(get_context),
):
    """
    Create a new account. The password is stored as a bcrypt digest.

    Answers 409 when the email is already registered.
    """
    try:
        digest = await run_in_threadpool(ctx.hasher.hash, request.password)
        user = await ctx.store.create(name=request.name, email=request.email, password_digest=digest)
        logging.info("Registered user %s", user.id)
        return MessageResponse(message="User created, you can now log in")
    except DuplicateEmailError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=EMAIL_IN_USE
        )
    except Exception as e:
        raise internal_error(e)


@router.get(
    "/users",
    response_model=List[UserResponse],
    response_model_exclude_none=True,
    responses={500: {"model": MessageResponse}},
)
async def list_users(ctx: AppContext = Depends(get_context)):
    try:
        users = await ctx.store.all()
        return [to_user_response(user, ctx.settings.expose_password_digest) for user in users]
    except Exception as e:
        raise internal_error(e)


@router.get(
    "/users/{user_id}",
    response_model=UserResponse,
    response_model_exclude_none=True,
    responses={404: {"model": MessageResponse}, 500: {"model": MessageResponse}},
)
async def get_user(user_id: str, ctx: AppContext = Depends(get_context)):
    try:
        user = await ctx.store.find_by_id(user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)
        return to_user_response(user, ctx.settings.expose_password_digest)
    except HTTPException:
        raise
    except Exception as e:
        raise internal_error(e)


@router.put(
    "/users/{user_id}",
    response_model=UserResponse,
    response_model_exclude_none=True,
    responses={404: {"model": MessageResponse}, 500: {"model": MessageResponse}},
    openapi_extra=body_openapi(UserUpdate),
)
async def update_user(
    user_id: str,
    update: UserUpdate = Depends(parsed_body(UserUpdate)),
    ctx: AppContext = Depends(get_context),
):
    """
    Update a user's name, description and profile.

    Only non-empty values replace what is stored. Concurrent updates to the same
    user are last-write-wins.
    """
    try:
        user = await ctx.store.find_by_id(user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)

        user.description = update.description or user.description
        user.profile = update.profile or user.profile
        user.name = update.name or user.name

        user = await ctx.store.save(user)
        logging.info("Updated user %s", user_id)
        return to_user_response(user, ctx.settings.expose_password_digest)
    except HTTPException:
        raise
    except Exception as e:
        raise internal_error(e)
