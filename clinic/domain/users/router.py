"""User router - registration, login and token sessions"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Request, Response
from sqlalchemy.orm import Session

from ...auth import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, get_current_user
from ...config import ACCESS_TOKEN_EXPIRE_MINUTES, COOKIE_SECURE, REFRESH_TOKEN_EXPIRE_DAYS
from ...database import get_db
from ...models import User
from ...shared.responses import api_response
from .schemas import LoginRequest, RefreshRequest, RegisterRequest, UserResponse
from .service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


def _set_auth_cookie(response: Response, key: str, value: str, max_age: int) -> None:
    response.set_cookie(
        key=key,
        value=value,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="strict",
        max_age=max_age,
        path="/",
    )


@router.post("/register", status_code=201)
async def register(data: RegisterRequest, service: UserService = Depends(get_user_service)):
    user = service.register(data)
    return api_response(201, UserResponse.model_validate(user), "User registered successfully")


@router.post("/login")
async def login(data: LoginRequest, response: Response, service: UserService = Depends(get_user_service)):
    """Issue access and refresh tokens, both in the body and as httpOnly cookies"""
    user, tokens = service.login(data)

    _set_auth_cookie(response, ACCESS_TOKEN_COOKIE, tokens.access_token, ACCESS_TOKEN_EXPIRE_MINUTES * 60)
    _set_auth_cookie(response, REFRESH_TOKEN_COOKIE, tokens.refresh_token, REFRESH_TOKEN_EXPIRE_DAYS * 86400)

    return api_response(
        200,
        {
            "user": UserResponse.model_validate(user),
            "accessToken": tokens.access_token,
            "refreshToken": tokens.refresh_token,
        },
        "User logged in successfully",
    )


@router.post("/refresh")
async def refresh(
    request: Request,
    response: Response,
    data: Optional[RefreshRequest] = Body(None),
    service: UserService = Depends(get_user_service),
):
    token = request.cookies.get(REFRESH_TOKEN_COOKIE) or (data.refresh_token if data else None)
    tokens = service.refresh(token)

    _set_auth_cookie(response, ACCESS_TOKEN_COOKIE, tokens.access_token, ACCESS_TOKEN_EXPIRE_MINUTES * 60)
    return api_response(200, {"accessToken": tokens.access_token}, "Access token refreshed")


@router.post("/logout")
async def logout(
    response: Response,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    service.logout(current_user)
    response.delete_cookie(ACCESS_TOKEN_COOKIE, path="/")
    response.delete_cookie(REFRESH_TOKEN_COOKIE, path="/")
    return api_response(200, None, "User logged out successfully")


@router.get("/profile")
async def profile(current_user: User = Depends(get_current_user)):
    return api_response(200, UserResponse.model_validate(current_user), "User profile fetched successfully")
