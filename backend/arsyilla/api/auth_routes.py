"""Registration and login endpoints.

    POST /api/register  — create account, returns its access key
    POST /api/login     — exchange username/password for the access key
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from ..services import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Authentication"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=201,
    summary="Register a new user",
)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    user = auth_service.register_user(db, body.username, body.password)
    return AuthResponse(message="Registration successful", access_key=user.access_key)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Log in and retrieve the access key",
)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, body.username, body.password)
    return AuthResponse(message="Login successful", access_key=user.access_key)
