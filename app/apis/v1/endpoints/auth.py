# app/apis/v1/endpoints/auth.py
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app import crud, schemas, models
from app.database import get_db
from app.core.security import create_access_token_for, verify_password
from app.dependencies import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


def _auth_response(user: models.User) -> dict:
    return {"token": create_access_token_for(user), "user": user}


@router.post("/register", response_model=schemas.AuthResponse)
def register_user(user_in: schemas.UserCreate, db: Session = Depends(get_db)) -> Any:
    """
    Create a new user with the chosen role and log them in.
    """
    if crud.get_user_by_email(db, email=user_in.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )
    user = crud.create_user(db=db, user=user_in)
    logger.info("Registered user %s with role %s", user.id, user.role.value)
    return _auth_response(user)


@router.post("/login", response_model=schemas.AuthResponse)
def login(credentials: schemas.LoginRequest, db: Session = Depends(get_db)) -> Any:
    """
    Exchange email and password for a bearer token.
    """
    user = crud.get_user_by_email(db, email=credentials.email)
    if not user or not verify_password(credentials.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    elif not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user"
        )
    return _auth_response(user)


@router.get("/me", response_model=schemas.User)
def read_current_user(current_user: models.User = Depends(get_current_user)) -> Any:
    return current_user
