from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from crm.database.config.db import get_db
from crm.database.models.auth import User, normalize_role
from crm.schema.auth import LoginRequest, Token, MeResponse
from crm.settings import ACCESS_TOKEN_COOKIE, JWT_ACCESS_TOKEN_EXPIRE_MINUTES
from crm.utils.auth import (
    verify_password,
    create_access_token,
    get_current_user,
)

auth_router = APIRouter(prefix="/auth", tags=["auth"])


@auth_router.post("/login", response_model=Token)
def login(
    form_data: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
):
    """
    Login and get access token.
    The token is returned in the body and also set as an HTTP-only cookie.
    """
    user = db.query(User).filter(User.email == form_data.email).first()

    if not user or not verify_password(form_data.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )

    access_token = create_access_token(
        data={"sub": str(user.id), "role": normalize_role(user.role)}
    )
    user.last_login_at = datetime.now(timezone.utc)
    db.commit()

    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        access_token,
        httponly=True,
        samesite="lax",
        max_age=JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    return {
        "access_token": access_token,
        "token_type": "bearer",
    }


@auth_router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(response: Response):
    """
    Clear the access token cookie.
    """
    response.delete_cookie(ACCESS_TOKEN_COOKIE)


@auth_router.get("/me", response_model=MeResponse)
def get_current_user_info(
    current_user: User = Depends(get_current_user),
):
    """
    Get current authenticated user information.
    """
    return current_user
