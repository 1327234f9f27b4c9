"""
Session endpoints.

POST /api/login           check credentials, set the session cookie
POST /api/logout          forget the session
GET  /api/me              current user
POST /api/token/refresh   issue a new long-lived API token
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from app.config import settings
from app.crypto import verify_secret
from app.database import get_db
from app.repositories import user_tokens, users
from app.schemas import LoginRequest, TokenResponse, User
from app.session import (
    SessionManager,
    get_current_user,
    get_session_manager,
    get_session_token,
)

logger = logging.getLogger(__name__)
router = APIRouter()


# ── POST /api/login ──────────────────────────────────────────────────────
@router.post("/login", response_model=User)
def login(
    req: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    sessions: SessionManager = Depends(get_session_manager),
):
    account = users.get_user_by_email_with_password(db, req.email)
    if account is None:
        raise HTTPException(status_code=404, detail="User not found")
    if not verify_secret(req.password, account.password):
        logger.info("Rejected login for user %s", account.id)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    user = User.model_validate(account)
    token, _ = sessions.issue(user)
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        token,
        max_age=sessions.ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )
    logger.info("User %s logged in", user.id)
    return user


# ── POST /api/logout ─────────────────────────────────────────────────────
@router.post("/logout")
def logout(
    response: Response,
    token: str = Depends(get_session_token),
    sessions: SessionManager = Depends(get_session_manager),
):
    sessions.revoke(token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME, httponly=True, samesite="lax")
    return {"message": "Logged out"}


# ── GET /api/me ──────────────────────────────────────────────────────────
@router.get("/me", response_model=User)
def me(user: User = Depends(get_current_user)):
    return user


# ── POST /api/token/refresh ──────────────────────────────────────────────
@router.post("/token/refresh", response_model=TokenResponse)
def refresh_api_token(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    token = user_tokens.refresh_token(db, user.id)
    logger.info("Issued a new API token for user %s", user.id)
    return TokenResponse(token=token)
