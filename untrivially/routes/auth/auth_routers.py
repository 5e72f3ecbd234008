import secrets
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session

from untrivially.core.config import settings
from untrivially.core.database import get_db
from untrivially.core.log import get_logger
from untrivially.core.security import create_access_token, get_current_user
from untrivially.models.session_db.session_crud import (
    create_refresh_token,
    delete_refresh_token,
    hash_token,
    list_refresh_tokens,
    revoke_refresh_token,
    revoke_user_refresh_tokens,
    rotate_refresh_token,
)
from untrivially.models.user_db.user_db import User
from untrivially.models.user_db.user_db_crud import get_or_create_user
from untrivially.schemas.auth.auth_base import LoginResponse, RefreshResponse, SessionListResponse, SessionOut
from untrivially.schemas.users.user_base import UserOut, UserResponse
from untrivially.services.google_oauth import GoogleOAuthClient, OAuthError, get_oauth_client

auth_router = APIRouter(tags=["Auth"])
log = get_logger(__name__)

OAUTH_STATE_COOKIE = "oauth_state"


def _client_info(request: Request):
    user_agent = request.headers.get("user-agent")
    ip_address = request.client.host if request.client else None
    return user_agent, ip_address


def _set_refresh_cookie(response: Response, token: str):
    max_age = settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60 if settings.REFRESH_TOKEN_EXPIRE_DAYS else None
    response.set_cookie(
        settings.REFRESH_TOKEN_COOKIE_NAME,
        token,
        max_age=max_age,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def _clear_refresh_cookie(response: Response):
    response.delete_cookie(
        settings.REFRESH_TOKEN_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def _refresh_token_from(request: Request) -> Optional[str]:
    return request.cookies.get(settings.REFRESH_TOKEN_COOKIE_NAME)


@auth_router.get("/login/google")
def login_google(oauth: GoogleOAuthClient = Depends(get_oauth_client)):
    url, state = oauth.authorization_url()
    response = RedirectResponse(url, status_code=status.HTTP_302_FOUND)
    response.set_cookie(
        OAUTH_STATE_COOKIE,
        state,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=600,
    )
    return response


@auth_router.get("/auth/google/callback", response_model=LoginResponse)
def google_callback(
    request: Request,
    response: Response,
    code: Optional[str] = None,
    state: Optional[str] = None,
    db: Session = Depends(get_db),
    oauth: GoogleOAuthClient = Depends(get_oauth_client),
):
    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if not code or not state or not expected_state or not secrets.compare_digest(state, expected_state):
        raise HTTPException(status_code=400, detail="Invalid OAuth callback")

    try:
        google_token = oauth.exchange_code(code)
        user_info = oauth.fetch_user_info(google_token)
    except OAuthError as e:
        raise HTTPException(status_code=502, detail=str(e))

    user = get_or_create_user(db, user_info.email, user_info.name, user_info.picture)
    user_agent, ip_address = _client_info(request)
    refresh_token = create_refresh_token(db, user.id, user_agent, ip_address)
    log.info("user logged in", extra={"user_id": str(user.id)})

    _set_refresh_cookie(response, refresh_token)
    response.delete_cookie(OAUTH_STATE_COOKIE, path="/")
    return LoginResponse(access_token=create_access_token(user), user=UserOut.model_validate(user))


@auth_router.post("/auth/refresh", response_model=RefreshResponse)
def refresh(request: Request, response: Response, db: Session = Depends(get_db)):
    presented = _refresh_token_from(request)
    if not presented:
        return JSONResponse(status_code=401, content={"detail": "Refresh token not found."})

    user_agent, ip_address = _client_info(request)
    rotated = rotate_refresh_token(db, presented, user_agent, ip_address)
    if rotated is None:
        # unknown, stale and replayed tokens all land here; force a new login
        failure = JSONResponse(status_code=401, content={"detail": "Invalid refresh token."})
        _clear_refresh_cookie(failure)
        return failure

    user, new_refresh_token = rotated
    _set_refresh_cookie(response, new_refresh_token)
    return RefreshResponse(access_token=create_access_token(user))


@auth_router.post("/auth/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(request: Request, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    presented = _refresh_token_from(request)
    if presented:
        delete_refresh_token(db, presented)

    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    _clear_refresh_cookie(response)
    return response


@auth_router.post("/auth/logout-all", status_code=status.HTTP_204_NO_CONTENT)
def logout_all(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    revoke_user_refresh_tokens(db, current_user.id)

    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    _clear_refresh_cookie(response)
    return response


@auth_router.get("/auth/sessions", response_model=SessionListResponse)
def get_sessions(request: Request, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    presented = _refresh_token_from(request)
    current_hash = hash_token(presented) if presented else None

    sessions = [
        SessionOut(
            id=record.id,
            user_agent=record.user_agent,
            ip_address=record.ip_address,
            created_at=record.created_at,
            updated_at=record.updated_at,
            is_current=record.hashed_token == current_hash,
        )
        for record in list_refresh_tokens(db, current_user.id)
    ]
    return SessionListResponse(sessions=sessions)


@auth_router.delete("/auth/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_session(session_id: UUID, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    if revoke_refresh_token(db, current_user.id, session_id) == 0:
        raise HTTPException(status_code=404, detail="Session not found")
    return None


@auth_router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    return {"user": current_user}
