from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr

from untrivially.schemas.users.user_base import UserOut


class GoogleUserInfo(BaseModel):
    """Subset of the Google userinfo payload the login flow relies on."""
    id: str
    email: EmailStr
    name: str
    picture: Optional[str] = None


class TokenPayload(BaseModel):
    sub: UUID
    name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    exp: Optional[int] = None


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class RefreshResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class SessionOut(BaseModel):
    id: UUID
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    is_current: bool = False


class SessionListResponse(BaseModel):
    sessions: List[SessionOut]
