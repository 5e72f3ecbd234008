from pydantic import BaseModel, ConfigDict, EmailStr
from uuid import UUID
from typing import Optional


class UserOut(BaseModel):
    id: UUID
    name: str
    email: EmailStr
    avatar_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UserResponse(BaseModel):
    user: UserOut
