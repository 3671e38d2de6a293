from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.schemas.envelope import Envelope


class LoginInput(BaseModel):
    usernameOrEmail: str
    password: str


class SignupInput(BaseModel):
    username: str
    email: str
    password: str


class UserOut(BaseModel):
    """Public view of a user; the password hash is never exposed."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    created_at: Optional[datetime] = None


class AuthResponse(Envelope):
    token: Optional[str] = None
    user: Optional[UserOut] = None
