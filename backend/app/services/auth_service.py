"""
Login and signup operations.
"""

import logging
from typing import Any, Mapping, Optional

from app.core.config import settings
from app.core.errors import DuplicateKey, OperationError, operation_boundary
from app.core.security import create_access_token, hash_password_async, verify_password_async
from app.core.validators import is_email, require_fields
from app.schemas.auth import AuthResponse, LoginInput, SignupInput, UserOut
from app.services.user_store import UserStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    def __init__(self, users: UserStore):
        self.users = users

    @operation_boundary(AuthResponse)
    async def login(self, data: Optional[Mapping[str, Any]]) -> AuthResponse:
        """
        Authenticate by username or email.

        Unknown identifier and wrong password produce the same message so
        callers cannot tell which one was wrong.
        """
        data = data or {}
        missing = require_fields(data, ["usernameOrEmail", "password"])
        if missing:
            raise OperationError.validation(missing)
        credentials = LoginInput.model_validate(data)

        identifier = credentials.usernameOrEmail
        if is_email(identifier):
            user = await self.users.find_by_email(identifier)
        else:
            user = await self.users.find_by_username(identifier)

        if user is None or not await verify_password_async(credentials.password, user.hashed_password):
            logger.info("Login failed")
            raise OperationError.validation(INVALID_CREDENTIALS)

        return AuthResponse(
            success=True,
            message="Login success",
            token=create_access_token(user),
            user=UserOut.model_validate(user),
        )

    @operation_boundary(AuthResponse)
    async def signup(self, data: Optional[Mapping[str, Any]]) -> AuthResponse:
        data = data or {}
        missing = require_fields(data, ["username", "email", "password"])
        if missing:
            raise OperationError.validation(missing)
        signup = SignupInput.model_validate(data)

        if not is_email(signup.email):
            raise OperationError.validation("Invalid email format")
        if len(signup.password) < settings.MIN_PASSWORD_LENGTH:
            raise OperationError.validation(
                f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters"
            )

        if await self.users.find_by_username(signup.username) is not None:
            raise OperationError.conflict("Username already exists")
        if await self.users.find_by_email(signup.email) is not None:
            raise OperationError.conflict("Email already exists")

        hashed = await hash_password_async(signup.password)
        created = await self.users.create(signup.username, signup.email, hashed)
        if isinstance(created, DuplicateKey):
            # Lost a race with a concurrent signup for the same name or email
            field = "Username" if created.field == "username" else "Email"
            raise OperationError.conflict(f"{field} already exists")

        logger.info(f"User {created.username} signed up")
        return AuthResponse(
            success=True,
            message="Signup success",
            token=create_access_token(created),
            user=UserOut.model_validate(created),
        )
