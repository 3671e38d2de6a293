"""
Credential store: persistence of login identities.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import DuplicateKey
from app.models.user import User

logger = logging.getLogger(__name__)


class UserStore(ABC):
    """Lookup and creation of users by unique username or email."""

    @abstractmethod
    async def find_by_username(self, username: str) -> Optional[User]:
        ...

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    async def create(self, username: str, email: str, hashed_password: str) -> Union[User, DuplicateKey]:
        """Persist a new user, or report which unique field collided."""


class SqlUserStore(UserStore):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_username(self, username: str) -> Optional[User]:
        return await self.db.scalar(select(User).where(User.username == username))

    async def find_by_email(self, email: str) -> Optional[User]:
        return await self.db.scalar(select(User).where(User.email == email))

    async def create(self, username: str, email: str, hashed_password: str) -> Union[User, DuplicateKey]:
        user = User(username=username, email=email, hashed_password=hashed_password)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.info(f"Duplicate user rejected: {e.orig}")
            return DuplicateKey(field=_collided_field(e, ("username", "email")))
        await self.db.refresh(user)
        return user


# PostgreSQL echoes the offending value as "Key (email)=(<value>)"; it is user input
_DETAIL_VALUE = re.compile(r"=\(.*\)")


def _collided_field(error: IntegrityError, candidates: tuple, table: str = User.__tablename__) -> str:
    """
    Name of the unique column a driver error reports.

    SQLite names the column (``users.email``). PostgreSQL names the index
    (``ix_users_email``) and the key (``Key (email)``).
    """
    text = _DETAIL_VALUE.sub("", str(error.orig))
    for name in candidates:
        pattern = rf"\b(?:{table}\.{name}|ix_{table}_{name}|{table}_{name}_key)\b|\({name}\)"
        if re.search(pattern, text):
            return name
    return candidates[-1]
