from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import AsyncSessionLocal
from app.core.security import CallerIdentity, resolve_identity
from app.services.auth_service import AuthService
from app.services.employee_service import EmployeeService
from app.services.employee_store import SqlEmployeeStore
from app.services.media_service import CloudinaryUploader, PhotoResolver
from app.services.user_store import SqlUserStore


async def get_db() -> AsyncGenerator:
    async with AsyncSessionLocal() as session:
        yield session


def get_caller_identity(request: Request) -> Optional[CallerIdentity]:
    """
    Resolve the caller once per request from the Authorization header.

    Anonymous callers get None rather than a 401 so every operation can
    report authorization failures inside its own envelope.
    """
    return resolve_identity(request.headers)


def get_photo_resolver() -> PhotoResolver:
    return PhotoResolver(CloudinaryUploader.from_settings())


def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(SqlUserStore(db))


def get_employee_service(
    db: AsyncSession = Depends(get_db),
    photos: PhotoResolver = Depends(get_photo_resolver),
) -> EmployeeService:
    return EmployeeService(SqlEmployeeStore(db), photos)
