# Services Package
# Re-exports for convenience; stores first so the services can import them

# Storage
from app.services.user_store import UserStore, SqlUserStore
from app.services.employee_store import EmployeeStore, SqlEmployeeStore

# Media
from app.services.media_service import (
    CloudinaryUploader,
    PhotoResolver,
    PhotoUploader,
    UploadError,
    is_remote_url,
)

# Operations
from app.services.auth_service import AuthService
from app.services.employee_service import EmployeeService

__all__ = [
    "UserStore",
    "SqlUserStore",
    "EmployeeStore",
    "SqlEmployeeStore",
    "CloudinaryUploader",
    "PhotoResolver",
    "PhotoUploader",
    "UploadError",
    "is_remote_url",
    "AuthService",
    "EmployeeService",
]
