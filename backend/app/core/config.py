from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Signing keys that ship in examples and docs; never acceptable in production
_PLACEHOLDER_SECRETS = {
    "your-secret-key-change-this-in-production-min-32-chars",
    "changeme",
    "secret",
    "jwt-secret",
}
_MIN_SECRET_LENGTH = 32


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_parse_delimiter=",", extra="ignore")

    # Service
    PROJECT_NAME: str = "Employee Directory API"
    VERSION: str = "1.0.0"
    BUILD_SHA: str = "dev"  # set by the image build
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    PORT: int = 4000

    # Browser clients; JSON array or comma-separated string
    ALLOWED_ORIGINS: List[str] | str = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:4200"],
    )

    # Employee and user records
    DATABASE_URL: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL", "SQLALCHEMY_DATABASE_URI"),
    )
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_SERVER: str = Field(
        default="localhost",
        validation_alias=AliasChoices("POSTGRES_SERVER", "POSTGRES_HOST"),
    )
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "employees"
    DB_POOL_SIZE: int = Field(default=10, description="Persistent connections kept in the pool")
    DB_MAX_OVERFLOW: int = Field(default=20, description="Extra connections allowed under load")
    DB_CONNECT_TIMEOUT: int = Field(default=8, description="Seconds before giving up on the database")
    SQLALCHEMY_ECHO: bool = False

    # Access tokens
    SECRET_KEY: str = Field(
        default="your-secret-key-change-this-in-production-min-32-chars",
        validation_alias=AliasChoices("JWT_SECRET", "JWT_SECRET_KEY", "SECRET_KEY"),
    )
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 120

    # Input policy
    MIN_PASSWORD_LENGTH: int = 6
    MIN_EMPLOYEE_SALARY: float = 1000

    # Employee photo hosting (Cloudinary)
    CLOUDINARY_CLOUD_NAME: Optional[str] = None
    CLOUDINARY_API_KEY: Optional[str] = None
    CLOUDINARY_API_SECRET: Optional[str] = None
    CLOUDINARY_FOLDER: str = "comp3133_employees"
    UPLOAD_TIMEOUT_SECONDS: float = 30.0

    # Inline base64 photos make request bodies large
    MAX_REQUEST_SIZE_MB: int = 15

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            value = value.split(",")
        return [origin.strip() for origin in value if origin.strip()]

    def model_post_init(self, __context):
        """Fill in DATABASE_URL from its parts, then refuse unsafe production settings."""
        if not self.DATABASE_URL:
            self.DATABASE_URL = (
                f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
                f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            )

        problems = self._production_problems() if self.is_production else []
        if problems:
            # Report everything at once
            raise ValueError(
                "Refusing to start with production configuration errors:\n"
                + "\n".join(f"  - {p}" for p in problems)
            )

    def _production_problems(self) -> List[str]:
        problems = []
        if self.SECRET_KEY in _PLACEHOLDER_SECRETS or len(self.SECRET_KEY) < _MIN_SECRET_LENGTH:
            problems.append(
                f"SECRET_KEY is insecure: use a random value of at least {_MIN_SECRET_LENGTH} characters"
            )
        if self.DEBUG:
            problems.append("DEBUG must be False in production")
        return problems

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def full_version(self) -> str:
        """VERSION with the short build SHA appended for non-dev builds."""
        if self.BUILD_SHA != "dev":
            return f"{self.VERSION}+{self.BUILD_SHA[:8]}"
        return self.VERSION


settings = Settings()
