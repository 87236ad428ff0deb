# cleancloak/core/config.py

from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CORS_ORIGINS = [
    "https://sprightly-trifle-9b980c.netlify.app",
    "https://teal-daffodil-d3a9b2.netlify.app",
    "https://clean-cloak-b.onrender.com",
    "capacitor://localhost",
    "http://localhost:5173",
    "http://localhost:3000",
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # MongoDB settings
    MONGODB_URI: str = Field(default="mongodb://localhost:27017")
    MONGODB_DB: str = Field(default="cleancloak")

    # Auth/JWT settings
    JWT_SECRET: str = Field(..., description="Signing secret for session tokens")
    JWT_ALGORITHM: str = Field(default="HS256")
    JWT_EXPIRE_DAYS: int = Field(default=7, gt=0)
    BCRYPT_ROUNDS: int = Field(default=12, ge=4, le=31)

    # Deployment
    ENVIRONMENT: str = Field(default="development")
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    LOG_LEVEL: str = Field(default="INFO")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() in ("production", "prod")

    @property
    def session_max_age(self) -> int:
        """Cookie lifetime in seconds, matching the token lifetime."""
        return self.JWT_EXPIRE_DAYS * 24 * 60 * 60


settings = Settings()
