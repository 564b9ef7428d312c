"""
Application configuration loaded from environment variables.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from b2boost_server.core.errors import ConfigurationError


class Settings(BaseSettings):
    """B2Boost backend and maintenance tooling configuration."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Document store
    mongodb_uri: Optional[str] = None
    mongodb_database: str = "b2boost"
    mongodb_timeout_ms: int = 10000

    # Session tokens
    jwt_secret: Optional[str] = None
    jwt_algorithm: str = "HS256"
    jwt_expire_days: int = 7
    token_storage_key: str = "b2boost_token"

    # Identity provider (Kinde)
    kinde_domain: str = ""
    kinde_client_id: str = ""
    kinde_redirect_uri: str = "http://localhost:5173/callback"
    kinde_logout_redirect_uri: str = "http://localhost:5173"

    # Logging
    log_level: str = "info"
    log_format: Literal["json", "text"] = "text"

    # Server
    host: str = "0.0.0.0"
    port: int = 5000
    debug: bool = False

    # CORS
    cors_origins: list[str] = ["http://localhost:5173"]

    def require_mongodb_uri(self) -> str:
        if not self.mongodb_uri:
            raise ConfigurationError("MONGODB_URI is not defined in environment variables")
        return self.mongodb_uri

    def require_jwt_secret(self) -> str:
        if not self.jwt_secret:
            raise ConfigurationError("JWT_SECRET is not defined in environment variables")
        return self.jwt_secret


@lru_cache
def get_settings() -> Settings:
    return Settings()
