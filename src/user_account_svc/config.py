"""Service settings loaded from environment variables and an optional .env file."""

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAX_BODY_BYTES = 50 * 1024 * 1024


class Settings(BaseSettings):
    """
    Configuration for the user account service.

    Values come from OS environment variables first, then from a `.env` file in
    the working directory, then from the defaults below. Only `SECRET_KEY` has no
    default.
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    host: str = "127.0.0.1"
    port: int = 3000
    debug: bool = False
    log_level: str = "INFO"

    secret_key: SecretStr
    bcrypt_rounds: int = 10

    mongo_uri: str = "mongodb://127.0.0.1:27017"
    mongo_db_name: str = "user_accounts"

    cors_origin: str = "http://localhost:5173"
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES

    # List/get/update responses have always carried the password digest.
    expose_password_digest: bool = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
