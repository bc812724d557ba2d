from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    app_name: str = "Image Vault API"
    environment: Literal["dev", "test", "prod"] = "dev"
    debug: bool = False
    port: int = 8000

    database_url: str

    access_token_secret: str = Field(min_length=1)
    refresh_token_secret: str = Field(min_length=1)
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    cloudinary_cloud_name: str = Field(min_length=1)
    cloudinary_api_key: str = Field(min_length=1)
    cloudinary_api_secret: str = Field(min_length=1)
    cloudinary_folder: str = "user_uploads"

    # "none" is for a frontend served from another site; browsers then require Secure.
    cookie_samesite: Literal["lax", "strict", "none"] = "lax"
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    max_upload_size_mb: int = 10
    max_files_per_upload: int = 10
    auto_create_tables: bool = True

    @model_validator(mode="after")
    def check_distinct_secrets(self) -> "Settings":
        if self.access_token_secret == self.refresh_token_secret:
            raise ValueError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ")
        return self

    @property
    def cookie_secure(self) -> bool:
        return self.environment == "prod" or self.cookie_samesite == "none"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
