from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv(".env", override=False)


class Settings(BaseSettings):
    """Service settings, read from the environment (or .env)."""

    app_name: str = "themeshot"
    log_level: str = Field(default="INFO")

    # Browser
    navigation_timeout_ms: int = Field(default=30000)
    viewport_width: int = Field(default=1280)
    viewport_height: int = Field(default=800)
    browser_args: List[str] = Field(default_factory=lambda: [
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
        "--disable-gpu",
    ])

    # Palette
    max_image_side: int = Field(default=400)

    # Screenshot hosting (S3)
    s3_bucket_name: Optional[str] = Field(default=None)
    s3_folder: str = Field(default="screenshots")
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(default=None)
    aws_region: str = Field(default="us-east-1")
    presigned_url_expiry: int = Field(default=86400)

    model_config = SettingsConfigDict(
        env_prefix="THEMESHOT_", env_file=".env", case_sensitive=False, extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
