from pydantic_settings import BaseSettings
from typing import List
import os


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "formstudio"
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = False
    TESTING: bool = False

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite+aiosqlite:///./formstudio.db"
    )

    # Origin used to build shareable submission links (<origin>/form/<id>)
    PUBLIC_ORIGIN: str = os.getenv("PUBLIC_ORIGIN", "http://localhost:5173")

    # Upload limits for form/theme JSON imports (bytes)
    MAX_IMPORT_BYTES: int = 1_000_000

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173", "http://127.0.0.1"]

    class Config:
        env_file = ".env"

settings = Settings()
