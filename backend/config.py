# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar
from pathlib import Path

from dotenv import load_dotenv

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"
# Existing environment variables take precedence over .env
load_dotenv(env_path)

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite:///./database_restaurant.db"

    # Defaults applied to new branches
    DEFAULT_TAX_RATE: float = 0.10
    DEFAULT_DELIVERY_FEE: float = 5.0
    DEFAULT_CURRENCY: str = "USD"

    FRONTEND_URL: str = "http://localhost:3000"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra = "ignore"

settings = Settings()
