# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12
    DATABASE_URL: str = "sqlite:///./shoppos.db"

    FRONTEND_URL: str = "http://localhost:5173"
    LOG_LEVEL: str = "INFO"

    # POS defaults
    POS_TAX_RATE: float = 0.07
    CURRENCY_SYMBOL: str = "Rs."
    LOYALTY_POINTS_PER_100: int = 1

    # Generated receipts and label sheets
    STORAGE_DIR: str = "storage"

    # Seed account created by seed_db.py
    ADMIN_EMAIL: str = "admin@shoppos.in"
    ADMIN_PASSWORD: str = "admin123"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra = "ignore"

settings = Settings()
