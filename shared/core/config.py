import os
from typing import List, Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Always load .env from root
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))


class Settings(BaseSettings):
    JWT_SECRET: Optional[str] = os.getenv("JWT_SECRET")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    APP_BASE_URL: str = os.getenv("APP_BASE_URL", "http://localhost:3000")

    # Full URL wins over the individual parts (used for sqlite in local runs)
    DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL")
    DB_USER: Optional[str] = os.getenv("DB_USER")
    DB_PASS: Optional[str] = os.getenv("DB_PASS")
    DB_HOST: Optional[str] = os.getenv("DB_HOST")
    DB_PORT: Optional[str] = os.getenv("DB_PORT")
    LEASE_DB_NAME: Optional[str] = os.getenv("LEASE_DB_NAME")

    # Signing
    SIGNING_LINK_EXPIRE_DAYS: int = int(os.getenv("SIGNING_LINK_EXPIRE_DAYS", 7))
    ENFORCE_TENANT_FIRST_SIGNING: bool = os.getenv(
        "ENFORCE_TENANT_FIRST_SIGNING", "False").lower() == "true"

    # Utilities every lease must allocate to one of the parties
    UTILITY_CATALOG: List[str] = [
        "Electric", "Gas", "Water", "Sewer", "Trash", "Internet", "Cable", "Phone",
    ]
    CURRENCY_CODE: str = "USD"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()

LEASE_DATABASE_URL = settings.DATABASE_URL or (
    f"postgresql+psycopg2://{settings.DB_USER}:{settings.DB_PASS}@{settings.DB_HOST}:{settings.DB_PORT}/{settings.LEASE_DB_NAME}?sslmode=require"
)
