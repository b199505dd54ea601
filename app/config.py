from typing import List

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql+asyncpg://user:password@db:5432/rental_db"
    REDIS_URL: str = "redis://localhost:6379/0"
    # "sql" for PostgreSQL, "memory" keeps every collection in-process (dev and tests)
    STORE_BACKEND: str = "sql"
    JWT_SECRET: str = "your_jwt_secret"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60 * 24 * 30
    BCRYPT_ROUNDS: int = 10
    # Image uploads are written to local disk and served as static files
    UPLOAD_DIR: str = "uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024
    MAX_UPLOAD_FILES: int = 10
    DEFAULT_PAGE_LIMIT: int = 10
    MAX_PAGE_LIMIT: int = 100
    MESSAGES_PAGE_LIMIT: int = 20
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3000"]
    RATE_LIMIT_ENABLED: bool = True
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
