from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ENV: str = "dev"                # "dev" / "staging" / "prod"
    SERVICE_NAME: str = "metapay"
    ENABLE_ADMIN: bool = True
    ENABLE_METRICS: bool = False
    ADMIN_SECRET: Optional[str] = None
    ADMIN_TOKEN_SECRET: Optional[str] = None
    ADMIN_TOKEN_ALGO: str = "HS256"
    ADMIN_TOKEN_EXPIRE_MINUTES: int = 30

    class Config:
        env_file = ".env"
        extra="ignore"

admin_config = Settings()
