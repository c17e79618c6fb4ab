from __future__ import annotations
from functools import lru_cache
from typing import Optional
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: Optional[str] = Field(
        None, validation_alias=AliasChoices("DATABASE_URL", "MONGODB_URI")
    )
    DATABASE_NAME: str = "cafe_orders"
    SENDGRID_API_KEY: Optional[str] = None
    EMAIL_FROM: str = "pedidos@cafe.local"
    PORT: int = 8000
    CONFIRMED_ORDERS_LIMIT: int = Field(20, ge=1)

@lru_cache
def get_settings() -> Settings:
    return Settings()
