# src/settings.py
import os
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # core
    APP_NAME: str = Field(default="VPN Guide Generator")
    ENV: str = Field(default=os.getenv("APP_ENV", "dev"))
    DEBUG: bool = Field(default=True)
    LOG_LEVEL: str = Field(default="INFO")

    # generation backend: gemini | openai | ollama | echo
    GUIDE_BACKEND: str = Field(default="gemini")
    GUIDE_MODEL: Optional[str] = None
    GUIDE_LANGUAGE: str = Field(default="zh")

    # secrets (API_KEY is the name the web app used)
    GEMINI_API_KEY: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY"),
    )
    OPENAI_API_KEY: Optional[str] = None
    OLLAMA_HOST: str = Field(default="http://localhost:11434")

    # retry policy for overloaded backends
    MAX_RETRIES: int = Field(default=3, ge=0)
    RETRY_BASE_DELAY: float = Field(default=1.0, ge=0)
    RETRY_JITTER: float = Field(default=1.0, ge=0)

    model_config = SettingsConfigDict(
        env_file=".env.dev",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def app_name(self) -> str:
        return self.APP_NAME


settings = Settings()
