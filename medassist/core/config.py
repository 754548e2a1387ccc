from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_SAFETY_DISCLAIMER = (
    "\n\nPlease remember: this is general information only. "
    "Always consult your healthcare provider or pharmacist for advice "
    "about your own medications."
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "MedAssist Reply API"
    app_env: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    api_prefix: str = ""

    cors_allow_origin: str = "*"
    cors_allow_headers: str = "authorization, x-client-info, apikey, content-type"

    # Hugging Face style inference API; model identifiers are appended to this URL
    inference_base_url: str = "https://api-inference.huggingface.co/models"
    inference_api_token: str = ""
    # Empty means every built-in endpoint in its default priority order
    model_endpoints: Annotated[list[str], NoDecode] = Field(default_factory=list)
    cascade_enabled: bool = True
    cascade_endpoint_timeout_seconds: float = 8.0
    cascade_deadline_seconds: float = 20.0
    min_reply_chars: int = 10
    safety_disclaimer: str = DEFAULT_SAFETY_DISCLAIMER

    @field_validator("model_endpoints", mode="before")
    @classmethod
    def parse_model_endpoints(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
