import json
import uuid
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class Settings(BaseSettings):
    app_name: str = "arqexpress-pricing"
    cors_origins_raw: str | None = Field(None, validation_alias="cors_origins")
    app_env: Literal["dev", "prod"] = Field("prod")
    strict_cors: bool = Field(False)
    log_level: str = Field("INFO")
    pricing_config_path: str = Field("pricing/arqexpress_v1.json")
    metrics_enabled: bool = Field(False)
    metrics_token: str | None = Field(None)
    testing: bool = Field(False)
    default_org_id: uuid.UUID = Field(uuid.UUID("00000000-0000-0000-0000-000000000001"))

    model_config = SettingsConfigDict(env_file=".env", enable_decoding=False)

    @field_validator("cors_origins_raw", mode="before")
    @classmethod
    def normalize_list_raw(cls, value: object) -> str | None:
        return cls._normalize_raw_list(value)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(sorted(_LOG_LEVELS))}")
        return normalized

    @model_validator(mode="after")
    def validate_prod_settings(self) -> "Settings":
        if self.app_env != "prod":
            return self

        if self.strict_cors:
            if not self.cors_origins:
                raise ValueError("STRICT_CORS=true in prod requires explicit CORS_ORIGINS")
            if any(origin == "*" for origin in self.cors_origins):
                raise ValueError("STRICT_CORS=true in prod does not allow wildcard CORS_ORIGINS entries")

        if self.metrics_enabled:
            token = (self.metrics_token or "").strip()
            if not token:
                raise ValueError("METRICS_TOKEN is required when METRICS_ENABLED=true in prod")
            if len(token) < 16:
                raise ValueError("METRICS_TOKEN must be at least 16 characters in prod")

        if self.testing:
            raise ValueError("APP_ENV=prod disables testing mode and X-Org-Id fallbacks")

        return self

    @property
    def cors_origins(self) -> list[str]:
        return self._parse_list(self.cors_origins_raw)

    @cors_origins.setter
    def cors_origins(self, value: list[str] | str | None) -> None:
        self.cors_origins_raw = self._normalize_raw_list(value)

    @staticmethod
    def _normalize_raw_list(value: object) -> str | None:
        if value is None:
            return None
        if isinstance(value, str):
            return value
        if isinstance(value, list):
            return json.dumps(value)
        return str(value)

    @staticmethod
    def _parse_list(raw: str | None) -> list[str]:
        if raw is None:
            return []
        stripped = raw.strip()
        if not stripped:
            return []
        if stripped.startswith("["):
            parsed = json.loads(stripped)
            if isinstance(parsed, list):
                return [str(entry).strip() for entry in parsed if str(entry).strip()]
            return [str(parsed).strip()] if str(parsed).strip() else []
        entries = [entry.strip() for entry in stripped.split(",")]
        return [entry for entry in entries if entry]


settings = Settings()
