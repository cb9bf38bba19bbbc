from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[2]

DEFAULT_TIMEZONE = "America/Los_Angeles"
DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"


class CalendarSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    calendar_id: str = "primary"
    max_results: int = Field(default=50, ge=1, le=250)

    @field_validator("calendar_id")
    @classmethod
    def validate_calendar_id(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("calendar.calendar_id must not be empty")
        return text


class DateSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    strict: bool = False


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value


class LookupYamlSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    calendar: CalendarSettings = Field(default_factory=CalendarSettings)
    dates: DateSettings = Field(default_factory=DateSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


class EnvSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    lookup_env: Literal["dev", "test", "prod"] = "dev"
    lookup_timezone: str = DEFAULT_TIMEZONE
    lookup_config_path: Path = Path("config/lookup.yaml")
    lookup_host: str = "127.0.0.1"
    lookup_port: int = Field(default=8000, ge=1, le=65535)

    google_client_id: str | None = None
    google_client_secret: str | None = None
    google_refresh_token: str | None = None
    google_token_uri: str = DEFAULT_TOKEN_URI

    @field_validator("lookup_timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except ZoneInfoNotFoundError as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("google_client_id", "google_client_secret", "google_refresh_token")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        return text or None


class AppSettings(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    env: EnvSettings
    yaml: LookupYamlSettings
    project_root: Path
    config_path: Path
    timezone: ZoneInfo


def _resolve_project_path(path: Path) -> Path:
    if path.is_absolute():
        return path
    return (PROJECT_ROOT / path).resolve()


def _load_yaml_settings(path: Path) -> LookupYamlSettings:
    if not path.exists():
        raise FileNotFoundError(f"Lookup config file not found: {path}")

    raw_config = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ValueError("Lookup config must be a YAML mapping/object at the top level")
    return LookupYamlSettings.model_validate(raw_config)


def build_settings(
    env: EnvSettings,
    yaml_settings: LookupYamlSettings | None = None,
) -> AppSettings:
    config_path = _resolve_project_path(env.lookup_config_path)
    if yaml_settings is None:
        yaml_settings = _load_yaml_settings(config_path)
    return AppSettings(
        env=env,
        yaml=yaml_settings,
        project_root=PROJECT_ROOT,
        config_path=config_path,
        timezone=ZoneInfo(env.lookup_timezone),
    )


@lru_cache(maxsize=1)
def load_settings() -> AppSettings:
    return build_settings(EnvSettings())
