from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from core.exceptions import ConfigurationError

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "default.yaml"

# Load .env file from project root
_env_path = PROJECT_ROOT / ".env"
if _env_path.exists():
    load_dotenv(_env_path)


@dataclass(frozen=True)
class StorageCredentials:
    access_key_id: str
    secret_access_key: str
    bucket: str
    endpoint_url: str


class StorageSettings(BaseModel):
    region: str = "auto"
    default_content_type: str = "application/pdf"
    access_key_id_env: str = "CLOUDFLARE_R2_ACCESS_KEY_ID"
    secret_access_key_env: str = "CLOUDFLARE_R2_SECRET_ACCESS_KEY"
    bucket_env: str = "CLOUDFLARE_R2_BUCKET_NAME"
    endpoint_env: str = "CLOUDFLARE_R2_ENDPOINT"

    def credentials(self) -> StorageCredentials:
        """Read the four storage values from the environment.

        Raises:
            ConfigurationError: naming the first variable that is unset or empty.
        """
        required = (
            self.access_key_id_env,
            self.secret_access_key_env,
            self.bucket_env,
            self.endpoint_env,
        )
        for name in required:
            if not os.getenv(name):
                raise ConfigurationError(
                    f"Missing required environment variable: {name}",
                    {"variable": name},
                )
        return StorageCredentials(
            access_key_id=os.environ[self.access_key_id_env],
            secret_access_key=os.environ[self.secret_access_key_env],
            bucket=os.environ[self.bucket_env],
            endpoint_url=os.environ[self.endpoint_env],
        )


class ApiSettings(BaseModel):
    title: str = "Invoice Relay API"
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


class InvoiceSettings(BaseModel):
    margin_pt: float = Field(20.0, ge=0.0)
    currency_symbol: str = "$"
    api_url: str = "http://localhost:8000"


class Settings(BaseModel):
    storage: StorageSettings = Field(default_factory=StorageSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    invoice: InvoiceSettings = Field(default_factory=InvoiceSettings)

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Load settings from YAML configuration file.

        Args:
            path: Optional path to configuration file. If not provided, uses
                INVOICE_RELAY_CONFIG environment variable or defaults to
                config/default.yaml in the project root.

        Returns:
            Settings instance with loaded configuration. When no path was
            requested and the default file is absent, built-in defaults apply.

        Raises:
            FileNotFoundError: If an explicitly requested file does not exist.
            ConfigurationError: If configuration is invalid.
        """
        env_path = os.getenv("INVOICE_RELAY_CONFIG")
        config_path = path or (Path(env_path) if env_path else DEFAULT_CONFIG_PATH)
        if not config_path.exists():
            if path is None and env_path is None:
                return cls()
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        with config_path.open("r", encoding="utf-8") as fp:
            payload = yaml.safe_load(fp) or {}
        try:
            return cls(**payload)
        except Exception as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}", {"path": str(config_path)}) from exc


@lru_cache(maxsize=1)
def get_settings(path: str | None = None) -> Settings:
    return Settings.load(Path(path) if path else None)


__all__ = [
    "Settings",
    "StorageSettings",
    "StorageCredentials",
    "ApiSettings",
    "InvoiceSettings",
    "get_settings",
]
