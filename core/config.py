"""Configuration models and loading."""

import json
from collections.abc import Callable
from pathlib import Path
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

CONFIG_DIR = Path.home() / ".config" / "cors-gateway"
CONFIG_FILE = CONFIG_DIR / "config.json"

MIB = 1024 * 1024


def _normalize_base_urls(values: tuple[str, ...]) -> tuple[str, ...]:
    """Strip trailing slashes and reject entries without scheme and host."""
    normalized = []
    for value in values:
        value = value.strip().rstrip("/")
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise ValueError(f"not an absolute http(s) URL: {value!r}")
        normalized.append(value)
    return tuple(normalized)


class ProxySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str = "127.0.0.1"
    port: int = 8787
    prefix: str = "/corsproxy/"
    keep_alive_timeout: int = 5


class CorsSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    allowed_origins: tuple[str, ...] = (
        "https://yourdomain.com",
        "https://app.yourdomain.com",
        "https://staging.yourdomain.com",
    )
    allowed_methods: tuple[str, ...] = ("GET", "HEAD", "POST", "PUT", "DELETE")
    allowed_headers: tuple[str, ...] = ("Content-Type", "Authorization", "X-Requested-With")
    max_age: int = 86400

    @field_validator("allowed_origins")
    @classmethod
    def _check_origins(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return _normalize_base_urls(value)

    @field_validator("allowed_methods")
    @classmethod
    def _upper_methods(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(m.upper() for m in value if m.upper() != "OPTIONS")


class TargetSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    allowed_targets: tuple[str, ...] = (
        "https://httpbin.org",
        "https://api.example.com",
        "https://trusted-api.com",
    )
    user_agent: str = "CorsGateway/1.0"

    @field_validator("allowed_targets")
    @classmethod
    def _check_targets(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return _normalize_base_urls(value)


class LimitSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_request_bytes: int = 1 * MIB
    max_response_bytes: int = 10 * MIB
    upstream_timeout: float = 10.0


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    proxy: ProxySettings = Field(default_factory=ProxySettings)
    cors: CorsSettings = Field(default_factory=CorsSettings)
    targets: TargetSettings = Field(default_factory=TargetSettings)
    limits: LimitSettings = Field(default_factory=LimitSettings)


def load_config(
    path: Path = CONFIG_FILE,
    on_reset: Callable[[Path, str], None] | None = None,
) -> Config:
    """Load configuration from JSON file, creating default if needed.

    A corrupt file is moved aside and replaced by defaults; ``on_reset`` is
    called with the backup path and the error name.
    """
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        default = Config()
        path.write_text(default.model_dump_json(indent=2))
        return default

    try:
        data = json.loads(path.read_text())
        return Config.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        # Backup corrupted config and recreate default
        backup = path.with_suffix(".json.bak")
        path.rename(backup)
        if on_reset:
            on_reset(backup, type(e).__name__)
        default = Config()
        path.write_text(default.model_dump_json(indent=2))
        return default
