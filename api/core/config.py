import os
from dataclasses import dataclass, field


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


@dataclass(frozen=True)
class Settings:
    api_name: str = field(default_factory=lambda: os.getenv("API_NAME", "Sheet Extraction API"))
    api_version: str = field(default_factory=lambda: os.getenv("API_VERSION", "1.0.0"))
    api_bearer_token: str = field(default_factory=lambda: os.getenv("API_BEARER_TOKEN", "").strip())
    max_image_bytes: int = field(
        default_factory=lambda: _int_env("API_MAX_IMAGE_BYTES", 10 * 1024 * 1024)
    )
    api_host: str = field(default_factory=lambda: os.getenv("API_HOST", "127.0.0.1").strip() or "127.0.0.1")
    api_port: int = field(default_factory=lambda: _int_env("API_PORT", 8000))


settings = Settings()
