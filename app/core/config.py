from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MOCK_DATA_PATH = Path(__file__).resolve().parent.parent / "data" / "mock_pins.json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "Pinterval API"
    env: str = "dev"
    log_level: str = "INFO"
    observability_enabled: bool = True

    pinterest_access_token: str | None = None
    pinterest_api_base_url: str = "https://api.pinterest.com/v5"
    upstream_timeout_seconds: float = 10.0

    image_proxy_timeout_seconds: float = 15.0
    image_proxy_max_bytes: int = 25 * 1024 * 1024
    image_proxy_allowed_hosts: str = "pinimg.com,pinterest.com"
    image_proxy_user_agent: str = "Pinterval-ImageProxy/1.0"

    search_cache_max_entries: int = 256
    search_cache_ttl_seconds: int = 600

    use_mock: bool = False
    mock_data_path: Path = DEFAULT_MOCK_DATA_PATH

    @property
    def image_proxy_allowed_host_list(self) -> list[str]:
        return [
            item.strip().lower().lstrip(".")
            for item in self.image_proxy_allowed_hosts.split(",")
            if item.strip()
        ]

    @model_validator(mode="after")
    def validate_limits(self) -> "Settings":
        if self.upstream_timeout_seconds <= 0 or self.image_proxy_timeout_seconds <= 0:
            raise ValueError("timeouts must be positive")
        if self.image_proxy_max_bytes <= 0:
            raise ValueError("image_proxy_max_bytes must be positive")
        if not self.image_proxy_allowed_host_list:
            raise ValueError("image_proxy_allowed_hosts must name at least one host suffix")
        if self.search_cache_max_entries < 1:
            raise ValueError("search_cache_max_entries must be at least 1")
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
