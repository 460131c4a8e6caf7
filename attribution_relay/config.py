"""Application configuration via pydantic-settings."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from attribution_relay.errors import ConfigurationError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    debug: bool = False
    log_level: str = "INFO"

    # Amplitude
    amplitude_api_key: str = ""
    amplitude_http_endpoint: str = "https://api2.amplitude.com"
    amplitude_timeout_seconds: float = 30.0

    # Branch webhook
    branch_token: str = ""  # shared secret carried in the webhook URL or bearer header
    branch_rate_limit: str = "600/minute"

    @field_validator("amplitude_http_endpoint")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")

    def check_required(self) -> None:
        """Raise ConfigurationError naming every required setting that is empty."""
        missing = [
            env_name
            for env_name, value in (
                ("AMPLITUDE_API_KEY", self.amplitude_api_key),
                ("AMPLITUDE_HTTP_ENDPOINT", self.amplitude_http_endpoint),
                ("BRANCH_TOKEN", self.branch_token),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")
