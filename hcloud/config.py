"""Client configuration."""

from dataclasses import dataclass, field, replace
from typing import Optional

import httpx
from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .backoff import DEFAULT_BACKOFF, BackoffFunc, exponential_backoff

DEFAULT_ENDPOINT = "https://api.hetzner.cloud/v1"
LIBRARY_NAME = "hcloud-python"
LIBRARY_VERSION = "1.0.0"


@dataclass
class ClientConfig:
    """Configuration for the API client. Read-only once a client is built."""

    endpoint: str = DEFAULT_ENDPOINT
    token: str = ""

    # Rate limit retries in Client.all; None retries until the caller cancels
    backoff_func: BackoffFunc = field(default=DEFAULT_BACKOFF)
    max_retries: Optional[int] = None

    # Timeout settings (in seconds)
    connection_timeout: float = 10.0
    read_timeout: float = 60.0
    total_timeout: float = 120.0

    # Prepended to the User-Agent header
    application_name: Optional[str] = None
    application_version: Optional[str] = None

    # Use a preconfigured httpx client instead of creating one
    http_client: Optional[httpx.Client] = None

    def __post_init__(self):
        self.endpoint = self.endpoint.rstrip("/")

    @property
    def user_agent(self) -> str:
        """User-Agent header value identifying this library and the application."""
        agent = f"{LIBRARY_NAME}/{LIBRARY_VERSION}"
        if self.application_name and self.application_version:
            return f"{self.application_name}/{self.application_version} {agent}"
        if self.application_name:
            return f"{self.application_name} {agent}"
        return agent

    @property
    def timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self.connection_timeout,
            read=self.read_timeout,
            write=self.read_timeout,
            pool=self.total_timeout,
        )

    def with_endpoint(self, endpoint: str) -> "ClientConfig":
        """Create a new config with a different API endpoint."""
        return replace(self, endpoint=endpoint)

    def with_token(self, token: str) -> "ClientConfig":
        """Create a new config with a different API token."""
        return replace(self, token=token)

    def with_backoff_func(self, backoff_func: BackoffFunc) -> "ClientConfig":
        """Create a new config with a different backoff function."""
        return replace(self, backoff_func=backoff_func)

    def with_application(self, name: str, version: Optional[str] = None) -> "ClientConfig":
        """Create a new config identifying the calling application."""
        return replace(self, application_name=name, application_version=version)

    def __repr__(self) -> str:
        return f"ClientConfig(endpoint={self.endpoint!r}, user_agent={self.user_agent!r})"


class Settings(BaseSettings):
    """Client settings loaded from HCLOUD_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HCLOUD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    token: SecretStr | None = None
    endpoint: str = DEFAULT_ENDPOINT

    # Exponential backoff: backoff_base ** retries * backoff_unit seconds
    backoff_base: float = 2.0
    backoff_unit: float = 0.5
    max_retries: int | None = None

    timeout: float = 60.0  # seconds
    debug: bool = False

    def to_client_config(self) -> ClientConfig:
        """Build a ClientConfig from these settings."""
        return ClientConfig(
            endpoint=self.endpoint,
            token=self.token.get_secret_value() if self.token else "",
            backoff_func=exponential_backoff(self.backoff_base, self.backoff_unit),
            max_retries=self.max_retries,
            read_timeout=self.timeout,
        )
