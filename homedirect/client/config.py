"""
Configuration for the client core.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
import httpx


class HomeDirectClientConfig(BaseSettings):
    """
    Where the client finds the API. Read from ``HOMEDIRECT_CLIENT_*`` variables.
    """

    base_url: str = "http://localhost:8000"
    timeout: float = 10.0

    model_config = SettingsConfigDict(
        env_prefix="HOMEDIRECT_CLIENT_",
        env_file=".env",
        extra="ignore"
    )

    def create_http_client(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
        """
        Build an ``httpx.AsyncClient`` for the API.

        The client keeps cookies, so the session cookie set by login or
        registration is sent on later requests.
        """
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=transport
        )


@lru_cache()
def get_client_config() -> HomeDirectClientConfig:
    return HomeDirectClientConfig()
