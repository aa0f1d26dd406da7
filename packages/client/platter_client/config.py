"""
Client configuration.

Values come from the environment:
    PLATTER_API_URL      Base URL of the Platter API (default: http://localhost:8000/api)
    PLATTER_API_TIMEOUT  Request timeout in seconds (default: 30)
    PLATTER_STORAGE_DIR  Directory for the local cart/favorites cache
"""

from pathlib import Path

import environ  # type: ignore[import-untyped]
from pydantic import BaseModel, Field

DEFAULT_API_URL = "http://localhost:8000/api"
DEFAULT_STORAGE_DIR = Path.home() / ".platter"


class ClientConfig(BaseModel):
    """Settings for the Platter client."""

    api_url: str = DEFAULT_API_URL
    timeout: float = Field(default=30.0, gt=0)
    storage_dir: Path = DEFAULT_STORAGE_DIR

    # Local store keys
    cart_key: str = "foodCart"
    favorites_key: str = "foodFavorites"

    @classmethod
    def from_env(cls, env: environ.Env | None = None) -> "ClientConfig":
        """Build configuration from environment variables."""
        env = env or environ.Env()
        return cls(
            api_url=env.str("PLATTER_API_URL", default=DEFAULT_API_URL).rstrip("/"),
            timeout=env.float("PLATTER_API_TIMEOUT", default=30.0),
            storage_dir=Path(
                env.str("PLATTER_STORAGE_DIR", default=str(DEFAULT_STORAGE_DIR))
            ),
        )
