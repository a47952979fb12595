"""Client configuration.

Settings are read from keyword arguments first, then from `RIAK_*`
environment variables (e.g. `RIAK_HOST`, `RIAK_PORT`, `RIAK_CLIENT_ID`).
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Connection and path settings for a `Client`."""

    model_config = SettingsConfigDict(env_prefix="RIAK_", frozen=True)

    host: str = "127.0.0.1"
    """Host name or address of a store node."""

    port: int = Field(default=8098, gt=0, lt=65536)
    """HTTP port of the store node."""

    protocol: Literal["http", "https"] = "http"

    prefix: str = "/riak/"
    """Path prefix of the object resource."""

    index_prefix: str = "/buckets"
    """Path prefix of the secondary index resource."""

    stats_path: str = "/stats"
    """Path of the node status resource, used to detect the server version."""

    client_id: str | int | None = None
    """Client identifier sent with every request. Generated when missing."""

    timeout_seconds: float = Field(default=10.0, gt=0)

    server_version: str | None = None
    """Known server version. Skips version detection when set."""

    @field_validator("host")
    @classmethod
    def _require_host(cls, value: str) -> str:
        if not value.strip():
            msg = "host must not be empty"
            raise ValueError(msg)
        return value

    @property
    def base_url(self) -> str:
        return f"{self.protocol}://{self.host}:{self.port}"
