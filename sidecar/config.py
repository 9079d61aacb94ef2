"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache): one instance per process
    - max_rows >= 0; 0 means scans are unbounded
    - Read/write deadlines default to 5 seconds each

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - SIDECAR_ env prefix: the sidecar usually shares a pod with the process it serves
"""

from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from sidecar.core.reader_protocol import Reader


class Settings(BaseSettings):
    """Sidecar settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SIDECAR_", env_file=".env", case_sensitive=False,
    )

    # Serving
    bind_addr: str = "localhost:1331"
    read_timeout_seconds: float = Field(5.0, gt=0)
    write_timeout_seconds: float = Field(5.0, gt=0)

    # Store
    ldb_path: str = "/var/spool/ctlstore/ldb.db"
    max_rows: int = Field(0, ge=0)

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()


@dataclass(frozen=True)
class SidecarConfig:
    """What one Sidecar instance serves: where, from which Reader, how many rows."""
    bind_addr: str
    reader: Reader
    max_rows: int = 0
    read_timeout_seconds: float = 5.0
    write_timeout_seconds: float = 5.0

    def __post_init__(self):
        if self.max_rows < 0:
            raise ValueError(f"max_rows must be >= 0, got {self.max_rows}")


def parse_bind_addr(bind_addr: str) -> tuple[str, int]:
    """Split "host:port"; an empty host means every interface."""
    host, sep, port = bind_addr.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid bind address: {bind_addr!r}")
    host = host.strip("[]")
    return host or "0.0.0.0", int(port)
