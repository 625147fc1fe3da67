"""Configuration settings for hashline-tools."""

from pydantic_settings import BaseSettings

from .fingerprint import FingerprintMode


class Settings(BaseSettings):
    """Process-wide defaults loaded from ``HASHLINE_*`` environment variables."""

    # Fingerprints
    fingerprint_mode: FingerprintMode = FingerprintMode.CHAINED

    # Listings and reports
    read_limit: int = 2000
    diff_context: int = 5
    mismatch_context: int = 2  # Lines shown around each stale anchor

    # Tool limits
    max_edits: int = 100
    max_file_bytes: int = 10 * 1024 * 1024
    workspace_root: str = "."

    # MCP server
    mcp_host: str = "0.0.0.0"
    mcp_port: int = 4001

    log_level: str = "INFO"

    class Config:
        env_prefix = "HASHLINE_"
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
