# -*- coding: utf-8 -*-
"""
Cell preview service configuration using Pydantic BaseSettings.
"""
from pathlib import Path
from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central service configuration loaded from environment variables.
    Pydantic's BaseSettings provides automatic validation, type casting,
    and reading from .env files.
    """

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8002

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # ==========================================================================
    # Document host bridge
    # ==========================================================================

    # Base URL of the REST bridge exposing the document host (tables, fields, selection)
    HOST_API_URL: str = "http://127.0.0.1:8800"
    # Optional bearer token sent with every bridge request
    HOST_API_TOKEN: str = ""
    # Transport timeout in seconds (no timeout is imposed on the preview itself)
    HOST_TIMEOUT: float = 30.0

    # Handshake retry (only the initial active-table lookup is retried)
    HANDSHAKE_RETRY_ATTEMPTS: int = 3
    HANDSHAKE_RETRY_MIN_WAIT: int = 1
    HANDSHAKE_RETRY_MAX_WAIT: int = 10

    # ==========================================================================
    # Preview
    # ==========================================================================

    # Show a "may not be Markdown" notice instead of rendering plain-looking text
    AUTO_DETECT_MARKDOWN: bool = True

    # Pass raw HTML found in cell content through the renderer (off: escaped)
    MARKDOWN_ALLOW_HTML: bool = False
    # Turn bare URLs into links
    MARKDOWN_LINKIFY: bool = False

    # Long-poll wait for GET /preview?after=N (seconds)
    PREVIEW_POLL_TIMEOUT: float = 25.0

    # CORS
    CORS_ORIGINS: List[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = False

    # Request tracking
    REQUEST_ID_HEADER: str = "X-Request-ID"

    # Compression
    GZIP_MIN_SIZE: int = 1000

    # ==========================================================================
    # Paths (computed, not from env vars)
    # ==========================================================================
    BASE_DIR: Path = Path(__file__).resolve().parent
    TEMPLATES_DIR: Path = BASE_DIR / "templates"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


# Global configuration instance
settings = Settings()
