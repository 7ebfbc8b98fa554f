"""Configuration management for the Katika portfolio backend.

All configuration is loaded through Pydantic Settings.  Values come from
environment variables with the ``KATIKA_`` prefix, then from a ``.env`` file
in the working directory, then from the defaults declared below.

Example .env file::

    KATIKA_ENVIRONMENT=production
    KATIKA_DATA_DIR=/var/lib/katika
    KATIKA_UPLOADS_DIR=/var/lib/katika/uploads
    KATIKA_BRAND_NAME=KatikaNaMe Platform

Unlike a module-level singleton, a :class:`KatikaConfig` instance is built by
the caller and handed to :func:`katika.api.main.create_app`, which stores it on
``app.state.config``.  Tests build their own instance pointing at temporary
directories.

Directory Management
--------------------
The configuration creates the data and upload directories on initialisation,
including the ``portfolios`` and ``web-portfolios`` subdirectories that the
generation endpoints write into.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PDF_SUBDIR = "portfolios"
WEB_SUBDIR = "web-portfolios"


class KatikaConfig(BaseSettings):
    """Main configuration for the Katika backend.

    Attributes:
        environment: Deployment mode.  Only ``production`` hides internal
            stack traces from error responses.
        log_level: Root log level name passed to ``logging``.
        data_dir: Directory holding the JSON document store.
        uploads_dir: Root directory for generated PDF and HTML files.
        server_host: Bind address for uvicorn.
        server_port: Bind port for uvicorn.
        brand_name: Platform name stamped in PDF footers and microsites.
        brand_domain: Domain used for live microsite URLs and the PDF footer.
        cors_origins: Origins allowed by the CORS middleware.
        directory_page_size: Default ``limit`` for the public directory.
        artist_directory_limit: Default ``limit`` for the artist directory.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="KATIKA_",
        case_sensitive=False,
    )

    environment: Literal["development", "production", "testing"] = Field(
        default="development",
        description="Deployment mode (development, production, testing)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level name (DEBUG, INFO, WARNING, ERROR)",
    )

    # Paths
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the JSON document store",
    )
    uploads_dir: Path = Field(
        default=Path("uploads"),
        description="Root directory for generated portfolio files",
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    server_port: int = Field(
        default=5000,
        description="Server port",
        ge=1024,
        le=65535,
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to call the API",
    )

    # Branding
    brand_name: str = Field(
        default="KatikaNaMe Platform",
        description="Platform name used in generated documents",
    )
    brand_domain: str = Field(
        default="katikaname.com",
        description="Domain for live microsite URLs",
    )

    # Listing defaults
    directory_page_size: int = Field(default=12, ge=1, le=100)
    artist_directory_limit: int = Field(default=20, ge=1, le=100)

    def __init__(self, **kwargs):
        """Initialise configuration and create the storage directories."""
        super().__init__(**kwargs)

        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.pdf_dir.mkdir(parents=True, exist_ok=True)
        self.web_dir.mkdir(parents=True, exist_ok=True)

    @property
    def store_path(self) -> Path:
        """Location of the JSON document store."""
        return self.data_dir / "katika.json"

    @property
    def pdf_dir(self) -> Path:
        return self.uploads_dir / PDF_SUBDIR

    @property
    def web_dir(self) -> Path:
        return self.uploads_dir / WEB_SUBDIR

    @property
    def is_production(self) -> bool:
        return self.environment == "production"
