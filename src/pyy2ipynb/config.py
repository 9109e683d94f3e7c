"""Configuration management for pyy2ipynb."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Pyy2IpynbConfig(BaseSettings):
    """Application configuration loaded from environment variables.

    Environment variables should be prefixed with PYY2IPYNB_
    Example: PYY2IPYNB_CONTENT_ROOT=courses

    Attributes:
        content_root: Directory scanned by ``--all`` for documents
        source_suffix: Extension of authoring documents
        output_suffix: Extension of generated notebooks
        images_suffix: Extension replacing the notebook's for its image directory
        default_nbformat_minor: Minor version used when the input has none
        json_indent: Indentation of the serialized notebook
        log_level: Minimum level for the stderr log sink
    """

    # Discovery
    content_root: str = Field(
        default="curricula",
        description="Directory searched when converting or validating everything",
    )
    source_suffix: str = Field(
        default=".pyy",
        description="File extension of authoring documents",
    )
    output_suffix: str = Field(
        default=".ipynb",
        description="File extension of generated notebooks",
    )

    # Output Configuration
    images_suffix: str = Field(
        default=".images",
        description="Suffix of the per-notebook image directory",
    )
    default_nbformat_minor: int = Field(
        default=5,
        ge=0,
        description="nbformat minor version used when the input has none",
    )
    json_indent: int = Field(
        default=2,
        ge=0,
        le=8,
        description="Indentation of the written notebook JSON",
    )

    # Logging
    log_level: Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Minimum log level written to stderr",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PYY2IPYNB_",
        case_sensitive=False,
        extra="ignore",
    )


# Global config instance (lazy-loaded)
_config: Pyy2IpynbConfig | None = None


def get_config() -> Pyy2IpynbConfig:
    """Get or create the global configuration instance.

    Returns:
        Pyy2IpynbConfig: The configuration object
    """
    global _config
    if _config is None:
        _config = Pyy2IpynbConfig()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
