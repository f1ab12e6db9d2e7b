"""Centralized configuration for syncappend."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RESERVED_COLUMNS: List[str] = [
    "cartodb_id",
    "created_at",
    "updated_at",
    "ogc_fid",
    "rowid",
    "oid",
    "tableoid",
    "xmin",
    "xmax",
    "cmin",
    "cmax",
    "ctid",
]


class SchemaSettings(BaseModel):
    """Warehouse schemas used during an append."""

    destination: str = Field(default="main", description="Schema holding destination tables")
    staging: str = Field(default="staging", description="Schema holding freshly imported tables")
    metadata: str = Field(default="_syncappend", description="Schema for bookkeeping tables")


class SyncAppendSettings(BaseSettings):
    """Append engine settings loaded from env, .env, and defaults."""

    schemas: SchemaSettings = Field(default_factory=SchemaSettings)
    registry_table: str = Field(
        default="table_metadata",
        description="Metadata registry table inside the metadata schema",
    )
    reserved_columns: List[str] = Field(
        default_factory=lambda: list(DEFAULT_RESERVED_COLUMNS),
        description="System column names never copied from staging",
    )
    storage_quota_bytes: Optional[int] = Field(
        default=None,
        ge=0,
        description="Warehouse storage quota for the built-in checker (None = unlimited)",
    )
    type_catalog_path: Optional[Path] = Field(
        default=None,
        description="YAML file overriding the default logical/physical type catalog",
    )
    log_level: str = Field(default="INFO", description="Log verbosity")

    model_config = SettingsConfigDict(
        env_prefix="SYNCAPPEND_",
        env_file=".env",
        extra="ignore",
        env_nested_delimiter="__",
    )

    def prepare_environment(self) -> None:
        """Apply process-wide settings (log verbosity of the syncappend loggers)."""

        logging.getLogger("syncappend").setLevel(self.log_level.upper())


@lru_cache(maxsize=1)
def get_settings() -> SyncAppendSettings:
    """Return a cached settings instance."""

    settings = SyncAppendSettings()
    settings.prepare_environment()
    return settings
