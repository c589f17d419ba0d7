"""Application configuration."""

import os
from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # API
    app_name: str = "Compliance Engine"
    debug: bool = False
    log_level: str = "INFO"

    # Document search
    compliance_data_dir: str | None = Field(
        default=None,
        validation_alias=AliasChoices("HIERA_compliance_data_dir", "compliance_data_dir"),
    )
    module_paths: list[str] = Field(default_factory=list)
    aux_paths: list[str] = Field(default_factory=list)
    load_paths: list[str] = Field(
        default_factory=lambda: ["SIMP/compliance_profiles", "simp/compliance_profiles"]
    )

    # Enforcement
    enforcement_mode: str = "value"
    enforcement_key: str = "compliance_markup::enforcement"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "extra": "ignore",
    }

    @property
    def data_dirs(self) -> list[str] | None:
        """Override search roots, or None when not configured.

        Several directories may be given separated by ``os.pathsep``.
        """
        if self.compliance_data_dir is None:
            return None
        return [p for p in self.compliance_data_dir.split(os.pathsep) if p]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
