"""Runtime configuration read from the environment (and ``.env``).

Each field maps to the upper-case env var of the same name, so
``SUPABASE_URL`` fills :attr:`Settings.supabase_url`.  Explicit environment
variables beat the ``.env`` file, which beats the defaults.

Example::

    settings = Settings()
    settings.success_rates()[Platform.OLX]   # 0.9 unless OLX_SUCCESS_RATE is set
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from imobcrm.core.models import Platform

__all__ = ["Settings"]

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """imobcrm settings.

    The simulation knobs (latency window, success rates) default to the
    values the simulated marketplaces have always used; they live here so a
    demo or a test run can make publishing instant or deterministic.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -- datastore -------------------------------------------------------
    datastore_backend: Literal["sqlite", "supabase"] = "sqlite"
    database_path: str = Field(
        default="data/imobcrm.db",
        description="SQLite file used by the sqlite backend.",
    )
    supabase_url: str = ""
    supabase_key: str = Field(default="", description="Anon or service-role key.")

    # -- publishing simulation -------------------------------------------
    publish_latency_min_s: float = Field(default=1.0, ge=0.0)
    publish_latency_max_s: float = Field(default=3.0, ge=0.0)
    olx_success_rate: float = Field(default=0.90, ge=0.0, le=1.0)
    zapimoveis_success_rate: float = Field(default=0.85, ge=0.0, le=1.0)
    vivareal_success_rate: float = Field(default=0.80, ge=0.0, le=1.0)

    # -- logging ---------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["text", "json"] = "text"

    @field_validator("datastore_backend", "log_format", mode="before")
    @classmethod
    def _lower(cls, v: object) -> object:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper(cls, v: object) -> object:
        return v.strip().upper() if isinstance(v, str) else v

    @model_validator(mode="after")
    def _check_latency_window(self) -> Settings:
        if self.publish_latency_min_s > self.publish_latency_max_s:
            raise ValueError(
                "publish_latency_min_s must not exceed publish_latency_max_s "
                f"({self.publish_latency_min_s} > {self.publish_latency_max_s})"
            )
        return self

    def success_rates(self) -> dict[Platform, float]:
        """Per-platform probability that a simulated submission succeeds."""
        return {
            Platform.OLX: self.olx_success_rate,
            Platform.ZAPIMOVEIS: self.zapimoveis_success_rate,
            Platform.VIVAREAL: self.vivareal_success_rate,
        }

    @property
    def latency_window(self) -> tuple[float, float]:
        return (self.publish_latency_min_s, self.publish_latency_max_s)

    @property
    def database_path_resolved(self) -> Path:
        return Path(self.database_path).expanduser().resolve()

    @property
    def supabase_configured(self) -> bool:
        """Both the Supabase URL and key are set."""
        return bool(self.supabase_url and self.supabase_key)
