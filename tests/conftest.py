"""Shared pytest fixtures and configuration for the imobcrm test suite.

This file is loaded automatically by pytest before any test module.
It provides project-wide fixtures and helpers used across the unit tests.
"""

from __future__ import annotations

import logging
import os
import random
from typing import Any

import pytest
from pydantic_settings import SettingsConfigDict

from imobcrm.core import configure_logging
from imobcrm.core.models import ContactInfo, Platform, Property, PublishingOptions
from imobcrm.core.settings import Settings


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _configure_test_logging() -> None:
    """Force DEBUG logging in text format for every test.

    ``force=True`` applies the configuration even when pytest's own
    ``log_cli`` handler is already present.
    """
    configure_logging(level="DEBUG", fmt="text", force=True)


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove imobcrm env vars and disable ``.env`` loading for one test.

    pydantic-settings reads the ``.env`` file directly rather than through
    ``os.environ``, so the file is switched off on the model config too.
    """
    prefixes = (
        "DATASTORE_",
        "DATABASE_",
        "SUPABASE_",
        "PUBLISH_",
        "OLX_",
        "ZAPIMOVEIS_",
        "VIVAREAL_",
        "LOG_LEVEL",
        "LOG_FORMAT",
    )
    for key in list(os.environ):
        if any(key.startswith(prefix) for prefix in prefixes):
            monkeypatch.delenv(key, raising=False)

    monkeypatch.setattr(
        Settings,
        "model_config",
        SettingsConfigDict(env_file=None, env_file_encoding="utf-8", extra="ignore"),
    )


# ---------------------------------------------------------------------------
# Domain helpers
# ---------------------------------------------------------------------------


class FixedRandom(random.Random):
    """``random.Random`` whose ``random()`` always returns *value*.

    ``uniform`` and ``choices`` are built on ``random()``, so with
    ``value=0.0`` every ad-id character is ``"a"``.
    """

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self._value = value

    def random(self) -> float:
        return self._value


async def no_sleep(_delay: float) -> None:
    """Drop-in for ``asyncio.sleep`` that returns immediately."""


def make_property(**overrides: Any) -> Property:
    """Return a property that passes every publication rule."""
    data: dict[str, Any] = {
        "id": "prop-1",
        "title": "Apartamento 3 quartos Vila Mariana",
        "description": (
            "Apartamento amplo e iluminado, com varanda gourmet, "
            "próximo ao metrô e a escolas."
        ),
        "sale_price": 850_000,
        "neighborhood": "Vila Mariana",
        "city": "São Paulo",
        "state": "SP",
        "bedrooms": 3,
        "bathrooms": 2,
        "parking_spaces": 1,
        "built_area": 95,
        "total_area": 95,
        "benefits": ["piscina", "churrasqueira"],
        "photos": ["https://cdn.example.com/p1.jpg", "https://cdn.example.com/p2.jpg"],
        "owner_id": "agent-1",
    }
    data.update(overrides)
    return Property(**data)


def make_options(*platforms: Platform | str, **overrides: Any) -> PublishingOptions:
    """Return publishing options for *platforms* (default ``all``)."""
    data: dict[str, Any] = {
        "platforms": list(platforms) or [Platform.ALL],
        "contact_info": ContactInfo(
            name="Ana Souza", phone="11987654321", email="ana@imob.com.br"
        ),
    }
    data.update(overrides)
    return PublishingOptions(**data)


@pytest.fixture()
def valid_property() -> Property:
    return make_property()


# ---------------------------------------------------------------------------
# Misc helpers
# ---------------------------------------------------------------------------


@pytest.fixture()
def logger() -> logging.Logger:
    """Return a ``logging.Logger`` for test code."""
    return logging.getLogger("tests")
