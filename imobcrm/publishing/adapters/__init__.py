"""Marketplace adapters and the factory that wires them from settings."""

from __future__ import annotations

import random

from imobcrm.core.models import Platform
from imobcrm.core.settings import Settings
from imobcrm.publishing.adapters.base import BasePlatformAdapter
from imobcrm.publishing.adapters.simulated import (
    DEFAULT_LATENCY_S,
    OlxAdapter,
    SimulatedPlatformAdapter,
    SleepFn,
    VivaRealAdapter,
    ZapImoveisAdapter,
)

__all__ = [
    "BasePlatformAdapter",
    "SimulatedPlatformAdapter",
    "OlxAdapter",
    "ZapImoveisAdapter",
    "VivaRealAdapter",
    "DEFAULT_LATENCY_S",
    "build_default_adapters",
]

_SIMULATED_ADAPTERS: tuple[type[SimulatedPlatformAdapter], ...] = (
    OlxAdapter,
    ZapImoveisAdapter,
    VivaRealAdapter,
)


def build_default_adapters(
    settings: Settings | None = None,
    *,
    rng: random.Random | None = None,
    sleep: SleepFn | None = None,
) -> dict[Platform, BasePlatformAdapter]:
    """Instantiate one simulated adapter per concrete platform.

    Args:
        settings: Source of the latency window and success rates.  Class
            defaults are used when ``None``.
        rng: Shared random source (e.g. ``random.Random(seed)`` for
            reproducible runs).
        sleep: Sleep coroutine override.

    Returns:
        Mapping from platform to adapter, in canonical platform order.
    """
    rng = rng or random.Random()
    latency = settings.latency_window if settings is not None else DEFAULT_LATENCY_S
    rates = settings.success_rates() if settings is not None else {}
    return {
        cls.platform: cls(
            rng=rng,
            latency=latency,
            success_rate=rates.get(cls.platform),
            sleep=sleep,
        )
        for cls in _SIMULATED_ADAPTERS
    }
