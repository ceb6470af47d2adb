"""Simulated marketplace adapters for OLX, ZapImóveis and VivaReal.

No network call is made.  Each submission:

1. Sleeps for ``rng.uniform(*latency)`` seconds to mimic network latency.
2. Draws ``u = rng.random()``; the ad is accepted iff ``u < success_rate``.
3. On acceptance, mints an ad id ``"<prefix>_<epoch ms>_<9 × [a-z0-9]>"``
   and a marketplace URL embedding it.  On rejection, returns the
   marketplace's canned failure message.

The random source, the sleep coroutine, the latency window and the success
rate are constructor arguments so tests can force either outcome without
waiting.  Any ``random.Random``-compatible object works as ``rng``.
"""

from __future__ import annotations

import asyncio
import logging
import random
import string
import time
from collections.abc import Awaitable, Callable
from typing import ClassVar

from imobcrm.core import events
from imobcrm.core.models import Platform, Property, PublishingOptions, PublishingResult
from imobcrm.publishing.adapters.base import BasePlatformAdapter

__all__ = [
    "DEFAULT_LATENCY_S",
    "SimulatedPlatformAdapter",
    "OlxAdapter",
    "ZapImoveisAdapter",
    "VivaRealAdapter",
]

logger = logging.getLogger(__name__)

#: Default ``(min, max)`` simulated latency, seconds.
DEFAULT_LATENCY_S: tuple[float, float] = (1.0, 3.0)

_AD_ID_ALPHABET: str = string.ascii_lowercase + string.digits
_AD_ID_SUFFIX_LENGTH: int = 9

SleepFn = Callable[[float], Awaitable[object]]


class SimulatedPlatformAdapter(BasePlatformAdapter):
    """Randomised stand-in for a marketplace publishing API.

    Subclasses only declare class-level constants.

    Args:
        rng: Random source; defaults to a fresh :class:`random.Random`.
        latency: ``(min, max)`` seconds to sleep before answering.
        success_rate: Acceptance probability; defaults to
            :attr:`default_success_rate`.
        sleep: Awaitable sleep function; defaults to :func:`asyncio.sleep`.

    Raises:
        ValueError: If the latency window or success rate is out of range.
    """

    default_success_rate: ClassVar[float]
    ad_id_prefix: ClassVar[str]
    url_template: ClassVar[str]
    failure_message: ClassVar[str]

    def __init__(
        self,
        *,
        rng: random.Random | None = None,
        latency: tuple[float, float] = DEFAULT_LATENCY_S,
        success_rate: float | None = None,
        sleep: SleepFn | None = None,
    ) -> None:
        low, high = latency
        if low < 0 or high < low:
            raise ValueError(f"latency window must satisfy 0 ≤ min ≤ max, got {latency!r}")
        rate = self.default_success_rate if success_rate is None else success_rate
        if not 0.0 <= rate <= 1.0:
            raise ValueError(f"success_rate must be within [0, 1], got {rate!r}")

        self._rng = rng or random.Random()
        self._latency = (low, high)
        self._success_rate = rate
        self._sleep: SleepFn = sleep or asyncio.sleep

    @property
    def success_rate(self) -> float:
        return self._success_rate

    def _new_ad_id(self) -> str:
        suffix = "".join(self._rng.choices(_AD_ID_ALPHABET, k=_AD_ID_SUFFIX_LENGTH))
        return f"{self.ad_id_prefix}_{time.time_ns() // 1_000_000}_{suffix}"

    async def submit(self, prop: Property, options: PublishingOptions) -> PublishingResult:
        payload = self.build_payload(prop, options)
        delay = self._rng.uniform(*self._latency)
        logger.debug(
            "%s: submitting property %s (price=%s photos=%d), simulated latency %.2fs",
            self.platform,
            payload.property_id,
            "shown" if payload.price is not None else "hidden",
            len(payload.photos),
            delay,
        )
        await self._sleep(delay)

        if self._rng.random() < self._success_rate:
            ad_id = self._new_ad_id()
            logger.info(
                "%s: ad %s published for property %s",
                self.platform,
                ad_id,
                payload.property_id,
                extra={"event": events.PLATFORM_SUBMIT_OK, "platform": str(self.platform)},
            )
            return PublishingResult(
                platform=self.platform,
                success=True,
                message=f"Anúncio publicado com sucesso no {self.display_name}",
                ad_id=ad_id,
                ad_url=self.url_template.format(ad_id=ad_id),
            )

        logger.info(
            "%s: submission rejected for property %s: %s",
            self.platform,
            payload.property_id,
            self.failure_message,
            extra={"event": events.PLATFORM_SUBMIT_FAILED, "platform": str(self.platform)},
        )
        return PublishingResult(
            platform=self.platform,
            success=False,
            message=self.failure_message,
        )


class OlxAdapter(SimulatedPlatformAdapter):
    platform = Platform.OLX
    default_success_rate = 0.90
    ad_id_prefix = "olx"
    url_template = "https://olx.com.br/anuncio/{ad_id}"
    failure_message = "Erro na publicação: Limite de anúncios atingido"


class ZapImoveisAdapter(SimulatedPlatformAdapter):
    platform = Platform.ZAPIMOVEIS
    default_success_rate = 0.85
    ad_id_prefix = "zap"
    url_template = "https://zapimoveis.com.br/imovel/{ad_id}"
    failure_message = "Erro na publicação: Dados do imóvel incompletos"


class VivaRealAdapter(SimulatedPlatformAdapter):
    platform = Platform.VIVAREAL
    default_success_rate = 0.80
    ad_id_prefix = "vr"
    url_template = "https://vivareal.com.br/imovel/{ad_id}"
    failure_message = "Erro na publicação: Falha na autenticação"
