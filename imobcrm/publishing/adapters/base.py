"""Platform adapter contract for every listing marketplace.

Every marketplace integration subclasses :class:`BasePlatformAdapter` and
implements :meth:`submit`.

Design decisions
----------------
* **Abstract base class** rather than a ``Protocol``, so adapters share the
  payload builder and the async-context-manager lifecycle.
* **``platform`` as a class variable**: the publishing service and tests can
  inspect which marketplace an adapter serves without constructing it.
* **Outcomes are data**: a marketplace rejecting an ad is a
  :class:`~imobcrm.core.models.PublishingResult` with ``success=False``.
  Only unexpected faults raise, and adapters do not catch those themselves;
  :class:`~imobcrm.publishing.service.PublishingService` turns them into
  failed results at its boundary.

Typical usage::

    class MyAdapter(BasePlatformAdapter):
        platform = Platform.OLX

        async def submit(self, prop, options) -> PublishingResult:
            payload = self.build_payload(prop, options)
            ...

    async with MyAdapter() as adapter:
        result = await adapter.submit(prop, options)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from types import TracebackType
from typing import ClassVar

from imobcrm.core.models import (
    AdPayload,
    Platform,
    Property,
    PublishingOptions,
    PublishingResult,
    platform_display_name,
)

__all__ = ["BasePlatformAdapter"]

logger = logging.getLogger(__name__)


class BasePlatformAdapter(ABC):
    """Abstract base for all marketplace adapters.

    Attributes:
        platform: The concrete :class:`~imobcrm.core.models.Platform` this
            adapter publishes to.  Never ``Platform.ALL``.
    """

    platform: ClassVar[Platform]

    @property
    def display_name(self) -> str:
        """Human-facing marketplace name, e.g. ``"ZapImóveis"``."""
        return platform_display_name(self.platform)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:  # noqa: B027
        """Release any resources held by this adapter.  No-op by default."""

    async def __aenter__(self) -> BasePlatformAdapter:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def build_payload(self, prop: Property, options: PublishingOptions) -> AdPayload:
        """Assemble the ad body for *prop* according to *options*.

        The custom description replaces the property's own text when set;
        price and photos are omitted when the corresponding flag is off.
        """
        return AdPayload(
            property_id=prop.id,
            title=prop.title.strip(),
            description=options.description_for(prop),
            price=prop.sale_price if options.include_price else None,
            photos=list(prop.photos) if options.include_photos else [],
            neighborhood=prop.neighborhood,
            city=prop.city,
            state=prop.state,
            bedrooms=prop.bedrooms,
            bathrooms=prop.bathrooms,
            parking_spaces=prop.parking_spaces,
            built_area=prop.built_area,
            total_area=prop.total_area,
            benefits=list(prop.benefits),
            contact=options.contact_info,
        )

    # ------------------------------------------------------------------
    # Core contract
    # ------------------------------------------------------------------

    @abstractmethod
    async def submit(self, prop: Property, options: PublishingOptions) -> PublishingResult:
        """Publish *prop* on this adapter's marketplace.

        Implementations should:

        * Return a result whose ``platform`` is :attr:`platform`.
        * Report business-level rejections (quota, incomplete data, auth) as
          ``success=False`` results, not exceptions.
        * Let unexpected faults propagate to the caller.

        Returns:
            A :class:`~imobcrm.core.models.PublishingResult`.
        """
