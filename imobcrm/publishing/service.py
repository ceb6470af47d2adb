"""Publishing orchestrator: one property, many marketplaces, concurrently.

:class:`PublishingService` is the single entry point of the publishing
workflow.  For one :class:`~imobcrm.core.models.Property` and one
:class:`~imobcrm.core.models.PublishingOptions` it:

1. Records the attempt in the audit trail (best-effort).
2. Expands the requested platforms (``all`` → every concrete platform,
   duplicates collapsed in first-request order).
3. Submits to every platform concurrently via
   ``asyncio.gather(..., return_exceptions=True)``.  No platform waits on
   another and none is cancelled because another failed.
4. Turns every adapter fault (exception, missing adapter) into a failed
   :class:`~imobcrm.core.models.PublishingResult`.
5. Records each outcome in the audit trail (best-effort).
6. Returns one result per concrete platform, in request order.

:meth:`PublishingService.publish` does **not** re-run the publication rules;
callers validate first.  :meth:`PublishingService.validate_and_publish`
packages that convention: it raises
:class:`~imobcrm.core.exceptions.PropertyValidationError` before any
adapter is contacted or any audit row is written.

Concurrency model
-----------------
Each platform runs in its own coroutine, which submits and then writes its
own audit row.  The publish-request id in
:data:`~imobcrm.core.logging_config.REQUEST_ID_CTX` is set before the
fan-out, so every log line of the request carries it.

Typical usage::

    from imobcrm.publishing.service import PublishingService
    from imobcrm.storage import open_gateway

    datastore, _auth = await open_gateway(settings)
    async with PublishingService(datastore) as service:
        results = await service.validate_and_publish(prop, options)
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Mapping
from types import TracebackType

from imobcrm.core import events
from imobcrm.core.exceptions import AdapterError, PropertyValidationError
from imobcrm.core.logging_config import REQUEST_ID_CTX
from imobcrm.core.models import (
    Platform,
    Property,
    PublishingOptions,
    PublishingResult,
    ValidationOutcome,
    platform_display_name,
)
from imobcrm.publishing.adapters import BasePlatformAdapter, build_default_adapters
from imobcrm.publishing.audit import PublishingAuditLog
from imobcrm.publishing.validation import validate_property_for_publishing
from imobcrm.storage.gateway import DatastoreGateway

__all__ = ["PublishingService", "UNKNOWN_ERROR_MESSAGE", "fault_result"]

logger = logging.getLogger(__name__)

#: Used when an adapter fault carries no message of its own.
UNKNOWN_ERROR_MESSAGE: str = "Erro desconhecido"


def fault_result(platform: Platform, exc: BaseException | str) -> PublishingResult:
    """Build the failed result reported when *platform* could not be reached.

    Args:
        platform: Concrete platform the fault belongs to.
        exc: The exception raised, or a plain description of the fault.

    Returns:
        A failed :class:`PublishingResult` whose message reads
        ``"Erro ao publicar no <display name>: <fault message>"``.
    """
    detail = str(exc).strip() or UNKNOWN_ERROR_MESSAGE
    return PublishingResult(
        platform=platform,
        success=False,
        message=f"Erro ao publicar no {platform_display_name(platform)}: {detail}",
    )


class PublishingService:
    """Validates properties and publishes them to listing platforms.

    Args:
        gateway: Datastore used for the audit trail.
        adapters: Platform → adapter mapping.  Defaults to the three
            simulated adapters with their built-in rates.
        audit: Audit writer override.  Defaults to a
            :class:`~imobcrm.publishing.audit.PublishingAuditLog` on
            *gateway*.
    """

    def __init__(
        self,
        gateway: DatastoreGateway,
        adapters: Mapping[Platform, BasePlatformAdapter] | None = None,
        *,
        audit: PublishingAuditLog | None = None,
    ) -> None:
        self._gateway = gateway
        self._adapters: dict[Platform, BasePlatformAdapter] = (
            dict(adapters) if adapters is not None else build_default_adapters()
        )
        self._audit = audit or PublishingAuditLog(gateway)

    @property
    def adapters(self) -> dict[Platform, BasePlatformAdapter]:
        return dict(self._adapters)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close every adapter; one failing close does not skip the others."""
        for platform, adapter in self._adapters.items():
            try:
                await adapter.close()
            except Exception as exc:  # noqa: BLE001
                logger.warning("Adapter %s failed to close cleanly: %s", platform, exc)

    async def __aenter__(self) -> PublishingService:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def validate(self, prop: Property) -> ValidationOutcome:
        """Run the publication rules against *prop*."""
        return validate_property_for_publishing(prop)

    async def validate_and_publish(
        self,
        prop: Property,
        options: PublishingOptions,
    ) -> list[PublishingResult]:
        """Validate *prop* and, if it passes, publish it.

        Raises:
            PropertyValidationError: If any publication rule fails.  Nothing
                is submitted and nothing is written to the audit trail.
        """
        outcome = self.validate(prop)
        if not outcome.is_valid:
            logger.info(
                "Property %s rejected by publication rules (%d problem(s))",
                prop.id,
                len(outcome.errors),
                extra={"event": events.PUBLISH_REJECTED, "errors": outcome.errors},
            )
            raise PropertyValidationError(outcome.errors)
        return await self.publish(prop, options)

    async def publish(
        self,
        prop: Property,
        options: PublishingOptions,
    ) -> list[PublishingResult]:
        """Publish *prop* to every platform requested in *options*.

        Per-platform problems never raise; they come back as failed results.

        Args:
            prop: Property to publish.  Assumed to have passed validation.
            options: Platforms, toggles and contact block.

        Returns:
            One :class:`PublishingResult` per concrete platform, in the order
            the platforms were requested.
        """
        token = REQUEST_ID_CTX.set(uuid.uuid4().hex[:8])
        try:
            return await self._publish(prop, options)
        finally:
            REQUEST_ID_CTX.reset(token)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _publish(
        self,
        prop: Property,
        options: PublishingOptions,
    ) -> list[PublishingResult]:
        await self._audit.log_attempt(prop.id, options)

        platforms = options.concrete_platforms()
        logger.info(
            "Publishing property %s to %s",
            prop.id,
            ", ".join(str(p) for p in platforms),
            extra={"event": events.PUBLISH_START, "platforms": [str(p) for p in platforms]},
        )

        raw_results = await asyncio.gather(
            *(self._publish_to(platform, prop, options) for platform in platforms),
            return_exceptions=True,
        )

        results: list[PublishingResult] = []
        for platform, raw in zip(platforms, raw_results):
            if isinstance(raw, BaseException):
                # _publish_to already isolates adapter faults; this only
                # triggers on a failure outside the adapter call.
                logger.error(
                    "Unexpected failure while publishing to %s: %s",
                    platform,
                    raw,
                    exc_info=raw,
                    extra={"event": events.PLATFORM_FAULT, "platform": str(platform)},
                )
                result = fault_result(platform, raw)
                await self._audit.save_result(prop.id, result)
                results.append(result)
            else:
                results.append(raw)

        succeeded = sum(1 for r in results if r.success)
        logger.info(
            "Publish finished: %d platform(s), %d succeeded",
            len(results),
            succeeded,
            extra={"event": events.PUBLISH_COMPLETE, "succeeded": succeeded},
        )
        return results

    async def _publish_to(
        self,
        platform: Platform,
        prop: Property,
        options: PublishingOptions,
    ) -> PublishingResult:
        adapter = self._adapters.get(platform)
        try:
            if adapter is None:
                raise AdapterError(str(platform), f"Plataforma {platform} não suportada")
            result = await adapter.submit(prop, options)
        except AdapterError as exc:
            logger.error(
                "Cannot publish property %s to %s: %s",
                prop.id,
                platform,
                exc,
                extra={"event": events.PLATFORM_FAULT, "platform": exc.platform},
            )
            result = fault_result(platform, exc)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Adapter %s raised while publishing property %s: %s",
                platform,
                prop.id,
                exc,
                exc_info=True,
                extra={"event": events.PLATFORM_FAULT, "platform": str(platform)},
            )
            result = fault_result(platform, exc)

        await self._audit.save_result(prop.id, result)
        return result
