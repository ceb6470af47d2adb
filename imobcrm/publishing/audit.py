"""Best-effort audit trail for publish requests.

Two collections are written through the
:class:`~imobcrm.storage.gateway.DatastoreGateway`:

* ``publishing_logs``: one row per publish invocation, holding the raw
  platform request and the full serialised options.
* ``publishing_results``: one row per platform outcome.

The trail is strictly best-effort.  A failed write is logged at ERROR with
``event=AUDIT_WRITE_ERROR`` and reported as ``False``; it never reaches the
caller of :meth:`~imobcrm.publishing.service.PublishingService.publish` and
never changes the returned results.  Rows carry no client-side timestamp;
the backend assigns ``created_at``.
"""

from __future__ import annotations

import logging

from imobcrm.core import events
from imobcrm.core.models import PublishingOptions, PublishingResult
from imobcrm.storage.gateway import PUBLISHING_LOGS, PUBLISHING_RESULTS, DatastoreGateway

__all__ = ["PublishingAuditLog"]

logger = logging.getLogger(__name__)


class PublishingAuditLog:
    """Writes publish attempts and outcomes to the datastore.

    Args:
        gateway: Datastore the audit rows are written to.
    """

    def __init__(self, gateway: DatastoreGateway) -> None:
        self._gateway = gateway

    async def log_attempt(self, property_id: str, options: PublishingOptions) -> bool:
        """Record that *property_id* is about to be published with *options*.

        Returns:
            ``True`` if the row was written, ``False`` if the write failed.
        """
        record = {
            "property_id": property_id,
            "platforms": [str(p) for p in options.platforms],
            "options": options.model_dump(mode="json"),
        }
        try:
            await self._gateway.insert(PUBLISHING_LOGS, record)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Could not record publish attempt for property %s: %s",
                property_id,
                exc,
                extra={"event": events.AUDIT_WRITE_ERROR, "collection": PUBLISHING_LOGS},
            )
            return False

        logger.debug(
            "Publish attempt recorded for property %s",
            property_id,
            extra={"event": events.AUDIT_ATTEMPT_LOGGED},
        )
        return True

    async def save_result(self, property_id: str, result: PublishingResult) -> bool:
        """Record one platform outcome for *property_id*.

        Returns:
            ``True`` if the row was written, ``False`` if the write failed.
        """
        record = {"property_id": property_id, **result.model_dump(mode="json")}
        try:
            await self._gateway.insert(PUBLISHING_RESULTS, record)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Could not record %s result for property %s: %s",
                result.platform,
                property_id,
                exc,
                extra={
                    "event": events.AUDIT_WRITE_ERROR,
                    "collection": PUBLISHING_RESULTS,
                    "platform": str(result.platform),
                },
            )
            return False

        logger.debug(
            "%s result recorded for property %s",
            result.platform,
            property_id,
            extra={"event": events.AUDIT_RESULT_SAVED},
        )
        return True
