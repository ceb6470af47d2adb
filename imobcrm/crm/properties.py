"""Property portfolio: CRUD over the ``properties`` collection plus list helpers.

Visibility follows the lead rules: agents see their own properties (by
``owner_id``), agencies see everything and may narrow to one owner.  Agents
can only modify their own properties; agencies can modify any.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from typing import Any

from imobcrm.core import events
from imobcrm.core.exceptions import CrmError, RecordNotFoundError
from imobcrm.core.models import Property, PropertyStatus, UserRole
from imobcrm.crm.session import AuthService
from imobcrm.storage.gateway import PROPERTIES, DatastoreGateway

__all__ = [
    "PropertyStore",
    "PRICE_RANGES",
    "PROPERTY_SORT_KEYS",
    "filter_properties",
    "sort_properties",
    "count_by_status",
]

logger = logging.getLogger(__name__)

#: Price-range dropdown values → ``[low, high)`` bounds in BRL.
PRICE_RANGES: dict[str, tuple[float, float]] = {
    "under-500k": (0.0, 500_000.0),
    "500k-1m": (500_000.0, 1_000_000.0),
    "over-1m": (1_000_000.0, float("inf")),
}

PROPERTY_SORT_KEYS: tuple[str, ...] = ("newest", "oldest", "price-asc", "price-desc")

#: Server-managed columns never taken from the caller.
_SERVER_FIELDS: frozenset[str] = frozenset({"id", "owner_id", "created_at", "updated_at"})


class PropertyStore:
    """Properties visible to the signed-in user.

    Args:
        gateway: Datastore hosting the ``properties`` collection.
        session: Provides the signed-in profile.
    """

    def __init__(self, gateway: DatastoreGateway, session: AuthService) -> None:
        self._gateway = gateway
        self._session = session
        self.properties: list[Property] = []

    async def get_properties(self, owner_id: str | None = None) -> list[Property]:
        """Load the visible properties, newest first, into :attr:`properties`.

        Raises:
            NotAuthenticatedError: If nobody is signed in.
        """
        profile = self._session.require_profile()
        filters: dict[str, Any] = {}
        if profile.role is UserRole.AGENT:
            filters["owner_id"] = profile.id
        elif owner_id:
            filters["owner_id"] = owner_id

        rows = await self._gateway.select(
            PROPERTIES, filters, order_by="created_at", descending=True
        )
        self.properties = [Property.model_validate(row) for row in rows]
        return self.properties

    async def get_property_by_id(self, property_id: str) -> Property | None:
        row = await self._gateway.select_one(PROPERTIES, {"id": property_id})
        return Property.model_validate(row) if row is not None else None

    async def add_property(self, prop: Property) -> Property:
        """Persist *prop* as a new property owned by the signed-in profile.

        Any ``id``, ``owner_id`` or timestamps on *prop* are ignored.

        Raises:
            NotAuthenticatedError: If nobody is signed in.
        """
        profile = self._session.require_profile()
        record = prop.model_dump(mode="json", exclude=set(_SERVER_FIELDS))
        record["owner_id"] = profile.id

        row = await self._gateway.insert(PROPERTIES, record)
        created = Property.model_validate(row)
        self.properties.insert(0, created)
        logger.info(
            "Property %s created by %s",
            created.id,
            profile.id,
            extra={"event": events.PROPERTY_CREATED},
        )
        return created

    async def update_property(self, property_id: str, updates: dict[str, Any]) -> Property:
        """Patch one property.

        Raises:
            CrmError: If *updates* touches a server-managed or unknown field.
            RecordNotFoundError: If the property is missing or not editable
                by the signed-in user.
        """
        bad = sorted(k for k in updates if k in _SERVER_FIELDS or k not in Property.model_fields)
        if bad:
            raise CrmError(f"Campos não editáveis: {', '.join(bad)}")
        # Round-trip through the model so enum and list fields are normalised.
        patch = Property.model_validate(updates).model_dump(mode="json", include=set(updates))
        return await self._write(property_id, patch)

    async def update_property_status(
        self, property_id: str, status: PropertyStatus | str
    ) -> Property:
        """Mark a property available, reserved or sold.

        Raises:
            CrmError: If *status* is not a known property status.
        """
        try:
            new_status = PropertyStatus(status)
        except ValueError:
            raise CrmError(f"Status de imóvel inválido: {status!r}") from None
        prop = await self._write(property_id, {"status": str(new_status)})
        logger.info(
            "Property %s marked %s",
            property_id,
            new_status,
            extra={"event": events.PROPERTY_STATUS_CHANGED},
        )
        return prop

    async def delete_property(self, property_id: str) -> None:
        """Delete one property.

        Raises:
            RecordNotFoundError: If the property is missing or not deletable
                by the signed-in user.
        """
        deleted = await self._gateway.delete(PROPERTIES, self._write_scope(property_id))
        if not deleted:
            raise RecordNotFoundError(PROPERTIES, property_id)
        self.properties = [p for p in self.properties if p.id != property_id]
        logger.info("Property %s deleted", property_id, extra={"event": events.PROPERTY_DELETED})

    def _write_scope(self, property_id: str) -> dict[str, Any]:
        profile = self._session.require_profile()
        scope: dict[str, Any] = {"id": property_id}
        if profile.role is UserRole.AGENT:
            scope["owner_id"] = profile.id
        return scope

    async def _write(self, property_id: str, patch: dict[str, Any]) -> Property:
        rows = await self._gateway.update(PROPERTIES, self._write_scope(property_id), patch)
        if not rows:
            raise RecordNotFoundError(PROPERTIES, property_id)
        updated = Property.model_validate(rows[0])
        self.properties = [updated if p.id == property_id else p for p in self.properties]
        return updated


# ---------------------------------------------------------------------------
# List helpers
# ---------------------------------------------------------------------------


def filter_properties(
    properties: Iterable[Property],
    search: str = "",
    status: PropertyStatus | str = "all",
    price_range: str = "all",
) -> list[Property]:
    """Apply the portfolio screen's search box and dropdowns.

    *search* matches case-insensitively against title, description, city
    and neighbourhood.  ``"all"`` disables a dropdown; an unknown price
    range also matches everything.
    """
    needle = search.lower()
    low, high = PRICE_RANGES.get(price_range, (float("-inf"), float("inf")))
    return [
        prop
        for prop in properties
        if any(
            needle in text.lower()
            for text in (prop.title, prop.description, prop.city, prop.neighborhood)
        )
        and (status == "all" or prop.status == status)
        and low <= prop.sale_price < high
    ]


def sort_properties(properties: Iterable[Property], sort_by: str = "newest") -> list[Property]:
    """Order properties by one of :data:`PROPERTY_SORT_KEYS`; unknown keys keep order."""
    items = list(properties)
    if sort_by == "newest":
        return sorted(items, key=_created_ts, reverse=True)
    if sort_by == "oldest":
        return sorted(items, key=_created_ts)
    if sort_by == "price-asc":
        return sorted(items, key=lambda p: p.sale_price)
    if sort_by == "price-desc":
        return sorted(items, key=lambda p: p.sale_price, reverse=True)
    return items


def count_by_status(properties: Iterable[Property]) -> dict[PropertyStatus, int]:
    """Number of properties per status; every status is present."""
    counts = Counter(prop.status for prop in properties)
    return {status: counts.get(status, 0) for status in PropertyStatus}


def _created_ts(prop: Property) -> float:
    return prop.created_at.timestamp() if prop.created_at else 0.0
