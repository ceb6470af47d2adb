"""Lead pipeline: CRUD over the ``leads`` collection plus list helpers.

:class:`LeadStore` keeps an in-memory :attr:`LeadStore.leads` cache of the
last listing, newest first, and updates it in place after every write.

Visibility rules:

* An **agent** only ever sees and edits leads whose ``agent_id`` is their
  own profile id.
* An **agency** sees every lead, optionally narrowed to one agent.  Writes
  are still scoped to the signed-in profile.

The pure helpers :func:`filter_leads`, :func:`sort_leads` and
:func:`count_by_status` back the list screen's search box, dropdowns and
status counters.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from typing import Any

from imobcrm.core import events
from imobcrm.core.exceptions import CrmError, RecordNotFoundError
from imobcrm.core.models import Lead, LeadCreate, LeadSource, LeadStatus, UserRole
from imobcrm.crm.session import AuthService
from imobcrm.storage.gateway import LEADS, DatastoreGateway

__all__ = [
    "LeadStore",
    "LEAD_SORT_KEYS",
    "filter_leads",
    "sort_leads",
    "count_by_status",
]

logger = logging.getLogger(__name__)

LEAD_SORT_KEYS: tuple[str, ...] = ("newest", "oldest", "name-asc", "name-desc")

#: Fields :meth:`LeadStore.update_lead` accepts.
_EDITABLE_FIELDS: frozenset[str] = frozenset(
    {"name", "email", "phone", "source", "status", "notes"}
)


class LeadStore:
    """Leads of the signed-in user.

    Args:
        gateway: Datastore hosting the ``leads`` collection.
        session: Provides the signed-in profile.
    """

    def __init__(self, gateway: DatastoreGateway, session: AuthService) -> None:
        self._gateway = gateway
        self._session = session
        self.leads: list[Lead] = []

    async def get_leads(self, agent_id: str | None = None) -> list[Lead]:
        """Load the visible leads, newest first, into :attr:`leads`.

        Args:
            agent_id: Agency-only narrowing to one agent.  Ignored for agents.

        Raises:
            NotAuthenticatedError: If nobody is signed in.
        """
        profile = self._session.require_profile()
        filters: dict[str, Any] = {}
        if profile.role is UserRole.AGENT:
            filters["agent_id"] = profile.id
        elif agent_id:
            filters["agent_id"] = agent_id

        rows = await self._gateway.select(LEADS, filters, order_by="created_at", descending=True)
        self.leads = [Lead.model_validate(row) for row in rows]
        logger.debug("Loaded %d lead(s) for %s", len(self.leads), profile.id)
        return self.leads

    async def get_lead_by_id(self, lead_id: str) -> Lead | None:
        """Return one lead, or ``None`` if it does not exist."""
        row = await self._gateway.select_one(LEADS, {"id": lead_id})
        return Lead.model_validate(row) if row is not None else None

    async def add_lead(self, data: LeadCreate) -> Lead:
        """Create a lead owned by the signed-in profile.

        Text fields are trimmed and the e-mail lower-cased; blank notes are
        stored as ``None``.

        Raises:
            NotAuthenticatedError: If nobody is signed in.
            CrmError: If name, e-mail or phone is blank.
        """
        profile = self._session.require_profile()
        name, email, phone = data.name.strip(), data.email.strip().lower(), data.phone.strip()
        if not (name and email and phone):
            raise CrmError("Nome, email e telefone são obrigatórios")

        row = await self._gateway.insert(
            LEADS,
            {
                "name": name,
                "email": email,
                "phone": phone,
                "source": str(data.source),
                "status": str(data.status),
                "agent_id": profile.id,
                "notes": (data.notes or "").strip() or None,
            },
        )
        lead = Lead.model_validate(row)
        self.leads.insert(0, lead)
        logger.info(
            "Lead %s created by %s",
            lead.id,
            profile.id,
            extra={"event": events.LEAD_CREATED},
        )
        return lead

    async def update_lead(self, lead_id: str, updates: dict[str, Any]) -> Lead:
        """Patch one of the signed-in agent's leads.

        Raises:
            CrmError: If *updates* names a field that cannot be edited.
            RecordNotFoundError: If no lead with that id belongs to the agent.
        """
        forbidden = sorted(set(updates) - _EDITABLE_FIELDS)
        if forbidden:
            raise CrmError(f"Campos não editáveis: {', '.join(forbidden)}")
        patch = {
            key: str(value) if isinstance(value, (LeadStatus, LeadSource)) else value
            for key, value in updates.items()
        }
        return await self._write(lead_id, patch)

    async def update_lead_status(self, lead_id: str, status: LeadStatus | str) -> Lead:
        """Move a lead to another pipeline stage.

        Raises:
            CrmError: If *status* is not one of cold / warm / hot.
            RecordNotFoundError: If no lead with that id belongs to the agent.
        """
        try:
            new_status = LeadStatus(status)
        except ValueError:
            raise CrmError(f"Status de lead inválido: {status!r}") from None
        lead = await self._write(lead_id, {"status": str(new_status)})
        logger.info(
            "Lead %s moved to %s",
            lead_id,
            new_status,
            extra={"event": events.LEAD_STATUS_CHANGED},
        )
        return lead

    async def delete_lead(self, lead_id: str) -> None:
        """Delete one of the signed-in agent's leads.

        Raises:
            RecordNotFoundError: If no lead with that id belongs to the agent.
        """
        profile = self._session.require_profile()
        deleted = await self._gateway.delete(LEADS, {"id": lead_id, "agent_id": profile.id})
        if not deleted:
            raise RecordNotFoundError(LEADS, lead_id)
        self.leads = [lead for lead in self.leads if lead.id != lead_id]
        logger.info("Lead %s deleted", lead_id, extra={"event": events.LEAD_DELETED})

    async def _write(self, lead_id: str, patch: dict[str, Any]) -> Lead:
        profile = self._session.require_profile()
        rows = await self._gateway.update(LEADS, {"id": lead_id, "agent_id": profile.id}, patch)
        if not rows:
            raise RecordNotFoundError(LEADS, lead_id)
        lead = Lead.model_validate(rows[0])
        self.leads = [lead if cached.id == lead_id else cached for cached in self.leads]
        return lead


# ---------------------------------------------------------------------------
# List helpers
# ---------------------------------------------------------------------------


def filter_leads(
    leads: Iterable[Lead],
    search: str = "",
    status: LeadStatus | str = "all",
    source: LeadSource | str = "all",
) -> list[Lead]:
    """Apply the list screen's search box and dropdowns.

    *search* matches case-insensitively against name and e-mail, and as a
    plain substring against the phone.  ``"all"`` disables a dropdown.
    """
    needle = search.lower()
    return [
        lead
        for lead in leads
        if (needle in lead.name.lower() or needle in lead.email.lower() or search in lead.phone)
        and (status == "all" or lead.status == status)
        and (source == "all" or lead.source == source)
    ]


def sort_leads(leads: Iterable[Lead], sort_by: str = "newest") -> list[Lead]:
    """Order leads by one of :data:`LEAD_SORT_KEYS`; unknown keys keep order."""
    items = list(leads)
    if sort_by == "newest":
        return sorted(items, key=_created_ts, reverse=True)
    if sort_by == "oldest":
        return sorted(items, key=_created_ts)
    if sort_by == "name-asc":
        return sorted(items, key=lambda lead: lead.name.casefold())
    if sort_by == "name-desc":
        return sorted(items, key=lambda lead: lead.name.casefold(), reverse=True)
    return items


def count_by_status(leads: Iterable[Lead]) -> dict[LeadStatus, int]:
    """Number of leads per status; every status is present."""
    counts = Counter(lead.status for lead in leads)
    return {status: counts.get(status, 0) for status in LeadStatus}


def _created_ts(lead: Lead) -> float:
    return lead.created_at.timestamp() if lead.created_at else 0.0
