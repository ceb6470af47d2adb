"""Datastore and authentication gateway contracts.

The application treats its backend as an opaque CRUD + auth service.  Every
store (leads, properties, profiles) and the publishing audit trail talk to it
through :class:`DatastoreGateway`; the session layer talks to
:class:`AuthGateway`.

Two backends implement these contracts:

* :mod:`imobcrm.storage.sqlite_gateway`: local ``aiosqlite`` database.
* :mod:`imobcrm.storage.supabase_gateway`: hosted Supabase project.

Filter semantics
----------------
``filters`` is a mapping of column → value, combined with AND, each an
equality match.  ``None`` / empty means "every row".

Server-assigned fields
----------------------
Backends fill ``id`` and ``created_at`` (plus ``updated_at`` where the
collection has it) on insert when the record does not supply them, and bump
``updated_at`` on update.  :meth:`DatastoreGateway.insert` returns the stored
row including those fields.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

__all__ = [
    "PROFILES",
    "LEADS",
    "PROPERTIES",
    "PUBLISHING_LOGS",
    "PUBLISHING_RESULTS",
    "Record",
    "Filters",
    "DatastoreGateway",
    "AuthEvent",
    "AuthUser",
    "Session",
    "AuthStateCallback",
    "AuthGateway",
]

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Collection names
# ---------------------------------------------------------------------------

PROFILES: str = "profiles"
LEADS: str = "leads"
PROPERTIES: str = "properties"
#: One row per publish invocation.
PUBLISHING_LOGS: str = "publishing_logs"
#: One row per platform outcome of a publish invocation.
PUBLISHING_RESULTS: str = "publishing_results"

Record = dict[str, Any]
Filters = Mapping[str, Any]


class DatastoreGateway(ABC):
    """Opaque CRUD access to named collections.

    All methods raise :class:`~imobcrm.core.exceptions.DatastoreError` (or a
    subclass) when the backend rejects the operation.
    """

    @abstractmethod
    async def insert(self, collection: str, record: Mapping[str, Any]) -> Record:
        """Insert one record and return it as stored."""

    @abstractmethod
    async def select(
        self,
        collection: str,
        filters: Filters | None = None,
        *,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Record]:
        """Return the records matching *filters*, optionally ordered and capped."""

    @abstractmethod
    async def update(
        self,
        collection: str,
        filters: Filters,
        patch: Mapping[str, Any],
    ) -> list[Record]:
        """Apply *patch* to every matching record and return the updated rows."""

    @abstractmethod
    async def delete(self, collection: str, filters: Filters) -> int:
        """Delete every matching record and return how many were removed."""

    async def select_one(self, collection: str, filters: Filters) -> Record | None:
        """Return the first matching record, or ``None``."""
        rows = await self.select(collection, filters, limit=1)
        return rows[0] if rows else None

    async def close(self) -> None:  # noqa: B027
        """Release backend resources.  No-op by default."""


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


class AuthEvent(StrEnum):
    """Session transitions broadcast to :meth:`AuthGateway.on_auth_state_change`
    listeners."""

    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


@dataclass(frozen=True)
class AuthUser:
    """Identity of an authenticated account."""

    id: str
    email: str


@dataclass(frozen=True)
class Session:
    """An authenticated session.

    Attributes:
        user: The signed-in account.
        access_token: Opaque bearer token issued by the backend.
    """

    user: AuthUser
    access_token: str


AuthStateCallback = Callable[[AuthEvent, Session | None], None]


class AuthGateway(ABC):
    """Sign-in / sign-up / session management.

    Raises:
        InvalidCredentialsError: From :meth:`sign_in` on a bad password or
            unknown e-mail.
        UserAlreadyExistsError: From :meth:`sign_up` on a taken e-mail.
    """

    def __init__(self) -> None:
        self._listeners: list[AuthStateCallback] = []

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> Session:
        """Authenticate and start a session."""

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> Session:
        """Create an account and start a session for it."""

    @abstractmethod
    async def sign_out(self) -> None:
        """End the current session (no-op if none)."""

    @abstractmethod
    async def get_session(self) -> Session | None:
        """Return the current session, if any."""

    def on_auth_state_change(self, callback: AuthStateCallback) -> Callable[[], None]:
        """Register *callback* for session transitions.

        Returns:
            A zero-argument function that unregisters the callback.
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _emit(self, event: AuthEvent, session: Session | None) -> None:
        """Notify listeners; a failing listener never breaks the auth call."""
        for listener in list(self._listeners):
            try:
                listener(event, session)
            except Exception:  # noqa: BLE001
                logger.error("Auth state listener raised on %s", event, exc_info=True)
