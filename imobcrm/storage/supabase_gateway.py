"""Hosted datastore backend on top of ``supabase-py``.

:class:`SupabaseDatastore` maps the gateway CRUD contract onto PostgREST
table queries and :class:`SupabaseAuth` onto Supabase Auth
(e-mail/password).  JSON and timestamp columns are native in Postgres, so
records pass through unchanged.

``supabase-py`` is synchronous; every call runs in a worker thread via
:func:`asyncio.to_thread` so the event loop keeps serving other publishing
tasks while a request is in flight.

Typical usage::

    client = create_supabase_client(settings)
    datastore = SupabaseDatastore(client)
    auth = SupabaseAuth(client)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from supabase import Client, create_client
from supabase.client import ClientOptions

from imobcrm.core.exceptions import (
    AuthError,
    ConfigError,
    DatastoreError,
    InvalidCredentialsError,
    UnknownCollectionError,
    UserAlreadyExistsError,
)
from imobcrm.core.settings import Settings
from imobcrm.storage.gateway import (
    LEADS,
    PROFILES,
    PROPERTIES,
    PUBLISHING_LOGS,
    PUBLISHING_RESULTS,
    AuthEvent,
    AuthGateway,
    AuthUser,
    DatastoreGateway,
    Filters,
    Record,
    Session,
)

__all__ = ["SupabaseDatastore", "SupabaseAuth", "create_supabase_client"]

logger = logging.getLogger(__name__)

_COLLECTIONS: frozenset[str] = frozenset(
    {PROFILES, LEADS, PROPERTIES, PUBLISHING_LOGS, PUBLISHING_RESULTS}
)

T = TypeVar("T")


def create_supabase_client(settings: Settings) -> Client:
    """Build a Supabase client from *settings*.

    Raises:
        ConfigError: If ``SUPABASE_URL`` or ``SUPABASE_KEY`` is missing.
    """
    if not settings.supabase_configured:
        raise ConfigError("SUPABASE_URL and SUPABASE_KEY must be set for the supabase backend")

    options = ClientOptions(auto_refresh_token=True, persist_session=False)
    client = create_client(settings.supabase_url, settings.supabase_key, options)
    logger.info("Supabase client initialized", extra={"url": settings.supabase_url})
    return client


# ---------------------------------------------------------------------------
# Datastore
# ---------------------------------------------------------------------------


class SupabaseDatastore(DatastoreGateway):
    """CRUD gateway over Supabase tables.

    Args:
        client: A configured :class:`supabase.Client`.
    """

    def __init__(self, client: Client) -> None:
        self._client = client

    async def insert(self, collection: str, record: Mapping[str, Any]) -> Record:
        table = self._table(collection)
        rows = await _call(
            f"insert into {collection}",
            lambda: table.insert(dict(record)).execute().data,
        )
        if not rows:
            raise DatastoreError(f"Failed to insert into {collection}: no data returned")
        return rows[0]

    async def select(
        self,
        collection: str,
        filters: Filters | None = None,
        *,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Record]:
        table = self._table(collection)

        def run() -> list[Record]:
            query = _apply_filters(table.select("*"), filters or {})
            if order_by is not None:
                query = query.order(order_by, desc=descending)
            if limit is not None:
                query = query.limit(limit)
            return query.execute().data or []

        return await _call(f"select from {collection}", run)

    async def update(
        self,
        collection: str,
        filters: Filters,
        patch: Mapping[str, Any],
    ) -> list[Record]:
        table = self._table(collection)
        _require_filters("update", collection, filters)
        if not patch:
            return await self.select(collection, filters)
        return await _call(
            f"update {collection}",
            lambda: _apply_filters(table.update(dict(patch)), filters).execute().data or [],
        )

    async def delete(self, collection: str, filters: Filters) -> int:
        table = self._table(collection)
        _require_filters("delete", collection, filters)
        rows = await _call(
            f"delete from {collection}",
            lambda: _apply_filters(table.delete(), filters).execute().data or [],
        )
        return len(rows)

    def _table(self, collection: str) -> Any:
        if collection not in _COLLECTIONS:
            raise UnknownCollectionError(collection)
        return self._client.table(collection)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class SupabaseAuth(AuthGateway):
    """E-mail/password authentication through Supabase Auth.

    Args:
        client: A configured :class:`supabase.Client`.
    """

    def __init__(self, client: Client) -> None:
        super().__init__()
        self._client = client

    async def sign_in(self, email: str, password: str) -> Session:
        credentials = {"email": email.strip().lower(), "password": password}
        try:
            response = await asyncio.to_thread(
                self._client.auth.sign_in_with_password, credentials
            )
        except Exception as exc:
            logger.info("Supabase sign-in rejected: %s", exc)
            raise InvalidCredentialsError() from exc

        session = _to_session(response.session)
        if session is None:
            raise InvalidCredentialsError()
        self._emit(AuthEvent.SIGNED_IN, session)
        return session

    async def sign_up(self, email: str, password: str) -> Session:
        email = email.strip().lower()
        credentials = {"email": email, "password": password}
        try:
            response = await asyncio.to_thread(self._client.auth.sign_up, credentials)
        except Exception as exc:
            if "already" in str(exc).lower():
                raise UserAlreadyExistsError(email) from exc
            raise AuthError(f"Falha no cadastro: {exc}") from exc

        session = _to_session(response.session)
        if session is None:
            # Projects with e-mail confirmation enabled return a user but no session.
            raise AuthError("Cadastro realizado. Confirme seu e-mail para entrar.")
        self._emit(AuthEvent.SIGNED_IN, session)
        return session

    async def sign_out(self) -> None:
        had_session = await self.get_session() is not None
        try:
            await asyncio.to_thread(self._client.auth.sign_out)
        except Exception as exc:
            raise AuthError(f"Falha ao sair: {exc}") from exc
        if had_session:
            self._emit(AuthEvent.SIGNED_OUT, None)

    async def get_session(self) -> Session | None:
        try:
            raw = await asyncio.to_thread(self._client.auth.get_session)
        except Exception as exc:
            raise AuthError(f"Falha ao obter a sessão: {exc}") from exc
        return _to_session(raw)


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


async def _call(action: str, fn: Callable[[], T]) -> T:
    try:
        return await asyncio.to_thread(fn)
    except Exception as exc:
        raise DatastoreError(f"Failed to {action}: {exc}") from exc


def _apply_filters(query: Any, filters: Filters) -> Any:
    for column, value in filters.items():
        query = query.is_(column, "null") if value is None else query.eq(column, value)
    return query


def _require_filters(action: str, collection: str, filters: Filters) -> None:
    # PostgREST refuses unfiltered UPDATE / DELETE.
    if not filters:
        raise DatastoreError(f"Refusing to {action} every row of {collection}")


def _to_session(raw: Any) -> Session | None:
    if raw is None or getattr(raw, "user", None) is None:
        return None
    user = AuthUser(id=str(raw.user.id), email=str(raw.user.email or ""))
    return Session(user=user, access_token=str(raw.access_token))
