"""Local datastore backend on top of ``aiosqlite``.

:class:`SqliteDatastore` implements :class:`~imobcrm.storage.gateway.
DatastoreGateway` over the tables declared in
:data:`~imobcrm.storage.database.TABLES`; :class:`SqliteAuth` implements
:class:`~imobcrm.storage.gateway.AuthGateway` against the private
``auth_users`` table.

Column names coming from callers are checked against the table metadata
before they reach SQL, so only values are ever bound as parameters.  The
sessions issued by :class:`SqliteAuth` live in process memory.

Typical usage::

    conn = await open_db(settings.database_path_resolved)
    datastore = SqliteDatastore(conn)
    auth = SqliteAuth(conn)

    row = await datastore.insert("leads", {...})
"""

from __future__ import annotations

import json
import logging
import secrets
import uuid
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

import aiosqlite
from passlib.context import CryptContext

from imobcrm.core.exceptions import (
    DatastoreError,
    InvalidCredentialsError,
    UnknownCollectionError,
    UserAlreadyExistsError,
)
from imobcrm.storage.database import AUTH_USERS, TABLES, TableSpec
from imobcrm.storage.gateway import (
    AuthEvent,
    AuthGateway,
    AuthUser,
    DatastoreGateway,
    Filters,
    Record,
    Session,
)

__all__ = ["SqliteDatastore", "SqliteAuth", "pwd_context", "utc_now_iso"]

logger = logging.getLogger(__name__)

#: Password hashing for :class:`SqliteAuth`.
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string (the server timestamp)."""
    return datetime.now(UTC).isoformat()


# ---------------------------------------------------------------------------
# Datastore
# ---------------------------------------------------------------------------


class SqliteDatastore(DatastoreGateway):
    """CRUD gateway over a single ``aiosqlite`` connection.

    The gateway does not own the connection lifecycle unless
    ``owns_connection=True``, in which case :meth:`close` closes it.

    Args:
        conn: Open connection with the schema applied
            (see :func:`~imobcrm.storage.database.open_db`).
        owns_connection: Close *conn* from :meth:`close`.
    """

    def __init__(self, conn: aiosqlite.Connection, *, owns_connection: bool = False) -> None:
        self._conn = conn
        self._owns_connection = owns_connection

    async def close(self) -> None:
        if self._owns_connection:
            await self._conn.close()
            logger.debug("SQLite connection closed.")

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def insert(self, collection: str, record: Mapping[str, Any]) -> Record:
        spec = _table(collection)
        _check_columns(collection, spec, record.keys())

        now = utc_now_iso()
        row: dict[str, Any] = dict(record)
        row.setdefault("id", uuid.uuid4().hex)
        row.setdefault("created_at", now)
        if spec.has_updated_at:
            row.setdefault("updated_at", now)

        columns = list(row)
        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO {collection} ({', '.join(columns)}) VALUES ({placeholders})"
        params = [_encode(spec, col, row[col]) for col in columns]

        try:
            await self._conn.execute(sql, params)
            await self._conn.commit()
        except aiosqlite.Error as exc:
            raise DatastoreError(f"Failed to insert into {collection}: {exc}") from exc

        logger.debug("Inserted %s row %s", collection, row["id"])
        stored = await self.select_one(collection, {"id": row["id"]})
        return stored if stored is not None else row

    async def select(
        self,
        collection: str,
        filters: Filters | None = None,
        *,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Record]:
        spec = _table(collection)
        filters = filters or {}
        _check_columns(collection, spec, filters.keys())

        where, params = _where_clause(spec, filters)
        sql = f"SELECT * FROM {collection}{where}"
        if order_by is not None:
            _check_columns(collection, spec, [order_by])
            sql += f" ORDER BY {order_by} {'DESC' if descending else 'ASC'}"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))

        try:
            cursor = await self._conn.execute(sql, params)
            rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise DatastoreError(f"Failed to select from {collection}: {exc}") from exc

        return [_decode(spec, row) for row in rows]

    async def update(
        self,
        collection: str,
        filters: Filters,
        patch: Mapping[str, Any],
    ) -> list[Record]:
        spec = _table(collection)
        _check_columns(collection, spec, filters.keys())
        _check_columns(collection, spec, patch.keys())

        # Resolve ids first so a patch touching a filter column still returns
        # the rows it changed.
        ids = [row["id"] for row in await self.select(collection, filters)]
        if not ids or not patch:
            return await self._select_ids(collection, ids)

        changes: dict[str, Any] = dict(patch)
        if spec.has_updated_at:
            changes.setdefault("updated_at", utc_now_iso())

        assignments = ", ".join(f"{col} = ?" for col in changes)
        id_marks = ", ".join("?" for _ in ids)
        sql = f"UPDATE {collection} SET {assignments} WHERE id IN ({id_marks})"
        params = [_encode(spec, col, val) for col, val in changes.items()] + ids

        try:
            await self._conn.execute(sql, params)
            await self._conn.commit()
        except aiosqlite.Error as exc:
            raise DatastoreError(f"Failed to update {collection}: {exc}") from exc

        logger.debug("Updated %d %s row(s)", len(ids), collection)
        return await self._select_ids(collection, ids)

    async def delete(self, collection: str, filters: Filters) -> int:
        spec = _table(collection)
        _check_columns(collection, spec, filters.keys())
        where, params = _where_clause(spec, filters)

        try:
            cursor = await self._conn.execute(f"DELETE FROM {collection}{where}", params)
            await self._conn.commit()
        except aiosqlite.Error as exc:
            raise DatastoreError(f"Failed to delete from {collection}: {exc}") from exc

        deleted = cursor.rowcount
        logger.debug("Deleted %d %s row(s)", deleted, collection)
        return deleted

    async def _select_ids(self, collection: str, ids: list[str]) -> list[Record]:
        if not ids:
            return []
        spec = _table(collection)
        id_marks = ", ".join("?" for _ in ids)
        cursor = await self._conn.execute(
            f"SELECT * FROM {collection} WHERE id IN ({id_marks})", ids
        )
        return [_decode(spec, row) for row in await cursor.fetchall()]


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class SqliteAuth(AuthGateway):
    """E-mail/password authentication backed by the ``auth_users`` table.

    Passwords are stored as bcrypt hashes via :data:`pwd_context`.  E-mail
    addresses are compared case-insensitively.

    Args:
        conn: Open connection with the schema applied.
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        super().__init__()
        self._conn = conn
        self._session: Session | None = None

    async def sign_up(self, email: str, password: str) -> Session:
        email = _normalise_email(email)
        if await self._find_user(email) is not None:
            raise UserAlreadyExistsError(email)

        user_id = uuid.uuid4().hex
        try:
            await self._conn.execute(
                f"INSERT INTO {AUTH_USERS} (id, email, password_hash, created_at) "
                "VALUES (?, ?, ?, ?)",
                (user_id, email, pwd_context.hash(password), utc_now_iso()),
            )
            await self._conn.commit()
        except aiosqlite.IntegrityError as exc:
            raise UserAlreadyExistsError(email) from exc
        except aiosqlite.Error as exc:
            raise DatastoreError(f"Failed to create user: {exc}") from exc

        logger.info("Registered auth user %s", user_id)
        return self._start_session(AuthUser(id=user_id, email=email))

    async def sign_in(self, email: str, password: str) -> Session:
        email = _normalise_email(email)
        row = await self._find_user(email)
        if row is None:
            raise InvalidCredentialsError()

        if not pwd_context.verify(password, row["password_hash"]):
            raise InvalidCredentialsError()

        return self._start_session(AuthUser(id=row["id"], email=row["email"]))

    async def sign_out(self) -> None:
        if self._session is None:
            return
        self._session = None
        self._emit(AuthEvent.SIGNED_OUT, None)

    async def get_session(self) -> Session | None:
        return self._session

    def _start_session(self, user: AuthUser) -> Session:
        self._session = Session(user=user, access_token=secrets.token_urlsafe(32))
        self._emit(AuthEvent.SIGNED_IN, self._session)
        return self._session

    async def _find_user(self, email: str) -> aiosqlite.Row | None:
        try:
            cursor = await self._conn.execute(
                f"SELECT id, email, password_hash FROM {AUTH_USERS} WHERE email = ?",
                (email,),
            )
            return await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise DatastoreError(f"Failed to look up user: {exc}") from exc


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


def _table(collection: str) -> TableSpec:
    try:
        return TABLES[collection]
    except KeyError:
        raise UnknownCollectionError(collection) from None


def _check_columns(collection: str, spec: TableSpec, columns: Iterable[str]) -> None:
    unknown = sorted(set(columns) - set(spec.columns))
    if unknown:
        raise DatastoreError(f"Unknown column(s) for {collection}: {', '.join(unknown)}")


def _where_clause(spec: TableSpec, filters: Filters) -> tuple[str, list[Any]]:
    if not filters:
        return "", []
    parts: list[str] = []
    params: list[Any] = []
    for col, value in filters.items():
        if value is None:
            parts.append(f"{col} IS NULL")
        else:
            parts.append(f"{col} = ?")
            params.append(_encode(spec, col, value))
    return " WHERE " + " AND ".join(parts), params


def _encode(spec: TableSpec, column: str, value: Any) -> Any:
    if value is None:
        return None
    if column in spec.json_columns:
        return json.dumps(value, default=str, ensure_ascii=False)
    if column in spec.bool_columns:
        return int(bool(value))
    if isinstance(value, datetime):
        return value.isoformat()
    # StrEnum members are str subclasses; store the plain value.
    if isinstance(value, str):
        return str(value)
    return value


def _decode(spec: TableSpec, row: aiosqlite.Row) -> Record:
    record: Record = dict(row)
    for col in spec.json_columns:
        if record.get(col) is not None:
            record[col] = json.loads(record[col])
    for col in spec.bool_columns:
        if record.get(col) is not None:
            record[col] = bool(record[col])
    return record


def _normalise_email(email: str) -> str:
    return email.strip().lower()

