"""SQLite database initialisation for the local datastore backend.

This module is responsible for:

* Opening (or creating) the SQLite file.
* Configuring PRAGMA settings (WAL journal mode, foreign keys).
* Bootstrapping the schema via ``CREATE TABLE IF NOT EXISTS``, which is
  idempotent and safe to run on every startup.

It also owns :data:`TABLES`, the column metadata the gateway uses to
whitelist column names and to (de)serialise JSON and boolean columns.

Typical usage::

    from imobcrm.storage.database import open_db

    conn = await open_db(Path("data/imobcrm.db"))
    # ... hand conn to SqliteDatastore / SqliteAuth ...
    await conn.close()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import aiosqlite

__all__ = [
    "DEFAULT_DB_PATH",
    "AUTH_USERS",
    "TableSpec",
    "TABLES",
    "open_db",
    "create_schema",
]

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH: Path = Path("imobcrm.db")

#: Credentials table; private to :class:`~imobcrm.storage.sqlite_gateway.SqliteAuth`.
AUTH_USERS: str = "auth_users"


@dataclass(frozen=True)
class TableSpec:
    """Column metadata for one table.

    Attributes:
        columns: Every column name, in DDL order.
        json_columns: Columns holding JSON-encoded lists / objects.
        bool_columns: Columns holding 0/1 booleans.
        ddl: ``CREATE TABLE IF NOT EXISTS`` statement.
    """

    columns: tuple[str, ...]
    ddl: str
    json_columns: frozenset[str] = frozenset()
    bool_columns: frozenset[str] = frozenset()

    @property
    def has_updated_at(self) -> bool:
        return "updated_at" in self.columns


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

_DDL_PROFILES = """\
CREATE TABLE IF NOT EXISTS profiles (
    id          TEXT PRIMARY KEY,
    name        TEXT NOT NULL,
    email       TEXT NOT NULL,
    phone       TEXT NOT NULL,
    role        TEXT NOT NULL,
    photo_url   TEXT,
    agency_id   TEXT,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
)"""

_DDL_LEADS = """\
CREATE TABLE IF NOT EXISTS leads (
    id          TEXT PRIMARY KEY,
    name        TEXT NOT NULL,
    email       TEXT NOT NULL,
    phone       TEXT NOT NULL,
    source      TEXT NOT NULL,
    status      TEXT NOT NULL,
    agent_id    TEXT NOT NULL,
    notes       TEXT,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
)"""

#: ``benefits`` and ``photos`` hold JSON arrays of strings.
_DDL_PROPERTIES = """\
CREATE TABLE IF NOT EXISTS properties (
    id               TEXT PRIMARY KEY,
    title            TEXT NOT NULL DEFAULT '',
    description      TEXT NOT NULL DEFAULT '',
    sale_price       REAL NOT NULL DEFAULT 0,
    appraisal_value  REAL,
    address          TEXT,
    neighborhood     TEXT NOT NULL DEFAULT '',
    city             TEXT NOT NULL DEFAULT '',
    state            TEXT NOT NULL DEFAULT '',
    bedrooms         INTEGER NOT NULL DEFAULT 0,
    bathrooms        INTEGER NOT NULL DEFAULT 0,
    parking_spaces   INTEGER NOT NULL DEFAULT 0,
    built_area       REAL NOT NULL DEFAULT 0,
    total_area       REAL NOT NULL DEFAULT 0,
    benefits         TEXT NOT NULL DEFAULT '[]',
    photos           TEXT NOT NULL DEFAULT '[]',
    status           TEXT NOT NULL DEFAULT 'available',
    owner_id         TEXT,
    created_at       TEXT NOT NULL,
    updated_at       TEXT NOT NULL
)"""

#: ``platforms`` is the raw request list (may contain "all"); ``options`` is
#: the full serialised PublishingOptions payload.
_DDL_PUBLISHING_LOGS = """\
CREATE TABLE IF NOT EXISTS publishing_logs (
    id           TEXT PRIMARY KEY,
    property_id  TEXT NOT NULL,
    platforms    TEXT NOT NULL,
    options      TEXT NOT NULL,
    created_at   TEXT NOT NULL
)"""

_DDL_PUBLISHING_RESULTS = """\
CREATE TABLE IF NOT EXISTS publishing_results (
    id           TEXT PRIMARY KEY,
    property_id  TEXT NOT NULL,
    platform     TEXT NOT NULL,
    success      INTEGER NOT NULL,
    message      TEXT NOT NULL,
    ad_id        TEXT,
    ad_url       TEXT,
    created_at   TEXT NOT NULL
)"""

_DDL_AUTH_USERS = """\
CREATE TABLE IF NOT EXISTS auth_users (
    id             TEXT PRIMARY KEY,
    email          TEXT NOT NULL UNIQUE,
    password_hash  TEXT NOT NULL,
    created_at     TEXT NOT NULL
)"""

TABLES: dict[str, TableSpec] = {
    "profiles": TableSpec(
        columns=(
            "id", "name", "email", "phone", "role", "photo_url", "agency_id",
            "created_at", "updated_at",
        ),
        ddl=_DDL_PROFILES,
    ),
    "leads": TableSpec(
        columns=(
            "id", "name", "email", "phone", "source", "status", "agent_id", "notes",
            "created_at", "updated_at",
        ),
        ddl=_DDL_LEADS,
    ),
    "properties": TableSpec(
        columns=(
            "id", "title", "description", "sale_price", "appraisal_value", "address",
            "neighborhood", "city", "state", "bedrooms", "bathrooms", "parking_spaces",
            "built_area", "total_area", "benefits", "photos", "status", "owner_id",
            "created_at", "updated_at",
        ),
        ddl=_DDL_PROPERTIES,
        json_columns=frozenset({"benefits", "photos"}),
    ),
    "publishing_logs": TableSpec(
        columns=("id", "property_id", "platforms", "options", "created_at"),
        ddl=_DDL_PUBLISHING_LOGS,
        json_columns=frozenset({"platforms", "options"}),
    ),
    "publishing_results": TableSpec(
        columns=(
            "id", "property_id", "platform", "success", "message", "ad_id", "ad_url",
            "created_at",
        ),
        ddl=_DDL_PUBLISHING_RESULTS,
        bool_columns=frozenset({"success"}),
    ),
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def open_db(path: Path | str | None = None) -> aiosqlite.Connection:
    """Open (or create) the SQLite database and bootstrap the schema.

    Args:
        path: Filesystem path for the SQLite file, or ``":memory:"``.
            Defaults to :data:`DEFAULT_DB_PATH`.

    Returns:
        An open, configured :class:`aiosqlite.Connection`.  The caller is
        responsible for closing it.

    Raises:
        aiosqlite.OperationalError: If the file cannot be opened or created.
    """
    target = str(path) if path is not None else str(DEFAULT_DB_PATH)
    if target != ":memory:":
        Path(target).parent.mkdir(parents=True, exist_ok=True)

    logger.debug("Opening SQLite database at %s", target)

    conn: aiosqlite.Connection = await aiosqlite.connect(target)
    conn.row_factory = aiosqlite.Row

    await _configure_pragmas(conn)
    await create_schema(conn)

    logger.info("SQLite database ready at %s", target)
    return conn


async def create_schema(conn: aiosqlite.Connection) -> None:
    """Create every table if missing.  Never alters existing data."""
    for spec in TABLES.values():
        await conn.execute(spec.ddl)
    await conn.execute(_DDL_AUTH_USERS)
    await conn.commit()
    logger.debug("Schema bootstrap complete (%d tables verified)", len(TABLES) + 1)


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


async def _configure_pragmas(conn: aiosqlite.Connection) -> None:
    result = await conn.execute("PRAGMA journal_mode=WAL")
    row = await result.fetchone()
    mode = row[0] if row else "unknown"
    if mode != "wal":
        logger.debug("SQLite journal_mode is %r (expected for ':memory:')", mode)
    await conn.execute("PRAGMA foreign_keys=ON")
