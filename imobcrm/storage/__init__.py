"""Datastore and authentication backends.

:func:`open_gateway` picks the backend named by ``DATASTORE_BACKEND`` and
returns a ready ``(datastore, auth)`` pair.
"""

from __future__ import annotations

import logging

from imobcrm.core.exceptions import ConfigError
from imobcrm.core.settings import Settings
from imobcrm.storage.database import open_db
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
    Session,
)
from imobcrm.storage.sqlite_gateway import SqliteAuth, SqliteDatastore

__all__ = [
    "PROFILES",
    "LEADS",
    "PROPERTIES",
    "PUBLISHING_LOGS",
    "PUBLISHING_RESULTS",
    "AuthEvent",
    "AuthGateway",
    "AuthUser",
    "DatastoreGateway",
    "Session",
    "SqliteAuth",
    "SqliteDatastore",
    "open_gateway",
]

logger = logging.getLogger(__name__)


async def open_gateway(settings: Settings) -> tuple[DatastoreGateway, AuthGateway]:
    """Open the configured backend.

    Args:
        settings: Application settings.

    Returns:
        ``(datastore, auth)``.  Call ``await datastore.close()`` on shutdown.

    Raises:
        ConfigError: If the supabase backend is selected but not configured.
    """
    if settings.datastore_backend == "supabase":
        # Imported lazily so the sqlite backend never loads the Supabase stack.
        from imobcrm.storage.supabase_gateway import (
            SupabaseAuth,
            SupabaseDatastore,
            create_supabase_client,
        )

        client = create_supabase_client(settings)
        logger.info("Using Supabase datastore backend")
        return SupabaseDatastore(client), SupabaseAuth(client)

    if settings.datastore_backend != "sqlite":
        raise ConfigError(f"Unknown datastore backend: {settings.datastore_backend!r}")

    conn = await open_db(settings.database_path_resolved)
    logger.info("Using SQLite datastore backend at %s", settings.database_path_resolved)
    return SqliteDatastore(conn, owns_connection=True), SqliteAuth(conn)
