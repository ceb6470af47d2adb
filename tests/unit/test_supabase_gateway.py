"""Unit tests for the Supabase datastore and auth backends.

The ``supabase`` client is replaced by a :class:`~unittest.mock.MagicMock`
whose query-builder methods all return the same mock, so each test can
inspect the chain of calls a gateway method produced.
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock, call

import pytest

from imobcrm.core.exceptions import (
    AuthError,
    ConfigError,
    DatastoreError,
    InvalidCredentialsError,
    UnknownCollectionError,
    UserAlreadyExistsError,
)
from imobcrm.core.settings import Settings
from imobcrm.storage.gateway import LEADS, AuthEvent
from imobcrm.storage.supabase_gateway import (
    SupabaseAuth,
    SupabaseDatastore,
    create_supabase_client,
)

_BUILDER_METHODS = ("select", "insert", "update", "delete", "eq", "is_", "order", "limit")


def _client(rows: list[dict[str, Any]] | None = None) -> tuple[MagicMock, MagicMock]:
    query = MagicMock(name="query")
    for method in _BUILDER_METHODS:
        getattr(query, method).return_value = query
    query.execute.return_value = SimpleNamespace(data=rows if rows is not None else [])
    client = MagicMock(name="client")
    client.table.return_value = query
    return client, query


def _raw_session(user_id: str = "u1", email: str = "ana@imob.com.br") -> SimpleNamespace:
    return SimpleNamespace(
        user=SimpleNamespace(id=user_id, email=email),
        access_token="jwt-token",
    )


class TestSupabaseDatastore:
    @pytest.mark.asyncio
    async def test_insert_returns_first_row(self) -> None:
        client, query = _client([{"id": "l1", "name": "Carlos"}])
        row = await SupabaseDatastore(client).insert(LEADS, {"name": "Carlos"})
        assert row == {"id": "l1", "name": "Carlos"}
        client.table.assert_called_once_with(LEADS)
        query.insert.assert_called_once_with({"name": "Carlos"})

    @pytest.mark.asyncio
    async def test_insert_without_data_raises(self) -> None:
        client, _ = _client([])
        with pytest.raises(DatastoreError, match="no data returned"):
            await SupabaseDatastore(client).insert(LEADS, {"name": "Carlos"})

    @pytest.mark.asyncio
    async def test_select_builds_filters_order_and_limit(self) -> None:
        client, query = _client([{"id": "l1"}])
        rows = await SupabaseDatastore(client).select(
            LEADS,
            {"agent_id": "a1", "notes": None},
            order_by="created_at",
            descending=True,
            limit=5,
        )
        assert rows == [{"id": "l1"}]
        query.select.assert_called_once_with("*")
        query.eq.assert_called_once_with("agent_id", "a1")
        query.is_.assert_called_once_with("notes", "null")
        query.order.assert_called_once_with("created_at", desc=True)
        query.limit.assert_called_once_with(5)

    @pytest.mark.asyncio
    async def test_update_applies_patch_and_filters(self) -> None:
        client, query = _client([{"id": "l1", "status": "hot"}])
        rows = await SupabaseDatastore(client).update(
            LEADS, {"id": "l1", "agent_id": "a1"}, {"status": "hot"}
        )
        assert rows[0]["status"] == "hot"
        query.update.assert_called_once_with({"status": "hot"})
        assert query.eq.call_args_list == [call("id", "l1"), call("agent_id", "a1")]

    @pytest.mark.asyncio
    async def test_delete_counts_returned_rows(self) -> None:
        client, _ = _client([{"id": "l1"}, {"id": "l2"}])
        assert await SupabaseDatastore(client).delete(LEADS, {"agent_id": "a1"}) == 2

    @pytest.mark.asyncio
    async def test_unfiltered_delete_refused(self) -> None:
        client, query = _client()
        with pytest.raises(DatastoreError, match="every row"):
            await SupabaseDatastore(client).delete(LEADS, {})
        query.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_collection(self) -> None:
        client, _ = _client()
        with pytest.raises(UnknownCollectionError):
            await SupabaseDatastore(client).select("auth_users")

    @pytest.mark.asyncio
    async def test_backend_error_wrapped(self) -> None:
        client, query = _client()
        query.execute.side_effect = RuntimeError("permission denied for table leads")
        with pytest.raises(DatastoreError, match="permission denied"):
            await SupabaseDatastore(client).select(LEADS)


class TestSupabaseAuth:
    @pytest.mark.asyncio
    async def test_sign_in(self) -> None:
        client, _ = _client()
        client.auth.sign_in_with_password.return_value = SimpleNamespace(session=_raw_session())
        auth = SupabaseAuth(client)
        events: list[AuthEvent] = []
        auth.on_auth_state_change(lambda e, s: events.append(e))

        session = await auth.sign_in(" Ana@Imob.com.br", "segredo1")

        assert session.user.id == "u1"
        assert session.access_token == "jwt-token"
        client.auth.sign_in_with_password.assert_called_once_with(
            {"email": "ana@imob.com.br", "password": "segredo1"}
        )
        assert events == [AuthEvent.SIGNED_IN]

    @pytest.mark.asyncio
    async def test_sign_in_rejected(self) -> None:
        client, _ = _client()
        client.auth.sign_in_with_password.side_effect = RuntimeError("Invalid login credentials")
        with pytest.raises(InvalidCredentialsError):
            await SupabaseAuth(client).sign_in("ana@imob.com.br", "errada")

    @pytest.mark.asyncio
    async def test_sign_up_existing_user(self) -> None:
        client, _ = _client()
        client.auth.sign_up.side_effect = RuntimeError("User already registered")
        with pytest.raises(UserAlreadyExistsError):
            await SupabaseAuth(client).sign_up("ana@imob.com.br", "segredo1")

    @pytest.mark.asyncio
    async def test_sign_up_pending_confirmation(self) -> None:
        client, _ = _client()
        client.auth.sign_up.return_value = SimpleNamespace(session=None)
        with pytest.raises(AuthError, match="Confirme seu e-mail"):
            await SupabaseAuth(client).sign_up("ana@imob.com.br", "segredo1")

    @pytest.mark.asyncio
    async def test_sign_out_emits_when_session_existed(self) -> None:
        client, _ = _client()
        client.auth.get_session.return_value = _raw_session()
        auth = SupabaseAuth(client)
        events: list[AuthEvent] = []
        auth.on_auth_state_change(lambda e, s: events.append(e))

        await auth.sign_out()

        client.auth.sign_out.assert_called_once()
        assert events == [AuthEvent.SIGNED_OUT]

    @pytest.mark.asyncio
    async def test_get_session_none(self) -> None:
        client, _ = _client()
        client.auth.get_session.return_value = None
        assert await SupabaseAuth(client).get_session() is None


class TestCreateClient:
    def test_requires_url_and_key(self, clean_env: None) -> None:
        with pytest.raises(ConfigError):
            create_supabase_client(Settings(supabase_url="https://x.supabase.co"))
