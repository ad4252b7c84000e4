"""Unit tests for lazy, paginated collection listing."""

import json
import logging
from types import SimpleNamespace

import pytest
from google.api_core import exceptions as core_exceptions

from tests.conftest import User
from tiny_firestore_odm.exceptions import DeserializationError, TransportError
from tiny_firestore_odm.models import NamedDocument


def _user(i: int) -> User:
    return User(name=f"user{i}", email=f"user{i}@email", id=i)


async def _populate(users, count: int):
    for i in range(count):
        await users.upsert(_user(i), f"u{i}")


class TestListResponse:
    @pytest.mark.asyncio
    async def test_lists_every_document(self, users) -> None:
        await _populate(users, 5)

        documents = [document async for document in users.list()]

        assert all(isinstance(document, NamedDocument) for document in documents)
        assert {document.key: document.value for document in documents} == {
            f"u{i}": _user(i) for i in range(5)
        }
        assert {document.name for document in documents} == {
            users.name.document(f"u{i}") for i in range(5)
        }

    @pytest.mark.asyncio
    async def test_empty_collection(self, users, fake_client) -> None:
        assert await users.list().collect() == []
        assert fake_client.count("list_documents") == 1

    @pytest.mark.asyncio
    async def test_nothing_is_fetched_until_iteration(self, users, fake_client) -> None:
        await _populate(users, 3)

        listing = users.list()

        assert fake_client.count("list_documents") == 0
        await listing.__anext__()
        assert fake_client.count("list_documents") == 1

    @pytest.mark.asyncio
    async def test_pages_are_fetched_on_demand(self, users, fake_client) -> None:
        await _populate(users, 5)
        listing = users.list().with_page_size(2)

        await listing.__anext__()
        await listing.__anext__()
        assert fake_client.count("list_documents") == 1

        await listing.__anext__()
        assert fake_client.count("list_documents") == 2

        remaining = await listing.collect()
        assert len(remaining) == 2
        assert fake_client.count("list_documents") == 3
        assert listing.depleted

    @pytest.mark.asyncio
    async def test_page_token_is_passed_along(self, users, fake_client) -> None:
        await _populate(users, 3)

        await users.list().with_page_size(2).with_order_by("__name__").collect()

        requests = [call[1] for call in fake_client.calls if call[0] == "list_documents"]
        assert [request.page_token for request in requests] == ["", "2"]
        assert all(request.page_size == 2 for request in requests)
        assert all(request.order_by == "__name__" for request in requests)
        assert requests[0].collection_id == "users"

    @pytest.mark.asyncio
    async def test_not_restartable(self, users) -> None:
        await _populate(users, 2)
        listing = users.list()

        assert len(await listing.collect()) == 2
        assert await listing.collect() == []
        assert len(await users.list().collect()) == 2

    @pytest.mark.asyncio
    async def test_empty_page_with_continuation_token(self, users, fake_client, monkeypatch) -> None:
        pages = iter(
            [
                SimpleNamespace(documents=[], next_page_token="next"),
                SimpleNamespace(documents=[], next_page_token=""),
            ]
        )

        async def list_documents(request, metadata=()):
            return next(pages)

        monkeypatch.setattr(fake_client, "list_documents", list_documents)

        assert await users.list().collect() == []

    @pytest.mark.asyncio
    async def test_empty_page_with_continuation_token_is_logged(
        self, users, fake_client, monkeypatch, caplog
    ) -> None:
        pages = iter(
            [
                SimpleNamespace(documents=[], next_page_token="next"),
                SimpleNamespace(documents=[], next_page_token=""),
            ]
        )

        async def list_documents(request, metadata=()):
            return next(pages)

        monkeypatch.setattr(fake_client, "list_documents", list_documents)

        with caplog.at_level(logging.WARNING):
            await users.list().collect()

        warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert warnings[0].name == "tiny_firestore_odm.firestore.list_response"
        assert json.loads(warnings[0].getMessage())["page_token"] == "next"

    @pytest.mark.asyncio
    async def test_get_page_walks_pages(self, users) -> None:
        await _populate(users, 3)
        listing = users.list().with_page_size(2)

        first = await listing.get_page()
        second = await listing.get_page()
        third = await listing.get_page()

        assert [document.key for document in first] == ["u0", "u1"]
        assert [document.key for document in second] == ["u2"]
        assert third == []

    @pytest.mark.asyncio
    async def test_deserialization_failure_is_raised_at_its_position(
        self, users, fake_client
    ) -> None:
        await _populate(users, 3)
        fake_client.put_raw(users.name.document("u1").name(), {"name": "broken"})
        listing = users.list()

        first = await listing.__anext__()
        assert first.key == "u0"

        with pytest.raises(DeserializationError) as exc_info:
            await listing.__anext__()
        assert exc_info.value.name == users.name.document("u1").name()

        # The failing document is consumed, iteration can carry on past it
        third = await listing.__anext__()
        assert third.key == "u2"
        with pytest.raises(StopAsyncIteration):
            await listing.__anext__()

    @pytest.mark.asyncio
    async def test_async_for_aborts_on_deserialization_failure(self, users, fake_client) -> None:
        await _populate(users, 2)
        fake_client.put_raw(users.name.document("u0").name(), {"name": "broken"})

        with pytest.raises(DeserializationError):
            async for _ in users.list():
                pass

    @pytest.mark.asyncio
    async def test_transport_error(self, users, fake_client) -> None:
        fake_client.fail_with = core_exceptions.DeadlineExceeded("slow")

        with pytest.raises(TransportError):
            await users.list().collect()
