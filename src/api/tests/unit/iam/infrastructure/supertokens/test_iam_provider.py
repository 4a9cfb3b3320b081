"""Unit tests for invitation storage in the SuperTokens IAM provider."""

import asyncio
from datetime import UTC, datetime

import pytest

from iam.domain.entities import PendingInvite
from iam.infrastructure.supertokens.iam_provider import SuperTokensIamProvider
from tests.unit.iam.fakes import FakeMetadataStore


class SlowMetadataStore(FakeMetadataStore):
    """Store that yields to the event loop between read and return."""

    async def get(self, key):
        document = await super().get(key)
        await asyncio.sleep(0)
        return document


@pytest.fixture
def store():
    return FakeMetadataStore({"user-2": {"tenants": {"t1": "viewer"}}})


@pytest.fixture
def provider(store):
    return SuperTokensIamProvider(store)


@pytest.fixture
def invite():
    return PendingInvite(
        tenant_id="t9",
        role_name="viewer",
        invited_by="user-1",
        created_at=datetime(2024, 5, 1, tzinfo=UTC),
    )


class TestPendingInvites:
    """Tests for add_pending_invite() and consume_pending_invite()."""

    @pytest.mark.asyncio
    async def test_invite_is_consumed_exactly_once(self, provider, invite):
        await provider.add_pending_invite("user-2", "tok", invite)

        assert await provider.consume_pending_invite("user-2", "tok") == invite
        assert await provider.consume_pending_invite("user-2", "tok") is None

    @pytest.mark.asyncio
    async def test_invites_are_stored_under_their_token(self, provider, store, invite):
        await provider.add_pending_invite("user-2", "tok-a", invite)
        await provider.add_pending_invite("user-2", "tok-b", invite)

        invites = store.documents["user-2"]["pending_invites"]
        assert set(invites) == {"tok-a", "tok-b"}
        assert invites["tok-a"]["tenantId"] == "t9"
        assert store.documents["user-2"]["tenants"] == {"t1": "viewer"}

    @pytest.mark.asyncio
    async def test_consuming_one_token_keeps_others(self, provider, store, invite):
        await provider.add_pending_invite("user-2", "tok-a", invite)
        await provider.add_pending_invite("user-2", "tok-b", invite)

        await provider.consume_pending_invite("user-2", "tok-a")

        assert set(store.documents["user-2"]["pending_invites"]) == {"tok-b"}

    @pytest.mark.asyncio
    async def test_unknown_token(self, provider):
        assert await provider.consume_pending_invite("user-2", "missing") is None

    @pytest.mark.asyncio
    async def test_concurrent_consumes_yield_the_invite_once(self, invite):
        provider = SuperTokensIamProvider(SlowMetadataStore())
        await provider.add_pending_invite("user-2", "tok", invite)

        results = await asyncio.gather(
            provider.consume_pending_invite("user-2", "tok"),
            provider.consume_pending_invite("user-2", "tok"),
        )

        assert sorted(result is not None for result in results) == [False, True]

    @pytest.mark.asyncio
    async def test_concurrent_adds_keep_every_token(self, invite):
        store = SlowMetadataStore()
        provider = SuperTokensIamProvider(store)

        await asyncio.gather(
            provider.add_pending_invite("user-2", "tok-a", invite),
            provider.add_pending_invite("user-2", "tok-b", invite),
        )

        assert set(store.documents["user-2"]["pending_invites"]) == {"tok-a", "tok-b"}
