"""Tests for the snapshot hub."""

import asyncio
import uuid

import pytest

from app.domains.issues.entities import Issue
from app.domains.issues.snapshot import SnapshotHub


def make_issue(title: str) -> Issue:
    return Issue(uuid=uuid.uuid4(), title=title, created_by="alice@example.com")


class TestSnapshotHub:
    def test_starts_empty(self, hub: SnapshotHub) -> None:
        assert hub.issues == ()
        assert hub.version == 0

    async def test_publish_replaces_snapshot(self, hub: SnapshotHub) -> None:
        first = [make_issue("one"), make_issue("two")]
        second = [make_issue("three")]

        assert await hub.publish(first) == 1
        assert await hub.publish(second) == 2

        assert hub.issues == tuple(second)
        assert hub.version == 2

    async def test_publish_accepts_empty_collection(self, hub: SnapshotHub) -> None:
        await hub.publish([make_issue("one")])
        await hub.publish([])

        assert hub.issues == ()

    async def test_subscriber_receives_full_snapshot(self, hub: SnapshotHub) -> None:
        received = []

        async def on_snapshot(issues, version):
            received.append((issues, version))

        hub.subscribe(on_snapshot)
        issues = [make_issue("one")]
        await hub.publish(issues)

        assert received == [(tuple(issues), 1)]

    def test_only_one_subscription(self, hub: SnapshotHub) -> None:
        async def on_snapshot(issues, version):
            pass

        hub.subscribe(on_snapshot)

        with pytest.raises(RuntimeError):
            hub.subscribe(on_snapshot)

    async def test_unsubscribe(self, hub: SnapshotHub) -> None:
        received = []

        async def on_snapshot(issues, version):
            received.append(version)

        unsubscribe = hub.subscribe(on_snapshot)
        unsubscribe()
        await hub.publish([])

        assert received == []
        hub.subscribe(on_snapshot)

    async def test_subscriber_failure_does_not_fail_publish(self, hub: SnapshotHub) -> None:
        async def on_snapshot(issues, version):
            raise RuntimeError("client went away")

        hub.subscribe(on_snapshot)

        assert await hub.publish([make_issue("one")]) == 1
        assert len(hub.issues) == 1

    async def test_concurrent_refreshes_publish_latest_collection(self, hub: SnapshotHub) -> None:
        store = [make_issue("first")]

        async def slow_load():
            loaded = list(store)
            await asyncio.sleep(0.05)
            return loaded

        async def fast_load():
            return list(store)

        slow = asyncio.create_task(hub.refresh(slow_load))
        await asyncio.sleep(0)
        store.append(make_issue("second"))
        fast = asyncio.create_task(hub.refresh(fast_load))

        await asyncio.gather(slow, fast)

        assert hub.version == 2
        assert hub.issues == tuple(store)
