"""Unit tests for NotificationHub."""

import asyncio

import pytest

from domain.entities.hub import HubMessage, TaskEvents, user_group
from domain.services.notification_hub import NotificationHub


class FailingObserver:
    def __init__(self) -> None:
        self.attempts = 0
        self.closed = False

    async def send(self, message: HubMessage) -> None:
        self.attempts += 1
        raise ConnectionResetError("socket closed")

    async def close(self) -> None:
        self.closed = True


class BlockedObserver:
    """Never finishes a send until released."""

    def __init__(self) -> None:
        self.release = asyncio.Event()
        self.closed = False

    async def send(self, message: HubMessage) -> None:
        await self.release.wait()

    async def close(self) -> None:
        self.closed = True


class UnclosableObserver(FailingObserver):
    """Send fails and so does tearing the transport down."""

    async def close(self) -> None:
        raise RuntimeError("already closed")


class TestBroadcast:
    @pytest.mark.asyncio
    async def test_reaches_every_observer(self, hub: NotificationHub, make_recorder):
        first, second = make_recorder(), make_recorder()
        await hub.connect(first)
        await hub.connect(second)

        recipients = await hub.broadcast_all(TaskEvents.TASK_DELETED, 42)
        await hub.wait_idle()

        assert recipients == 2
        assert first.messages == [HubMessage(TaskEvents.TASK_DELETED, (42,))]
        assert second.messages == first.messages

    @pytest.mark.asyncio
    async def test_preserves_submission_order_per_observer(
        self, hub: NotificationHub, make_recorder
    ):
        observer = make_recorder()
        await hub.connect(observer)

        for i in range(10):
            await hub.broadcast_all(TaskEvents.TASK_STATUS_CHANGED, i)
        await hub.wait_idle()

        assert [m.args[0] for m in observer.messages] == list(range(10))

    @pytest.mark.asyncio
    async def test_no_observers(self, hub: NotificationHub):
        assert await hub.broadcast_all(TaskEvents.TASK_CREATED, {}) == 0

    @pytest.mark.asyncio
    async def test_failing_observer_is_dropped_without_affecting_others(
        self, hub: NotificationHub, make_recorder
    ):
        healthy = make_recorder()
        broken = FailingObserver()
        await hub.connect(healthy)
        broken_id = await hub.connect(broken)

        await hub.broadcast_all(TaskEvents.TASK_CREATED, "a")
        await hub.wait_idle()
        recipients = await hub.broadcast_all(TaskEvents.TASK_CREATED, "b")
        await hub.wait_idle()

        assert healthy.events == [TaskEvents.TASK_CREATED, TaskEvents.TASK_CREATED]
        assert broken.attempts == 1
        assert broken.closed
        assert not healthy.closed
        assert not hub.is_connected(broken_id)
        assert recipients == 1

    @pytest.mark.asyncio
    async def test_slow_observer_times_out(self, make_recorder):
        hub = NotificationHub(send_timeout=0.05)
        slow = BlockedObserver()
        fast = make_recorder()
        slow_id = await hub.connect(slow)
        await hub.connect(fast)

        await hub.broadcast_all(TaskEvents.TASK_UPDATED, 1)
        await hub.wait_idle()

        assert not hub.is_connected(slow_id)
        assert slow.closed
        assert fast.events == [TaskEvents.TASK_UPDATED]
        await hub.close()

    @pytest.mark.asyncio
    async def test_overflowing_observer_is_dropped(self, make_recorder):
        hub = NotificationHub(max_pending=2, send_timeout=5.0)
        stuck = BlockedObserver()
        healthy = make_recorder()
        stuck_id = await hub.connect(stuck)
        await hub.connect(healthy)

        # One message in flight plus two queued fills the stuck outbox
        for i in range(5):
            await hub.broadcast_all(TaskEvents.TASK_UPDATED, i)
            await asyncio.sleep(0.01)

        assert not hub.is_connected(stuck_id)
        assert stuck.closed
        await hub.wait_idle()
        assert len(healthy.messages) == 5
        await hub.close()

    @pytest.mark.asyncio
    async def test_observer_that_fails_to_close_is_still_dropped(
        self, hub: NotificationHub, make_recorder
    ):
        broken = UnclosableObserver()
        healthy = make_recorder()
        broken_id = await hub.connect(broken)
        await hub.connect(healthy)

        await hub.broadcast_all(TaskEvents.TASK_CREATED, 1)
        await hub.wait_idle()

        assert not hub.is_connected(broken_id)
        assert await hub.broadcast_all(TaskEvents.TASK_CREATED, 2) == 1


class TestGroups:
    @pytest.mark.asyncio
    async def test_group_delivery_reaches_members_only(
        self, hub: NotificationHub, make_recorder
    ):
        member, outsider = make_recorder(), make_recorder()
        member_id = await hub.connect(member)
        await hub.connect(outsider)
        await hub.join_group(member_id, user_group(7))

        recipients = await hub.broadcast_to_group(
            user_group(7), TaskEvents.RECEIVE_NOTIFICATION, "hello"
        )
        await hub.wait_idle()

        assert recipients == 1
        assert member.events == [TaskEvents.RECEIVE_NOTIFICATION]
        assert outsider.messages == []

    @pytest.mark.asyncio
    async def test_join_and_leave_are_idempotent(self, hub: NotificationHub, make_recorder):
        connection_id = await hub.connect(make_recorder())

        assert await hub.join_group(connection_id, "team") is True
        assert await hub.join_group(connection_id, "team") is True
        assert hub.members("team") == {connection_id}
        assert await hub.broadcast_to_group("team", TaskEvents.RECEIVE_MESSAGE, "x") == 1

        await hub.leave_group(connection_id, "team")
        await hub.leave_group(connection_id, "team")
        await hub.leave_group(connection_id, "never-joined")
        assert hub.members("team") == set()

    @pytest.mark.asyncio
    async def test_disconnect_removes_memberships(self, hub: NotificationHub, make_recorder):
        connection_id = await hub.connect(make_recorder())
        await hub.join_group(connection_id, "team")

        assert await hub.disconnect(connection_id) is True
        assert await hub.disconnect(connection_id) is False
        assert hub.groups_of(connection_id) == set()
        assert await hub.broadcast_to_group("team", TaskEvents.RECEIVE_MESSAGE, "x") == 0

    @pytest.mark.asyncio
    async def test_join_after_disconnect_is_refused(self, hub: NotificationHub, make_recorder):
        connection_id = await hub.connect(make_recorder())
        await hub.disconnect(connection_id)

        assert await hub.join_group(connection_id, user_group(7)) is False
        await hub.disconnect(connection_id)

        assert hub.members(user_group(7)) == set()

    @pytest.mark.asyncio
    async def test_join_after_drop_is_refused(self, hub: NotificationHub):
        broken = FailingObserver()
        connection_id = await hub.connect(broken)
        await hub.broadcast_all(TaskEvents.TASK_CREATED, 1)
        await hub.wait_idle()

        assert await hub.join_group(connection_id, "team") is False
        assert hub.members("team") == set()


class TestConnectionLifecycle:
    @pytest.mark.asyncio
    async def test_reconnect_with_same_id_keeps_groups(
        self, hub: NotificationHub, make_recorder
    ):
        old, new = make_recorder(), make_recorder()
        connection_id = await hub.connect(old, connection_id="abc")
        await hub.join_group(connection_id, "team")

        assert await hub.connect(new, connection_id="abc") == "abc"
        await hub.broadcast_to_group("team", TaskEvents.RECEIVE_MESSAGE, "after")
        await hub.wait_idle()

        assert hub.connection_count == 1
        assert old.messages == []
        assert new.events == [TaskEvents.RECEIVE_MESSAGE]

    @pytest.mark.asyncio
    async def test_send_to_connection(self, hub: NotificationHub, make_recorder):
        target, other = make_recorder(), make_recorder()
        target_id = await hub.connect(target)
        await hub.connect(other)

        assert await hub.send_to_connection(target_id, TaskEvents.ERROR, "bad frame") is True
        assert await hub.send_to_connection("missing", TaskEvents.ERROR, "x") is False
        await hub.wait_idle()

        assert target.events == [TaskEvents.ERROR]
        assert other.messages == []

    @pytest.mark.asyncio
    async def test_close_disconnects_everyone(self, make_recorder):
        hub = NotificationHub()
        await hub.connect(make_recorder())
        await hub.connect(BlockedObserver())
        await hub.broadcast_all(TaskEvents.TASK_CREATED, 1)

        await hub.close()

        assert hub.connection_count == 0
        assert await hub.broadcast_all(TaskEvents.TASK_CREATED, 2) == 0

    @pytest.mark.asyncio
    async def test_concurrent_broadcasts_do_not_interleave_per_observer(
        self, hub: NotificationHub, make_recorder
    ):
        observers = [make_recorder() for _ in range(5)]
        for observer in observers:
            await hub.connect(observer)

        await asyncio.gather(
            *(hub.broadcast_all(TaskEvents.TASK_STATUS_CHANGED, i) for i in range(20))
        )
        await hub.wait_idle()

        expected = [m.args for m in observers[0].messages]
        assert len(expected) == 20
        for observer in observers[1:]:
            assert [m.args for m in observer.messages] == expected


class TestWireFormat:
    def test_to_wire(self):
        message = HubMessage(TaskEvents.TASK_STATUS_CHANGED, (3, "Completed"))

        assert message.to_wire() == {"event": "taskStatusChanged", "args": [3, "Completed"]}
