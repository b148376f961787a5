"""Real-time fan-out of task changes to connected observers."""

import asyncio
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Protocol
from uuid import uuid4

import structlog

from domain.entities.hub import ConnectionState, HubMessage

logger = structlog.get_logger()

DEFAULT_MAX_PENDING = 256
DEFAULT_SEND_TIMEOUT_SECONDS = 10.0


class IObserver(Protocol):
    """Delivery handle for one connected client."""

    async def send(self, message: HubMessage) -> None:
        """Push one message. Raising means the connection is gone."""
        ...

    async def close(self) -> None:
        """Tear down the transport so the client knows to reconnect."""
        ...


@dataclass(eq=False)
class _Connection:
    """Registry entry: one observer with its own ordered outbox."""

    connection_id: str
    observer: IObserver
    outbox: asyncio.Queue[HubMessage]
    state: ConnectionState = ConnectionState.CONNECTING
    worker: asyncio.Task[None] | None = field(default=None, repr=False)

    def retire(self) -> None:
        """Mark disconnected and stop the delivery worker."""
        self.state = ConnectionState.DISCONNECTED
        if self.worker and self.worker is not asyncio.current_task():
            self.worker.cancel()

    async def idle(self) -> None:
        """Wait until the outbox is drained or the worker has stopped."""
        if self.worker is None or self.worker.done():
            return
        drained = asyncio.ensure_future(self.outbox.join())
        try:
            await asyncio.wait({drained, self.worker}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            drained.cancel()


class NotificationHub:
    """Registry of connected observers with best-effort broadcast.

    Each connection owns a bounded FIFO outbox drained by one delivery task,
    so a given observer receives events in the order they were submitted and
    broadcasting never waits on the network. An observer whose send fails,
    times out, or whose outbox overflows is deregistered and closed; nothing
    is raised back to the caller.
    """

    def __init__(
        self,
        max_pending: int = DEFAULT_MAX_PENDING,
        send_timeout: float = DEFAULT_SEND_TIMEOUT_SECONDS,
    ) -> None:
        self._max_pending = max_pending
        self._send_timeout = send_timeout
        self._connections: dict[str, _Connection] = {}
        self._groups: defaultdict[str, set[str]] = defaultdict(set)
        self._lock = asyncio.Lock()

    @property
    def connection_count(self) -> int:
        """Number of currently connected observers."""
        return sum(
            1 for c in self._connections.values() if c.state is ConnectionState.CONNECTED
        )

    def is_connected(self, connection_id: str) -> bool:
        conn = self._connections.get(connection_id)
        return conn is not None and conn.state is ConnectionState.CONNECTED

    def groups_of(self, connection_id: str) -> set[str]:
        """Groups a connection currently belongs to."""
        return {group for group, members in self._groups.items() if connection_id in members}

    def members(self, group: str) -> set[str]:
        """Connection ids joined to a group."""
        return set(self._groups.get(group, ()))

    # --- Connection lifecycle ---

    async def connect(self, observer: IObserver, connection_id: str | None = None) -> str:
        """Register an observer and start delivering to it.

        Reusing a live connection_id (a transport-level reconnect) swaps the
        delivery handle and keeps the group memberships. Nothing is replayed:
        the client re-reads a snapshot before trusting later pushes.
        """
        connection_id = connection_id or uuid4().hex
        conn = _Connection(
            connection_id=connection_id,
            observer=observer,
            outbox=asyncio.Queue(maxsize=self._max_pending),
        )

        async with self._lock:
            previous = self._connections.get(connection_id)
            conn.worker = asyncio.create_task(
                self._deliver(conn), name=f"hub-delivery-{connection_id}"
            )
            conn.state = ConnectionState.CONNECTED
            self._connections[connection_id] = conn

        if previous is not None:
            previous.retire()
            logger.info("hub_observer_reconnected", connection_id=connection_id)
        else:
            logger.info(
                "hub_observer_connected",
                connection_id=connection_id,
                connections=self.connection_count,
            )
        return connection_id

    async def disconnect(self, connection_id: str) -> bool:
        """Deregister a connection and drop its group memberships.

        Returns False if it was not registered (already gone is fine).
        """
        async with self._lock:
            conn = self._connections.get(connection_id)
            if conn is None:
                return False
            self._remove_locked(conn)

        conn.retire()
        logger.info(
            "hub_observer_disconnected",
            connection_id=connection_id,
            connections=self.connection_count,
        )
        return True

    # --- Groups ---

    async def join_group(self, connection_id: str, group: str) -> bool:
        """Add a connection to a group. Joining twice is a no-op.

        Returns False if the connection is not registered.
        """
        async with self._lock:
            if connection_id not in self._connections:
                return False
            self._groups[group].add(connection_id)
        return True

    async def leave_group(self, connection_id: str, group: str) -> None:
        """Remove a connection from a group. Leaving twice is a no-op."""
        async with self._lock:
            members = self._groups.get(group)
            if members is None:
                return
            members.discard(connection_id)
            if not members:
                del self._groups[group]

    # --- Delivery ---

    async def broadcast_all(self, event: str, *args: Any) -> int:
        """Queue an event for every connected observer.

        Returns the number of observers it was queued for.
        """
        async with self._lock:
            targets = list(self._connections.values())
        return await self._enqueue(targets, HubMessage(event=event, args=args))

    async def broadcast_to_group(self, group: str, event: str, *args: Any) -> int:
        """Queue an event for the observers joined to a group."""
        async with self._lock:
            members = self._groups.get(group, set())
            targets = [self._connections[cid] for cid in members if cid in self._connections]
        return await self._enqueue(targets, HubMessage(event=event, args=args))

    async def send_to_connection(self, connection_id: str, event: str, *args: Any) -> bool:
        """Queue an event for one connection."""
        async with self._lock:
            conn = self._connections.get(connection_id)
        if conn is None:
            return False
        return await self._enqueue([conn], HubMessage(event=event, args=args)) == 1

    async def wait_idle(self) -> None:
        """Wait until every queued message has been handed to its observer."""
        async with self._lock:
            targets = list(self._connections.values())
        await asyncio.gather(*(conn.idle() for conn in targets))

    async def close(self) -> None:
        """Disconnect everyone (application shutdown)."""
        async with self._lock:
            targets = list(self._connections.values())
            self._connections.clear()
            self._groups.clear()
        for conn in targets:
            conn.retire()
        workers = [conn.worker for conn in targets if conn.worker is not None]
        await asyncio.gather(*workers, return_exceptions=True)

    async def _enqueue(self, targets: list[_Connection], message: HubMessage) -> int:
        delivered = 0
        overflowed: list[_Connection] = []
        for conn in targets:
            if conn.state is not ConnectionState.CONNECTED:
                continue
            try:
                conn.outbox.put_nowait(message)
            except asyncio.QueueFull:
                overflowed.append(conn)
                continue
            delivered += 1

        for conn in overflowed:
            logger.warning(
                "hub_observer_overflow",
                connection_id=conn.connection_id,
                hub_event=message.event,
                pending=conn.outbox.qsize(),
            )
            await self._drop(conn)
        return delivered

    async def _deliver(self, conn: _Connection) -> None:
        """Drain one connection's outbox in order until it is retired."""
        while True:
            message = await conn.outbox.get()
            try:
                await asyncio.wait_for(conn.observer.send(message), timeout=self._send_timeout)
            except asyncio.CancelledError:
                conn.outbox.task_done()
                raise
            except Exception as exc:
                logger.warning(
                    "hub_delivery_failed",
                    connection_id=conn.connection_id,
                    hub_event=message.event,
                    error=str(exc) or type(exc).__name__,
                )
                # Drained only once deregistered, so wait_idle() sees the drop
                await self._drop(conn)
                conn.outbox.task_done()
                return
            conn.outbox.task_done()

    async def _drop(self, conn: _Connection) -> None:
        """Deregister a broken connection unless it was already replaced."""
        async with self._lock:
            if self._connections.get(conn.connection_id) is conn:
                self._remove_locked(conn)
        conn.retire()
        try:
            await asyncio.wait_for(conn.observer.close(), timeout=self._send_timeout)
        except Exception as exc:
            logger.info(
                "hub_observer_close_failed",
                connection_id=conn.connection_id,
                error=str(exc) or type(exc).__name__,
            )

    def _remove_locked(self, conn: _Connection) -> None:
        del self._connections[conn.connection_id]
        for group in [g for g, members in self._groups.items() if conn.connection_id in members]:
            self._groups[group].discard(conn.connection_id)
            if not self._groups[group]:
                del self._groups[group]
