"""
Live Sessions

One LiveSession per connected client. The session owns its view, applies
commands from a single inbox one at a time (user events and timer ticks
alike) and pushes the resulting updates to a transport.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional

from ..core.entity import Entity, nest_signals

logger = logging.getLogger(__name__)


class SessionClosedError(RuntimeError):
    """Raised when a command is dispatched to a session that has been closed."""


@dataclass
class Command:
    """An inbound event for a view: method name, arguments and client signal values."""
    name: str
    kwargs: Dict[str, Any] = field(default_factory=dict)
    signals: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ViewUpdate:
    """Outbound message: changed signals (namespaced) and fragments to merge."""
    signals: Dict[str, Any] = field(default_factory=dict)
    fragments: List[Any] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.signals and not self.fragments


def apply_command(view: Entity, command: Command) -> ViewUpdate:
    """Run one command against a view and return what changed."""
    if command.signals:
        view.sync_from_client(command.signals)

    before = view.signal_values()
    result = getattr(view, command.name)(**command.kwargs)
    after = view.signal_values()

    changed = {k: v for k, v in after.items() if before.get(k) != v}
    return ViewUpdate(signals=nest_signals(view.namespace, changed) if changed else {},
                      fragments=[result] if result is not None else [])


def full_state(view: Entity) -> ViewUpdate:
    """Every signal and fragment of the view, sent when a connection opens."""
    return ViewUpdate(signals=view.signals, fragments=list(view.fragments()))


class Transport(ABC):
    """Where a session pushes its updates."""

    @abstractmethod
    async def send(self, update: ViewUpdate) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        pass


class QueueTransport(Transport):
    """Transport backed by an asyncio queue, consumed by the SSE response."""

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, update: ViewUpdate) -> None:
        if self._closed:
            logger.debug("Dropping update sent to a closed transport")
            return
        await self._queue.put(update)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(None)

    async def get(self) -> Optional[ViewUpdate]:
        return await self._queue.get()

    async def updates(self) -> AsyncIterator[ViewUpdate]:
        """Yield updates until the transport is closed."""
        while True:
            update = await self._queue.get()
            if update is None:
                break
            yield update


class PeriodicTimer:
    """Call an async callback every ``interval`` seconds until cancelled."""

    def __init__(self, interval: float, callback: Callable[[], Awaitable[None]]):
        self.interval = interval
        self.callback = callback
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop())

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.callback()

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None


class LiveSession:
    """
    Sequential actor owning one connected view.

    ``dispatch`` enqueues a command and waits for its update. The periodic
    tick goes through the same inbox, so it never runs concurrently with a
    user event.
    """

    def __init__(self, view: Entity, transport: Transport, tick_interval: float = 5.0):
        self.view = view
        self.transport = transport
        self._inbox: asyncio.Queue = asyncio.Queue()
        self._worker: Optional[asyncio.Task] = None
        self._closed = False
        self._timer: Optional[PeriodicTimer] = None
        if view.is_live() and callable(getattr(view, "tick", None)):
            self._timer = PeriodicTimer(tick_interval, self._enqueue_tick)

    @property
    def id(self) -> str:
        return self.view.id

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def timer(self) -> Optional[PeriodicTimer]:
        return self._timer

    async def start(self) -> None:
        """Connect the view, send its full state and start processing commands."""
        if self._closed:
            raise SessionClosedError(f"Session {self.id} is closed")
        self.view.connect()
        await self.transport.send(full_state(self.view))
        if self._timer:
            self._timer.start()
        self._worker = asyncio.get_running_loop().create_task(self._run())
        logger.info(f"Live session opened for {self.view.__class__.__name__}:{self.id}")

    async def _enqueue_tick(self) -> None:
        await self._inbox.put((Command("tick"), None))

    async def dispatch(self, command: Command) -> ViewUpdate:
        """Queue a command and wait until the session has applied it."""
        if self._closed:
            raise SessionClosedError(f"Session {self.id} is closed")
        future = asyncio.get_running_loop().create_future()
        await self._inbox.put((command, future))
        return await future

    async def _run(self) -> None:
        while True:
            command, future = await self._inbox.get()
            try:
                update = apply_command(self.view, command)
                if not update.empty:
                    await self.transport.send(update)
            except asyncio.CancelledError:
                if future is not None and not future.done():
                    future.set_exception(SessionClosedError(f"Session {self.id} closed while handling '{command.name}'"))
                raise
            except Exception as exc:
                logger.exception(f"Session {self.id} failed while handling '{command.name}'")
                if future is not None and not future.done():
                    future.set_exception(exc)
                self.close()
                return
            if command.name == "tick":
                logger.debug(f"Session {self.id} ticked")
            if future is not None and not future.done():
                future.set_result(update)

    def _drain(self) -> None:
        while not self._inbox.empty():
            command, future = self._inbox.get_nowait()
            if future is not None and not future.done():
                future.set_exception(SessionClosedError(f"Session {self.id} closed before '{command.name}' ran"))

    def close(self) -> None:
        """Cancel the timer and the worker, disconnect the view and close the transport."""
        if self._closed:
            return
        self._closed = True
        if self._timer:
            self._timer.cancel()
        if self._worker is not None and self._worker is not asyncio.current_task():
            self._worker.cancel()
        self._worker = None
        self._drain()
        self.view.disconnect()
        self.transport.close()
        logger.info(f"Live session closed for {self.view.__class__.__name__}:{self.id}")


class SessionRegistry:
    """Live sessions by view id. At most one session per view."""

    def __init__(self):
        self._sessions: Dict[str, LiveSession] = {}

    def attach(self, session: LiveSession) -> None:
        previous = self._sessions.get(session.id)
        if previous is not None and previous is not session:
            logger.info(f"Replacing live session for view {session.id}")
            previous.close()
        self._sessions[session.id] = session

    def get(self, view_id: str) -> Optional[LiveSession]:
        session = self._sessions.get(view_id)
        if session is not None and session.closed:
            return None
        return session

    def detach(self, session: LiveSession) -> None:
        if self._sessions.get(session.id) is session:
            del self._sessions[session.id]

    def close_all(self) -> None:
        for session in list(self._sessions.values()):
            session.close()
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)
