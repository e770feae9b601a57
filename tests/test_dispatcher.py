"""
Dispatcher Tests

Argument resolution, routing through live sessions, the connect stream and
SSE rendering.
"""

import pytest
from starlette.datastructures import QueryParams
from starlette.requests import Request

from guestbook.app.dispatcher import Dispatcher, resolve_event_args
from guestbook.app.session import Command, LiveSession, QueueTransport, ViewUpdate
from guestbook.core import DatastarPayload, GuestEntry
from guestbook.entities import GuestBook
from guestbook.persistence import MemoryRepo


def test_resolve_args_priority():
    info = GuestBook.events()["submit"]
    kwargs = resolve_event_args(info, QueryParams("name=FromQuery"), {"name": "FromSignals", "message": "m"})
    assert kwargs == {"name": "FromQuery", "message": "m"}

    assert resolve_event_args(info, QueryParams(""), {}) == {}, "Defaults are left to the method"


def test_discover_events(context):
    dispatcher = Dispatcher(context)
    assert set(dispatcher.discover_events(GuestBook)) == {"submit", "clear"}
    with pytest.raises(NotImplementedError):
        dispatcher.include_entity(None, GuestBook)


def test_update_to_sse(context):
    dispatcher = Dispatcher(context)
    events = list(dispatcher.update_to_sse(ViewUpdate(signals={"GuestBook": {"name": ""}},
                                                      fragments=["<div id='x'>hi</div>", None])))
    assert len(events) == 2
    assert "datastar-merge-signals" in events[0]
    assert "datastar-merge-fragments" in events[1]


@pytest.mark.asyncio
async def test_call_event_goes_through_live_session(context):
    view = context.track(GuestBook.from_context(context))
    dispatcher = Dispatcher(context)

    update, via_session = await dispatcher.call_event(view, Command("submit", {"name": "A", "message": "a"}))
    assert not via_session
    assert update.fragments

    session = LiveSession(view, QueueTransport())
    context.sessions.attach(session)
    await session.start()
    try:
        update, via_session = await dispatcher.call_event(view, Command("submit", {"name": "B", "message": "b"}))
        assert via_session
        assert [e.name for e in view.entries] == ["B", "A"]
    finally:
        session.close()

    update, via_session = await dispatcher.call_event(view, Command("clear"))
    assert not via_session, "Closed sessions fall back to direct application"
    assert view.entries == []


def test_payload_dig():
    payload = DatastarPayload({"GuestComponent": {"w1": {"name": "Ann"}}, "flat": 1})
    assert payload.dig("GuestComponent.w1") == {"name": "Ann"}
    assert payload.dig("GuestComponent.missing") == {}
    assert payload.dig("flat") == {}, "Non-dict leaves are not namespaces"
    assert payload.raw_data["flat"] == 1


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock(context):
    clock = FakeClock()
    context.views = MemoryRepo(clock=clock)
    return clock


def connect_request(view_id: str) -> Request:
    return Request({"type": "http", "method": "GET", "path": "/guestbook/connect",
                    "query_string": f"id={view_id}".encode(), "headers": []})


@pytest.mark.asyncio
async def test_connect_stream_reuses_view_and_cleans_up(context, clock):
    view = context.track(GuestBook.from_context(context), ttl=60)
    handler = Dispatcher(context)._create_connect_handler(GuestBook)

    response = await handler(connect_request(view.id))
    session = context.sessions.get(view.id)
    assert session is not None and session.view is view, "The registered view is reused"
    assert view.connected
    assert session.timer.running

    clock.now += 120
    assert context.views.load_entity_sync(view.id) is view, "A connected view is kept without a TTL"

    first = await response.body_iterator.__anext__()
    assert "datastar-merge-signals" in first
    assert str(view.visitor_count) in first

    await response.body_iterator.aclose()

    assert context.sessions.get(view.id) is None
    assert len(context.sessions) == 0
    assert not session.timer.running
    assert not view.connected
    assert context.views.load_entity_sync(view.id) is None, "The view is forgotten on disconnect"
    print("✓ Connect stream tears down session, timer and view")


@pytest.mark.asyncio
async def test_connect_remounts_expired_view(context, clock, store):
    expired = context.track(GuestBook.from_context(context), ttl=10)
    store.insert(GuestEntry.candidate(store.next_id(), "Late", "arrival"))
    clock.now += 60

    handler = Dispatcher(context)._create_connect_handler(GuestBook)
    response = await handler(connect_request(expired.id))
    try:
        session = context.sessions.get(expired.id)
        view = session.view
        assert view is not expired, "An expired view is mounted afresh"
        assert view.id == expired.id
        assert [e.name for e in view.entries] == ["Late"]
        assert context.views.load_entity_sync(expired.id) is view

        first = await response.body_iterator.__anext__()
        assert "datastar-merge-signals" in first
    finally:
        await response.body_iterator.aclose()

    assert context.sessions.get(expired.id) is None
    assert context.views.load_entity_sync(expired.id) is None
