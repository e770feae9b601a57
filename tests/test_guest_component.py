"""
Guest Component Tests

The embeddable variant: host configuration, theming, the smaller cap,
origin stamping and per-instance signal namespaces.
"""

import random

from fastcore.xml import to_xml

from guestbook.entities import GuestBook, GuestComponent
from guestbook.entities.guest_component import THEME_STYLES, theme_variant


def test_defaults(store):
    view = GuestComponent.mount(store, id="c1")
    assert view.host_app == "unknown"
    assert view.theme == "dark"
    assert view.styles == THEME_STYLES["dark"]


def test_theme_variants(store):
    assert GuestComponent.mount(store, id="c1", theme="light").styles == THEME_STYLES["light"]
    assert theme_variant("light") == "light"
    assert theme_variant("dark") == "dark"
    assert theme_variant("solarized") == "dark"
    assert theme_variant(None) == "dark"


def test_display_list_is_capped_at_fifteen(store):
    view = GuestComponent.mount(store, id="c1")
    for i in range(1, 21):
        view.submit(name=f"E{i}", message="hi")
    assert len(view.entries) == 15
    assert [e.name for e in view.entries] == [f"E{i}" for i in range(20, 5, -1)]


def test_submit_stamps_origin_host(store):
    view = GuestComponent.mount(store, id="c1", host_app="dashboard")
    view.submit(name="Ann", message="from the dashboard")
    assert store.list_recent(1)[0].origin_host == "dashboard"

    view.submit(name="", message="ignored")
    assert len(store) == 1
    assert (view.name, view.message) == ("", "")


def test_update_merges_host_config_and_rereads(store):
    view = GuestComponent.mount(store, id="c1")
    GuestBook.mount(store, random.Random(1)).submit(name="Standalone", message="hello")
    assert view.entries == []

    view.update({"hostApp": "portal", "theme": "light"})
    assert view.host_app == "portal"
    assert view.theme == "light"
    assert [e.name for e in view.entries] == ["Standalone"]

    view.update(host_app="console")
    assert view.host_app == "console"
    assert view.theme == "light", "Missing keys keep their current value"


def test_refresh_pulls_latest(store):
    view = GuestComponent.mount(store, id="c1")
    GuestComponent.mount(store, id="c2").submit(name="Other", message="widget")
    view.refresh()
    assert [e.name for e in view.entries] == ["Other"]


def test_clear(store):
    view = GuestComponent.mount(store, id="c1")
    view.submit(name="A", message="a")
    view.clear()
    assert view.entries == []
    assert len(store) == 0


def test_signals_are_namespaced_per_instance(store):
    view = GuestComponent.mount(store, id="widget-1", host_app="dash")
    assert view.namespace == "GuestComponent.widget_1"
    assert view.signals["GuestComponent"]["widget_1"]["host_app"] == "dash"
    assert view.Sname == "$GuestComponent.widget_1.name"
    assert view.action("refresh") == "@post('/guestcomponent/refresh?id=widget-1')"
    assert set(GuestComponent.events()) == {"submit", "clear", "refresh"}
    assert not GuestComponent.is_live()


def test_embed_reuses_registered_instance(context):
    first = GuestComponent.embed(context, "w", host_app="host-a")
    second = GuestComponent.embed(context, "w", theme="light")
    assert first is second
    assert second.host_app == "host-a"
    assert second.theme == "light"
    assert context.views.load_entity_sync("w") is first

    assert GuestComponent.unmount(context, "w")
    assert context.views.load_entity_sync("w") is None


def test_embed_uses_configured_cap(context):
    context.config.guestbook.component_cap = 3
    view = GuestComponent.embed(context, "small")
    for i in range(5):
        view.submit(name=f"G{i}", message="x")
    assert len(view.entries) == 3


def test_render(store):
    view = GuestComponent.mount(store, id="c1", host_app="dashboard", theme="light")
    html = to_xml(view)
    assert "Hosted by: dashboard" in html
    assert "No guests yet. Be the first!" in html
    assert "0 entries" in html
    assert "Clear all" in html
    assert THEME_STYLES["light"]["container"] in html

    view.submit(name="Zoe", message="hi")
    html = to_xml(view.entry_list())
    assert "Zoe" in html
    assert view.entries[0].timestamp.strftime("%H:%M") in html
