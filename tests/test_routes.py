"""
HTTP Route Tests

Health check, the guest book page and the generated event routes,
exercised through Starlette's TestClient.
"""

from starlette.testclient import TestClient

from guestbook.entities import GuestBook, GuestComponent

HEALTH_BODY = b'{"status":"healthy","app":"demo_phoenix","type":"phoenix_liveview"}'


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.content == HEALTH_BODY
    assert response.json() == {"status": "healthy", "app": "demo_phoenix", "type": "phoenix_liveview"}


def test_index_renders_and_registers_view(client, app):
    response = client.get("/")
    assert response.status_code == 200
    html = response.text
    assert "Sign the Guest Book" in html
    assert "Clear All" in html
    assert "No guests yet. Be the first to sign!" in html
    assert "visitors" in html
    assert "/guestbook/connect" in html
    assert "deployed via GitOps" in html
    assert len(app.state.context.views) == 1


def test_registered_routes(app):
    assert set(app.state.dispatcher.routes) == {
        "guestbook_submit", "guestbook_clear", "guestbook_connect",
        "guestcomponent_submit", "guestcomponent_clear", "guestcomponent_refresh",
    }


def mount_view(app):
    context = app.state.context
    return context.track(GuestBook.from_context(context))


def test_submit_returns_json_state(client, app):
    view = mount_view(app)
    response = client.post(f"/guestbook/submit?id={view.id}",
                           json={"GuestBook": {"name": "Alice", "message": "Hi!"}},
                           headers={"accept": "application/json"})
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["entity"]["entries"][0]["name"] == "Alice"
    assert data["entity"]["name"] == ""
    assert data["entity"]["message"] == ""

    response = client.post(f"/guestbook/submit?id={view.id}",
                           json={"GuestBook": {"name": "", "message": "Bye"}},
                           headers={"accept": "application/json"})
    entries = response.json()["entity"]["entries"]
    assert [(e["name"], e["message"]) for e in entries] == [("Alice", "Hi!")]


def test_view_id_from_signals(client, app):
    view = mount_view(app)
    response = client.post("/guestbook/submit",
                           json={"GuestBook": {"id": view.id, "name": "Sig", "message": "nals"}},
                           headers={"accept": "application/json"})
    assert response.status_code == 200
    assert response.json()["entity"]["entries"][0]["name"] == "Sig"


def test_datastar_request_gets_sse(client, app):
    view = mount_view(app)
    response = client.post(f"/guestbook/submit?id={view.id}",
                           json={"GuestBook": {"name": "Dana", "message": "Streaming"}},
                           headers={"Datastar-Request": "true"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert "datastar-merge-signals" in response.text
    assert "datastar-merge-fragments" in response.text
    assert "Dana" in response.text


def test_clear_route(client, app, store):
    view = mount_view(app)
    view.submit(name="A", message="a")
    response = client.post(f"/guestbook/clear?id={view.id}", headers={"accept": "application/json"})
    assert response.json()["entity"]["entries"] == []
    assert len(store) == 0


def test_unknown_view(client):
    response = client.post("/guestbook/submit?id=nope", json={}, headers={"accept": "application/json"})
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "unknown view"}


def test_connect_without_id(client):
    response = client.get("/guestbook/connect")
    assert response.status_code == 404


def test_component_routes(client, app, store):
    context = app.state.context
    GuestComponent.embed(context, "widget", host_app="dash")

    response = client.post("/guestcomponent/submit?id=widget",
                           json={"GuestComponent": {"widget": {"name": "Zed", "message": "yo"}}},
                           headers={"accept": "application/json"})
    assert response.status_code == 200
    entity = response.json()["entity"]
    assert entity["entries"][0]["origin_host"] == "dash"
    assert entity["theme_variant"] == "dark"

    GuestBook.mount(store).submit(name="Elsewhere", message="hi")
    response = client.post("/guestcomponent/refresh?id=widget", headers={"accept": "application/json"})
    assert [e["name"] for e in response.json()["entity"]["entries"]] == ["Elsewhere", "Zed"]


def test_component_id_does_not_match_guest_book(client, app):
    view = mount_view(app)
    response = client.post(f"/guestcomponent/refresh?id={view.id}", headers={"accept": "application/json"})
    assert response.status_code == 404


def test_app_serves_inside_lifespan(app):
    with TestClient(app) as client:
        assert client.get("/health").content == HEALTH_BODY
        assert client.get("/").status_code == 200
    assert len(app.state.context.sessions) == 0
