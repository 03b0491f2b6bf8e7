"""Integration tests for the HTTP surface (Flask test client)."""

from unittest.mock import Mock, patch

import pytest

from app import create_app
from conftest import FakeChannelFactory, asb


@pytest.fixture
def factory():
    return FakeChannelFactory(read_data=asb(byte5=0x04))


@pytest.fixture
def app(factory):
    application = create_app("config.TestingConfig", channel_factory=factory)
    yield application
    application.extensions["tup900_cleanup"]()


@pytest.fixture
def client(app):
    return app.test_client()


class TestMethodRoutes:

    def test_print(self, client, factory):
        resp = client.post("/methods/print", data=b'{"name":"Ada"}')

        assert resp.status_code == 200
        assert resp.mimetype == "application/json"
        body = resp.get_json()
        assert body["deviceId"] == "test-device"
        assert body["status"] == "Message deserialized and printed."
        assert factory.written.endswith(b"\x1b\x64\x02\x1b\x16\x31\x40")

    def test_print_malformed(self, client):
        resp = client.post("/methods/print", data=b"{name: Ada}")

        assert resp.status_code == 500
        assert resp.get_json()["status"].startswith("Failed to print message")

    def test_status(self, client):
        resp = client.post("/methods/status")

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["rollMissing"] is True
        assert body["paperCollected"] is True

    def test_unknown_method(self, client):
        resp = client.post("/methods/reboot")

        assert resp.status_code == 501
        assert sorted(resp.get_json()["methods"]) == ["print", "status"]

    def test_events_are_listed(self, client):
        client.post("/methods/print", data=b'{"name":"Ada"}')
        client.post("/methods/status")

        resp = client.get("/api/events?output=output1")

        events = resp.get_json()["events"]
        assert [e["body"]["status"] for e in events] == [
            "Message deserialized and printed.",
            "Status method called and status read.",
        ]
        assert all(e["contentType"] == "application/json" for e in events)

    def test_events_limit(self, client):
        for _ in range(3):
            client.post("/methods/status")

        resp = client.get("/api/events?limit=2")

        assert len(resp.get_json()["events"]) == 2


class TestTwinRoutes:

    def test_reported_defaults_to_configured_path(self, client):
        resp = client.get("/twin/reported")
        assert resp.get_json() == {"printerPath": "/dev/usb/lp1"}

    def test_desired_update(self, client, factory):
        resp = client.patch("/twin/desired", json={"printerPath": "/dev/usb/lp0"})

        assert resp.status_code == 200
        assert resp.get_json() == {"printerPath": "/dev/usb/lp0"}

        client.post("/methods/status")
        assert factory.opened[-1] == ("/dev/usb/lp0", True)

    def test_empty_desired_reports_default(self, client):
        client.patch("/twin/desired", json={"printerPath": "/dev/usb/lp0"})

        resp = client.patch("/twin/desired", json={"printerPath": ""})

        assert resp.get_json() == {"printerPath": "/dev/usb/lp1"}

    def test_rejected_desired(self, client):
        resp = client.patch("/twin/desired", json={"printerPath": 12})

        assert resp.status_code == 400
        assert resp.get_json()["reported"] == {"printerPath": "/dev/usb/lp1"}

    def test_non_object_body(self, client):
        resp = client.patch("/twin/desired", data="nope", content_type="text/plain")
        assert resp.status_code == 400


class TestHealth:

    def test_health_ok(self, client):
        resp = client.get("/health")

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["checks"]["device_worker"] == "running"
        assert body["moduleId"] == "test-module"
        assert body["checks"]["edge_hub"] == "disabled"

    def test_not_found_is_json(self, client):
        resp = client.get("/nowhere")

        assert resp.status_code == 404
        assert resp.get_json()["error"] == "Not Found"


class TestAppLifecycle:

    def test_cleanup_is_idempotent_and_unregistered(self, factory):
        with patch("app.atexit") as mock_atexit:
            application = create_app("config.TestingConfig", channel_factory=factory)
            cleanup = application.extensions["tup900_cleanup"]
            mock_atexit.register.assert_called_once_with(cleanup)

            with patch("app.logger") as log:
                cleanup()
                cleanup()

        assert not application.config["DEVICE_WORKER"].is_running
        assert mock_atexit.unregister.call_count == 2
        shutdown_logs = [c for c in log.info.call_args_list if c.args[0] == "Shutting down..."]
        assert len(shutdown_logs) == 1


class TestEdgeHubWiring:

    @pytest.fixture
    def hub_client(self):
        client = Mock()
        client.get_twin.return_value = {"desired": {"printerPath": "/dev/usb/lp0"}}
        return client

    @pytest.fixture
    def hub_app(self, factory, hub_client):
        application = create_app(
            "config.TestingConfig", channel_factory=factory, hub_client=hub_client
        )
        yield application
        application.extensions["tup900_cleanup"]()

    def test_hub_is_connected_and_synced(self, hub_app, hub_client):
        hub_client.connect.assert_called_once()
        hub_client.patch_twin_reported_properties.assert_called_with({"printerPath": "/dev/usb/lp0"})
        assert hub_app.config["DISPATCHER"].reported_properties == {"printerPath": "/dev/usb/lp0"}

    def test_events_go_to_hub_output(self, hub_app, hub_client):
        client = hub_app.test_client()

        client.post("/methods/status")

        message, output_name = hub_client.send_message_to_output.call_args.args
        assert output_name == "output1"
        assert message.content_type == "application/json"
        assert len(client.get("/api/events").get_json()["events"]) == 1

    def test_http_patch_is_reported_to_hub(self, hub_app, hub_client):
        hub_app.test_client().patch("/twin/desired", json={"printerPath": "/dev/usb/lp3"})

        hub_client.patch_twin_reported_properties.assert_called_with({"printerPath": "/dev/usb/lp3"})

    def test_health_shows_hub(self, hub_app):
        body = hub_app.test_client().get("/health").get_json()
        assert body["checks"]["edge_hub"] == "running"

    def test_cleanup_shuts_hub_down(self, hub_app, hub_client):
        hub_app.extensions["tup900_cleanup"]()
        hub_client.shutdown.assert_called_once()
