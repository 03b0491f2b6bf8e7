"""Tests for the method response and event models."""

from datetime import datetime, timezone

from models.method_response import EventMessage, MethodResponse, PrintResponse, StatusResponse


STAMP = datetime(2026, 10, 19, 8, 30, tzinfo=timezone.utc)


class TestResponseBodies:

    def test_print_response_fields(self):
        body = PrintResponse(device_id="edge-01", timestamp=STAMP).to_dict()

        assert body == {
            "deviceId": "edge-01",
            "timestamp": "2026-10-19T08:30:00+00:00",
            "status": "Message deserialized and printed.",
        }

    def test_status_response_fields(self):
        response = StatusResponse(device_id="edge-01", roll_missing=True, timestamp=STAMP)

        body = response.to_dict()

        assert body["status"] == "Status method called and status read."
        assert body["paperCollected"] is False
        assert body["rollMissing"] is True

    def test_method_response_carries_body_as_utf8_json(self):
        body = PrintResponse(device_id="édge", timestamp=STAMP).to_dict()

        response = MethodResponse.from_body(body, 200)

        assert isinstance(response.payload, bytes)
        assert response.json() == body
        assert response.status == 200


class TestEventMessage:

    def test_to_dict_decodes_body(self):
        message = EventMessage(output_name="output1", body=b'{"status": "ok"}', created_at=STAMP)

        assert message.to_dict() == {
            "outputName": "output1",
            "contentType": "application/json",
            "contentEncoding": "utf-8",
            "createdAt": "2026-10-19T08:30:00+00:00",
            "body": {"status": "ok"},
        }
