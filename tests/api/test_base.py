"""Tests for api/base.py - response envelopes."""

from datetime import datetime

from api.base import success_response, error_response, ErrorCodes


class TestSuccessResponse:
    """Tests for success_response()."""

    def test_payload_at_top_level(self):
        resp = success_response(invoice={"id": "x"}, source="mock")

        assert resp["success"] is True
        assert resp["invoice"] == {"id": "x"}
        assert resp["source"] == "mock"
        assert "error" not in resp

    def test_request_id_passed_through(self):
        resp = success_response("req-123")

        assert resp["meta"]["request_id"] == "req-123"

    def test_request_id_generated_when_missing(self):
        resp = success_response()

        assert len(resp["meta"]["request_id"]) > 0

    def test_timestamp_is_utc_iso(self):
        resp = success_response()

        assert datetime.fromisoformat(resp["meta"]["timestamp"].replace("Z", "+00:00")).utcoffset().total_seconds() == 0


class TestErrorResponse:
    """Tests for error_response()."""

    def test_structure(self):
        resp = error_response(ErrorCodes.NOT_FOUND, "Invoice x not found", "req-1")

        assert resp["success"] is False
        assert resp["error"] == {"code": "NOT_FOUND", "message": "Invoice x not found"}
        assert resp["meta"]["request_id"] == "req-1"
