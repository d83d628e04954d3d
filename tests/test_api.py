"""
Retry policy of ApiClient.request.
"""

from unittest.mock import call

import pytest
import requests

from ksense_healthcare_assessment.api import (
    BASE_DELAY,
    MAX_ATTEMPTS,
    NETWORK_ERROR,
    RATE_LIMITED,
    SERVER_ERROR,
    ClientError,
    MaxRetriesError,
    backoff_delay,
    retry_decision,
    retry_reason,
)


class TestBackoff:
    def test_rate_limit_is_linear(self):
        assert [backoff_delay(RATE_LIMITED, n, 1.0) for n in range(4)] == [1.0, 2.0, 3.0, 4.0]

    def test_server_error_is_exponential(self):
        assert [backoff_delay(SERVER_ERROR, n, 0.5) for n in range(4)] == [0.5, 1.0, 2.0, 4.0]

    def test_network_error_is_exponential(self):
        assert backoff_delay(NETWORK_ERROR, 3, 1.0) == 8.0

    def test_retry_reason(self):
        assert retry_reason(429) == RATE_LIMITED
        assert retry_reason(500) == SERVER_ERROR
        assert retry_reason(503) == SERVER_ERROR
        assert retry_reason(400) is None
        assert retry_reason(404) is None

    def test_decision_stops_at_last_attempt(self):
        assert retry_decision(SERVER_ERROR, MAX_ATTEMPTS - 2) == BASE_DELAY * 2 ** (MAX_ATTEMPTS - 2)
        assert retry_decision(SERVER_ERROR, MAX_ATTEMPTS - 1) is None


class TestRequest:
    def test_success_returns_json(self, client, session, sleeps, make_response):
        session.request.return_value = make_response(200, {"ok": True})

        assert client.get_json("/patients", params={"page": 1}) == {"ok": True}
        session.request.assert_called_once_with(
            "GET", "https://api.test/patients", params={"page": 1}, json=None, headers=None, timeout=30.0
        )
        assert sleeps == []

    def test_default_headers(self, client, session):
        assert session.headers["x-api-key"] == "test-key"
        assert session.headers["Content-Type"] == "application/json"

    def test_post_sends_body(self, client, session, make_response):
        session.request.return_value = make_response(200, {"received": 1})
        body = {"high_risk_patients": ["DEMO001"]}

        client.post_json("/submit-assessment", body)

        args, kwargs = session.request.call_args
        assert args == ("POST", "https://api.test/submit-assessment")
        assert kwargs["json"] == body

    def test_sustained_server_error_gives_up_after_five_attempts(self, client, session, sleeps, make_response):
        session.request.return_value = make_response(500, text="boom")

        with pytest.raises(MaxRetriesError) as exc:
            client.get_json("/patients")

        assert session.request.call_count == 5
        assert sleeps == [1.0, 2.0, 4.0, 8.0]
        assert exc.value.url == "https://api.test/patients"
        assert "Max retries reached" in str(exc.value)

    def test_rate_limit_then_success(self, client, session, sleeps, make_response):
        session.request.side_effect = [
            make_response(429),
            make_response(429),
            make_response(200, {"data": []}),
        ]

        assert client.get_json("/patients") == {"data": []}
        assert sleeps == [1.0, 2.0]

    def test_mixed_transient_failures_share_one_budget(self, client, session, sleeps, make_response):
        session.request.side_effect = [
            make_response(503),
            make_response(429),
            requests.ConnectionError("reset"),
            make_response(502),
            make_response(200, {"done": True}),
        ]

        assert client.get_json("/patients") == {"done": True}
        assert sleeps == [1.0, 2.0, 4.0, 8.0]

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 422])
    def test_client_error_is_terminal(self, client, session, sleeps, make_response, status):
        session.request.return_value = make_response(status, text="bad request body")

        with pytest.raises(ClientError) as exc:
            client.get_json("/patients")

        assert session.request.call_count == 1
        assert sleeps == []
        assert exc.value.status_code == status
        assert exc.value.body == "bad request body"
        assert str(status) in str(exc.value)

    def test_network_failures_exhaust_budget(self, client, session, sleeps):
        session.request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(MaxRetriesError) as exc:
            client.get_json("/patients")

        assert session.request.call_count == 5
        assert sleeps == [1.0, 2.0, 4.0, 8.0]
        assert isinstance(exc.value.__cause__, requests.ConnectionError)

    def test_timeout_is_retried(self, client, session, sleeps, make_response):
        session.request.side_effect = [requests.Timeout("slow"), make_response(200, [1, 2])]

        assert client.get_json("/patients") == [1, 2]
        assert sleeps == [1.0]

    def test_undecodable_body_is_retried(self, client, session, sleeps, make_response):
        bad = make_response(200)
        bad.json.side_effect = ValueError("not json")
        session.request.side_effect = [bad, make_response(200, {"ok": True})]

        assert client.get_json("/patients") == {"ok": True}
        assert sleeps == [1.0]

    def test_retries_are_logged(self, client, session, make_response, caplog):
        session.request.side_effect = [make_response(429), make_response(200, {})]

        with caplog.at_level("WARNING"):
            client.get_json("/patients")

        assert any("Rate limit" in r.message for r in caplog.records)

    def test_custom_base_delay(self, session, make_response):
        from ksense_healthcare_assessment.api import ApiClient

        sleeps = []
        client = ApiClient("k", base_url="https://api.test/", session=session, base_delay=0.25, sleep=sleeps.append)
        session.request.return_value = make_response(500)

        with pytest.raises(MaxRetriesError):
            client.get_json("/patients")

        assert sleeps == [0.25, 0.5, 1.0, 2.0]
        assert session.request.call_args == call(
            "GET", "https://api.test/patients", params=None, json=None, headers=None, timeout=30.0
        )
