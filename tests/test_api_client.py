"""
Tests for the HTTP binding.

These tests verify:
  - Every request is signed with a token bound to the exact body
  - Error envelopes are decoded into ServiceError entries
  - Undecodable error bodies and transport failures still yield ServiceError
  - Malformed success bodies are reported as INVALID_RESPONSE
  - The sandbox rejects unsigned, expired and tampered requests
"""

import json
from datetime import timedelta

import httpx
import pytest

from carbon_calculator.client import ApiClient
from carbon_calculator.exceptions import ServiceError
from carbon_calculator.schemas.payment_card import PaymentCard
from carbon_calculator.security import create_request_token, verify_request_token
from carbon_calculator.services import build_services


def mock_api_client(handler) -> ApiClient:
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        base_url="http://mock.test",
    )
    return ApiClient(http_client=http_client)


class TestRequestSigning:

    async def test_token_matches_body(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            scheme, _, token = request.headers["Authorization"].partition(" ")
            seen["scheme"] = scheme
            seen["claims"] = verify_request_token(token, request.content)
            seen["content_type"] = request.headers.get("Content-Type")
            return httpx.Response(200, json={"paymentCardId": "abc", "last4fpan": "1234"})

        api_client = mock_api_client(handler)
        body = await api_client.request("POST", "/payment-cards", json_body={"fpan": "x"})

        assert body == {"paymentCardId": "abc", "last4fpan": "1234"}
        assert seen["scheme"] == "Bearer"
        assert seen["claims"]["sub"] == "test-consumer-key"
        assert seen["content_type"] == "application/json"

    async def test_get_request_signed_over_empty_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            token = request.headers["Authorization"].split(" ", 1)[1]
            verify_request_token(token, b"")
            assert request.url.params["limit"] == "50"
            return httpx.Response(200, json={"ok": True})

        api_client = mock_api_client(handler)
        assert await api_client.request("GET", "/things", params={"limit": 50}) == {"ok": True}

    async def test_no_content_returns_none(self):
        api_client = mock_api_client(lambda request: httpx.Response(204))
        assert await api_client.request("DELETE", "/payment-cards", json_body=["a"]) is None


class TestErrorDecoding:

    async def test_error_envelope_decoded(self):
        envelope = {
            "Errors": {
                "Error": [
                    {
                        "Source": "CARBON_CALCULATOR",
                        "ReasonCode": "INVALID_PAYMENT_CARD",
                        "Description": "Payment card rejected",
                        "Recoverable": False,
                        "Details": "fpan fails the Luhn check",
                    },
                    {
                        "Source": "CARBON_CALCULATOR",
                        "ReasonCode": "INVALID_CURRENCY",
                        "Description": "Bad currency",
                        "Recoverable": False,
                        "Details": None,
                    },
                ]
            }
        }
        api_client = mock_api_client(lambda request: httpx.Response(400, json=envelope))

        with pytest.raises(ServiceError) as exc_info:
            await api_client.request("POST", "/payment-cards", json_body={})

        error = exc_info.value
        assert error.status_code == 400
        assert error.reason_codes == ["INVALID_PAYMENT_CARD", "INVALID_CURRENCY"]
        assert error.service_errors[0].details == "fpan fails the Luhn check"

    async def test_non_envelope_error_body(self):
        api_client = mock_api_client(lambda request: httpx.Response(502, text="Bad gateway"))

        with pytest.raises(ServiceError) as exc_info:
            await api_client.request("GET", "/payment-cards/abc/transaction-footprints")

        error = exc_info.value
        assert error.status_code == 502
        assert error.reason_codes == ["HTTP_502"]
        assert error.service_errors[0].source == "mock.test"
        assert "Bad gateway" in error.service_errors[0].description

    async def test_transport_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        api_client = mock_api_client(handler)

        with pytest.raises(ServiceError) as exc_info:
            await api_client.request("GET", "/health")

        error = exc_info.value
        assert error.status_code is None
        assert error.reason_codes == ["TRANSPORT_ERROR"]
        assert error.service_errors[0].recoverable is True

    async def test_timeout_is_transport_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        api_client = mock_api_client(handler)

        with pytest.raises(ServiceError) as exc_info:
            await api_client.request("GET", "/health")
        assert exc_info.value.reason_codes == ["TRANSPORT_ERROR"]

    async def test_non_json_success_body(self):
        api_client = mock_api_client(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(ServiceError) as exc_info:
            await api_client.request("GET", "/health")
        assert exc_info.value.reason_codes == ["INVALID_RESPONSE"]

    async def test_unexpected_response_shape(self):
        api_client = mock_api_client(lambda request: httpx.Response(200, json={"unexpected": 1}))
        add_card_service, _ = build_services(api_client)

        with pytest.raises(ServiceError) as exc_info:
            await add_card_service.register_payment_card(
                PaymentCard(fpan="5454545454545454", card_base_currency="USD")
            )
        assert exc_info.value.reason_codes == ["INVALID_RESPONSE"]

    @pytest.mark.parametrize("reply", [
        {"paymentCardId": "", "last4fpan": "5454"},
        {"paymentCardId": "abc", "last4fpan": "5454545454545454"},
        {"paymentCardId": "abc", "last4fpan": "54x4"},
    ])
    async def test_reference_without_id_or_redaction_rejected(self, reply):
        api_client = mock_api_client(lambda request: httpx.Response(200, json=reply))
        add_card_service, _ = build_services(api_client)

        with pytest.raises(ServiceError) as exc_info:
            await add_card_service.register_payment_card(
                PaymentCard(fpan="5454545454545454", card_base_currency="USD")
            )
        assert exc_info.value.reason_codes == ["INVALID_RESPONSE"]

    async def test_enrolment_with_full_fpan_rejected(self):
        reply = [{"paymentCardId": "abc", "last4fpan": "5454545454545454"}]
        api_client = mock_api_client(lambda request: httpx.Response(200, json=reply))
        add_card_service, _ = build_services(api_client)

        with pytest.raises(ServiceError) as exc_info:
            await add_card_service.register_batch_payment_cards(
                [PaymentCard(fpan="5454545454545454", card_base_currency="USD")]
            )
        assert exc_info.value.reason_codes == ["INVALID_RESPONSE"]

    @pytest.mark.parametrize("payment_card_id, raw_segment", [
        ("abc#frag", b"abc%23frag"),
        ("abc?x", b"abc%3Fx"),
        ("a/b", b"a%2Fb"),
    ])
    async def test_card_id_escaped_in_history_path(self, payment_card_id, raw_segment):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["raw_path"] = request.url.raw_path
            return httpx.Response(
                200, json={"count": 0, "offset": 0, "limit": 50, "total": 0, "transactionFootprints": []}
            )

        _, payment_card_service = build_services(mock_api_client(handler))
        await payment_card_service.get_payment_card_transaction_history(
            payment_card_id, "2020-09-19", "2020-10-01"
        )

        path, _, query = seen["raw_path"].partition(b"?")
        assert path == b"/payment-cards/" + raw_segment + b"/transaction-footprints"
        assert b"fromDate=2020-09-19" in query

    async def test_batch_count_mismatch(self):
        one_enrolment = [{"paymentCardId": "abc", "last4fpan": "5454"}]
        api_client = mock_api_client(lambda request: httpx.Response(200, json=one_enrolment))
        add_card_service, _ = build_services(api_client)

        cards = [
            PaymentCard(fpan="5454545454545454", card_base_currency="USD"),
            PaymentCard(fpan="4111111111111111", card_base_currency="USD"),
        ]
        with pytest.raises(ServiceError) as exc_info:
            await add_card_service.register_batch_payment_cards(cards)
        assert exc_info.value.reason_codes == ["ENROLMENT_COUNT_MISMATCH"]


class TestSandboxAuthentication:

    async def test_missing_token_rejected(self, http_client):
        response = await http_client.post("/payment-cards", json={})
        assert response.status_code == 401
        assert response.json()["Errors"]["Error"][0]["ReasonCode"] == "UNAUTHORIZED"

    async def test_tampered_body_rejected(self, http_client):
        signed = json.dumps({"fpan": "5454545454545454", "cardBaseCurrency": "USD"}).encode()
        sent = json.dumps({"fpan": "4111111111111111", "cardBaseCurrency": "USD"}).encode()
        token = create_request_token(signed)

        response = await http_client.post(
            "/payment-cards",
            content=sent,
            headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
        )
        assert response.status_code == 401
        assert "body" in response.json()["Errors"]["Error"][0]["Details"]

    async def test_expired_token_rejected(self, http_client):
        token = create_request_token(b"", expires_delta=timedelta(seconds=-10))
        response = await http_client.get(
            "/payment-cards/abc/transaction-footprints",
            params={"fromDate": "2020-09-19", "toDate": "2020-10-01"},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 401

    async def test_wrong_secret_rejected(self, http_client):
        token = create_request_token(b"", signing_secret="not-the-secret")
        response = await http_client.get(
            "/payment-cards/abc/transaction-footprints",
            params={"fromDate": "2020-09-19", "toDate": "2020-10-01"},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 401

    async def test_health_needs_no_token(self, http_client):
        response = await http_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
