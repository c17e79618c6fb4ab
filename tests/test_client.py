import httpx
import pytest

from client import ApiError, OrderApiClient, TransportError, validate_code, validate_order_form
from conftest import order_payload
from schemas import CreateOrderRequest


def _api(handler):
    return OrderApiClient(
        "http://cafe.test",
        client=httpx.Client(base_url="http://cafe.test", transport=httpx.MockTransport(handler)),
    )


class TestFormValidation:
    def test_valid(self):
        assert validate_order_form("Ana", "ana@x.com") == {}

    def test_blank_name(self):
        assert set(validate_order_form("  ", "ana@x.com")) == {"employeeName"}

    @pytest.mark.parametrize("email", ["not-an-email", "ana@x", "a na@x.com", ""])
    def test_bad_email(self, email):
        assert "employeeEmail" in validate_order_form("Ana", email)

    @pytest.mark.parametrize("code,ok", [("123456", True), ("12345", False), ("1234567", False), ("", False), ("      ", False)])
    def test_code(self, code, ok):
        assert (validate_code(code) is None) is ok


class TestOrderApiClient:
    def test_server_message_is_surfaced(self):
        api = _api(lambda request: httpx.Response(404, json={"success": False, "message": "Order not found."}))

        with pytest.raises(ApiError) as exc:
            api.verify_order("abc", "123456")

        assert exc.value.message == "Order not found."
        assert exc.value.status_code == 404

    def test_non_json_error_gets_generic_message(self):
        api = _api(lambda request: httpx.Response(502, text="Bad gateway"))

        with pytest.raises(ApiError) as exc:
            api.get_confirmed_orders()

        assert "502" in exc.value.message

    def test_connection_failure_is_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(TransportError) as exc:
            _api(handler).get_confirmed_orders()

        assert "http://cafe.test" in exc.value.message

    def test_unreadable_success_body(self):
        with pytest.raises(TransportError):
            _api(lambda request: httpx.Response(200, text="<html>")).get_confirmed_orders()

    def test_create_order_sends_camel_case(self):
        seen = {}

        def handler(request):
            seen["body"] = request.read()
            return httpx.Response(201, json={"success": True, "orderId": "abc", "message": "ok"})

        details = CreateOrderRequest.model_validate(order_payload())
        response = _api(handler).create_order(details)

        assert response.order_id == "abc"
        assert b'"employeeName":"Ana"' in seen["body"].replace(b" ", b"")

    def test_against_live_app(self, client):
        api = OrderApiClient(client=client)
        assert [p.name for p in api.list_products()][-1] == "Mocha"
        assert api.get_confirmed_orders() == []
