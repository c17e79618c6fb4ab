from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

import httpx
import structlog
from pydantic import ValidationError

from schemas import CreateOrderRequest, CreateOrderResponse, OrderOut, Product, VerifyOrderResponse

logger = structlog.get_logger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
CODE_LENGTH = 6

class ApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)

class TransportError(ApiError):
    """Server unreachable or replied with something that is not JSON."""

def validate_order_form(employee_name: str, employee_email: str) -> Dict[str, str]:
    """Field name -> error message; empty when the form can be submitted."""
    errors = {}
    if not (employee_name or "").strip():
        errors["employeeName"] = "Name is required."
    email = (employee_email or "").strip()
    if not email:
        errors["employeeEmail"] = "Email is required."
    elif not EMAIL_RE.match(email):
        errors["employeeEmail"] = "Please enter a valid email."
    return errors

def validate_code(code: str) -> Optional[str]:
    if not (code or "").strip() or len(code) != CODE_LENGTH:
        return f"The code must have {CODE_LENGTH} digits."
    return None

class OrderApiClient:
    def __init__(self, base_url: str = "http://localhost:8000", client: Optional[httpx.Client] = None, timeout: float = 10.0):
        self.base_url = base_url
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "OrderApiClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            resp = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("API request failed", method=method, url=url, error=str(e))
            raise TransportError(
                f"Could not connect to the server. The API may be unavailable at {self.base_url}."
            ) from e

        if resp.is_error:
            try:
                message = resp.json().get("message")
            except (ValueError, AttributeError):
                message = None
            raise ApiError(
                message or f"Server error (code {resp.status_code}). Please try again later.",
                status_code=resp.status_code,
            )
        if resp.status_code == 204:
            return {"success": True}
        try:
            return resp.json()
        except ValueError as e:
            raise TransportError("The server returned an unreadable response.", resp.status_code) from e

    def list_products(self) -> List[Product]:
        return [Product(**p) for p in self._request("GET", "/api/products")]

    def create_order(self, details: CreateOrderRequest) -> CreateOrderResponse:
        data = self._request("POST", "/api/orders", json=details.model_dump(mode="json", by_alias=True))
        return self._parse(CreateOrderResponse, data)

    def verify_order(self, order_id: str, code: str) -> VerifyOrderResponse:
        data = self._request("POST", "/api/orders/verify", json={"orderId": order_id, "code": code})
        return self._parse(VerifyOrderResponse, data)

    def get_confirmed_orders(self) -> List[OrderOut]:
        data = self._request("GET", "/api/orders/confirmed")
        if not isinstance(data, list):
            raise TransportError("Unexpected response for confirmed orders.")
        return [self._parse(OrderOut, o) for o in data]

    @staticmethod
    def _parse(model, data):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise TransportError("The server returned an unexpected response.") from e
