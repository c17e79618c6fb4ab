# Storefront order flow, one active order at a time:
#
#   SHOPPING --checkout--> FORM --submit_order ok--> VERIFICATION --submit_code ok--> CONFIRMED
#   FORM --submit_order failed or back--> SHOPPING (cart kept)
#   VERIFICATION --back--> FORM, wrong code stays in VERIFICATION
#   CONFIRMED --new_order--> SHOPPING (cart cleared), cancel resets from any stage

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, List, Optional

import structlog

from cart import Cart
from client import ApiError, OrderApiClient, validate_code, validate_order_form
from schemas import CreateOrderRequest, OrderItem

logger = structlog.get_logger(__name__)

class OrderStage(str, Enum):
    SHOPPING = "Shopping"
    FORM = "Form"
    VERIFICATION = "Verification"
    CONFIRMED = "Confirmed"

class InvalidTransition(Exception):
    pass

class OrderFlow:
    def __init__(self, api: OrderApiClient, cart: Optional[Cart] = None, on_confirmed: Optional[Callable[[], object]] = None):
        self.api = api
        # e.g. ConfirmedOrdersPoller.refresh, so the staff panel shows the order right away
        self.on_confirmed = on_confirmed
        self._cart = cart or Cart()
        self._stage = OrderStage.SHOPPING
        self._order_id: Optional[str] = None
        self._current_order: Optional[CreateOrderRequest] = None
        self._error: Optional[str] = None
        self._form_errors: Dict[str, str] = {}
        self._is_loading = False

    # read accessors

    @property
    def stage(self) -> OrderStage:
        return self._stage

    @property
    def cart(self) -> Cart:
        return self._cart

    @property
    def order_id(self) -> Optional[str]:
        return self._order_id

    @property
    def current_order(self) -> Optional[CreateOrderRequest]:
        return self._current_order

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def form_errors(self) -> Dict[str, str]:
        return dict(self._form_errors)

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def total(self) -> float:
        return self._cart.total()

    # actions

    def _require(self, *stages: OrderStage) -> None:
        if self._stage not in stages:
            raise InvalidTransition(f"Action not allowed in stage {self._stage.value}")

    def add_to_cart(self, product_id: str) -> None:
        self._require(OrderStage.SHOPPING)
        self._cart.add(product_id)

    def remove_from_cart(self, product_id: str) -> None:
        self._require(OrderStage.SHOPPING)
        self._cart.remove(product_id)

    def checkout(self) -> bool:
        self._require(OrderStage.SHOPPING)
        if not self._cart:
            self._error = "Your cart is empty."
            return False
        self._error = None
        self._stage = OrderStage.FORM
        return True

    def back(self) -> None:
        """Leave the form for the cart; the verification step returns to the form."""
        self._require(OrderStage.FORM, OrderStage.VERIFICATION)
        self._error = None
        self._form_errors = {}
        self._stage = OrderStage.SHOPPING if self._stage is OrderStage.FORM else OrderStage.FORM

    def submit_order(self, employee_name: str, employee_email: str) -> bool:
        self._require(OrderStage.FORM)
        self._form_errors = validate_order_form(employee_name, employee_email)
        if self._form_errors:
            return False

        items: List[OrderItem] = self._cart.to_order_items()
        details = CreateOrderRequest(
            employee_name=employee_name,
            employee_email=employee_email,
            items=items,
            total=round(self._cart.total(), 2),
        )
        self._is_loading = True
        self._error = None
        try:
            response = self.api.create_order(details)
        except ApiError as e:
            logger.info("Order submission failed", error=e.message)
            self._error = e.message
            self._stage = OrderStage.SHOPPING
            return False
        finally:
            self._is_loading = False

        if not response.success:
            self._error = response.message or "The order could not be created."
            self._stage = OrderStage.SHOPPING
            return False

        self._current_order = details
        self._order_id = response.order_id
        self._stage = OrderStage.VERIFICATION
        return True

    def submit_code(self, code: str) -> bool:
        self._require(OrderStage.VERIFICATION)
        code_error = validate_code(code)
        if code_error:
            self._error = code_error
            return False
        if not self._order_id:
            self._error = "Order id not found."
            return False

        self._is_loading = True
        self._error = None
        try:
            response = self.api.verify_order(self._order_id, code)
        except ApiError as e:
            self._error = e.message
            return False
        finally:
            self._is_loading = False

        if not response.success:
            self._error = response.message or "The verification code is incorrect."
            return False
        self._stage = OrderStage.CONFIRMED
        if self.on_confirmed:
            self.on_confirmed()
        return True

    def new_order(self) -> None:
        self._require(OrderStage.CONFIRMED)
        self._reset()

    def cancel(self) -> None:
        # closing the checkout dialog abandons the in-progress order
        self._reset()

    def dismiss_error(self) -> None:
        self._error = None

    def _reset(self) -> None:
        self._stage = OrderStage.SHOPPING
        self._cart.clear()
        self._order_id = None
        self._current_order = None
        self._error = None
        self._form_errors = {}
        self._is_loading = False
