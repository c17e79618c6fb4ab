from __future__ import annotations

import threading
from typing import Callable, List, Optional

import structlog

from client import ApiError, OrderApiClient
from schemas import OrderOut

logger = structlog.get_logger(__name__)

DEFAULT_INTERVAL = 15.0

def summarize_order(order: OrderOut) -> str:
    items = ", ".join(f"{i.quantity}x {i.name}" for i in order.items)
    return f"Order for: {order.employee_name}\n{items}\nTotal: ${order.total:.2f}"

class ConfirmedOrdersPoller:
    """Fetches confirmed orders immediately on ``start`` and then every ``interval`` seconds
    until ``stop``. Tie ``start``/``stop`` to the panel being shown/hidden.
    """

    def __init__(
        self,
        api: OrderApiClient,
        interval: float = DEFAULT_INTERVAL,
        on_update: Optional[Callable[[List[OrderOut]], None]] = None,
    ):
        self.api = api
        self.interval = interval
        self.on_update = on_update
        self._orders: List[OrderOut] = []
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def orders(self) -> List[OrderOut]:
        with self._lock:
            return list(self._orders)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def refresh(self) -> bool:
        try:
            orders = self.api.get_confirmed_orders()
        except ApiError as e:
            logger.warning("Failed to fetch confirmed orders", error=e.message)
            return False
        with self._lock:
            self._orders = orders
        if self.on_update:
            self.on_update(orders)
        return True

    def _run(self, stop: threading.Event) -> None:
        while not stop.is_set():
            self.refresh()
            stop.wait(self.interval)

    def start(self) -> None:
        if self.running and not self._stop.is_set():
            return
        # each run owns its stop event; a run still finishing a request exits on its own
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, args=(self._stop,), name="confirmed-orders-poller", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
        self._thread = None

    def render(self) -> str:
        orders = self.orders
        if not orders:
            return "No confirmed orders."
        return "\n\n".join(summarize_order(o) for o in orders)
