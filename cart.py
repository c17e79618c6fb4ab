from __future__ import annotations
from typing import List, Optional
import structlog

from catalog import get_product
from schemas import CartItem, OrderItem

logger = structlog.get_logger(__name__)

class Cart:
    """In-memory cart: at most one entry per product, quantities always >= 1."""

    def __init__(self) -> None:
        self._items: List[CartItem] = []

    def _find(self, product_id: str) -> Optional[CartItem]:
        return next((item for item in self._items if item.product_id == product_id), None)

    @property
    def items(self) -> List[CartItem]:
        return [item.model_copy() for item in self._items]

    def quantity_of(self, product_id: str) -> int:
        item = self._find(product_id)
        return item.quantity if item else 0

    def add(self, product_id: str) -> None:
        item = self._find(product_id)
        if item:
            item.quantity += 1
            return
        product = get_product(product_id)
        if product is None:
            logger.debug("Ignoring unknown product", product_id=product_id)
            return
        # price is copied now and never re-read from the catalog
        self._items.append(CartItem(product_id=product.id, name=product.name, price=product.price, quantity=1))

    def remove(self, product_id: str) -> None:
        item = self._find(product_id)
        if item is None:
            return
        if item.quantity > 1:
            item.quantity -= 1
        else:
            self._items.remove(item)

    def clear(self) -> None:
        self._items = []

    def total(self) -> float:
        return sum(item.price * item.quantity for item in self._items)

    def to_order_items(self) -> List[OrderItem]:
        return [
            OrderItem(product_id=i.product_id, name=i.name, quantity=i.quantity, price=i.price)
            for i in self._items
        ]

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)
