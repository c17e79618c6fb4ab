from __future__ import annotations

import secrets
from typing import Any

import structlog

from database import create_document, find_document_by_id, get_documents, update_document
from errors import AlreadyConfirmed, InvalidRequest, NotFound, VerificationMismatch
from schemas import CreateOrderRequest, OrderOut, OrderStatus

logger = structlog.get_logger(__name__)

COLLECTION = "order"
CODE_MIN = 100000
CODE_MAX = 999999

def generate_verification_code() -> str:
    """Uniform draw over [100000, 999999], always six digits."""
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))

def compute_total(order: CreateOrderRequest) -> float:
    return round(sum(item.price * item.quantity for item in order.items), 2)

async def create_order(order: CreateOrderRequest) -> tuple[dict[str, Any], str]:
    """Persist a Pending order; returns the stored document and its verification code."""
    if not order.employee_name or not order.employee_email or not order.items:
        raise InvalidRequest()

    total = compute_total(order)
    if order.total is not None and abs(order.total - total) >= 0.005:
        logger.warning("Client total differs from item sum", client_total=order.total, total=total)

    code = generate_verification_code()
    doc = await create_document(COLLECTION, {
        "employee_name": order.employee_name,
        "employee_email": order.employee_email,
        "items": [item.model_dump() for item in order.items],
        "total": total,
        "verification_code": code,
        "status": OrderStatus.PENDING.value,
    })
    logger.info("Order created", order_id=doc["id"], item_count=len(order.items), total=total)
    return doc, code

async def verify_order(order_id: str, code: str) -> None:
    if not order_id or not code:
        raise InvalidRequest("Order id and verification code are required.")

    doc = await find_document_by_id(COLLECTION, order_id)
    if doc is None:
        raise NotFound()
    if doc.get("status") == OrderStatus.CONFIRMED.value:
        raise AlreadyConfirmed()
    if doc.get("verification_code") != code:
        logger.info("Verification code mismatch", order_id=order_id)
        raise VerificationMismatch()

    confirmed = await update_document(
        COLLECTION,
        order_id,
        {"status": OrderStatus.CONFIRMED.value},
        filter_dict={"status": OrderStatus.PENDING.value},
    )
    if not confirmed:
        # another request confirmed it between our read and write
        raise AlreadyConfirmed()
    logger.info("Order confirmed", order_id=order_id)

async def list_confirmed_orders(limit: int = 20) -> list[OrderOut]:
    docs = await get_documents(
        COLLECTION,
        {"status": OrderStatus.CONFIRMED.value},
        limit=limit,
        sort=[("created_at", -1)],
        projection={"verification_code": 0},
    )
    return [OrderOut(**d) for d in docs]
