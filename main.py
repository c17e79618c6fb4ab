import os
from contextlib import asynccontextmanager
from typing import List
from fastapi import BackgroundTasks, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
import structlog

import database
import orders
from catalog import PRODUCTS
from config import get_settings
from errors import InternalError, InvalidRequest, OrderError
from notifier import get_notifier, send_verification_code
from schemas import (
    CreateOrderRequest,
    CreateOrderResponse,
    ErrorResponse,
    OrderOut,
    Product,
    VerifyOrderRequest,
    VerifyOrderResponse,
)

logger = structlog.get_logger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    if not settings.DATABASE_URL:
        logger.error("DATABASE_URL is not set, refusing to start")
        raise RuntimeError("DATABASE_URL (or MONGODB_URI) must be set")
    await database.get_db()
    get_notifier()
    logger.info("Café order API started", database=settings.DATABASE_NAME)
    yield
    database.close_db()

app = FastAPI(title="Café Orders API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Error rendering

def error_response(exc: OrderError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=exc.message).model_dump(by_alias=True),
    )

@app.exception_handler(OrderError)
async def order_error_handler(request: Request, exc: OrderError):
    return error_response(exc)

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected malformed request", path=request.url.path, errors=len(exc.errors()))
    if request.url.path.endswith("/verify"):
        missing = all(e["type"] in ("missing", "string_too_short") for e in exc.errors())
        if missing:
            return error_response(InvalidRequest("Order id and verification code are required."))
        return error_response(InvalidRequest("Order id and verification code must be text."))
    return error_response(InvalidRequest())

@app.exception_handler(PyMongoError)
@app.exception_handler(database.DatabaseNotConfigured)
async def storage_error_handler(request: Request, exc: Exception):
    logger.error("Storage failure", path=request.url.path, exc_info=exc)
    return error_response(InternalError())

@app.get("/")
async def root():
    return {"message": "Café Orders Backend Running"}

@app.get("/test")
async def test():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if get_settings().DATABASE_URL else "❌ Not Set",
        "email": "✅ Configured" if get_settings().SENDGRID_API_KEY else "⚠️ Log only",
        "connection_status": "Not Connected",
    }
    try:
        await database.ping()
        response["database"] = "✅ Available"
        response["connection_status"] = "Connected"
    except Exception as e:
        response["database"] = f"❌ Error: {str(e)[:80]}"
    return response

@app.get("/api/products", response_model=List[Product])
async def list_products():
    return PRODUCTS

@app.post("/api/orders", status_code=201, response_model=CreateOrderResponse)
async def create_order(order: CreateOrderRequest, background_tasks: BackgroundTasks):
    doc, code = await orders.create_order(order)
    background_tasks.add_task(
        send_verification_code,
        doc["id"],
        order.employee_email,
        order.employee_name,
        code,
        order.items,
        doc["total"],
    )
    return CreateOrderResponse(
        order_id=doc["id"],
        message="Order received. Please check your email for the verification code.",
    )

@app.post("/api/orders/verify", response_model=VerifyOrderResponse)
async def verify_order(payload: VerifyOrderRequest):
    await orders.verify_order(payload.order_id, payload.code)
    return VerifyOrderResponse(success=True, message="Order confirmed successfully.")

@app.get("/api/orders/confirmed", response_model=List[OrderOut])
async def confirmed_orders():
    return await orders.list_confirmed_orders(limit=get_settings().CONFIRMED_ORDERS_LIMIT)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", get_settings().PORT)))
