from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Café order schemas. JSON on the wire is camelCase, store documents are snake_case.

class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

class OrderStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"

class Product(CamelModel):
    id: str
    name: str
    description: str = ""
    price: float = Field(ge=0)

class CartItem(CamelModel):
    product_id: str
    name: str
    price: float = Field(ge=0)
    quantity: int = Field(ge=1, default=1)

class OrderItem(CamelModel):
    product_id: Optional[str] = None
    name: str = Field(min_length=1)
    quantity: int = Field(ge=1)
    price: float = Field(ge=0)

class CreateOrderRequest(CamelModel):
    employee_name: str = Field(min_length=1)
    employee_email: str = Field(min_length=1)
    items: List[OrderItem] = Field(min_length=1)
    total: Optional[float] = Field(None, ge=0)

class CreateOrderResponse(CamelModel):
    success: bool = True
    order_id: str
    message: str

class VerifyOrderRequest(CamelModel):
    # codes are compared exactly as typed
    model_config = ConfigDict(str_strip_whitespace=False)

    order_id: str = Field(min_length=1)
    code: str = Field(min_length=1)

class VerifyOrderResponse(CamelModel):
    success: bool
    message: str

class ErrorResponse(CamelModel):
    success: bool = False
    message: str

class OrderOut(CamelModel):
    id: str
    employee_name: str
    employee_email: str
    items: List[OrderItem]
    total: float
    status: OrderStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
