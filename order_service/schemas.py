from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict


class CreateOrderRequest(BaseModel):
    items: Optional[List[Any]] = None
    totalAmount: Optional[Decimal] = None


class UpdateStatusRequest(BaseModel):
    status: Optional[str] = None


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    userId: int
    items: List[Any]
    totalAmount: Decimal
    status: str
    createdAt: datetime
    updatedAt: datetime
