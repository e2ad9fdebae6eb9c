from pydantic import BaseModel
from typing import Optional
from decimal import Decimal
from schemas.common import RequestModel


class TraderBillItemCreate(RequestModel):
    # description and unit_cost are checked by the service
    product_id: Optional[int] = None
    description: Optional[str] = None
    quantity: Decimal = Decimal(1)
    unit_cost: Optional[Decimal] = None


class TraderBillItemUpdate(RequestModel):
    description: Optional[str] = None
    quantity: Optional[Decimal] = None
    unit_cost: Optional[Decimal] = None


class TraderBillItem(BaseModel):
    id: int
    bill_id: int
    product_id: Optional[int] = None
    product_name: Optional[str] = None
    description: str
    quantity: Decimal
    unit_cost: Decimal
    total_cost: Decimal

    class Config:
        from_attributes = True
