from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from decimal import Decimal
from schemas.common import RequestModel


class TraderPaymentCreate(RequestModel):
    bill_id: Optional[int] = None
    amount: Optional[Decimal] = None # must be > 0, checked by the service
    payment_method: Optional[str] = None # defaults to "cash"
    payment_date: Optional[datetime] = None # defaults to now
    reference_number: Optional[str] = None
    notes: Optional[str] = None


class TraderPayment(BaseModel):
    id: int
    trader_id: int
    trader_name: Optional[str] = None
    bill_id: Optional[int] = None
    bill_number: Optional[str] = None
    amount: Decimal
    payment_method: str
    payment_date: datetime
    reference_number: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_by_name: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
