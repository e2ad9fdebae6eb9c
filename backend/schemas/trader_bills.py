from pydantic import BaseModel
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from schemas.common import RequestModel
from schemas.trader_bill_items import TraderBillItemCreate


class TraderBillCreate(RequestModel):
    bill_number: Optional[str] = None # generated when absent
    bill_date: Optional[date] = None
    due_date: Optional[date] = None
    subtotal: Optional[Decimal] = None
    tax_amount: Optional[Decimal] = None
    total_amount: Optional[Decimal] = None
    bill_image: Optional[str] = None
    notes: Optional[str] = None
    # When items are given, subtotal and total_amount are derived from them
    items: Optional[List[TraderBillItemCreate]] = None


class TraderBillUpdate(RequestModel):
    bill_number: Optional[str] = None
    bill_date: Optional[date] = None
    due_date: Optional[date] = None
    subtotal: Optional[Decimal] = None
    tax_amount: Optional[Decimal] = None
    total_amount: Optional[Decimal] = None
    bill_image: Optional[str] = None
    notes: Optional[str] = None


class TraderBill(BaseModel):
    id: int
    trader_id: int
    trader_name: Optional[str] = None
    contact_person: Optional[str] = None
    trader_phone: Optional[str] = None
    bill_number: str
    bill_date: date
    due_date: Optional[date] = None
    subtotal: Optional[Decimal] = None
    tax_amount: Optional[Decimal] = None
    total_amount: Optional[Decimal] = None
    amount_paid: Optional[Decimal] = None
    amount_due: Optional[Decimal] = None
    payment_status: Optional[str] = None
    bill_image: Optional[str] = None
    notes: Optional[str] = None
    item_count: int = 0
    created_by: Optional[int] = None
    created_by_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
