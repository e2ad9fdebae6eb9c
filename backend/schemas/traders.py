from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
from models.traders import TraderStatus
from schemas.common import RequestModel


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class TraderBase(RequestModel):
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    tax_number: Optional[str] = None
    payment_terms: Optional[int] = Field(None, ge=0) # days
    credit_limit: Optional[Decimal] = Field(None, ge=0)
    status: Optional[TraderStatus] = None
    notes: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def empty_email_is_none(cls, value):
        return _blank_to_none(value)


class TraderCreate(TraderBase):
    # Presence is checked by the service so the error reads like the other business rules
    company_name: Optional[str] = None


class TraderUpdate(TraderBase):
    company_name: Optional[str] = None


class Trader(BaseModel):
    id: int
    company_name: str
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    tax_number: Optional[str] = None
    payment_terms: int
    credit_limit: Optional[Decimal] = None
    current_balance: Optional[Decimal] = None
    status: str
    notes: Optional[str] = None
    bill_count: int = 0
    total_purchases: Optional[Decimal] = None
    total_payments: Optional[Decimal] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TraderBalance(BaseModel):
    trader_id: int
    company_name: str
    credit_limit: Decimal
    current_balance: Decimal
    total_purchases: Decimal
    total_payments: Decimal


class TraderStatistics(BaseModel):
    total_traders: int
    active_traders: int
    total_balance: Decimal
    total_purchases: Decimal
    total_payments: Decimal
    unpaid_bills: int
    total_due: Decimal
