from sqlalchemy import Column, Integer, String, Text, Numeric, select, func
from sqlalchemy.orm import relationship, column_property
from database import Base
import enum
from models.audit_mixin import TimestampMixin
from models.trader_bills import TraderBill
from models.trader_payments import TraderPayment


class TraderStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    BLOCKED = "blocked"


class Trader(Base, TimestampMixin):
    __tablename__ = "traders"

    id = Column(Integer, primary_key=True, index=True)
    company_name = Column(String(255), nullable=False, index=True)
    contact_person = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    tax_number = Column(String(100), nullable=True)
    payment_terms = Column(Integer, default=30, nullable=False) # days
    credit_limit = Column(Numeric(12, 2), default=0, nullable=False)
    # Maintained outside the ledger (DB-side or by another process); never written here
    current_balance = Column(Numeric(12, 2), default=0, server_default="0", nullable=False)
    status = Column(String(20), default=TraderStatus.ACTIVE.value, nullable=False, index=True)
    notes = Column(Text, nullable=True)

    # Read-only aggregates, computed by the database on every load
    bill_count = column_property(
        select(func.count(TraderBill.id))
        .where(TraderBill.trader_id == id)
        .correlate_except(TraderBill)
        .scalar_subquery()
    )
    total_purchases = column_property(
        select(func.coalesce(func.sum(TraderBill.total_amount), 0))
        .where(TraderBill.trader_id == id)
        .correlate_except(TraderBill)
        .scalar_subquery()
    )
    total_payments = column_property(
        select(func.coalesce(func.sum(TraderPayment.amount), 0))
        .where(TraderPayment.trader_id == id)
        .correlate_except(TraderPayment)
        .scalar_subquery()
    )

    # Relationships
    bills = relationship("TraderBill", back_populates="trader", cascade="all, delete-orphan")
    payments = relationship("TraderPayment", back_populates="trader", cascade="all, delete-orphan")
