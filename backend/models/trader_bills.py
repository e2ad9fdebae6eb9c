from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, Computed, select, func
from sqlalchemy.orm import relationship, column_property
from database import Base
import enum
from models.audit_mixin import TimestampMixin
from models.trader_bill_items import TraderBillItem


class BillPaymentStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"


class TraderBill(Base, TimestampMixin):
    __tablename__ = "trader_bills"

    id = Column(Integer, primary_key=True, index=True)
    trader_id = Column(Integer, ForeignKey("traders.id", ondelete="CASCADE"), nullable=False, index=True)
    bill_number = Column(String(50), unique=True, nullable=False, index=True) # TRD-YYYY-NNNNN
    bill_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=True)
    subtotal = Column(Numeric(12, 2), default=0, nullable=False) # sum of item total_cost
    tax_amount = Column(Numeric(12, 2), default=0, nullable=False)
    total_amount = Column(Numeric(12, 2), default=0, nullable=False) # subtotal + tax_amount
    amount_paid = Column(Numeric(12, 2), default=0, server_default="0", nullable=False)
    amount_due = Column(Numeric(12, 2), Computed("total_amount - amount_paid", persisted=True))
    payment_status = Column(String(20), default=BillPaymentStatus.UNPAID.value, server_default="unpaid", nullable=False)
    bill_image = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("admins.id", ondelete="SET NULL"), nullable=True)

    item_count = column_property(
        select(func.count(TraderBillItem.id))
        .where(TraderBillItem.bill_id == id)
        .correlate_except(TraderBillItem)
        .scalar_subquery()
    )

    # Relationships
    trader = relationship("Trader", back_populates="bills")
    creator = relationship("Admin")
    items = relationship(
        "TraderBillItem",
        back_populates="bill",
        cascade="all, delete-orphan",
        order_by="TraderBillItem.id",
    )
    payments = relationship("TraderPayment", back_populates="bill")

    @property
    def trader_name(self):
        return self.trader.company_name if self.trader else None

    @property
    def contact_person(self):
        return self.trader.contact_person if self.trader else None

    @property
    def trader_phone(self):
        return self.trader.phone if self.trader else None

    @property
    def created_by_name(self):
        return self.creator.display_name if self.creator else None
