from sqlalchemy import Column, Integer, Numeric, DateTime, String, ForeignKey, Text
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin


class TraderPayment(Base, TimestampMixin):
    __tablename__ = "trader_payments"

    id = Column(Integer, primary_key=True, index=True)
    trader_id = Column(Integer, ForeignKey("traders.id", ondelete="CASCADE"), nullable=False, index=True)
    # Optional: a payment can settle a specific bill or the trader account in general
    bill_id = Column(Integer, ForeignKey("trader_bills.id", ondelete="SET NULL"), nullable=True, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(String(50), default="cash", nullable=False) # e.g., "cash", "bank_transfer", "cheque"
    payment_date = Column(DateTime(timezone=True), nullable=False)
    reference_number = Column(String(100), nullable=True) # Cheque number, transaction ID etc.
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("admins.id", ondelete="SET NULL"), nullable=True)

    # Relationships
    trader = relationship("Trader", back_populates="payments")
    bill = relationship("TraderBill", back_populates="payments")
    creator = relationship("Admin")

    @property
    def trader_name(self):
        return self.trader.company_name if self.trader else None

    @property
    def bill_number(self):
        return self.bill.bill_number if self.bill else None

    @property
    def created_by_name(self):
        return self.creator.display_name if self.creator else None
