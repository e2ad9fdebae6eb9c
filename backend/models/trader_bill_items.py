from sqlalchemy import Column, Integer, Numeric, ForeignKey, String
from sqlalchemy.orm import relationship
from database import Base


class TraderBillItem(Base):
    __tablename__ = "trader_bill_items"

    id = Column(Integer, primary_key=True, index=True)
    bill_id = Column(Integer, ForeignKey("trader_bills.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    description = Column(String(500), nullable=False)
    quantity = Column(Numeric(10, 3), default=1, nullable=False)
    unit_cost = Column(Numeric(12, 2), nullable=False)
    total_cost = Column(Numeric(14, 2), nullable=False) # quantity * unit_cost, stored for convenience

    # Relationships
    bill = relationship("TraderBill", back_populates="items")
    product = relationship("Product")

    @property
    def product_name(self):
        return self.product.product_name if self.product else None
