from sqlalchemy import Column, Integer, String
from database import Base


class Product(Base):
    """Catalog product, referenced by bill items for display names only."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    product_name = Column(String(255), nullable=False)
