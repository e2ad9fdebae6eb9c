from sqlalchemy import Column, Integer, String
from database import Base
from models.audit_mixin import TimestampMixin


class Admin(Base, TimestampMixin):
    """Back-office user. Owned by the auth side; the ledger only reads names from it."""
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), unique=True, nullable=False)
    role = Column(String(50), default="admin", nullable=False)

    @property
    def display_name(self):
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or None
