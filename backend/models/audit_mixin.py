from sqlalchemy import Column, DateTime
from datetime import datetime
from dotenv import load_dotenv
import os
import pytz

load_dotenv()

APP_TIMEZONE = pytz.timezone(os.getenv("APP_TIMEZONE", "Asia/Kolkata"))


def local_now() -> datetime:
    """Current time in the application timezone (APP_TIMEZONE, default Asia/Kolkata)."""
    return datetime.now(APP_TIMEZONE)


class TimestampMixin:
    """Mixin that provides created/updated timestamps.

    Ledger rows are hard-deleted, so there are no soft-delete columns here.
    """
    # DateTime(timezone=True) ensures the timezone info is persisted in the database.
    created_at = Column(DateTime(timezone=True), default=local_now)
    updated_at = Column(DateTime(timezone=True), onupdate=local_now)
