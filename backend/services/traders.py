"""
Trader service: business rules for traders, their bills and payments.

Every function guards its invariants before delegating to the ``crud``
store and raises ``NotFoundError`` / ``ValidationError`` on violations.
Multi-step writes (a bill with its items) run in one transaction.
"""

from sqlalchemy.orm import Session
from decimal import Decimal
from typing import Optional
import logging

from crud import traders as crud_traders
from crud import trader_bills as crud_bills
from crud import trader_payments as crud_payments
from services.exceptions import NotFoundError, ValidationError
from schemas.traders import TraderCreate, TraderUpdate, TraderBalance
from schemas.trader_bills import TraderBillCreate, TraderBillUpdate
from schemas.trader_bill_items import TraderBillItemCreate, TraderBillItemUpdate
from schemas.trader_payments import TraderPaymentCreate

logger = logging.getLogger("traders")


def _require_trader(db: Session, trader_id: int):
    trader = crud_traders.get_trader(db, trader_id)
    if trader is None:
        raise NotFoundError("Trader not found")
    return trader


def _require_bill(db: Session, bill_id: int):
    bill = crud_bills.get_bill(db, bill_id)
    if bill is None:
        raise NotFoundError("Bill not found")
    return bill


def _require_item(db: Session, item_id: int):
    item = crud_bills.get_bill_item(db, item_id)
    if item is None:
        raise NotFoundError("Item not found")
    return item


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


# ==================== TRADERS ====================

def list_traders(db: Session, **options):
    return crud_traders.list_traders(db, **options)


def get_trader(db: Session, trader_id: int):
    return _require_trader(db, trader_id)


def create_trader(db: Session, trader: TraderCreate):
    if _is_blank(trader.company_name):
        raise ValidationError("Company name is required")
    db_trader = crud_traders.create_trader(db, trader)
    logger.info(f"Trader '{db_trader.company_name}' (ID: {db_trader.id}) created")
    return db_trader


def update_trader(db: Session, trader_id: int, trader: TraderUpdate):
    _require_trader(db, trader_id)
    if trader.company_name is not None and _is_blank(trader.company_name):
        raise ValidationError("Company name is required")
    db_trader = crud_traders.update_trader(db, trader_id, trader)
    logger.info(f"Trader ID {trader_id} updated")
    return db_trader


def delete_trader(db: Session, trader_id: int) -> bool:
    trader = _require_trader(db, trader_id)
    if (trader.current_balance or Decimal(0)) > 0:
        logger.warning(f"Refused to delete trader ID {trader_id}: outstanding balance {trader.current_balance}")
        raise ValidationError("Cannot delete trader with outstanding balance")
    deleted = crud_traders.delete_trader(db, trader_id)
    logger.info(f"Trader ID {trader_id} deleted")
    return deleted


def get_balance(db: Session, trader_id: int) -> TraderBalance:
    trader = _require_trader(db, trader_id)
    return TraderBalance(
        trader_id=trader.id,
        company_name=trader.company_name,
        credit_limit=trader.credit_limit or Decimal(0),
        current_balance=trader.current_balance or Decimal(0),
        total_purchases=trader.total_purchases or Decimal(0),
        total_payments=trader.total_payments or Decimal(0),
    )


def get_statistics(db: Session):
    return crud_traders.get_statistics(db)


# ==================== BILLS ====================

def get_bills(db: Session, trader_id: int, page: int = 1, limit: int = 10, payment_status: Optional[str] = None):
    _require_trader(db, trader_id)
    return crud_bills.list_bills(db, trader_id, page=page, limit=limit, payment_status=payment_status)


def get_bill(db: Session, bill_id: int):
    bill = crud_bills.get_bill_with_items(db, bill_id)
    if bill is None:
        raise NotFoundError("Bill not found")
    return bill


def create_bill(db: Session, trader_id: int, bill: TraderBillCreate, created_by: Optional[int] = None):
    """Create a bill, optionally with line items.

    When items are given, subtotal and total_amount come from them and any
    values the caller sent are ignored.
    """
    _require_trader(db, trader_id)

    subtotal = bill.subtotal or Decimal(0)
    total_amount = bill.total_amount or Decimal(0)
    items = bill.items or []

    if items:
        for item in items:
            if _is_blank(item.description):
                raise ValidationError("Item description is required")
        subtotal = sum(
            (
                crud_bills.line_total(
                    item.quantity if item.quantity is not None else Decimal(1),
                    item.unit_cost or Decimal(0),
                )
                for item in items
            ),
            Decimal(0),
        )
        total_amount = subtotal + crud_bills.to_money(bill.tax_amount or Decimal(0))

    if total_amount <= 0 and subtotal <= 0:
        raise ValidationError("Bill must have items with valid amounts")

    bill_data = bill.model_copy(update={"subtotal": subtotal, "total_amount": total_amount})
    try:
        db_bill = crud_bills.create_bill(db, trader_id, bill_data, created_by=created_by, commit=False)
        bill_id = db_bill.id
        for item in items:
            # Each insert recomputes the bill totals inside this same transaction
            crud_bills.add_bill_item(db, bill_id, item, commit=False)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db_bill = crud_bills.get_bill_with_items(db, bill_id)
    logger.info(f"Bill {db_bill.bill_number} (ID: {bill_id}) created for trader ID {trader_id} by admin {created_by}")
    return db_bill


def update_bill(db: Session, bill_id: int, bill: TraderBillUpdate):
    _require_bill(db, bill_id)
    crud_bills.update_bill(db, bill_id, bill)
    logger.info(f"Bill ID {bill_id} updated")
    return crud_bills.get_bill_with_items(db, bill_id)


def delete_bill(db: Session, bill_id: int) -> bool:
    bill = _require_bill(db, bill_id)
    if (bill.amount_paid or Decimal(0)) > 0:
        logger.warning(f"Refused to delete bill {bill.bill_number}: {bill.amount_paid} already paid")
        raise ValidationError("Cannot delete bill with payments")
    deleted = crud_bills.delete_bill(db, bill_id)
    logger.info(f"Bill {bill.bill_number} (ID: {bill_id}) deleted")
    return deleted


def add_bill_item(db: Session, bill_id: int, item: TraderBillItemCreate):
    _require_bill(db, bill_id)
    if _is_blank(item.description):
        raise ValidationError("Item description is required")
    if item.unit_cost is None or crud_bills.to_money(item.unit_cost) <= 0:
        raise ValidationError("Valid unit cost is required")
    db_item = crud_bills.add_bill_item(db, bill_id, item)
    logger.info(f"Item ID {db_item.id} added to bill ID {bill_id}")
    return db_item


def update_bill_item(db: Session, item_id: int, item: TraderBillItemUpdate):
    _require_item(db, item_id)
    if item.description is not None and _is_blank(item.description):
        raise ValidationError("Item description is required")
    if item.unit_cost is not None and crud_bills.to_money(item.unit_cost) <= 0:
        raise ValidationError("Valid unit cost is required")
    return crud_bills.update_bill_item(db, item_id, item)


def remove_bill_item(db: Session, item_id: int) -> bool:
    item = _require_item(db, item_id)
    removed = crud_bills.remove_bill_item(db, item_id)
    logger.info(f"Item ID {item_id} removed from bill ID {item.bill_id}")
    return removed


# ==================== PAYMENTS ====================

def record_payment(db: Session, trader_id: int, payment: TraderPaymentCreate, created_by: Optional[int] = None):
    _require_trader(db, trader_id)

    # Checked at the stored scale: 0.001 would be kept as 0.00
    if payment.amount is None or crud_bills.to_money(payment.amount) <= 0:
        raise ValidationError("Valid payment amount is required")

    if payment.bill_id is not None:
        bill = _require_bill(db, payment.bill_id)
        if bill.trader_id != trader_id:
            raise ValidationError("Bill does not belong to this trader")

    db_payment = crud_payments.record_payment(db, trader_id, payment, created_by=created_by)
    logger.info(f"Payment of {payment.amount} recorded for trader ID {trader_id} by admin {created_by}")
    return db_payment


def get_payments(db: Session, trader_id: int, page: int = 1, limit: int = 10):
    _require_trader(db, trader_id)
    return crud_payments.list_payments(db, trader_id, page=page, limit=limit)
