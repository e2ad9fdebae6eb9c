from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from database import get_db
from services import traders as trader_service
from schemas.traders import TraderCreate, TraderUpdate
from schemas.trader_bills import TraderBillCreate, TraderBillUpdate
from schemas.trader_bill_items import TraderBillItemCreate, TraderBillItemUpdate
from schemas.trader_payments import TraderPaymentCreate
from utils.auth_utils import get_user_identifier, require_super_admin
from utils.formatting import (
    format_bill,
    format_bill_item,
    format_payment,
    format_summary,
    format_trader,
    http_error,
    paginated_response,
    success_response,
)

router = APIRouter(
    prefix="/api/traders",
    tags=["Traders"],
    dependencies=[Depends(require_super_admin)],
)
logger = logging.getLogger("traders")

READ_FAILED = status.HTTP_500_INTERNAL_SERVER_ERROR
WRITE_FAILED = status.HTTP_400_BAD_REQUEST


# ==================== TRADERS ====================

@router.get("/")
def list_traders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    status: Optional[str] = None,
    sort: Optional[str] = "created_at",
    order: Optional[str] = "DESC",
    db: Session = Depends(get_db),
):
    """List traders with bill count and purchase/payment totals."""
    try:
        result = trader_service.list_traders(
            db, page=page, limit=limit, search=search, status=status, sort=sort, order=order
        )
    except Exception as e:
        raise http_error(e, READ_FAILED) from e
    return paginated_response(result, format_trader, "Traders retrieved successfully")


@router.get("/statistics")
def get_statistics(db: Session = Depends(get_db)):
    try:
        stats = trader_service.get_statistics(db)
    except Exception as e:
        raise http_error(e, READ_FAILED) from e
    return success_response(format_summary(stats), "Statistics retrieved successfully")


@router.get("/{trader_id}")
def get_trader(trader_id: int, db: Session = Depends(get_db)):
    try:
        trader = trader_service.get_trader(db, trader_id)
    except Exception as e:
        raise http_error(e, READ_FAILED) from e
    return success_response(format_trader(trader), "Trader retrieved successfully")


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_trader(trader: TraderCreate, db: Session = Depends(get_db), user: dict = Depends(require_super_admin)):
    try:
        db_trader = trader_service.create_trader(db, trader)
    except Exception as e:
        raise http_error(e, WRITE_FAILED) from e
    logger.info(f"Trader ID {db_trader.id} created by admin {get_user_identifier(user)}")
    return success_response(format_trader(db_trader), "Trader created successfully")


@router.put("/{trader_id}")
def update_trader(trader_id: int, trader: TraderUpdate, db: Session = Depends(get_db), user: dict = Depends(require_super_admin)):
    try:
        db_trader = trader_service.update_trader(db, trader_id, trader)
    except Exception as e:
        raise http_error(e, WRITE_FAILED) from e
    logger.info(f"Trader ID {trader_id} updated by admin {get_user_identifier(user)}")
    return success_response(format_trader(db_trader), "Trader updated successfully")


@router.delete("/{trader_id}")
def delete_trader(trader_id: int, db: Session = Depends(get_db), user: dict = Depends(require_super_admin)):
    try:
        trader_service.delete_trader(db, trader_id)
    except Exception as e:
        raise http_error(e, WRITE_FAILED) from e
    logger.info(f"Trader ID {trader_id} deleted by admin {get_user_identifier(user)}")
    return success_response(None, "Trader deleted successfully")


@router.get("/{trader_id}/balance")
def get_trader_balance(trader_id: int, db: Session = Depends(get_db)):
    try:
        balance = trader_service.get_balance(db, trader_id)
    except Exception as e:
        raise http_error(e, READ_FAILED) from e
    return success_response(format_summary(balance), "Trader balance retrieved successfully")


# ==================== BILLS ====================

@router.get("/{trader_id}/bills")
def list_trader_bills(
    trader_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    payment_status: Optional[str] = None,
    paymentStatus: Optional[str] = Query(None, include_in_schema=False),
    db: Session = Depends(get_db),
):
    try:
        result = trader_service.get_bills(
            db, trader_id, page=page, limit=limit, payment_status=payment_status or paymentStatus
        )
    except Exception as e:
        raise http_error(e, READ_FAILED) from e
    return paginated_response(result, format_bill, "Bills retrieved successfully")


@router.post("/{trader_id}/bills", status_code=status.HTTP_201_CREATED)
def create_trader_bill(
    trader_id: int,
    bill: TraderBillCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_super_admin),
):
    """Create a bill for a trader; line items, when given, set the totals."""
    try:
        db_bill = trader_service.create_bill(db, trader_id, bill, created_by=get_user_identifier(user))
    except Exception as e:
        raise http_error(e, WRITE_FAILED) from e
    return success_response(format_bill(db_bill, with_items=True), "Bill created successfully")


@router.get("/bills/{bill_id}")
def get_bill(bill_id: int, db: Session = Depends(get_db)):
    try:
        bill = trader_service.get_bill(db, bill_id)
    except Exception as e:
        raise http_error(e, READ_FAILED) from e
    return success_response(format_bill(bill, with_items=True), "Bill retrieved successfully")


@router.put("/bills/{bill_id}")
def update_bill(bill_id: int, bill: TraderBillUpdate, db: Session = Depends(get_db), user: dict = Depends(require_super_admin)):
    try:
        db_bill = trader_service.update_bill(db, bill_id, bill)
    except Exception as e:
        raise http_error(e, WRITE_FAILED) from e
    logger.info(f"Bill ID {bill_id} updated by admin {get_user_identifier(user)}")
    return success_response(format_bill(db_bill, with_items=True), "Bill updated successfully")


@router.delete("/bills/{bill_id}")
def delete_bill(bill_id: int, db: Session = Depends(get_db), user: dict = Depends(require_super_admin)):
    try:
        trader_service.delete_bill(db, bill_id)
    except Exception as e:
        raise http_error(e, WRITE_FAILED) from e
    logger.info(f"Bill ID {bill_id} deleted by admin {get_user_identifier(user)}")
    return success_response(None, "Bill deleted successfully")


# ==================== BILL ITEMS ====================

@router.post("/bills/{bill_id}/items", status_code=status.HTTP_201_CREATED)
def add_bill_item(bill_id: int, item: TraderBillItemCreate, db: Session = Depends(get_db)):
    try:
        db_item = trader_service.add_bill_item(db, bill_id, item)
    except Exception as e:
        raise http_error(e, WRITE_FAILED) from e
    return success_response(format_bill_item(db_item), "Item added successfully")


@router.put("/bills/items/{item_id}")
def update_bill_item(item_id: int, item: TraderBillItemUpdate, db: Session = Depends(get_db)):
    try:
        db_item = trader_service.update_bill_item(db, item_id, item)
    except Exception as e:
        raise http_error(e, WRITE_FAILED) from e
    return success_response(format_bill_item(db_item), "Item updated successfully")


@router.delete("/bills/items/{item_id}")
def remove_bill_item(item_id: int, db: Session = Depends(get_db)):
    try:
        trader_service.remove_bill_item(db, item_id)
    except Exception as e:
        raise http_error(e, WRITE_FAILED) from e
    return success_response(None, "Item removed successfully")


# ==================== PAYMENTS ====================

@router.post("/{trader_id}/payment")
def record_payment(
    trader_id: int,
    payment: TraderPaymentCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_super_admin),
):
    try:
        db_payment = trader_service.record_payment(db, trader_id, payment, created_by=get_user_identifier(user))
    except Exception as e:
        raise http_error(e, WRITE_FAILED) from e
    return success_response(format_payment(db_payment), "Payment recorded successfully")


@router.get("/{trader_id}/payments")
def list_trader_payments(
    trader_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    try:
        result = trader_service.get_payments(db, trader_id, page=page, limit=limit)
    except Exception as e:
        raise http_error(e, READ_FAILED) from e
    return paginated_response(result, format_payment, "Payments retrieved successfully")
