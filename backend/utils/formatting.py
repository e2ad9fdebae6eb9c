"""
Response formatting for the trader ledger API.

Records leave the API as snake_case dicts with money values as floats. While
RESPONSE_DUAL_CASE is on (the default) every key is also emitted in
camelCase, because the admin frontend still reads both spellings.
"""

from decimal import Decimal
from typing import Any, Dict, Iterable, Optional
import logging
import os

from dotenv import load_dotenv
from fastapi import HTTPException, status
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from schemas.common import Pagination
from schemas.traders import Trader as TraderSchema
from schemas.trader_bills import TraderBill as TraderBillSchema
from schemas.trader_bill_items import TraderBillItem as TraderBillItemSchema
from schemas.trader_payments import TraderPayment as TraderPaymentSchema
from services.exceptions import NotFoundError, LedgerError

load_dotenv()

logger = logging.getLogger("formatting")

DUAL_CASE = os.getenv("RESPONSE_DUAL_CASE", "true").strip().lower() in ("1", "true", "yes", "on")

# Missing money values are reported as 0 rather than null
MONEY_FIELDS = frozenset({
    "credit_limit", "current_balance", "total_purchases", "total_payments",
    "subtotal", "tax_amount", "total_amount", "amount_paid", "amount_due",
    "unit_cost", "total_cost", "amount", "total_balance", "total_due",
})


def to_number(value: Any) -> Any:
    """Decimals become floats; everything else passes through."""
    if isinstance(value, Decimal):
        return float(value)
    return value


def _dual_case(record: Dict[str, Any]) -> Dict[str, Any]:
    result = {}
    for key, value in record.items():
        result[key] = value
        camel = to_camel(key)
        if camel != key:
            result[camel] = value
    return result


def format_record(record: Dict[str, Any], id_alias: Optional[str] = None) -> Dict[str, Any]:
    """Coerce numbers, add the legacy ``<entity>_id`` key and apply the casing policy."""
    formatted = {}
    for key, value in record.items():
        if key in MONEY_FIELDS and value is None:
            value = 0.0
        formatted[key] = to_number(value)
    if id_alias and "id" in formatted:
        formatted[id_alias] = formatted["id"]
    return _dual_case(formatted) if DUAL_CASE else formatted


def format_trader(trader) -> Optional[Dict[str, Any]]:
    if trader is None:
        return None
    return format_record(TraderSchema.model_validate(trader).model_dump(), id_alias="trader_id")


def format_bill_item(item) -> Optional[Dict[str, Any]]:
    if item is None:
        return None
    return format_record(TraderBillItemSchema.model_validate(item).model_dump(), id_alias="item_id")


def format_bill(bill, with_items: bool = False) -> Optional[Dict[str, Any]]:
    if bill is None:
        return None
    record = TraderBillSchema.model_validate(bill).model_dump()
    if with_items:
        record["items"] = [format_bill_item(item) for item in bill.items]
    return format_record(record, id_alias="bill_id")


def format_payment(payment) -> Optional[Dict[str, Any]]:
    if payment is None:
        return None
    return format_record(TraderPaymentSchema.model_validate(payment).model_dump(), id_alias="payment_id")


def format_summary(summary) -> Dict[str, Any]:
    """Balance / statistics blocks: plain numbers, same casing policy."""
    return format_record(summary.model_dump())


def success_response(
    data: Any = None,
    message: str = "Success",
    pagination: Optional[Pagination] = None,
) -> Dict[str, Any]:
    response = {"success": True, "message": message, "data": data}
    if pagination is not None:
        response["pagination"] = pagination.model_dump()
    return response


def paginated_response(page, formatter, message: str) -> Dict[str, Any]:
    return success_response([formatter(row) for row in page.data], message, pagination=page.pagination)


def error_response(message: str, errors: Optional[Iterable] = None) -> Dict[str, Any]:
    response = {"success": False, "message": message}
    if errors:
        response["errors"] = errors
    return response


def _database_error_message(exc: SQLAlchemyError) -> str:
    if isinstance(exc, IntegrityError) and "bill_number" in str(exc.orig):
        return "Bill number already exists"
    return "Request failed"


def http_error(exc: Exception, default_status: int) -> HTTPException:
    """Map a service/store failure to the HTTPException the router raises.

    Not-found failures are 404 whatever the path; everything else gets the
    path's default (400 for writes, 500 for reads).
    """
    if isinstance(exc, SQLAlchemyError):
        # Driver text carries the SQL and its parameters; it stays in the log
        logger.exception(f"Database error while handling request: {exc}")
        return HTTPException(status_code=default_status, detail=_database_error_message(exc))

    message = exc.message if isinstance(exc, LedgerError) else str(exc)
    if isinstance(exc, NotFoundError) or "not found" in message.lower():
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message)
    if not isinstance(exc, LedgerError):
        logger.exception(f"Unexpected error while handling request: {exc}")
    return HTTPException(status_code=default_status, detail=message or "Request failed")
