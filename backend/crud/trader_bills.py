from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
import re

from models.audit_mixin import local_now
from models.trader_bills import TraderBill
from models.trader_bill_items import TraderBillItem
from schemas.common import Page, make_pagination
from schemas.trader_bills import TraderBillCreate, TraderBillUpdate
from schemas.trader_bill_items import TraderBillItemCreate, TraderBillItemUpdate

BILL_NUMBER_PREFIX = "TRD"
BILL_SEQUENCE_DIGITS = 5
_TRAILING_DIGITS = re.compile(r"(\d+)$")

# Columns that reject NULL; an explicit null in an update payload leaves them untouched
_REQUIRED_FIELDS = {"bill_number", "bill_date", "subtotal", "tax_amount", "total_amount"}
_MONEY_FIELDS = {"subtotal", "tax_amount", "total_amount"}

CENT = Decimal("0.01")
QUANTITY_STEP = Decimal("0.001")


# Values are rounded to the column scale before they are stored or compared,
# so what is validated is exactly what the database keeps.
def to_money(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_quantity(value) -> Decimal:
    return Decimal(value).quantize(QUANTITY_STEP, rounding=ROUND_HALF_UP)


def line_total(quantity, unit_cost) -> Decimal:
    """quantity * unit_cost on the stored (rounded) values, rounded to cents."""
    return to_money(to_quantity(quantity) * to_money(unit_cost))


def generate_bill_number(db: Session, year: Optional[int] = None) -> str:
    """Next bill number for the year: TRD-<year>-<5-digit sequence>.

    The sequence continues from the most recently inserted bill of that year,
    so numbers grow monotonically; the first bill of a year gets 00001.
    """
    if year is None:
        year = local_now().year
    prefix = f"{BILL_NUMBER_PREFIX}-{year}-"

    last_number = (
        db.query(TraderBill.bill_number)
        .filter(TraderBill.bill_number.like(f"{prefix}%"))
        .order_by(TraderBill.id.desc())
        .limit(1)
        .scalar()
    )

    next_number = 1
    if last_number:
        match = _TRAILING_DIGITS.search(last_number)
        if match:
            next_number = int(match.group(1)) + 1

    return f"{prefix}{next_number:0{BILL_SEQUENCE_DIGITS}d}"


def list_bills(
    db: Session,
    trader_id: int,
    page: int = 1,
    limit: int = 10,
    payment_status: Optional[str] = None,
) -> Page:
    query = db.query(TraderBill).filter(TraderBill.trader_id == trader_id)
    if payment_status:
        query = query.filter(TraderBill.payment_status == payment_status)

    total = query.count()
    bills = (
        query.options(
            selectinload(TraderBill.trader),
            selectinload(TraderBill.creator),
        )
        .order_by(TraderBill.bill_date.desc(), TraderBill.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .populate_existing()
        .all()
    )
    return Page(data=bills, pagination=make_pagination(page, limit, total))


def get_bill(db: Session, bill_id: int) -> Optional[TraderBill]:
    return (
        db.query(TraderBill)
        .options(
            selectinload(TraderBill.trader),
            selectinload(TraderBill.creator),
        )
        .filter(TraderBill.id == bill_id)
        .populate_existing()
        .first()
    )


def get_bill_with_items(db: Session, bill_id: int) -> Optional[TraderBill]:
    """Bill plus its items in insertion order, each with its product loaded."""
    return (
        db.query(TraderBill)
        .options(
            selectinload(TraderBill.trader),
            selectinload(TraderBill.creator),
            selectinload(TraderBill.items).selectinload(TraderBillItem.product),
        )
        .filter(TraderBill.id == bill_id)
        .populate_existing()
        .first()
    )


def create_bill(
    db: Session,
    trader_id: int,
    bill: TraderBillCreate,
    created_by: Optional[int] = None,
    commit: bool = True,
) -> TraderBill:
    db_bill = TraderBill(
        trader_id=trader_id,
        bill_number=bill.bill_number or generate_bill_number(db),
        bill_date=bill.bill_date or local_now().date(),
        due_date=bill.due_date,
        subtotal=to_money(bill.subtotal or Decimal(0)),
        tax_amount=to_money(bill.tax_amount or Decimal(0)),
        total_amount=to_money(bill.total_amount or Decimal(0)),
        bill_image=bill.bill_image,
        notes=bill.notes,
        created_by=created_by,
    )
    db.add(db_bill)
    db.flush()
    if commit:
        db.commit()
    return get_bill_with_items(db, db_bill.id)


def update_bill(db: Session, bill_id: int, bill: TraderBillUpdate, commit: bool = True) -> Optional[TraderBill]:
    db_bill = get_bill(db, bill_id)
    if db_bill is None:
        return None

    update_data = bill.model_dump(exclude_unset=True)
    update_data = {
        key: value for key, value in update_data.items()
        if value is not None or key not in _REQUIRED_FIELDS
    }
    if not update_data:
        return db_bill

    for key, value in update_data.items():
        if key in _MONEY_FIELDS:
            value = to_money(value)
        setattr(db_bill, key, value)
    db.flush()

    # A bill with line items keeps subtotal/total derived from them
    if db_bill.item_count:
        recalculate_bill_totals(db, bill_id)

    if commit:
        db.commit()
    return get_bill(db, bill_id)


def delete_bill(db: Session, bill_id: int, commit: bool = True) -> bool:
    db_bill = db.query(TraderBill).filter(TraderBill.id == bill_id).first()
    if db_bill is None:
        return False
    # Items are removed with the bill; payments keep their row with bill_id cleared
    db.delete(db_bill)
    db.flush()
    if commit:
        db.commit()
    return True


def _lock_bill(db: Session, bill_id: int) -> None:
    """Take the bill row lock so item writes and the totals recompute serialize per bill."""
    db.query(TraderBill.id).filter(TraderBill.id == bill_id).with_for_update().scalar()


def recalculate_bill_totals(db: Session, bill_id: int) -> None:
    """subtotal = sum(items.total_cost); total_amount = subtotal + tax_amount.

    Runs as a single UPDATE against the current item rows, so it is safe to
    call any number of times.
    """
    items_subtotal = (
        select(func.coalesce(func.sum(TraderBillItem.total_cost), 0))
        .where(TraderBillItem.bill_id == bill_id)
        .scalar_subquery()
    )
    db.query(TraderBill).filter(TraderBill.id == bill_id).update(
        {
            TraderBill.subtotal: items_subtotal,
            TraderBill.total_amount: items_subtotal + TraderBill.tax_amount,
        },
        synchronize_session=False,
    )
    db.flush()


def get_bill_item(db: Session, item_id: int) -> Optional[TraderBillItem]:
    return (
        db.query(TraderBillItem)
        .options(selectinload(TraderBillItem.product))
        .filter(TraderBillItem.id == item_id)
        .populate_existing()
        .first()
    )


def add_bill_item(db: Session, bill_id: int, item: TraderBillItemCreate, commit: bool = True) -> TraderBillItem:
    _lock_bill(db, bill_id)

    quantity = to_quantity(item.quantity if item.quantity is not None else Decimal(1))
    unit_cost = to_money(item.unit_cost if item.unit_cost is not None else Decimal(0))
    db_item = TraderBillItem(
        bill_id=bill_id,
        product_id=item.product_id,
        description=item.description,
        quantity=quantity,
        unit_cost=unit_cost,
        total_cost=line_total(quantity, unit_cost),
    )
    db.add(db_item)
    db.flush()

    recalculate_bill_totals(db, bill_id)
    if commit:
        db.commit()
    return get_bill_item(db, db_item.id)


def update_bill_item(db: Session, item_id: int, item: TraderBillItemUpdate, commit: bool = True) -> Optional[TraderBillItem]:
    db_item = get_bill_item(db, item_id)
    if db_item is None:
        return None
    bill_id = db_item.bill_id
    _lock_bill(db, bill_id)

    # Fields not supplied keep their stored values
    quantity = to_quantity(item.quantity if item.quantity is not None else db_item.quantity)
    unit_cost = to_money(item.unit_cost if item.unit_cost is not None else db_item.unit_cost)
    if item.description is not None:
        db_item.description = item.description
    db_item.quantity = quantity
    db_item.unit_cost = unit_cost
    db_item.total_cost = line_total(quantity, unit_cost)
    db.flush()

    recalculate_bill_totals(db, bill_id)
    if commit:
        db.commit()
    return get_bill_item(db, item_id)


def remove_bill_item(db: Session, item_id: int, commit: bool = True) -> bool:
    db_item = db.query(TraderBillItem).filter(TraderBillItem.id == item_id).first()
    if db_item is None:
        return False
    bill_id = db_item.bill_id
    _lock_bill(db, bill_id)

    db.delete(db_item)
    db.flush()

    recalculate_bill_totals(db, bill_id)
    if commit:
        db.commit()
    return True
