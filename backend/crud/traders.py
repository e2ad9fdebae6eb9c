from sqlalchemy import or_, func
from sqlalchemy.orm import Session
from decimal import Decimal
from typing import Optional

from models.traders import Trader, TraderStatus
from models.trader_bills import TraderBill, BillPaymentStatus
from models.trader_payments import TraderPayment
from schemas.common import Page, make_pagination
from schemas.traders import TraderCreate, TraderUpdate, TraderStatistics

DEFAULT_PAYMENT_TERMS = 30

# Only these columns may drive ORDER BY; anything else falls back to newest first
SORTABLE_COLUMNS = {
    "id": Trader.id,
    "trader_id": Trader.id,
    "company_name": Trader.company_name,
    "current_balance": Trader.current_balance,
    "status": Trader.status,
    "created_at": Trader.created_at,
}

# Columns that reject NULL; an explicit null in an update payload leaves them untouched
_REQUIRED_FIELDS = {"company_name", "payment_terms", "credit_limit", "status"}


def _like_pattern(text: str) -> str:
    """Substring pattern with LIKE wildcards in the user text taken literally."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _order_by(sort: Optional[str], order: Optional[str]):
    column = SORTABLE_COLUMNS.get(sort) if sort else None
    if column is None:
        return [Trader.created_at.desc(), Trader.id.desc()]
    if (order or "").upper() == "ASC":
        return [column.asc(), Trader.id.asc()]
    return [column.desc(), Trader.id.desc()]


def list_traders(
    db: Session,
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    status: Optional[str] = None,
    sort: Optional[str] = "created_at",
    order: Optional[str] = "DESC",
) -> Page:
    query = db.query(Trader)

    if search:
        term = _like_pattern(search)
        query = query.filter(
            or_(
                Trader.company_name.ilike(term, escape="\\"),
                Trader.contact_person.ilike(term, escape="\\"),
                Trader.phone.ilike(term, escape="\\"),
                Trader.email.ilike(term, escape="\\"),
            )
        )
    if status:
        query = query.filter(Trader.status == status)

    total = query.count()
    traders = (
        query.order_by(*_order_by(sort, order))
        .offset((page - 1) * limit)
        .limit(limit)
        .populate_existing()
        .all()
    )
    return Page(data=traders, pagination=make_pagination(page, limit, total))


def get_trader(db: Session, trader_id: int) -> Optional[Trader]:
    return (
        db.query(Trader)
        .filter(Trader.id == trader_id)
        .populate_existing()
        .first()
    )


def create_trader(db: Session, trader: TraderCreate, commit: bool = True) -> Trader:
    db_trader = Trader(
        company_name=trader.company_name,
        contact_person=trader.contact_person,
        phone=trader.phone,
        email=trader.email,
        address=trader.address,
        tax_number=trader.tax_number,
        payment_terms=trader.payment_terms if trader.payment_terms is not None else DEFAULT_PAYMENT_TERMS,
        credit_limit=trader.credit_limit if trader.credit_limit is not None else Decimal(0),
        status=(trader.status or TraderStatus.ACTIVE).value,
        notes=trader.notes,
    )
    db.add(db_trader)
    db.flush()
    if commit:
        db.commit()
    return get_trader(db, db_trader.id)


def update_trader(db: Session, trader_id: int, trader: TraderUpdate, commit: bool = True) -> Optional[Trader]:
    db_trader = get_trader(db, trader_id)
    if db_trader is None:
        return None

    update_data = trader.model_dump(exclude_unset=True)
    update_data = {
        key: value for key, value in update_data.items()
        if value is not None or key not in _REQUIRED_FIELDS
    }
    if not update_data:
        # Nothing to change: hand back the stored record as-is
        return db_trader

    for key, value in update_data.items():
        if isinstance(value, TraderStatus):
            value = value.value
        setattr(db_trader, key, value)
    db.flush()
    if commit:
        db.commit()
    return get_trader(db, trader_id)


def delete_trader(db: Session, trader_id: int, commit: bool = True) -> bool:
    db_trader = db.query(Trader).filter(Trader.id == trader_id).first()
    if db_trader is None:
        return False
    # Bills, their items and payments go with the trader (ORM cascade)
    db.delete(db_trader)
    db.flush()
    if commit:
        db.commit()
    return True


def get_statistics(db: Session) -> TraderStatistics:
    total_traders = db.query(func.count(Trader.id)).scalar() or 0
    active_traders = (
        db.query(func.count(Trader.id))
        .filter(Trader.status == TraderStatus.ACTIVE.value)
        .scalar()
    ) or 0
    total_balance = db.query(func.coalesce(func.sum(Trader.current_balance), 0)).scalar()
    total_purchases = db.query(func.coalesce(func.sum(TraderBill.total_amount), 0)).scalar()
    total_payments = db.query(func.coalesce(func.sum(TraderPayment.amount), 0)).scalar()
    unpaid_bills = (
        db.query(func.count(TraderBill.id))
        .filter(TraderBill.payment_status == BillPaymentStatus.UNPAID.value)
        .scalar()
    ) or 0
    total_due = (
        db.query(func.coalesce(func.sum(TraderBill.amount_due), 0))
        .filter(TraderBill.payment_status != BillPaymentStatus.PAID.value)
        .scalar()
    )

    return TraderStatistics(
        total_traders=total_traders,
        active_traders=active_traders,
        total_balance=Decimal(str(total_balance or 0)),
        total_purchases=Decimal(str(total_purchases or 0)),
        total_payments=Decimal(str(total_payments or 0)),
        unpaid_bills=unpaid_bills,
        total_due=Decimal(str(total_due or 0)),
    )
