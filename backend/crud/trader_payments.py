from sqlalchemy.orm import Session, selectinload
from typing import Optional

from crud.trader_bills import to_money
from models.audit_mixin import local_now
from models.trader_payments import TraderPayment
from schemas.common import Page, make_pagination
from schemas.trader_payments import TraderPaymentCreate

DEFAULT_PAYMENT_METHOD = "cash"


def _with_relations(query):
    return query.options(
        selectinload(TraderPayment.trader),
        selectinload(TraderPayment.bill),
        selectinload(TraderPayment.creator),
    )


def get_payment(db: Session, payment_id: int) -> Optional[TraderPayment]:
    return (
        _with_relations(db.query(TraderPayment))
        .filter(TraderPayment.id == payment_id)
        .populate_existing()
        .first()
    )


def record_payment(
    db: Session,
    trader_id: int,
    payment: TraderPaymentCreate,
    created_by: Optional[int] = None,
    commit: bool = True,
) -> TraderPayment:
    """Insert a payment row.

    Trader current_balance and bill amount_paid are maintained outside the
    ledger and are not touched here.
    """
    db_payment = TraderPayment(
        trader_id=trader_id,
        bill_id=payment.bill_id,
        amount=to_money(payment.amount),
        payment_method=payment.payment_method or DEFAULT_PAYMENT_METHOD,
        payment_date=payment.payment_date or local_now(),
        reference_number=payment.reference_number,
        notes=payment.notes,
        created_by=created_by,
    )
    db.add(db_payment)
    db.flush()
    if commit:
        db.commit()
    return get_payment(db, db_payment.id)


def list_payments(db: Session, trader_id: int, page: int = 1, limit: int = 10) -> Page:
    query = db.query(TraderPayment).filter(TraderPayment.trader_id == trader_id)

    total = query.count()
    payments = (
        _with_relations(query)
        .order_by(TraderPayment.payment_date.desc(), TraderPayment.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .populate_existing()
        .all()
    )
    return Page(data=payments, pagination=make_pagination(page, limit, total))
