from datetime import datetime
from typing import List

from pydantic import BaseModel
from sqlmodel import Session, col, select

from .config import STATEMENT_WINDOW
from .errors import AccountNotFound
from .models import Movement, MovementKind, as_utc, utcnow


class BalanceSnapshot(BaseModel):
    total: int
    limit: int
    as_of: datetime


class MovementOut(BaseModel):
    amount: int
    kind: str
    description: str
    applied_at: datetime


class Statement(BaseModel):
    balance: BalanceSnapshot
    recent_movements: List[MovementOut]


def build_statement(session: Session, account_id: int, window: int = STATEMENT_WINDOW) -> Statement:
    """Current balance/limit plus up to `window` real movements, newest first.

    Balance and limit come from the newest entry's snapshot, so no summing is
    needed. The opening entry carries a snapshot too but is never listed.
    """
    # one extra row so a full window survives dropping the opening entry
    rows = session.exec(
        select(Movement)
        .where(Movement.account_id == account_id)
        .order_by(col(Movement.id).desc())
        .limit(window + 1)
    ).all()
    if not rows:
        raise AccountNotFound(f"no ledger history for account {account_id}")

    newest = rows[0]
    movements = [
        MovementOut(amount=m.amount, kind=m.kind, description=m.description, applied_at=as_utc(m.applied_at))
        for m in rows
        if m.kind != MovementKind.OPENING.value
    ][:window]

    return Statement(
        balance=BalanceSnapshot(total=newest.balance, limit=newest.credit_limit, as_of=utcnow()),
        recent_movements=movements,
    )
