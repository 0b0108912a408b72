import logging

from pydantic import BaseModel, StrictInt
from sqlalchemy import update
from sqlmodel import Session

from .errors import TransactionRejected
from .models import MAX_AMOUNT, Account, Movement, MovementKind

logger = logging.getLogger(__name__)

_account = Account.__table__


class Balance(BaseModel):
    balance: StrictInt
    limit: StrictInt


def _balance_update(account_id: int, amount: int, kind: MovementKind):
    stmt = update(_account).where(_account.c.id == account_id)
    if kind == MovementKind.CREDIT:
        stmt = stmt.values(balance=_account.c.balance + amount)
    else:
        # limit check and mutation in one statement, evaluated under the row lock
        stmt = stmt.where(_account.c.balance - amount >= -_account.c.credit_limit)
        stmt = stmt.values(balance=_account.c.balance - amount)
    return stmt.returning(_account.c.balance, _account.c.credit_limit)


def apply_transaction(session: Session, account_id: int, amount: int, kind: MovementKind, description: str) -> Balance:
    """Apply one credit or debit and record it, atomically.

    The balance update and the movement insert share the session's
    transaction; on rejection or any failure before the commit nothing is
    persisted. Raises TransactionRejected when the update matched no row:
    either the debit would take the balance below -limit or the account row
    is missing.
    """
    kind = MovementKind(kind)
    if kind == MovementKind.OPENING:
        raise ValueError("opening entries are created by seeding only")
    if not 0 < amount <= MAX_AMOUNT:
        raise ValueError(f"amount must be between 1 and {MAX_AMOUNT}")

    try:
        row = session.connection().execute(_balance_update(account_id, amount, kind)).first()
        if row is not None:
            result = Balance(balance=row[0], limit=row[1])
            session.add(Movement(
                account_id=account_id,
                amount=amount,
                kind=kind.value,
                description=description,
                credit_limit=result.limit,
                balance=result.balance,
            ))
            session.commit()
    except Exception:
        session.rollback()
        logger.exception("failure applying transaction to account %d", account_id)
        raise

    if row is None:
        session.rollback()
        logger.info("rejected %s of %d on account %d", kind.name.lower(), amount, account_id)
        raise TransactionRejected(f"transaction rejected for account {account_id}")

    logger.debug("applied %s of %d on account %d -> %d", kind.name.lower(), amount, account_id, result.balance)
    return result
