from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from ledger_service.errors import TransactionRejected
from ledger_service.ledger import apply_transaction
from ledger_service.models import MAX_AMOUNT, Account, Movement, MovementKind

CREDIT, DEBIT = MovementKind.CREDIT, MovementKind.DEBIT


def movements(session, account_id):
    return session.exec(
        select(Movement).where(Movement.account_id == account_id).order_by(col(Movement.id))
    ).all()


def test_credit_increases_balance_and_records_movement(session):
    res = apply_transaction(session, 1, 500, CREDIT, "dep")
    assert (res.balance, res.limit) == (500, 1000)

    rows = movements(session, 1)
    assert [r.kind for r in rows] == ["o", "c"]
    assert (rows[-1].amount, rows[-1].balance, rows[-1].credit_limit) == (500, 500, 1000)


def test_debit_down_to_exactly_minus_limit_succeeds(session):
    res = apply_transaction(session, 1, 1000, DEBIT, "all")
    assert res.balance == -1000


def test_debit_past_limit_is_rejected_without_writes(session):
    apply_transaction(session, 1, 500, CREDIT, "dep")
    with pytest.raises(TransactionRejected):
        apply_transaction(session, 1, 1501, DEBIT, "x")

    assert session.get(Account, 1).balance == 500
    assert len(movements(session, 1)) == 2


def test_rejection_is_repeatable(session):
    apply_transaction(session, 1, 900, DEBIT, "a")
    for _ in range(5):
        with pytest.raises(TransactionRejected):
            apply_transaction(session, 1, 101, DEBIT, "b")
    session.expire_all()
    assert session.get(Account, 1).balance == -900
    assert len(movements(session, 1)) == 2


def test_unknown_account_row_is_rejected(session):
    with pytest.raises(TransactionRejected):
        apply_transaction(session, 99, 10, CREDIT, "ghost")
    assert movements(session, 99) == []


def test_opening_kind_cannot_be_applied(session):
    with pytest.raises(ValueError):
        apply_transaction(session, 1, 10, MovementKind.OPENING, "nope")


def test_snapshots_match_replayed_balances(session):
    ops = [(CREDIT, 300), (DEBIT, 700), (DEBIT, 400), (CREDIT, 50), (DEBIT, 2000), (DEBIT, 250)]
    for kind, amount in ops:
        try:
            apply_transaction(session, 1, amount, kind, "op")
        except TransactionRejected:
            pass

    rows = movements(session, 1)
    assert rows[0].kind == "o"
    balance = rows[0].balance
    for m in rows[1:]:
        balance += m.amount if m.kind == "c" else -m.amount
        assert m.balance == balance
        assert m.credit_limit == 1000
        assert balance >= -m.credit_limit
    assert session.get(Account, 1).balance == balance


def test_concurrent_debits_never_breach_limit(engine):
    # limit 1000: only three debits of 300 fit
    def debit(_):
        with Session(engine) as s:
            try:
                apply_transaction(s, 1, 300, DEBIT, "race")
                return True
            except TransactionRejected:
                return False

    with ThreadPoolExecutor(max_workers=10) as pool:
        results = list(pool.map(debit, range(10)))

    assert results.count(True) == 3
    with Session(engine) as s:
        assert s.get(Account, 1).balance == -900
        assert len(movements(s, 1)) == 4


@pytest.mark.parametrize("amount", [0, -1, MAX_AMOUNT + 1, 2**62])
def test_out_of_range_amount_writes_nothing(session, amount):
    with pytest.raises(ValueError):
        apply_transaction(session, 1, amount, CREDIT, "big")
    assert session.get(Account, 1).balance == 0
    assert len(movements(session, 1)) == 1


def test_large_credits_keep_integer_balance(session):
    for _ in range(3):
        res = apply_transaction(session, 1, MAX_AMOUNT, CREDIT, "max")
    assert res.balance == 3 * MAX_AMOUNT
    assert isinstance(res.balance, int)
    assert movements(session, 1)[-1].balance == 3 * MAX_AMOUNT


def test_store_failure_rolls_back_balance_and_movement(engine, session, monkeypatch):
    def fail():
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(session, "commit", fail)
    with pytest.raises(SQLAlchemyError):
        apply_transaction(session, 1, 500, CREDIT, "dep")

    with Session(engine) as s:
        assert s.get(Account, 1).balance == 0
        assert [m.kind for m in movements(s, 1)] == ["o"]
