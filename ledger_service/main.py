import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request
from sqlmodel import Session

from .config import ACCOUNT_LIMITS, LOG_LEVEL
from .db import get_session, init_db, seed_accounts
from .errors import AccountNotFound, MalformedRequest, TransactionRejected
from .ledger import Balance, apply_transaction
from .log import setup_logging
from .models import MovementKind
from .statement import Statement, build_statement
from .validation import decode_body, parse_transaction

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(LOG_LEVEL)
    init_db()
    seed_accounts(ACCOUNT_LIMITS)
    logger.info("ledger-service ready, accounts %s", sorted(ACCOUNT_LIMITS))
    yield


app = FastAPI(title="ledger-service", lifespan=lifespan)


def known_account(account_id: int) -> int:
    # fixed account set; anything else never reaches the store
    if account_id not in ACCOUNT_LIMITS:
        raise HTTPException(404, "Account not found")
    return account_id


async def transaction_body(request: Request, account_id: int = Depends(known_account)) -> Any:
    # read by hand so an unknown account answers 404 before the body is parsed
    try:
        return decode_body(await request.body())
    except MalformedRequest as e:
        raise HTTPException(422, str(e))


@app.post("/accounts/{account_id}/transactions", response_model=Balance)
def post_transaction(
    account_id: int = Depends(known_account),
    body: Any = Depends(transaction_body),
    session: Session = Depends(get_session),
):
    try:
        tx = parse_transaction(body)
    except MalformedRequest as e:
        raise HTTPException(422, str(e))

    try:
        return apply_transaction(session, account_id, tx.amount, MovementKind(tx.kind), tx.description)
    except TransactionRejected:
        raise HTTPException(422, "Transaction rejected")


@app.get("/accounts/{account_id}/statement", response_model=Statement)
def get_statement(account_id: int = Depends(known_account), session: Session = Depends(get_session)):
    try:
        return build_statement(session, account_id)
    except AccountNotFound:
        raise HTTPException(404, "Account not found")
