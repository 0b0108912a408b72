import logging
from typing import Dict, Iterator, Optional

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine, select

from .config import DATABASE_URL, DB_ECHO, DB_POOL_SIZE
from .models import Account, Movement, MovementKind

logger = logging.getLogger(__name__)


def make_engine(url: str = DATABASE_URL, echo: bool = DB_ECHO) -> Engine:
    if url.startswith("sqlite"):
        eng = create_engine(url, echo=echo, connect_args={"check_same_thread": False, "timeout": 30})

        @event.listens_for(eng, "connect")
        def _sqlite_pragmas(dbapi_conn, _):
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON")
            cur.close()

        return eng
    return create_engine(url, echo=echo, pool_size=DB_POOL_SIZE, pool_pre_ping=True)


engine = make_engine()


def init_db(eng: Optional[Engine] = None) -> None:
    SQLModel.metadata.create_all(eng or engine)


def seed_accounts(limits: Dict[int, int], eng: Optional[Engine] = None) -> int:
    """Provision the fixed account set with one opening movement each.

    Accounts that already exist are left untouched, so this is safe to run on
    every start-up. Returns the number of accounts created.
    """
    created = 0
    with Session(eng or engine) as s:
        existing = set(s.exec(select(Account.id)).all())
        new = {k: v for k, v in limits.items() if k not in existing}
        for acc_id, limit in sorted(new.items()):
            s.add(Account(id=acc_id, credit_limit=limit, balance=0))
        s.flush()
        for acc_id, limit in sorted(new.items()):
            s.add(Movement(
                account_id=acc_id,
                amount=0,
                kind=MovementKind.OPENING.value,
                description="opening",
                credit_limit=limit,
                balance=0,
            ))
            created += 1
        s.commit()
    if created:
        logger.info("seeded %d account(s)", created)
    return created


def get_session() -> Iterator[Session]:
    with Session(engine) as s:
        yield s
