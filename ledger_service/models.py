from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import BigInteger, DateTime
from sqlmodel import Field, SQLModel

# largest single movement; keeps balances far inside a signed 64-bit column
MAX_AMOUNT = 2**31 - 1


class MovementKind(str, Enum):
    CREDIT = "c"
    DEBIT = "d"
    OPENING = "o"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    # SQLite hands timestamps back without an offset; they are stored as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class Account(SQLModel, table=True):
    id: int = Field(primary_key=True)
    credit_limit: int = Field(sa_type=BigInteger)
    balance: int = Field(default=0, sa_type=BigInteger)


class Movement(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    account_id: int = Field(foreign_key="account.id", index=True)
    amount: int = Field(sa_type=BigInteger)
    kind: str = Field(max_length=1)
    description: str = Field(max_length=10)
    applied_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    # account state right after this movement committed
    credit_limit: int = Field(sa_type=BigInteger)
    balance: int = Field(sa_type=BigInteger)
