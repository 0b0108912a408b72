import os
from typing import Dict, Optional

DEFAULT_ACCOUNT_LIMITS = "1:100000,2:80000,3:1000000,4:10000000,5:500000"
STATEMENT_WINDOW = 10


def parse_account_limits(text: str) -> Dict[int, int]:
    limits: Dict[int, int] = {}
    for item in text.split(","):
        item = item.strip()
        if not item:
            continue
        acc_id, sep, limit = item.partition(":")
        if not sep:
            raise ValueError(f"bad account entry {item!r}, expected id:limit")
        acc_id, limit = int(acc_id), int(limit)
        if limit <= 0:
            raise ValueError(f"account {acc_id} limit must be > 0")
        limits[acc_id] = limit
    if not limits:
        raise ValueError("no accounts configured")
    return limits


def database_url() -> str:
    url: Optional[str] = os.getenv("DATABASE_URL")
    if url:
        return url
    host = os.getenv("DB_HOST")
    if not host:
        return "sqlite:///./ledger.db"
    return "postgresql://{user}:{password}@{host}:{port}/{name}".format(
        user=os.getenv("DB_USER", "postgres"),
        password=os.getenv("DB_PASSWORD", ""),
        host=host,
        port=os.getenv("DB_PORT", "5432"),
        name=os.getenv("DB_NAME", "ledger"),
    )


DATABASE_URL = database_url()
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))
DB_ECHO = os.getenv("DB_ECHO", "0") == "1"
ACCOUNT_LIMITS = parse_account_limits(os.getenv("ACCOUNT_LIMITS", DEFAULT_ACCOUNT_LIMITS))
SERVER_HOST = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT = int(os.getenv("SERVER_PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
