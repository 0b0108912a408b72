import json
import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError, field_validator

from .errors import MalformedRequest
from .models import MAX_AMOUNT

_CLEAN_INT = re.compile(r"^\+?[0-9]+$")


class TransactionIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    amount: int
    kind: Literal["c", "d"]
    description: StrictStr

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, v: Any) -> int:
        # bool is an int subclass; floats are refused even when integral
        if isinstance(v, bool) or not isinstance(v, (int, str)):
            raise ValueError("amount must be an integer")
        if isinstance(v, str):
            v = v.strip()
            if len(v) > 12 or not _CLEAN_INT.match(v):
                raise ValueError("amount must be an integer")
            v = int(v)
        if not 0 < v <= MAX_AMOUNT:
            raise ValueError(f"amount must be between 1 and {MAX_AMOUNT}")
        return v

    @field_validator("description")
    @classmethod
    def _description(cls, v: str) -> str:
        if not 1 <= len(v) <= 10:
            raise ValueError("description must be 1..10 characters")
        return v


def parse_transaction(body: Any) -> TransactionIn:
    if not isinstance(body, dict):
        raise MalformedRequest("body must be a JSON object")
    try:
        return TransactionIn.model_validate(body)
    except ValidationError as e:
        raise MalformedRequest(str(e)) from e


def decode_body(raw: bytes) -> Any:
    """JSON-decode a raw request body; an empty body decodes to None."""
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError as e:
        raise MalformedRequest("body is not valid JSON") from e
