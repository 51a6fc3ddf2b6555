"""Shared pieces for ledger entities: camelCase wire names and millisecond clocks."""

import uuid
from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MS = timedelta(milliseconds=1)


def utc_now_ms() -> datetime:
    """Current UTC time truncated to whole milliseconds."""
    now = datetime.now(UTC)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def to_epoch_ms(value: datetime) -> int:
    """Exact integer milliseconds since the Unix epoch."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return (value - EPOCH) // _ONE_MS


def new_id() -> str:
    return str(uuid.uuid4())


class LedgerModel(BaseModel):
    """Base model whose stored form uses camelCase keys (minStock, alertEnabled...)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
    )
