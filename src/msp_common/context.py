"""Correlation id of the tool call in progress, one per asyncio task."""
from __future__ import annotations

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

_corr_id_ctx: ContextVar[str | None] = ContextVar("msp_corr_id", default=None)


def new_request_id() -> str:
    return uuid.uuid4().hex


def get_request_id() -> str:
    rid = _corr_id_ctx.get()
    if not rid:
        rid = new_request_id()
        _corr_id_ctx.set(rid)
    return rid


def set_request_id(rid: str | None) -> None:
    if rid:
        _corr_id_ctx.set(rid)


@contextmanager
def request_scope(rid: str | None = None) -> Iterator[str]:
    """Bind a correlation id for the duration of the block, then restore the previous one."""
    rid = rid or new_request_id()
    token = _corr_id_ctx.set(rid)
    try:
        yield rid
    finally:
        _corr_id_ctx.reset(token)
