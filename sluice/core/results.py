"""Result values threaded through the chain, and the safe invoker."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from sluice.core.errors import ProcedureError


class SafeOk(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    ok: Literal[True] = True
    data: Any = None


class SafeErr(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    ok: Literal[False] = False
    error: Any


SafeResult = SafeOk | SafeErr


class ChainOk(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    ok: Literal[True] = True
    data: Any = None
    ctx: Any = None


class ChainError(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    ok: Literal[False] = False
    error: ProcedureError


ChainResult = ChainOk | ChainError


def is_chain_result(value: Any) -> bool:
    return isinstance(value, ChainOk | ChainError)


async def call_safe(fn: Callable[[], Any]) -> SafeResult:
    """Run *fn*, awaiting its value if needed, and capture any failure.

    Only ``Exception`` subclasses are captured; cancellation and interpreter
    exit still propagate to the caller.
    """
    try:
        value = fn()
        if inspect.isawaitable(value):
            value = await value
    except Exception as e:
        return SafeErr(error=e)
    return SafeOk(data=value)
