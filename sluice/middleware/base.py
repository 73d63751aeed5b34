"""Middleware contract — each link can forward to call_next or short-circuit."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from sluice.core.procedure import ProcedureType
    from sluice.core.results import ChainResult


class NextFn(Protocol):
    """Continuation into the rest of the chain.

    Called with no argument the downstream links see the current context;
    passing ``ctx`` substitutes it for everything downstream.
    """

    def __call__(self, ctx: Any = ...) -> Awaitable[ChainResult]: ...


class MiddlewareFunction(Protocol):
    def __call__(
        self,
        *,
        ctx: Any,
        type: ProcedureType,
        path: str,
        raw_input: Any,
        options: Any,
        call_next: NextFn,
    ) -> Awaitable[ChainResult] | ChainResult: ...


class Middleware(ABC):
    """Base for class-based middleware.

    Instances are plain middleware functions, so they can be mixed freely
    with bare ``async def`` middleware in a procedure's list.
    """

    @abstractmethod
    async def __call__(
        self,
        *,
        ctx: Any,
        type: ProcedureType,
        path: str,
        raw_input: Any,
        options: Any,
        call_next: NextFn,
    ) -> ChainResult: ...
