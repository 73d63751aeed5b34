"""Allowlist authentication middleware."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

import structlog

from sluice.core.errors import ErrorCode, ProcedureError
from sluice.core.procedure import ProcedureType
from sluice.core.results import ChainError, ChainResult
from sluice.middleware.base import Middleware, NextFn

logger = structlog.get_logger()

UserIdGetter = Callable[[Any], str | None]


def user_id_from_ctx(ctx: Any) -> str | None:
    """Read ``user_id`` from a mapping context or a context attribute."""
    if isinstance(ctx, Mapping):
        value = ctx.get("user_id")
    else:
        value = getattr(ctx, "user_id", None)
    return None if value is None else str(value)


class AuthMiddleware(Middleware):
    def __init__(
        self,
        allowed_user_ids: set[str],
        *,
        allow_all: bool = False,
        user_id_of: UserIdGetter | None = None,
    ) -> None:
        self._allowed = allowed_user_ids
        self._allow_all = allow_all
        self._user_id_of = user_id_of or user_id_from_ctx

    async def __call__(
        self,
        *,
        ctx: Any,
        type: ProcedureType,
        path: str,
        raw_input: Any,
        options: Any,
        call_next: NextFn,
    ) -> ChainResult:
        user_id = self._user_id_of(ctx)
        if self._allow_all or (user_id is not None and user_id in self._allowed):
            return await call_next()

        logger.warning("auth_rejected", user_id=user_id, path=path)
        return ChainError(
            error=ProcedureError(
                ErrorCode.UNAUTHORIZED,
                "Unauthorized: you are not allowed to call this procedure.",
            )
        )
