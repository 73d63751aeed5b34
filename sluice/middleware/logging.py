"""Call logging middleware — path, type, duration and outcome."""

from __future__ import annotations

import time
from typing import Any

import structlog

from sluice.core.procedure import ProcedureType
from sluice.core.results import ChainError, ChainResult
from sluice.middleware.base import Middleware, NextFn

logger = structlog.get_logger()


class LoggingMiddleware(Middleware):
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
        start = time.perf_counter()
        with structlog.contextvars.bound_contextvars(
            procedure_path=path, procedure_type=type.value
        ):
            result = await call_next()
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            if isinstance(result, ChainError):
                logger.info(
                    "procedure_errored",
                    code=result.error.code.value,
                    duration_ms=duration_ms,
                )
            else:
                logger.info("procedure_completed", duration_ms=duration_ms)
        return result
