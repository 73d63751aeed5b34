"""Middleware chain executor — linked continuations with short-circuit."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

import structlog

from sluice.core.errors import ErrorCode, ProcedureError, error_from_unknown
from sluice.core.results import ChainError, ChainResult, call_safe, is_chain_result

if TYPE_CHECKING:
    from sluice.core.procedure import CallOptions
    from sluice.middleware.base import MiddlewareFunction, NextFn

logger = structlog.get_logger()

ErrorClassifier = Callable[[Any], ProcedureError]

_UNSET: Any = object()

NO_RESULT_MESSAGE = (
    "No result from middlewares - did you forget to `return await call_next()`?"
)


def _check_result(value: Any, path: str, index: int) -> ChainResult:
    if is_chain_result(value):
        return value
    if value is None:
        message = NO_RESULT_MESSAGE
    else:
        message = (
            f"Middleware returned {type(value).__name__}, expected a chain result"
        )
    logger.error(
        "chain_integrity_error",
        path=path,
        link_index=index,
        returned_type=type(value).__name__,
    )
    return ChainError(
        error=ProcedureError(ErrorCode.INTERNAL_SERVER_ERROR, message)
    )


def _classify(classify_error: ErrorClassifier, caught: Any) -> ProcedureError:
    error = classify_error(caught)
    if isinstance(error, ProcedureError):
        return error
    logger.error(
        "classifier_returned_non_procedure_error",
        returned_type=type(error).__name__,
    )
    return error_from_unknown(caught)


def build_chain(
    links: Sequence[MiddlewareFunction],
    opts: CallOptions,
    *,
    options: Any,
    classify_error: ErrorClassifier,
) -> NextFn:
    """Return the continuation that starts the chain.

    Continuations are built on demand so each one inherits the context
    resolved by the link that calls it.
    """

    def _link(index: int, inherited_ctx: Any) -> NextFn:
        fn = links[index]

        async def call_next(ctx: Any = _UNSET) -> ChainResult:
            resolved_ctx = inherited_ctx if ctx is _UNSET else ctx
            downstream = (
                _link(index + 1, resolved_ctx) if index + 1 < len(links) else None
            )
            res = await call_safe(
                lambda: fn(
                    ctx=resolved_ctx,
                    type=opts.type,
                    path=opts.path,
                    raw_input=opts.raw_input,
                    options=options,
                    call_next=downstream,
                )
            )
            if res.ok:
                return _check_result(res.data, opts.path, index)
            return ChainError(error=_classify(classify_error, res.error))

        return call_next

    return _link(0, opts.ctx)


async def run_chain(
    links: Sequence[MiddlewareFunction],
    opts: CallOptions,
    *,
    options: Any,
    classify_error: ErrorClassifier,
) -> ChainResult:
    if not links:
        raise ValueError("chain must contain at least the resolver link")
    start = build_chain(links, opts, options=options, classify_error=classify_error)
    return await start()
