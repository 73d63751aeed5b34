"""Procedure — middleware, validators and a resolver executed as one call."""

from __future__ import annotations

import inspect
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict

from sluice.core.chain import ErrorClassifier, run_chain
from sluice.core.errors import ErrorCode, ProcedureError, error_from_unknown
from sluice.core.results import ChainError, ChainOk
from sluice.core.validators import get_parse_fn, parse_value
from sluice.middleware.base import MiddlewareFunction

logger = structlog.get_logger()


class ProcedureType(Enum):
    QUERY = "query"
    MUTATION = "mutation"
    SUBSCRIPTION = "subscription"


class CallOptions(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    ctx: Any = None
    raw_input: Any = None
    path: str
    type: ProcedureType


Resolver = Callable[..., Any]


class ProcedureDefinition(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    resolver: Resolver
    input_validator: Any
    output_validator: Any
    middlewares: tuple[Any, ...] = ()
    options: Any = None


class Procedure:
    """One executable operation.

    Validators are resolved once here; an unrecognised validator raises
    ``ValidatorConfigError`` and no instance is produced. Instances hold no
    per-call state and may be called concurrently.
    """

    def __init__(
        self,
        definition: ProcedureDefinition,
        *,
        classify_error: ErrorClassifier = error_from_unknown,
    ) -> None:
        self._definition = definition
        self._middlewares: tuple[MiddlewareFunction, ...] = tuple(
            definition.middlewares
        )
        self._parse_input = get_parse_fn(definition.input_validator)
        self._parse_output = get_parse_fn(definition.output_validator)
        self._classify_error = classify_error

    @property
    def definition(self) -> ProcedureDefinition:
        return self._definition

    @property
    def middlewares(self) -> tuple[MiddlewareFunction, ...]:
        return self._middlewares

    @property
    def options(self) -> Any:
        return self._definition.options

    async def _parse_input_value(self, raw_input: Any) -> Any:
        try:
            return await parse_value(self._parse_input, raw_input)
        except Exception as e:
            raise ProcedureError(ErrorCode.BAD_REQUEST, cause=e) from e

    async def _parse_output_value(self, raw_output: Any) -> Any:
        try:
            return await parse_value(self._parse_output, raw_output)
        except Exception as e:
            raise ProcedureError(
                ErrorCode.INTERNAL_SERVER_ERROR,
                "Output validation failed",
                cause=e,
            ) from e

    def _resolver_link(self) -> MiddlewareFunction:
        async def resolve(
            *,
            ctx: Any,
            type: ProcedureType,
            path: str,
            raw_input: Any,
            options: Any,
            call_next: Any = None,
        ) -> ChainOk:
            parsed_input = await self._parse_input_value(raw_input)
            raw_output = self._definition.resolver(
                ctx=ctx,
                input=parsed_input,
                type=type,
                path=path,
                raw_input=raw_input,
                options=options,
            )
            if inspect.isawaitable(raw_output):
                raw_output = await raw_output
            data = await self._parse_output_value(raw_output)
            return ChainOk(data=data, ctx=ctx)

        return resolve

    async def call(self, opts: CallOptions) -> Any:
        """Run middlewares in order, parse input, resolve and parse output.

        Returns the parsed output or raises the ``ProcedureError`` produced
        by whichever link failed first.
        """
        links = [*self._middlewares, self._resolver_link()]
        result = await run_chain(
            links,
            opts,
            options=self._definition.options,
            classify_error=self._classify_error,
        )
        if isinstance(result, ChainError):
            error = result.error
            log = logger.debug if error.code.is_client_error else logger.warning
            log(
                "procedure_call_failed",
                path=opts.path,
                type=opts.type.value,
                code=error.code.value,
                error=error.message,
            )
            raise error
        return result.data

    def _derive(self, definition: ProcedureDefinition) -> Procedure:
        """Build a same-class procedure; override if __init__ needs more."""
        return type(self)(definition, classify_error=self._classify_error)

    def inherit_middlewares(
        self, middlewares: Sequence[MiddlewareFunction]
    ) -> Procedure:
        """Return a new procedure with *middlewares* running before the existing ones."""
        definition = self._definition.model_copy(
            update={"middlewares": (*middlewares, *self._middlewares)}
        )
        return self._derive(definition)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(middlewares={len(self._middlewares)}, "
            f"options={self._definition.options!r})"
        )
