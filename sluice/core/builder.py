"""Procedure builder — declarative options to an executable Procedure."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from sluice.core.chain import ErrorClassifier
from sluice.core.errors import ErrorCode, ProcedureError, error_from_unknown
from sluice.core.procedure import Procedure, ProcedureDefinition, Resolver


def no_input(raw: Any) -> None:
    """Default input validator: the procedure accepts no input."""
    if raw is not None:
        raise ProcedureError(ErrorCode.BAD_REQUEST, "No input expected")
    return None


def passthrough(raw: Any) -> Any:
    return raw


class CreateProcedureOptions(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    resolve: Resolver
    input: Any = None
    output: Any = None
    options: Any = None


def create_procedure(
    *,
    resolve: Resolver,
    input: Any = None,
    output: Any = None,
    options: Any = None,
    procedure_cls: type[Procedure] = Procedure,
    classify_error: ErrorClassifier = error_from_unknown,
) -> Procedure:
    definition = ProcedureDefinition(
        resolver=resolve,
        input_validator=input if input is not None else no_input,
        output_validator=output if output is not None else passthrough,
        middlewares=(),
        options=options,
    )
    return procedure_cls(definition, classify_error=classify_error)


def create_procedure_from(
    opts: CreateProcedureOptions,
    *,
    procedure_cls: type[Procedure] = Procedure,
    classify_error: ErrorClassifier = error_from_unknown,
) -> Procedure:
    return create_procedure(
        resolve=opts.resolve,
        input=opts.input,
        output=opts.output,
        options=opts.options,
        procedure_cls=procedure_cls,
        classify_error=classify_error,
    )
