"""Validator adapter — normalizes supported validator shapes into one parse fn."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from enum import Enum
from typing import Any

import structlog
from pydantic import BaseModel, TypeAdapter

from sluice.exceptions import ValidatorConfigError

logger = structlog.get_logger()

ParseFn = Callable[[Any], Any]


class ValidatorKind(Enum):
    PYDANTIC = "pydantic"
    CALLABLE = "callable"
    PARSE_ASYNC = "parse_async"
    PARSE = "parse"
    VALIDATE_SYNC = "validate_sync"
    CREATE = "create"


# Checked in order after callables; first attribute found wins.
_METHOD_KINDS: tuple[tuple[str, ValidatorKind], ...] = (
    ("parse_async", ValidatorKind.PARSE_ASYNC),
    ("parse", ValidatorKind.PARSE),
    ("validate_sync", ValidatorKind.VALIDATE_SYNC),
    ("create", ValidatorKind.CREATE),
)


def resolve_validator(validator: Any) -> tuple[ValidatorKind, ParseFn]:
    """Return the matched validator kind and its parse function.

    Pydantic models and type adapters are recognised before plain callables
    because a model class is itself callable but takes keyword fields.
    """
    if isinstance(validator, type) and issubclass(validator, BaseModel):
        return ValidatorKind.PYDANTIC, validator.model_validate
    if isinstance(validator, TypeAdapter):
        return ValidatorKind.PYDANTIC, validator.validate_python

    if callable(validator):
        return ValidatorKind.CALLABLE, validator

    for attr, kind in _METHOD_KINDS:
        method = getattr(validator, attr, None)
        if callable(method):
            return kind, method

    logger.error("validator_unrecognized", validator_type=type(validator).__name__)
    raise ValidatorConfigError("Could not find a validator fn")


def get_parse_fn(validator: Any) -> ParseFn:
    _, fn = resolve_validator(validator)
    return fn


async def parse_value(parse_fn: ParseFn, raw: Any) -> Any:
    value = parse_fn(raw)
    if inspect.isawaitable(value):
        value = await value
    return value
