"""Classified procedure errors and the default classifier."""

from __future__ import annotations

from enum import Enum
from typing import Any

from sluice.exceptions import SluiceError


class ErrorCode(Enum):
    PARSE_ERROR = "PARSE_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_SUPPORTED = "METHOD_NOT_SUPPORTED"
    TIMEOUT = "TIMEOUT"
    CONFLICT = "CONFLICT"
    PRECONDITION_FAILED = "PRECONDITION_FAILED"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"
    CLIENT_CLOSED_REQUEST = "CLIENT_CLOSED_REQUEST"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"

    @property
    def json_rpc_code(self) -> int:
        return _JSON_RPC_CODES[self]

    @property
    def is_client_error(self) -> bool:
        return self is not ErrorCode.INTERNAL_SERVER_ERROR


_JSON_RPC_CODES: dict[ErrorCode, int] = {
    ErrorCode.PARSE_ERROR: -32700,
    ErrorCode.BAD_REQUEST: -32600,
    ErrorCode.INTERNAL_SERVER_ERROR: -32603,
    ErrorCode.UNAUTHORIZED: -32001,
    ErrorCode.FORBIDDEN: -32003,
    ErrorCode.NOT_FOUND: -32004,
    ErrorCode.METHOD_NOT_SUPPORTED: -32005,
    ErrorCode.TIMEOUT: -32008,
    ErrorCode.CONFLICT: -32009,
    ErrorCode.PRECONDITION_FAILED: -32012,
    ErrorCode.PAYLOAD_TOO_LARGE: -32013,
    ErrorCode.TOO_MANY_REQUESTS: -32029,
    ErrorCode.CLIENT_CLOSED_REQUEST: -32099,
}


class ProcedureError(SluiceError):
    """An error classified with a machine-readable code.

    The underlying failure, when there is one, is kept on ``cause`` and is
    also chained as ``__cause__`` when it is an exception.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str | None = None,
        *,
        cause: Any = None,
    ) -> None:
        if message is None:
            if isinstance(cause, BaseException) and str(cause):
                message = str(cause)
            else:
                message = code.value
        super().__init__(message)
        self.code = code
        self.message = message
        self.cause = cause
        if isinstance(cause, BaseException):
            self.__cause__ = cause

    def __repr__(self) -> str:
        return f"ProcedureError(code={self.code.value}, message={self.message!r})"


def error_from_unknown(value: Any) -> ProcedureError:
    """Map any caught value to a ``ProcedureError``.

    Already-classified errors are returned untouched so they are never
    wrapped twice.
    """
    if isinstance(value, ProcedureError):
        return value
    if isinstance(value, Exception):
        return ProcedureError(ErrorCode.INTERNAL_SERVER_ERROR, cause=value)
    return ProcedureError(
        ErrorCode.INTERNAL_SERVER_ERROR, "Unknown error", cause=value
    )
