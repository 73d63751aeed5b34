"""Bootstrap: logging setup and config-driven default middleware."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

import structlog

from sluice.core.config import SluiceConfig
from sluice.core.procedure import Procedure
from sluice.middleware.auth import AuthMiddleware
from sluice.middleware.base import Middleware
from sluice.middleware.logging import LoggingMiddleware
from sluice.middleware.rate_limit import RateLimitMiddleware

logger = structlog.get_logger()


_PRE_CHAIN: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
]


def _with_renderer(
    handler: logging.Handler, renderer: structlog.types.Processor
) -> logging.Handler:
    # foreign_pre_chain gives plain stdlib records the same timestamp/level keys
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer, foreign_pre_chain=_PRE_CHAIN
        )
    )
    return handler


def configure_logging(config: SluiceConfig, *, log_dir: Path | None = None) -> None:
    """Route structlog through stdlib logging.

    One stream handler (console or JSON per ``log_json``) and, when a log
    directory is given or configured, a rotating ``app.log`` of JSON lines.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.log_level)
    root_logger.handlers.clear()

    stream_renderer = (
        structlog.processors.JSONRenderer()
        if config.log_json
        else structlog.dev.ConsoleRenderer()
    )
    root_logger.addHandler(_with_renderer(logging.StreamHandler(), stream_renderer))

    target_dir = log_dir or config.log_dir
    if target_dir is not None:
        target_dir.mkdir(parents=True, exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            target_dir / "app.log",
            maxBytes=config.log_max_bytes,
            backupCount=config.log_backup_count,
        )
        root_logger.addHandler(
            _with_renderer(rotating, structlog.processors.JSONRenderer())
        )

    structlog.configure(
        processors=[
            *_PRE_CHAIN,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def build_middlewares(config: SluiceConfig) -> list[Middleware]:
    middlewares: list[Middleware] = []
    if config.log_calls:
        middlewares.append(LoggingMiddleware())
    if config.allowed_user_ids:
        middlewares.append(AuthMiddleware(config.allowed_user_ids))
    if config.rate_limit_rpm > 0:
        middlewares.append(
            RateLimitMiddleware(config.rate_limit_rpm, config.rate_limit_burst)
        )
    logger.debug(
        "middlewares_built",
        names=[type(mw).__name__ for mw in middlewares],
    )
    return middlewares


def apply_middlewares(
    procedure: Procedure, config: SluiceConfig | None = None
) -> Procedure:
    """Prepend the config-driven middleware to *procedure*."""
    if config is None:
        config = SluiceConfig()
    return procedure.inherit_middlewares(build_middlewares(config))
