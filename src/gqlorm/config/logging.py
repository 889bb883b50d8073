"""Logging setup: stdlib loggers rendered through structlog.

Every module logs with ``logging.getLogger(__name__)``; this module routes
those records, and structlog's own, to one stderr handler. stdout is left to
command results so ``--json`` output can be piped.
"""

from __future__ import annotations

import logging
import sys

import structlog

# Request libraries log every connection at DEBUG.
_QUIET_LOGGERS = ("urllib3", "requests")


def _level_for(*, verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    return logging.ERROR if quiet else logging.WARNING


def _pre_chain(log_json: bool) -> list[structlog.types.Processor]:
    """Processors applied to both structlog events and foreign stdlib records."""
    chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if log_json:
        chain.append(structlog.processors.dict_tracebacks)
    return chain


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_json: bool = False,
) -> None:
    """Install the stderr handler and set the ``gqlorm`` logger level.

    ``verbose`` wins over ``quiet``. Safe to call repeatedly; the root
    handler is replaced, not stacked.
    """
    pre_chain = _pre_chain(log_json)
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if log_json
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.WARNING)

    logging.getLogger("gqlorm").setLevel(_level_for(verbose=verbose, quiet=quiet))
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
