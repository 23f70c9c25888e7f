"""structlog setup for the porter CLI.

Library modules log through ``logging.getLogger(__name__)``; the CLI calls
:func:`configure_logging` once so those records are rendered by structlog
on stderr, leaving stdout to command output.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

PACKAGE_LOGGER = "porter"


def configure_logging(
    level: str,
    *,
    app_env: str = "dev",
    json_output: bool | None = None,
) -> None:
    """Attach a structlog-rendered stderr handler to the ``porter`` logger.

    Args:
        level: Log level name. Unknown names fall back to WARNING.
        app_env: PORTER_ENV value; ``prod`` selects JSON lines.
        json_output: Force JSON (True) or console (False) rendering.
    """
    if json_output is None:
        json_output = app_env == "prod"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
    ]
    if json_output:
        shared_processors.append(structlog.processors.TimeStamper(fmt="iso"))
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    logger.propagate = False


@contextmanager
def operation_context(**fields: object) -> Iterator[None]:
    """Tag every porter log record emitted inside the block with ``fields``."""
    with structlog.contextvars.bound_contextvars(**fields):
        yield
