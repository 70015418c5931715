# src/cmdsynth/core/logging.py
"""Structured logging for cmdsynth.

structlog and stdlib ``logging`` share one ``ProcessorFormatter`` on stderr,
so stdout stays free for the CLI's JSON output. Engine code binds the graph
it is working on with ``graph_log_context``; every line emitted inside the
block carries ``graph_id``, ``tenant`` and ``run_id`` without each call site
repeating them.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.stdlib import ProcessorFormatter

from cmdsynth.contracts import CommandGraph

# Loggers that stay at WARNING or above even when cmdsynth runs at DEBUG
_QUIET_LOGGERS: tuple[str, ...] = ("asyncio", "dynaconf")


def _renderers(json_output: bool) -> list[Any]:
    # remove_processors_meta drops the _record/_from_structlog bookkeeping keys
    if json_output:
        return [
            ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ]
    return [ProcessorFormatter.remove_processors_meta, structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def configure_logging(*, json_output: bool = False, level: str = "INFO") -> None:
    """Route structlog and stdlib logging to stderr in one format.

    Args:
        json_output: One JSON object per line instead of console output
        level: Root level name (DEBUG, INFO, WARNING, ERROR)
    """
    log_level = getattr(logging, level.upper())

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]

    structlog.configure(
        processors=[*shared_processors, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Tests reconfigure between cases
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ProcessorFormatter(processors=_renderers(json_output), foreign_pre_chain=shared_processors))

    root = logging.getLogger()
    root.handlers = []
    root.addHandler(handler)
    root.setLevel(log_level)

    quiet_level = max(log_level, logging.WARNING)
    for logger_name in _QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(quiet_level)


@contextmanager
def graph_log_context(graph: CommandGraph) -> Iterator[None]:
    """Bind the graph's identity to every log line emitted inside the block.

    Bindings live in contextvars, so concurrent tasks working on different
    graphs keep their own values. Previous bindings are restored on exit.
    """
    with structlog.contextvars.bound_contextvars(graph_id=graph.id, tenant=graph.tenant, run_id=graph.run_id):
        yield


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
