"""structlog configuration for bldctl.

Logs always go to stderr so stdout stays parseable: nested builds are
scraped for their ``Installed Version:`` line.

Two output modes:
- Human (default): colored console output
- JSON (--log-json): one JSON object per line

A build running as someone's git dependency tags every record with
``parent``, the coordinate of the build that spawned it. Its stderr ends up
in the parent's error detail, where that tag tells the levels apart.
"""

from __future__ import annotations

import logging
import sys

import structlog

from bldctl.infrastructure.nested import inherited_lineage

PACKAGE_LOGGER = "bldctl"


def _tag_parent(parent: str) -> structlog.types.Processor:
    def processor(
        logger: object, method_name: str, event_dict: structlog.types.EventDict
    ) -> structlog.types.EventDict:
        event_dict.setdefault("parent", parent)
        return event_dict

    return processor


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Configure structlog processors and route stdlib logging through them.

    Args:
        verbose: DEBUG for bldctl loggers (every subprocess is logged).
            When False, only WARNING+.
        log_json: Use JSON renderer instead of console renderer.
    """
    level = logging.DEBUG if verbose else logging.WARNING

    shared_processors: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    lineage = inherited_lineage()
    if lineage:
        shared_processors.append(_tag_parent(lineage[-1]))

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger(PACKAGE_LOGGER).setLevel(level)
    logging.getLogger("pluggy").setLevel(logging.WARNING)
