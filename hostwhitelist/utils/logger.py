"""structlog setup for hostwhitelist.

Importing the package never touches structlog's global configuration: the
host application owns it. Applications that want hostwhitelist's own output
format call configure_logging() once at startup (create_resolver() does so
when it loads the config file itself).

Every event logged inside a run_scope() carries that run's run_id, so the
decisions made during one configuration run can be grouped together.
"""

import logging
import sys
from contextvars import ContextVar, Token
from typing import Optional

import structlog
from structlog.typing import EventDict, FilteringBoundLogger, Processor, WrappedLogger

run_id_var: ContextVar[Optional[str]] = ContextVar("hostwhitelist_run_id", default=None)


def add_run_id(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Copy the active run id into the event, unless the caller passed one."""
    run_id = run_id_var.get()
    if run_id is not None:
        event_dict.setdefault("run_id", run_id)
    return event_dict


def build_processors(json_output: bool = True) -> list[Processor]:
    """Processor chain used by configure_logging(), renderer last."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_run_id,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return processors


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Install hostwhitelist's structlog configuration.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
        json_output: JSON lines when True, the console renderer otherwise.

    Raises:
        ValueError: log_level is not a known level name.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level!r}")

    structlog.configure(
        processors=build_processors(json_output),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "hostwhitelist") -> FilteringBoundLogger:
    """Module logger. Resolved lazily, so configure_logging() may run later."""
    return structlog.get_logger(name)


def bind_run_id(run_id: str) -> Token:
    """Make run_id the active run id; pass the token to reset_run_id()."""
    return run_id_var.set(run_id)


def reset_run_id(token: Token) -> None:
    """Restore the run id that was active before bind_run_id()."""
    run_id_var.reset(token)
