"""Structured logging via structlog.

Configures structlog once per process. Library modules keep logging through
``logging.getLogger(__name__)``; the stdlib bridge routes those records to
the same stream.

Renderer selection:
  debug=True:  `ConsoleRenderer` with colours for interactive runs.
  debug=False: `JSONRenderer` for CI logs.

ContextVar injection:
  `run_id` and `project_root` are bound by `MigrationEngine.run()` so every
  structlog line emitted during a run carries them.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar

import structlog

_run_id_var: ContextVar[str] = ContextVar("run_id", default="")
_project_root_var: ContextVar[str] = ContextVar("project_root", default="")


def bind_run_context(run_id: str, project_root: str) -> None:
    """Set the run-scoped context vars picked up by every log line."""
    _run_id_var.set(run_id)
    _project_root_var.set(project_root)


def get_run_id() -> str:
    """Return the current run ID, or empty string if not set."""
    return _run_id_var.get()


def _inject_context_vars(
    logger: logging.Logger,
    method: str,
    event_dict: dict,
) -> dict:
    """Structlog processor: inject run_id and project_root from ContextVars."""
    run_id = get_run_id()
    project_root = _project_root_var.get()
    if run_id:
        event_dict["run_id"] = run_id
    if project_root:
        event_dict["project_root"] = project_root
    return event_dict


def configure_structlog(debug: bool = True) -> None:
    """Configure structlog for the process lifetime.

    Called from `create_engine()`. Calling multiple times is safe.
    """
    shared_processors: list = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _inject_context_vars,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if debug:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if debug else logging.INFO
        ),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        level=logging.DEBUG if debug else logging.INFO,
    )
