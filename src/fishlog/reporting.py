"""
Bugsnag integration.

Configures the process-wide Bugsnag client from ``LoggingSettings`` and
provides ``BugsnagReporter``, the ``ErrorReporter`` used by the
error-reporting hook.
"""

from __future__ import annotations

import importlib.util
import os
from traceback import extract_tb
from types import TracebackType
from typing import TYPE_CHECKING, Any, Optional

import bugsnag

from .config import LoggingSettings
from .exceptions import WrappedError
from .interceptors import intercept_logger

if TYPE_CHECKING:
    from .core import Logger

MAX_UNWRAP_DEPTH = 10


def _qualified_name(error: BaseException) -> str:
    cls = type(error)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def classify_error(
    error: BaseException,
    *,
    max_depth: int = MAX_UNWRAP_DEPTH,
    diagnostics: Optional["Logger"] = None,
) -> str:
    """Class name Bugsnag should group ``error`` under.

    Errors wrapped by the hook all share the ``WrappedError`` class; the
    chain is followed to the wrapped error's own class. Chains deeper than
    ``max_depth`` stop there, with a warning on ``diagnostics``.
    """
    current = error
    depth = 0
    while isinstance(current, WrappedError) and current.__cause__ is not None:
        if depth >= max_depth:
            if diagnostics is not None:
                diagnostics.with_fields(
                    error_class=_qualified_name(error),
                    unwrapped_class=_qualified_name(current),
                ).warning("failed to unwrap error after %d levels: %s", depth, error)
            break
        current = current.__cause__
        depth += 1
    return _qualified_name(current)


def grouping_hash(error_class: str, traceback: Optional[TracebackType]) -> str:
    """Group by error class and the function that logged it, like Bugsnag's default."""
    if traceback is None:
        return error_class
    frame = extract_tb(traceback)[-1]
    return f"{error_class}@{frame.filename}:{frame.name}"


def _project_root(settings: LoggingSettings) -> Optional[str]:
    if settings.bugsnag_project_paths:
        return settings.bugsnag_project_paths[0]
    for package in settings.bugsnag_project_packages:
        try:
            spec = importlib.util.find_spec(package)
        except (ImportError, ValueError):
            continue
        if spec is not None and spec.submodule_search_locations:
            return os.path.dirname(list(spec.submodule_search_locations)[0])
    return None


def configure_bugsnag(settings: LoggingSettings, *, diagnostics: Optional["Logger"] = None) -> None:
    """Configure the process-wide Bugsnag client.

    An empty release-stage allowlist notifies from every stage. When
    ``diagnostics`` is given, Bugsnag's own log lines go through it.
    """
    options: dict[str, Any] = {
        "api_key": settings.bugsnag_api_key.get_secret_value() if settings.bugsnag_api_key else None,
        "release_stage": settings.environment,
    }
    if settings.app_version:
        options["app_version"] = settings.app_version
    if settings.bugsnag_notify_release_stages:
        options["notify_release_stages"] = list(settings.bugsnag_notify_release_stages)
    project_root = _project_root(settings)
    if project_root:
        options["project_root"] = project_root
    if settings.bugsnag_package_root:
        options["lib_root"] = settings.bugsnag_package_root

    bugsnag.configure(**options)

    if diagnostics is not None:
        intercept_logger("bugsnag", diagnostics.new_entry().with_field("component", "bugsnag"))


class BugsnagReporter:
    """Sends reportable errors to Bugsnag."""

    def __init__(self, diagnostics: Optional["Logger"] = None, max_depth: int = MAX_UNWRAP_DEPTH) -> None:
        self.diagnostics = diagnostics
        self.max_depth = max_depth

    def notify(
        self,
        error: BaseException,
        *,
        traceback: Optional[TracebackType],
        metadata: dict[str, dict[str, Any]],
    ) -> None:
        traceback = traceback or error.__traceback__
        error_class = classify_error(error, max_depth=self.max_depth, diagnostics=self.diagnostics)
        bugsnag.notify(
            error,
            traceback=traceback,
            severity="error",
            metadata=metadata,
            grouping_hash=grouping_hash(error_class, traceback),
        )
