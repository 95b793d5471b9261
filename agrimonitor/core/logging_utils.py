"""Component-tagged loggers for AgriMonitor."""

from __future__ import annotations

import logging
from typing import Optional, Union

LOGGER_NAMESPACE = "agrimonitor"


def _qualified_name(name: Optional[str]) -> str:
    if not name:
        return LOGGER_NAMESPACE
    if name == LOGGER_NAMESPACE or name.startswith(LOGGER_NAMESPACE + "."):
        return name
    return f"{LOGGER_NAMESPACE}.{name}"


def _component_for(logger_name: str) -> str:
    if logger_name.startswith(LOGGER_NAMESPACE):
        return logger_name[len(LOGGER_NAMESPACE):].lstrip(".") or "Core"
    return logger_name or "Core"


class StructuredLogger:
    """Wraps a stdlib logger and tags each message with a component.

    ``get_module_logger("Camera").info("ready")`` emits ``[Camera] ready``
    on the ``agrimonitor.Camera`` logger.
    """

    def __init__(self, logger: logging.Logger, component: Optional[str] = None) -> None:
        self.logger = logger
        self.component = component or _component_for(logger.name)

    @property
    def name(self) -> str:
        return self.logger.name

    def _render(self, message: object, args: tuple) -> str:
        text = str(message)
        if args:
            try:
                text = text % args
            except (TypeError, ValueError):
                text = f"{text} | args={' '.join(map(str, args))}"
        tag = f"[{self.component}]"
        return text if text.startswith(tag) else f"{tag} {text}"

    def _emit(self, level: int, message: object, args: tuple, kwargs: dict) -> None:
        if self.logger.isEnabledFor(level):
            # Attribute the record to our caller, not this wrapper.
            kwargs.setdefault("stacklevel", 3)
            self.logger.log(level, self._render(message, args), **kwargs)

    def log(self, level: int, message: object, *args, **kwargs) -> None:
        self._emit(level, message, args, kwargs)

    def debug(self, message: object, *args, **kwargs) -> None:
        self._emit(logging.DEBUG, message, args, kwargs)

    def info(self, message: object, *args, **kwargs) -> None:
        self._emit(logging.INFO, message, args, kwargs)

    def warning(self, message: object, *args, **kwargs) -> None:
        self._emit(logging.WARNING, message, args, kwargs)

    def error(self, message: object, *args, **kwargs) -> None:
        self._emit(logging.ERROR, message, args, kwargs)

    def exception(self, message: object, *args, **kwargs) -> None:
        kwargs.setdefault("exc_info", True)
        self._emit(logging.ERROR, message, args, kwargs)

    def critical(self, message: object, *args, **kwargs) -> None:
        self._emit(logging.CRITICAL, message, args, kwargs)


LoggerLike = Union[StructuredLogger, logging.Logger, None]


def ensure_structured_logger(logger: LoggerLike, *, fallback_name: Optional[str] = None) -> StructuredLogger:
    """Wrap a plain logger, pass a StructuredLogger through, or build one."""
    if isinstance(logger, StructuredLogger):
        return logger
    if isinstance(logger, logging.Logger):
        return StructuredLogger(logger)
    return get_module_logger(fallback_name)


def get_module_logger(name: Optional[str] = None) -> StructuredLogger:
    """Return a component logger inside the ``agrimonitor`` namespace."""
    return StructuredLogger(logging.getLogger(_qualified_name(name)))


__all__ = [
    "LOGGER_NAMESPACE",
    "LoggerLike",
    "StructuredLogger",
    "ensure_structured_logger",
    "get_module_logger",
]
