"""Diagnostic channel for view lifecycle and command failures."""

import logging
from typing import Any, List, Optional

logger = logging.getLogger(__name__)


class DiagnosticCallback:
    """Base class for diagnostic callbacks.

    Override methods to receive events from controllers and the router.
    All methods are optional - only override what you need.
    """

    def on_view_ready(self, instance_id: str, view: Any) -> None:
        """Called once when a view finishes construction.

        Args:
            instance_id: ID of the instance
            view: The resolved view
        """
        pass

    def on_construction_error(self, instance_id: str, error: BaseException) -> None:
        """Called once per failed construction attempt.

        Args:
            instance_id: ID of the instance
            error: ConstructionError wrapping the engine's failure
        """
        pass

    def on_method_not_found(self, instance_id: str, method_name: str) -> None:
        """Called when ``invoke`` targets a method absent from the view.

        Args:
            instance_id: ID of the instance
            method_name: Name that could not be resolved
        """
        pass

    def on_command_error(
        self, instance_id: str, command: str, error: BaseException
    ) -> None:
        """Called when a queued command raises while running against the view.

        Args:
            instance_id: ID of the instance
            command: Command (or listener registration) that failed
            error: Exception that was raised
        """
        pass

    def on_message_dropped(
        self, message: Any, reason: str, error: Optional[BaseException] = None
    ) -> None:
        """Called when the router discards an inbound message.

        Args:
            message: The raw message as received
            reason: Short reason code ("malformed", "unknown_instance", ...)
            error: Validation error, if any
        """
        pass


class LoggingCallback(DiagnosticCallback):
    """Writes every diagnostic event to the ``vegawidget`` logger."""

    def on_view_ready(self, instance_id: str, view: Any) -> None:
        logger.debug(f"View '{instance_id}' is ready")

    def on_construction_error(self, instance_id: str, error: BaseException) -> None:
        logger.error(f"{error}")

    def on_method_not_found(self, instance_id: str, method_name: str) -> None:
        logger.error(f"View '{instance_id}' has no method '{method_name}'; view left unchanged")

    def on_command_error(
        self, instance_id: str, command: str, error: BaseException
    ) -> None:
        logger.error(f"Command '{command}' failed on view '{instance_id}': {error!r}")

    def on_message_dropped(
        self, message: Any, reason: str, error: Optional[BaseException] = None
    ) -> None:
        if reason == "unknown_instance":
            # Messages racing a teardown are expected
            logger.debug(f"Dropped message for unknown instance: {message!r}")
        else:
            logger.warning(f"Dropped {reason} message {message!r}: {error}")


class CallbackDispatcher:
    """Dispatches diagnostic events to a list of callbacks."""

    def __init__(self, callbacks: Optional[List[DiagnosticCallback]] = None):
        self.callbacks = callbacks or []

    def _notify(self, hook: str, *args: Any) -> None:
        for callback in self.callbacks:
            try:
                getattr(callback, hook)(*args)
            except Exception:
                logger.exception(f"Diagnostic callback {type(callback).__name__}.{hook} failed")

    def notify_view_ready(self, instance_id: str, view: Any) -> None:
        self._notify("on_view_ready", instance_id, view)

    def notify_construction_error(self, instance_id: str, error: BaseException) -> None:
        self._notify("on_construction_error", instance_id, error)

    def notify_method_not_found(self, instance_id: str, method_name: str) -> None:
        self._notify("on_method_not_found", instance_id, method_name)

    def notify_command_error(
        self, instance_id: str, command: str, error: BaseException
    ) -> None:
        self._notify("on_command_error", instance_id, command, error)

    def notify_message_dropped(
        self, message: Any, reason: str, error: Optional[BaseException] = None
    ) -> None:
        self._notify("on_message_dropped", message, reason, error)


def default_callbacks() -> List[DiagnosticCallback]:
    return [LoggingCallback()]

