"""Command router for messages arriving from an external process.

The router is best-effort: it returns nothing to the sender, drops messages
for unknown instances, and reports malformed messages through the diagnostic
callbacks instead of raising.
"""

import logging
from typing import Any, List, Optional

from .callbacks import CallbackDispatcher, DiagnosticCallback, default_callbacks
from .commands import CHANGE_COMMAND
from .controller import ViewController
from .exceptions import MalformedMessageError, VegaWidgetError
from .messages import CommandMessage, parse_change_params, parse_message
from .registry import InstanceRegistry

logger = logging.getLogger(__name__)


class CommandRouter:
    """Routes addressed command messages to view controllers.

    Args:
        registry: Registry used to resolve the target instance
        callbacks: Diagnostic callbacks for dropped messages (defaults to logging)
    """

    def __init__(
        self,
        registry: InstanceRegistry,
        callbacks: Optional[List[DiagnosticCallback]] = None,
    ):
        self.registry = registry
        self._dispatcher = CallbackDispatcher(
            callbacks if callbacks is not None else default_callbacks()
        )

    def dispatch(self, raw: Any) -> bool:
        """Forward one message to its controller.

        Args:
            raw: Message as a mapping, JSON text, or CommandMessage

        Returns:
            True if the command was queued on a controller, False if it was dropped
        """
        try:
            message = parse_message(raw)
        except MalformedMessageError as e:
            self._dispatcher.notify_message_dropped(raw, "malformed", e)
            return False

        controller = self.registry.lookup(message.id)
        if controller is None:
            self._dispatcher.notify_message_dropped(raw, "unknown_instance")
            return False

        try:
            self._forward(controller, message)
        except MalformedMessageError as e:
            self._dispatcher.notify_message_dropped(raw, "malformed", e)
            return False
        except VegaWidgetError as e:
            self._dispatcher.notify_message_dropped(raw, "rejected", e)
            return False

        logger.debug(f"Routed '{message.fn}' to instance '{message.id}'")
        return True

    def _forward(self, controller: ViewController, message: CommandMessage) -> None:
        # "change" carries {name, data} rather than positional arguments
        if message.fn == CHANGE_COMMAND:
            params = parse_change_params(message)
            controller.change_data(params.name, params.data)
        else:
            controller.invoke(message.fn, message.positional_args())
