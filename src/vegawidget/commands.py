"""Command table mapping wire command names to view methods.

External callers address view methods by the rendering engine's own
(camelCase) names. The table below is the closed set of commands this
package knows about; ``resolve_command`` falls back to the raw name only
when unlisted commands are allowed.
"""

from typing import Dict

from .exceptions import UnknownCommandError

# Reserved: routed through ViewController.change_data with reshaped params.
CHANGE_COMMAND = "change"

VIEW_COMMANDS: Dict[str, str] = {
    # Data
    "change": "change",
    "insert": "insert",
    "remove": "remove",
    "data": "data",
    # Signals
    "signal": "signal",
    # Rendering
    "run": "run",
    "resize": "resize",
    "width": "width",
    "height": "height",
    "padding": "padding",
    "background": "background",
    "renderer": "renderer",
    "hover": "hover",
    # Listeners
    "addEventListener": "add_event_listener",
    "removeEventListener": "remove_event_listener",
    "addSignalListener": "add_signal_listener",
    "removeSignalListener": "remove_signal_listener",
    # Lifecycle
    "finalize": "finalize",
}


def resolve_command(command: str, allow_unlisted: bool = True) -> str:
    """Return the view attribute name implementing ``command``.

    Args:
        command: Wire command name, e.g. "signal" or "addEventListener"
        allow_unlisted: Forward names missing from VIEW_COMMANDS unchanged

    Raises:
        UnknownCommandError: If ``command`` is unlisted and unlisted names are disabled
    """
    if command in VIEW_COMMANDS:
        return VIEW_COMMANDS[command]
    if allow_unlisted:
        return command
    raise UnknownCommandError(command)
