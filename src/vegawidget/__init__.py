"""vegawidget: drive rendered Vega views from Python and from other processes.

Every rendered visualization instance gets a ViewController that queues
commands against its (asynchronously built) view, a registry maps instance
ids to controllers, and a router turns addressed command messages into
controller calls.

Example:
    >>> import asyncio
    >>> from vegawidget import HeadlessEngine, WidgetHost
    >>>
    >>> async def main():
    ...     host = WidgetHost(HeadlessEngine())
    ...     chart = host.render("chart1", {"data": [{"name": "data1", "values": []}]})
    ...     host.handle_message(
    ...         {"id": "chart1", "fn": "change", "params": {"name": "data1", "data": [{"x": 1}]}}
    ...     )
    ...     view = await chart.drain()
    ...     return view.data("data1")
    >>>
    >>> asyncio.run(main())
    [{'x': 1}]
"""

from .callbacks import CallbackDispatcher, DiagnosticCallback, LoggingCallback
from .changeset import Changeset, columns_to_records
from .commands import VIEW_COMMANDS, resolve_command
from .config import WidgetConfiguration, load_vegawidget_config
from .controller import ViewController, ViewState
from .exceptions import (
    ConstructionError,
    ConstructionTimeoutError,
    InstanceDestroyedError,
    InstanceNotFoundError,
    MalformedMessageError,
    MethodNotFoundError,
    UnknownCommandError,
    VegaWidgetError,
)
from .headless import HeadlessEngine, HeadlessView
from .host import WidgetHost
from .messages import CommandMessage, parse_message
from .registry import InstanceRegistry
from .router import CommandRouter
from .transport import CommandClient, create_command_app, serve_commands

__version__ = "0.1.0"

__all__ = [
    # Core
    "ViewController",
    "ViewState",
    "InstanceRegistry",
    "CommandRouter",
    "WidgetHost",
    # Data
    "Changeset",
    "columns_to_records",
    # Commands & messages
    "VIEW_COMMANDS",
    "resolve_command",
    "CommandMessage",
    "parse_message",
    # Transport
    "CommandClient",
    "create_command_app",
    "serve_commands",
    # Engines
    "HeadlessEngine",
    "HeadlessView",
    # Configuration & callbacks
    "WidgetConfiguration",
    "load_vegawidget_config",
    "DiagnosticCallback",
    "LoggingCallback",
    "CallbackDispatcher",
    # Exceptions
    "VegaWidgetError",
    "ConstructionError",
    "ConstructionTimeoutError",
    "MethodNotFoundError",
    "UnknownCommandError",
    "MalformedMessageError",
    "InstanceNotFoundError",
    "InstanceDestroyedError",
]
