"""Custom exceptions for vegawidget view control."""


class VegaWidgetError(Exception):
    """Base exception for all vegawidget errors."""
    pass


class ConstructionError(VegaWidgetError):
    """Raised when the rendering engine fails to build a view."""

    def __init__(self, instance_id: str, cause: BaseException):
        self.instance_id = instance_id
        self.cause = cause
        super().__init__(f"View construction failed for '{instance_id}': {cause!r}")


class ConstructionTimeoutError(ConstructionError):
    """Raised when view construction does not finish within the configured timeout."""
    pass


class MethodNotFoundError(VegaWidgetError):
    """Raised when a command targets a method the resolved view does not expose."""

    def __init__(self, instance_id: str, method_name: str):
        self.instance_id = instance_id
        self.method_name = method_name
        super().__init__(f"View '{instance_id}' has no method '{method_name}'")


class UnknownCommandError(VegaWidgetError):
    """Raised when a command name is not in the command table and unlisted names are disabled."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"Unknown view command '{command}'")


class MalformedMessageError(VegaWidgetError):
    """Raised when an inbound command message fails validation."""
    pass


class InstanceNotFoundError(VegaWidgetError):
    """Raised when no controller is registered for an instance id."""
    pass


class InstanceDestroyedError(VegaWidgetError):
    """Raised when a command is queued against a torn-down instance."""
    pass
