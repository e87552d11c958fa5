"""Host for rendered visualization instances.

The host plays the part of the page that embeds visualizations: it renders
specifications into instances, tears instances down, and accepts command
messages from external processes.
"""

import asyncio
import logging
from typing import Any, Mapping, Optional

from .config import WidgetConfiguration
from .controller import ViewController
from .exceptions import InstanceNotFoundError
from .protocols import RenderingEngine
from .registry import InstanceRegistry
from .router import CommandRouter

logger = logging.getLogger(__name__)


class WidgetHost:
    """Owns the registry, router and engine for a set of visualization instances.

    Args:
        engine: Rendering engine used to build every view
        config: Configuration shared by all controllers of this host
        registry: Registry to use; a fresh empty registry by default

    Example:
        >>> host = WidgetHost(HeadlessEngine())
        >>> host.render("chart1", spec, {"renderer": "svg"})
        >>> host.handle_message({"id": "chart1", "fn": "signal", "params": ["cyl", 6]})
    """

    def __init__(
        self,
        engine: RenderingEngine,
        config: Optional[WidgetConfiguration] = None,
        registry: Optional[InstanceRegistry] = None,
    ):
        self.engine = engine
        self.config = config or WidgetConfiguration()
        self.registry = registry if registry is not None else InstanceRegistry()
        self.router = CommandRouter(self.registry, callbacks=self.config.effective_callbacks)

    def render(
        self,
        instance_id: str,
        spec: Any,
        options: Optional[Mapping[str, Any]] = None,
        config: Optional[WidgetConfiguration] = None,
    ) -> ViewController:
        """Render ``spec`` into ``instance_id``.

        The first render creates and registers a controller. Later renders for
        the same identifier reset it with a fresh view future.

        Args:
            instance_id: Identifier of the host element
            spec: Visualization specification
            options: Embedding options passed to the engine
            config: Per-instance overrides; unset fields fall back to the host configuration
        """
        effective = config.merge_with(self.config) if config is not None else self.config
        controller = self.registry.lookup(instance_id)
        if controller is None:
            controller = ViewController(instance_id, self.engine, effective)
            self.registry.register(instance_id, controller)
        elif config is not None:
            controller.reconfigure(effective)
        controller.create(spec, options)
        return controller

    def teardown(self, instance_id: str) -> bool:
        """Destroy and unregister an instance; returns False if it was not registered."""
        controller = self.registry.unregister(instance_id)
        if controller is None:
            return False
        controller.destroy()
        logger.info(f'Tore down instance "{instance_id}"')
        return True

    def find(self, instance_id: str) -> Optional[ViewController]:
        return self.registry.lookup(instance_id)

    def get_view_future(self, instance_id: str) -> asyncio.Future:
        """Return the view future of an instance.

        Raises:
            InstanceNotFoundError: If the instance is not registered or was never rendered
        """
        controller = self.registry.lookup(instance_id)
        if controller is None:
            raise InstanceNotFoundError(f"No instance registered as '{instance_id}'")
        future = controller.get_future()
        if future is None:
            raise InstanceNotFoundError(f"Instance '{instance_id}' has not been rendered")
        return future

    def handle_message(self, message: Any) -> bool:
        """Route a command message from an external process."""
        return self.router.dispatch(message)

    def close(self) -> None:
        """Tear down every instance."""
        for instance_id in self.registry:
            self.teardown(instance_id)
