import logging
from typing import Dict, Iterator, Optional

from .controller import ViewController

logger = logging.getLogger(__name__)


class InstanceRegistry:
    """
    Maps instance identifiers to their view controllers.

    The registry is owned by whoever creates it (normally a WidgetHost) and is
    passed explicitly to the router; there is no process-wide instance. It only
    looks controllers up, it never transfers their ownership.
    """

    def __init__(self):
        self._controllers: Dict[str, ViewController] = {}

    def register(self, instance_id: str, controller: ViewController) -> None:
        """
        Register a controller under an identifier.

        Args:
            instance_id (str): Identifier of the host element.
            controller (ViewController): Controller for that instance.

        Registering an identifier that is already present replaces the previous
        controller and destroys it, so its views and listeners do not outlive
        the registration.
        """
        previous = self._controllers.get(instance_id)
        if previous is not None and previous is not controller:
            logger.info(f'Replacing controller for instance "{instance_id}"')
            previous.destroy()
        self._controllers[instance_id] = controller
        logger.debug(f'Registered instance "{instance_id}"')

    def lookup(self, instance_id: str) -> Optional[ViewController]:
        """
        Find the controller for an identifier.

        Args:
            instance_id (str): Identifier of the host element.

        Returns:
            Optional[ViewController]: The controller, or None if the identifier is not registered.
        """
        return self._controllers.get(instance_id)

    def unregister(self, instance_id: str) -> Optional[ViewController]:
        """
        Remove an identifier from the registry.

        Returns:
            Optional[ViewController]: The removed controller, or None if it was not registered.
        """
        controller = self._controllers.pop(instance_id, None)
        if controller is not None:
            logger.debug(f'Unregistered instance "{instance_id}"')
        return controller

    def __contains__(self, instance_id: object) -> bool:
        return instance_id in self._controllers

    def __len__(self) -> int:
        return len(self._controllers)

    def __iter__(self) -> Iterator[str]:
        # Snapshot so callers may unregister while iterating
        return iter(list(self._controllers))
