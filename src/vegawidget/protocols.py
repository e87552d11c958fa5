"""Protocol definitions for the rendering engine binding.

The engine itself lives outside this package. These protocols describe the
capability surface the controller consumes.
"""

from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Mapping, Protocol

if TYPE_CHECKING:
    from .changeset import Changeset

Row = Dict[str, Any]
Handler = Callable[..., Any]


class View(Protocol):
    """A live, mutable view produced by a rendering engine.

    Besides the methods below, a view may expose any number of other methods
    that are reachable through ``ViewController.invoke``. Listener removal and
    ``finalize`` are optional and used only when present.
    """

    def insert(self, name: str, rows: List[Row]) -> Any:
        ...

    def change(self, name: str, changeset: "Changeset") -> Any:
        ...

    def run(self) -> Any:
        """Re-evaluate the dataflow and re-render after a mutation."""
        ...

    def add_event_listener(self, name: str, handler: Handler) -> Any:
        ...

    def add_signal_listener(self, name: str, handler: Handler) -> Any:
        ...


class RenderingEngine(Protocol):
    """Protocol for engines that build views from a specification."""

    def embed(
        self, instance_id: str, spec: Any, options: Mapping[str, Any]
    ) -> Awaitable[View]:
        """Start building a view for ``spec``.

        Args:
            instance_id: Identifier of the host element the view renders into
            spec: Visualization specification, passed through unexamined
            options: Embed options (renderer, action links, ...), passed through unexamined

        Returns:
            Awaitable resolving to the view, or raising if construction fails
        """
        ...
