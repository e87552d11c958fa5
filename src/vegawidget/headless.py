"""Headless rendering engine.

HeadlessView keeps named datasets and signals in memory and implements the
view capability surface without drawing anything. It is used to drive
controllers outside a browser and as the reference engine in tests.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .changeset import Changeset, Row
from .protocols import Handler

logger = logging.getLogger(__name__)

_UNSET = object()


class HeadlessView:
    """In-memory view built from a Vega-style specification.

    Datasets are read from ``spec["data"]`` entries carrying inline
    ``values`` and signals from ``spec["signals"]`` entries carrying a
    ``value``. Every mutating call is recorded in ``calls``.
    """

    def __init__(self, spec: Optional[Mapping[str, Any]] = None):
        spec = spec or {}
        self.spec = spec
        self.datasets: Dict[str, List[Row]] = {
            d["name"]: [dict(row) for row in d.get("values", [])]
            for d in spec.get("data", [])
            if "name" in d
        }
        self.signals: Dict[str, Any] = {
            s["name"]: s.get("value") for s in spec.get("signals", []) if "name" in s
        }
        self.settings: Dict[str, Any] = {
            "width": spec.get("width", 0),
            "height": spec.get("height", 0),
            "padding": spec.get("padding", 0),
            "background": spec.get("background"),
            "renderer": "none",
        }
        self.calls: List[Tuple[str, tuple]] = []
        self.run_count = 0
        self.finalized = False
        self._event_listeners: Dict[str, List[Handler]] = defaultdict(list)
        self._signal_listeners: Dict[str, List[Handler]] = defaultdict(list)

    # Data

    def data(self, name: str, values: Any = _UNSET) -> Any:
        """Return a copy of dataset ``name``, or replace it when ``values`` is given."""
        if values is _UNSET:
            return [dict(row) for row in self.datasets.get(name, [])]
        self.calls.append(("data", (name,)))
        self.datasets[name] = [dict(row) for row in values]
        return self

    def insert(self, name: str, rows: List[Row]) -> "HeadlessView":
        self.calls.append(("insert", (name, len(rows))))
        self.datasets.setdefault(name, []).extend(dict(row) for row in rows)
        return self

    def remove(self, name: str, predicate: Any) -> "HeadlessView":
        self.calls.append(("remove", (name,)))
        rows = self.datasets.get(name, [])
        self.datasets[name] = [row for row in rows if not predicate(row)]
        return self

    def change(self, name: str, changeset: Changeset) -> "HeadlessView":
        self.calls.append(("change", (name, len(changeset.insert))))
        self.datasets[name] = changeset.apply(self.datasets.get(name, []))
        return self

    # Signals

    def signal(self, name: str, value: Any = _UNSET) -> Any:
        """Return signal ``name``, or set it and notify its listeners."""
        if value is _UNSET:
            return self.signals.get(name)
        self.calls.append(("signal", (name, value)))
        self.signals[name] = value
        for handler in list(self._signal_listeners.get(name, [])):
            handler(name, value)
        return self

    # Rendering

    def run(self) -> "HeadlessView":
        self.run_count += 1
        self.calls.append(("run", ()))
        return self

    def resize(self) -> "HeadlessView":
        self.calls.append(("resize", ()))
        return self

    def hover(self) -> "HeadlessView":
        self.calls.append(("hover", ()))
        return self

    def _setting(self, key: str, value: Any) -> Any:
        if value is _UNSET:
            return self.settings[key]
        self.calls.append((key, (value,)))
        self.settings[key] = value
        return self

    def width(self, value: Any = _UNSET) -> Any:
        return self._setting("width", value)

    def height(self, value: Any = _UNSET) -> Any:
        return self._setting("height", value)

    def padding(self, value: Any = _UNSET) -> Any:
        return self._setting("padding", value)

    def background(self, value: Any = _UNSET) -> Any:
        return self._setting("background", value)

    def renderer(self, value: Any = _UNSET) -> Any:
        return self._setting("renderer", value)

    # Listeners

    def add_event_listener(self, name: str, handler: Handler) -> "HeadlessView":
        self.calls.append(("add_event_listener", (name,)))
        self._event_listeners[name].append(handler)
        return self

    def remove_event_listener(self, name: str, handler: Handler) -> "HeadlessView":
        listeners = self._event_listeners.get(name, [])
        if handler in listeners:
            listeners.remove(handler)
        return self

    def add_signal_listener(self, name: str, handler: Handler) -> "HeadlessView":
        self.calls.append(("add_signal_listener", (name,)))
        self._signal_listeners[name].append(handler)
        return self

    def remove_signal_listener(self, name: str, handler: Handler) -> "HeadlessView":
        listeners = self._signal_listeners.get(name, [])
        if handler in listeners:
            listeners.remove(handler)
        return self

    def listener_count(self, kind: str, name: str) -> int:
        listeners = self._event_listeners if kind == "event" else self._signal_listeners
        return len(listeners.get(name, []))

    def emit(self, event_name: str, item: Any = None) -> None:
        """Simulate a user interaction by firing the listeners of ``event_name``."""
        for handler in list(self._event_listeners.get(event_name, [])):
            handler(event_name, item)

    def finalize(self) -> "HeadlessView":
        self.finalized = True
        self._event_listeners.clear()
        self._signal_listeners.clear()
        return self


class HeadlessEngine:
    """Rendering engine that builds HeadlessView instances.

    Args:
        delay: Seconds to wait before resolving each construction
        error: Exception raised by every construction instead of building a view
    """

    view_class = HeadlessView

    def __init__(self, delay: float = 0.0, error: Optional[BaseException] = None):
        self.delay = delay
        self.error = error
        self.views: Dict[str, HeadlessView] = {}
        self.embed_calls: List[Tuple[str, Any, Dict[str, Any]]] = []
        self._gate: Optional[asyncio.Event] = None

    def hold(self) -> None:
        """Keep constructions pending until ``release`` is called."""
        self._gate = asyncio.Event()

    def release(self) -> None:
        if self._gate is not None:
            self._gate.set()

    async def embed(
        self, instance_id: str, spec: Any, options: Mapping[str, Any]
    ) -> HeadlessView:
        self.embed_calls.append((instance_id, spec, dict(options)))
        if self._gate is not None:
            await self._gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if spec is not None and not isinstance(spec, Mapping):
            raise TypeError(f"Specification must be a mapping, got {type(spec).__name__}")

        view = self.view_class(spec)
        if "renderer" in options:
            view.settings["renderer"] = options["renderer"]
        self.views[instance_id] = view
        logger.debug(f"Built headless view for '{instance_id}'")
        return view
