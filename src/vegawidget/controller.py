"""Asynchronous view controller.

A ViewController owns the view future of one visualization instance and
exposes an order-preserving command surface over it:

- Commands issued before the view exists are attached as continuations to
  the view future and run, in attachment order, once it resolves.
- Commands issued after the view exists are still attached to the same
  future, so they stay ordered behind anything queued earlier.
- A failed construction is reported once through the diagnostic callbacks;
  every queued continuation then observes the rejection on its own and does
  nothing.

All public operations return immediately and must be called from the thread
running the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .callbacks import CallbackDispatcher
from .changeset import Changeset, columns_to_records
from .commands import CHANGE_COMMAND, resolve_command
from .config import WidgetConfiguration
from .exceptions import (
    ConstructionError,
    ConstructionTimeoutError,
    InstanceDestroyedError,
    MethodNotFoundError,
    VegaWidgetError,
)
from .protocols import Handler, RenderingEngine, View

logger = logging.getLogger(__name__)

ViewAction = Callable[[View], Any]

_LISTENER_KINDS = {"add_event_listener": "event", "add_signal_listener": "signal"}


class ViewState(str, Enum):
    """Lifecycle states of a visualization instance."""
    UNINITIALIZED = "uninitialized"
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"
    DESTROYED = "destroyed"


class ViewController:
    """Controller for a single visualization instance.

    Args:
        instance_id: Stable identifier of the host element
        engine: Rendering engine used to build the view
        config: Controller configuration; unset fields use package defaults
    """

    def __init__(
        self,
        instance_id: str,
        engine: RenderingEngine,
        config: Optional[WidgetConfiguration] = None,
    ):
        self.instance_id = instance_id
        self.engine = engine
        self.config = config or WidgetConfiguration()
        self.spec: Any = None
        self.options: Dict[str, Any] = {}

        self._dispatcher = CallbackDispatcher(self.config.effective_callbacks)
        self._future: Optional[asyncio.Future] = None
        self._generation = 0
        self._destroyed = False

        # Construction tasks that may still be running (current and superseded)
        self._pending: List[asyncio.Future] = []
        # Every view this controller has resolved, for finalization on destroy
        self._views: List[View] = []
        # (view, kind, name, handler) for each listener registered on a view
        self._listeners: List[Tuple[View, str, str, Handler]] = []

    def __repr__(self) -> str:
        return f"ViewController(instance_id={self.instance_id!r}, state={self.state.value})"

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def state(self) -> ViewState:
        if self._destroyed:
            return ViewState.DESTROYED
        future = self._future
        if future is None:
            return ViewState.UNINITIALIZED
        if not future.done():
            return ViewState.PENDING
        if future.cancelled() or future.exception() is not None:
            return ViewState.FAILED
        return ViewState.READY

    @property
    def generation(self) -> int:
        """Number of times ``create`` has been called."""
        return self._generation

    def reconfigure(self, config: WidgetConfiguration) -> None:
        """Replace the configuration; applies to continuations that have not run yet."""
        self.config = config
        self._dispatcher = CallbackDispatcher(config.effective_callbacks)

    def create(self, spec: Any, options: Optional[Mapping[str, Any]] = None) -> None:
        """Start building a view for ``spec``, replacing any previous view future.

        Commands already attached to the previous future are not cancelled. With
        ``stale_commands="run"`` they still run against the superseded view if it
        resolves; with ``"drop"`` they are skipped. Once they have run, the
        superseded view loses its listeners and is finalized.

        Raises:
            InstanceDestroyedError: If the controller was destroyed
            RuntimeError: If no event loop is running
        """
        self._check_alive()
        loop = asyncio.get_running_loop()

        self.spec = spec
        self.options = dict(options or {})
        self._generation += 1

        future = loop.create_task(
            self._construct(spec, self.options),
            name=f"vegawidget-embed-{self.instance_id}-{self._generation}",
        )
        # Registered first so the diagnostic fires before any queued command observes the result
        future.add_done_callback(self._on_construction_done)

        previous = self._future
        if previous is not None:
            if not previous.done():
                logger.debug(
                    f"View '{self.instance_id}' re-created while construction "
                    f"{self._generation - 1} is still pending"
                )
            # Runs after every continuation already attached to the previous future
            previous.add_done_callback(self._retire)
        self._pending = [f for f in self._pending if not f.done()]
        self._pending.append(future)
        self._future = future
        logger.debug(f"Started construction {self._generation} for view '{self.instance_id}'")

    def get_future(self) -> Optional[asyncio.Future]:
        """Return the current view future unchanged (None before ``create``)."""
        return self._future

    async def drain(self) -> View:
        """Wait until every command attached so far has run, then return the view.

        Raises:
            ConstructionError: If the current construction failed
            asyncio.CancelledError: If the construction was cancelled by ``destroy``
        """
        future = self._require_future()
        marker = asyncio.get_running_loop().create_future()

        def _release(_: asyncio.Future) -> None:
            if not marker.done():
                marker.set_result(None)

        future.add_done_callback(_release)
        await marker
        return future.result()

    def destroy(self) -> None:
        """Tear the instance down.

        Cancels construction still in flight, removes every listener this
        controller registered, and finalizes resolved views. Later attempts
        to queue commands raise InstanceDestroyedError.
        """
        if self._destroyed:
            return
        self._destroyed = True

        for future in self._pending:
            if not future.done():
                future.cancel()
        self._pending.clear()

        for view in list(self._views):
            self._release_view(view)

        logger.debug(f"Destroyed view '{self.instance_id}'")

    # =========================================================================
    # Commands
    # =========================================================================

    def invoke(self, method_name: str, args: Sequence[Any] = ()) -> None:
        """Call ``method_name`` on the view with positional ``args``, then re-render.

        ``method_name`` is a wire command name resolved through the command
        table. A name the resolved view does not expose is reported as
        method-not-found and leaves the view unchanged.

        Raises:
            UnknownCommandError: If the name is unlisted and unlisted commands are disabled
            InstanceDestroyedError: If the controller was destroyed
        """
        attribute = resolve_command(method_name, self.config.effective_allow_unlisted_commands)
        args = list(args)

        def _call(view: View) -> None:
            method = getattr(view, attribute, None)
            if not callable(method):
                raise MethodNotFoundError(self.instance_id, method_name)
            if attribute in _LISTENER_KINDS:
                # Tracked so destroy/re-create can remove it again
                self._register_listener(view, _LISTENER_KINDS[attribute], *args)
            else:
                method(*args)
            view.run()

        self._when_ready(method_name, _call)

    def change_data(self, name: str, rows: Iterable[Mapping[str, Any]]) -> None:
        """Replace every row of dataset ``name`` with ``rows``.

        Args:
            name: Dataset name
            rows: ROW records, one mapping per row (not column data, see ``load_data``)
        """
        self.invoke(CHANGE_COMMAND, [name, Changeset.hard_reset(rows)])

    def load_data(self, name: str, columns: Any) -> None:
        """Append rows to dataset ``name`` without removing existing rows.

        Args:
            name: Dataset name
            columns: COLUMN data, a mapping of field name to equal-length
                sequences or a DataFrame-like object (not row records, see
                ``change_data``)

        Raises:
            ValueError: If the columns have different lengths
        """
        records = columns_to_records(columns)

        def _insert(view: View) -> None:
            view.insert(name, records)
            view.run()

        self._when_ready("insert", _insert)

    def add_event_listener(self, name: str, handler: Handler) -> None:
        """Register ``handler`` for view event ``name`` once the view is ready."""
        self._when_ready(
            f"addEventListener:{name}",
            lambda view: self._register_listener(view, "event", name, handler),
        )

    def add_signal_listener(self, name: str, handler: Handler) -> None:
        """Register ``handler`` for signal ``name`` once the view is ready."""
        self._when_ready(
            f"addSignalListener:{name}",
            lambda view: self._register_listener(view, "signal", name, handler),
        )

    # =========================================================================
    # Internals
    # =========================================================================

    async def _construct(self, spec: Any, options: Dict[str, Any]) -> View:
        timeout = self.config.construction_timeout
        try:
            embedding = self.engine.embed(self.instance_id, spec, options)
            if timeout is None:
                return await embedding
            try:
                return await asyncio.wait_for(embedding, timeout)
            except asyncio.TimeoutError as e:
                raise ConstructionTimeoutError(
                    self.instance_id, TimeoutError(f"no view after {timeout}s")
                ) from e
        except (asyncio.CancelledError, ConstructionError):
            raise
        except Exception as e:
            raise ConstructionError(self.instance_id, e) from e

    def _on_construction_done(self, future: asyncio.Future) -> None:
        if future.cancelled():
            logger.debug(f"Construction for view '{self.instance_id}' was cancelled")
            return
        error = future.exception()
        if error is not None:
            self._dispatcher.notify_construction_error(self.instance_id, error)
            return
        view = future.result()
        self._views.append(view)
        self._dispatcher.notify_view_ready(self.instance_id, view)

    def _register_listener(self, view: View, kind: str, name: str, handler: Handler) -> None:
        getattr(view, f"add_{kind}_listener")(name, handler)
        self._listeners.append((view, kind, name, handler))

    def _retire(self, future: asyncio.Future) -> None:
        """Release the view of a superseded construction."""
        if future.cancelled() or future.exception() is not None:
            return
        view = future.result()
        current = self._future
        if current is not None and current.done() and not current.cancelled() \
                and current.exception() is None and current.result() is view:
            return
        self._release_view(view)
        logger.debug(f"Released superseded view of '{self.instance_id}'")

    def _release_view(self, view: View) -> None:
        """Remove the listeners registered on ``view`` and finalize it."""
        if not any(v is view for v in self._views):
            return

        for _, kind, name, handler in [e for e in self._listeners if e[0] is view]:
            remover = getattr(view, f"remove_{kind}_listener", None)
            if callable(remover):
                try:
                    remover(name, handler)
                except Exception as e:
                    logger.warning(f"Failed to remove {kind} listener '{name}' from '{self.instance_id}': {e}")
        self._listeners = [e for e in self._listeners if e[0] is not view]

        finalize = getattr(view, "finalize", None)
        if callable(finalize):
            try:
                finalize()
            except Exception as e:
                logger.warning(f"Failed to finalize view '{self.instance_id}': {e}")
        self._views = [v for v in self._views if v is not view]

    def _check_alive(self) -> None:
        if self._destroyed:
            raise InstanceDestroyedError(f"View '{self.instance_id}' has been destroyed")

    def _require_future(self) -> asyncio.Future:
        self._check_alive()
        if self._future is None:
            raise VegaWidgetError(
                f"View '{self.instance_id}' has not been created; call create() first"
            )
        return self._future

    def _when_ready(self, command: str, action: ViewAction) -> None:
        """Attach ``action`` to the current view future as a continuation."""
        future = self._require_future()
        generation = self._generation

        def _continuation(fut: asyncio.Future) -> None:
            if fut.cancelled() or fut.exception() is not None:
                # The rejection itself was reported once by _on_construction_done
                logger.debug(f"Skipping '{command}' on '{self.instance_id}': construction did not succeed")
                return
            if self._destroyed:
                logger.debug(f"Skipping '{command}' on destroyed view '{self.instance_id}'")
                return
            if generation != self._generation and self.config.effective_stale_commands == "drop":
                logger.debug(
                    f"Dropping '{command}' queued against superseded construction "
                    f"{generation} of '{self.instance_id}'"
                )
                return
            try:
                action(fut.result())
            except MethodNotFoundError as e:
                self._dispatcher.notify_method_not_found(self.instance_id, e.method_name)
            except Exception as e:
                self._dispatcher.notify_command_error(self.instance_id, command, e)

        future.add_done_callback(_continuation)
