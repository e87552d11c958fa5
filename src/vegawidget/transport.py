"""Cross-process transport for command messages.

An external process POSTs command messages as JSON to ``/commands``. The
endpoint always answers 202 Accepted with an empty body: routing is
best-effort, so the sender learns about the effect of a command only by
observing the view.
"""

import logging
from typing import Any, Mapping, Optional, Sequence, Union

import httpx
import uvicorn
from fastapi import APIRouter, FastAPI, Request, Response

from .commands import CHANGE_COMMAND
from .messages import CommandMessage, encode_message, parse_message
from .router import CommandRouter

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8765
COMMANDS_PATH = "/commands"


def create_command_app(router: CommandRouter) -> FastAPI:
    """Build the ASGI app that feeds POSTed messages into ``router``.

    The app must run on the event loop that owns the controllers, since
    routing queues continuations on their view futures.
    """
    routes = APIRouter(tags=["commands"])

    @routes.post(COMMANDS_PATH, status_code=202)
    async def post_command(request: Request) -> Response:
        body = await request.body()
        routed = router.dispatch(body)
        logger.debug(f"Command received ({'routed' if routed else 'dropped'})")
        return Response(status_code=202)

    app = FastAPI(title="vegawidget commands")
    app.include_router(routes)
    app.state.command_router = router
    return app


async def serve_commands(
    router: CommandRouter, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT
) -> None:
    """Serve the command endpoint on the running event loop until cancelled."""
    config = uvicorn.Config(create_command_app(router), host=host, port=port, log_level="warning")
    server = uvicorn.Server(config)
    logger.info(f"Command endpoint listening on http://{host}:{port}{COMMANDS_PATH}")
    await server.serve()


class CommandClient:
    """Sends command messages to a command endpoint from another process.

    Args:
        base_url: Root URL of the endpoint, e.g. "http://127.0.0.1:8765"
        transport: Optional httpx transport (e.g. ``httpx.ASGITransport``)
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        base_url: str = f"http://{DEFAULT_HOST}:{DEFAULT_PORT}",
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url
        self._client = httpx.AsyncClient(
            base_url=base_url,
            transport=transport,
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "CommandClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def send(self, message: Union[CommandMessage, Mapping[str, Any]]) -> None:
        """Validate and send one message.

        Raises:
            MalformedMessageError: If the message misses id/fn/params
            httpx.HTTPStatusError: If the endpoint does not accept the message
        """
        response = await self._client.post(
            COMMANDS_PATH, content=encode_message(parse_message(message))
        )
        response.raise_for_status()

    async def call_view(
        self, instance_id: str, fn: str, params: Union[Sequence[Any], Mapping[str, Any]] = ()
    ) -> None:
        """Call view method ``fn`` with ``params`` on ``instance_id``."""
        if not isinstance(params, Mapping):
            params = list(params)
        await self.send(CommandMessage(id=instance_id, fn=fn, params=params))

    async def set_data(
        self, instance_id: str, name: str, data: Sequence[Mapping[str, Any]]
    ) -> None:
        """Replace dataset ``name`` with ``data`` (row records)."""
        rows = [dict(row) for row in data]
        await self.call_view(instance_id, CHANGE_COMMAND, {"name": name, "data": rows})

    async def set_signal(self, instance_id: str, name: str, value: Any) -> None:
        await self.call_view(instance_id, "signal", [name, value])

    async def run(self, instance_id: str) -> None:
        await self.call_view(instance_id, "run", [])
