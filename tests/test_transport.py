"""End-to-end tests: an external client drives views through the command endpoint."""

import asyncio

import httpx
import pytest

from vegawidget import CommandClient, HeadlessEngine, MalformedMessageError, WidgetHost, create_command_app


def _client_for(host):
    transport = httpx.ASGITransport(app=create_command_app(host.router))
    return CommandClient("http://vegawidget.test", transport=transport)


def test_client_commands_reach_the_view(spec, config, recorder):
    async def main():
        host = WidgetHost(HeadlessEngine(), config)
        controller = host.render("chart1", spec)

        async with _client_for(host) as client:
            await client.set_data("chart1", "data1", [{"x": 5, "y": 6}])
            await client.set_signal("chart1", "cyl", 8)
            await client.run("chart1")
            await client.call_view("missing", "run")

        return await controller.drain()

    view = asyncio.run(main())
    assert view.data("data1") == [{"x": 5, "y": 6}]
    assert view.signal("cyl") == 8
    # change, signal and run each re-render once, run itself runs twice
    assert view.run_count == 4
    assert [e[1] for e in recorder.of_kind("dropped")] == ["unknown_instance"]


def test_endpoint_accepts_and_drops_malformed_bodies(spec, config, recorder):
    async def main():
        host = WidgetHost(HeadlessEngine(), config)
        controller = host.render("chart1", spec)
        transport = httpx.ASGITransport(app=create_command_app(host.router))

        async with httpx.AsyncClient(transport=transport, base_url="http://vegawidget.test") as http:
            bad = await http.post("/commands", content=b"{not json}")
            good = await http.post(
                "/commands", json={"id": "chart1", "fn": "signal", "params": ["cyl", 6]}
            )

        view = await controller.drain()
        return bad, good, view

    bad, good, view = asyncio.run(main())
    assert bad.status_code == 202
    assert good.status_code == 202
    assert bad.content == b""
    assert view.signal("cyl") == 6
    assert [e[1] for e in recorder.of_kind("dropped")] == ["malformed"]


def test_client_validates_before_sending(config):
    async def main():
        host = WidgetHost(HeadlessEngine(), config)
        async with _client_for(host) as client:
            with pytest.raises(MalformedMessageError):
                await client.send({"id": "chart1", "params": []})

    asyncio.run(main())
