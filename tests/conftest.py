import pytest

from vegawidget import DiagnosticCallback, WidgetConfiguration

SPEC = {
    "width": 200,
    "height": 100,
    "data": [{"name": "data1", "values": [{"x": 0, "y": 0}]}],
    "signals": [{"name": "cyl", "value": 4}],
}


class RecordingCallback(DiagnosticCallback):
    """Callback that records every diagnostic event."""

    def __init__(self):
        self.events = []

    def on_view_ready(self, instance_id, view):
        self.events.append(("ready", instance_id))

    def on_construction_error(self, instance_id, error):
        self.events.append(("construction_error", instance_id, error))

    def on_method_not_found(self, instance_id, method_name):
        self.events.append(("method_not_found", instance_id, method_name))

    def on_command_error(self, instance_id, command, error):
        self.events.append(("command_error", instance_id, command, error))

    def on_message_dropped(self, message, reason, error=None):
        self.events.append(("dropped", reason, message))

    def of_kind(self, kind):
        return [e for e in self.events if e[0] == kind]


@pytest.fixture
def spec():
    return {
        "width": SPEC["width"],
        "height": SPEC["height"],
        "data": [{"name": d["name"], "values": list(d["values"])} for d in SPEC["data"]],
        "signals": [dict(s) for s in SPEC["signals"]],
    }


@pytest.fixture
def recorder():
    return RecordingCallback()


@pytest.fixture
def config(recorder):
    return WidgetConfiguration(callbacks=[recorder])
