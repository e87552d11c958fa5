"""Tests for diagnostic callback dispatch."""

import logging

from vegawidget import CallbackDispatcher, DiagnosticCallback, LoggingCallback


class ExplodingCallback(DiagnosticCallback):
    def on_method_not_found(self, instance_id, method_name):
        raise RuntimeError("boom")


def test_dispatch_reaches_every_callback(recorder):
    dispatcher = CallbackDispatcher([recorder, recorder])
    dispatcher.notify_method_not_found("chart1", "nope")
    assert recorder.events == [("method_not_found", "chart1", "nope")] * 2


def test_failing_callback_does_not_stop_others(recorder, caplog):
    dispatcher = CallbackDispatcher([ExplodingCallback(), recorder])
    with caplog.at_level(logging.ERROR, logger="vegawidget.callbacks"):
        dispatcher.notify_method_not_found("chart1", "nope")
    assert recorder.events == [("method_not_found", "chart1", "nope")]
    assert "ExplodingCallback.on_method_not_found" in caplog.text


def test_base_callback_hooks_are_noops():
    dispatcher = CallbackDispatcher([DiagnosticCallback()])
    dispatcher.notify_view_ready("chart1", object())
    dispatcher.notify_construction_error("chart1", ValueError("x"))
    dispatcher.notify_command_error("chart1", "run", ValueError("x"))
    dispatcher.notify_message_dropped({}, "malformed", ValueError("x"))


def test_logging_callback(caplog):
    callback = LoggingCallback()
    with caplog.at_level(logging.DEBUG, logger="vegawidget.callbacks"):
        callback.on_method_not_found("chart1", "nope")
        callback.on_command_error("chart1", "signal", TypeError("missing name"))
        callback.on_message_dropped({"id": "x"}, "malformed", ValueError("no fn"))
        callback.on_message_dropped({"id": "gone"}, "unknown_instance")

    levels = [(r.levelno, r.getMessage()) for r in caplog.records]
    assert levels[0][0] == logging.ERROR and "nope" in levels[0][1]
    assert levels[1][0] == logging.ERROR and "signal" in levels[1][1]
    assert levels[2][0] == logging.WARNING and "malformed" in levels[2][1]
    assert levels[3][0] == logging.DEBUG and "gone" in levels[3][1]
