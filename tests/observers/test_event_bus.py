import logging

from scyllanode.observers.dispatcher import EventBus
from scyllanode.observers.events import NodeStarted, NodeStartSkipped, new_ctx
from scyllanode.observers.logger import LoggerObserver


class Capture:
    def __init__(self): self.events = []
    def notify(self, ev): self.events.append(ev)


class Broken:
    def notify(self, ev): raise RuntimeError("observer bug")


def test_broken_observer_does_not_stop_others():
    cap = Capture()
    bus = EventBus([Broken(), cap])
    bus.emit(NodeStarted(node="a", **new_ctx("r1")))
    assert len(cap.events) == 1
    assert cap.events[0].run_id == "r1"
    assert cap.events[0].ts.endswith("Z")


def test_logger_observer_formats_event(caplog):
    logger = logging.getLogger("eventbus.test")
    bus = EventBus()
    bus.subscribe(LoggerObserver(logger))
    with caplog.at_level(logging.INFO, logger="eventbus.test"):
        bus.emit(NodeStartSkipped(node="b", reason="decommissioned", **new_ctx("r1")))
    assert "[EVENT] NodeStartSkipped: node=b, reason=decommissioned" in caplog.text
