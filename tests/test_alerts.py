from uptime_monitor.alerts import AlertDispatcher, AlertEvent, NotificationSink


class OrderedSink(NotificationSink):
    def __init__(self, label, order):
        self.label = label
        self.order = order

    def notify(self, event):
        self.order.append(self.label)
        return True


class BrokenCloseSink(NotificationSink):
    def notify(self, event):
        return True

    def close(self):
        raise OSError("close failed")


def test_broadcast_reaches_every_sink_in_order():
    order = []
    disp = AlertDispatcher([OrderedSink("first", order), OrderedSink("second", order)])
    assert disp.broadcast(AlertEvent("hello")) == 2
    assert order == ["first", "second"]


def test_raising_sink_is_isolated(make_sink):
    good = make_sink()
    disp = AlertDispatcher([make_sink(raises=True), good])
    delivered = disp.broadcast(AlertEvent("site down", "a.example"))
    assert delivered == 1
    assert [e.message for e in good.events] == ["site down"]


def test_sink_reporting_failure_is_isolated(make_sink):
    good = make_sink()
    disp = AlertDispatcher([good, make_sink(fail=True)])
    assert disp.broadcast(AlertEvent("site down")) == 1
    assert len(good.events) == 1


def test_no_sinks():
    assert AlertDispatcher().broadcast(AlertEvent("nobody listens")) == 0


def test_sinks_are_fixed_at_construction(make_sink):
    sinks = [make_sink()]
    disp = AlertDispatcher(sinks)
    sinks.append(make_sink())
    assert len(disp.sinks) == 1


def test_close_continues_past_failures(make_sink):
    last = make_sink()
    disp = AlertDispatcher([BrokenCloseSink(), last])
    disp.close()
    assert last.closed
