import threading

from uptime_monitor.alerts import RECOVERED, AlertDispatcher
from uptime_monitor.config import MAX_ALERT_MESSAGE_LEN, SiteConfig
from uptime_monitor.controller import Controller, format_alert
from uptime_monitor.network_errors import RecoverableNetworkError
from uptime_monitor.state import PollResult, SiteStatus

REFUSED = RecoverableNetworkError.CONNECTION_REFUSED


def make_controller(sink, threshold=3, notify_recovery=False, names=("a.example",)):
    sites = [SiteConfig(name=n, threshold=threshold) for n in names]
    return Controller(sites, AlertDispatcher([sink]), notify_recovery=notify_recovery)


def ok(name="a.example", rtt=12.5):
    return PollResult.success(name, rtt)


def err(name="a.example", kind=REFUSED):
    return PollResult.failure(name, kind)


def test_alert_fires_once_after_threshold_exceeded(sink):
    ctl = make_controller(sink, threshold=3)
    ctl.handle_result(ok())
    for _ in range(3):
        ctl.handle_result(err())
    assert sink.events == []
    assert ctl.state_for("a.example").status is SiteStatus.DEGRADING

    ctl.handle_result(err())
    assert len(sink.events) == 1
    assert sink.events[0].message == "ALERT! a.example: connection refused"
    state = ctl.state_for("a.example")
    assert state.is_alerting
    assert state.status is SiteStatus.ALERTING


def test_success_resets_silently(sink):
    ctl = make_controller(sink, threshold=3)
    for r in (ok(), err(), err(), err(), err()):
        ctl.handle_result(r)
    ctl.handle_result(ok())
    state = ctl.state_for("a.example")
    assert state.consecutive_failures == 0
    assert not state.is_alerting
    assert state.status is SiteStatus.HEALTHY
    assert len(sink.events) == 1


def test_no_alert_storm(sink):
    ctl = make_controller(sink, threshold=3)
    for _ in range(100):
        ctl.handle_result(err())
    assert len(sink.events) == 1
    assert ctl.state_for("a.example").consecutive_failures == 100


def test_alerts_again_after_recovery(sink):
    ctl = make_controller(sink, threshold=1)
    for r in (err(), err(), ok(), err(), err()):
        ctl.handle_result(r)
    assert len(sink.events) == 2


def test_zero_threshold_alerts_on_first_failure(sink):
    ctl = make_controller(sink, threshold=0)
    ctl.handle_result(err())
    assert len(sink.events) == 1


def test_recovery_notification_when_enabled(sink):
    ctl = make_controller(sink, threshold=0, notify_recovery=True)
    ctl.handle_result(ok())
    assert sink.events == []
    ctl.handle_result(err())
    ctl.handle_result(ok())
    assert [e.kind for e in sink.events] == ["alert", RECOVERED]
    assert "a.example" in sink.events[1].message


def test_sites_are_tracked_independently(sink):
    ctl = make_controller(sink, threshold=1, names=("a.example", "b.example"))
    ctl.handle_result(err("a.example"))
    ctl.handle_result(err("b.example"))
    ctl.handle_result(ok("a.example"))
    ctl.handle_result(err("b.example"))
    assert ctl.state_for("a.example").consecutive_failures == 0
    assert ctl.state_for("b.example").consecutive_failures == 2
    assert [e.site_name for e in sink.events] == ["b.example"]


def test_unknown_site_is_ignored(sink):
    ctl = make_controller(sink)
    ctl.handle_result(err("nobody.example"))
    assert ctl.processed == 0
    assert set(ctl.states) == {"a.example"}


def test_failing_sink_does_not_break_controller(make_sink):
    good = make_sink()
    sites = [SiteConfig(name="a.example", threshold=0)]
    ctl = Controller(sites, AlertDispatcher([make_sink(raises=True), good]))
    ctl.handle_result(err())
    assert len(good.events) == 1
    assert ctl.state_for("a.example").is_alerting


def test_telemetry_is_recorded(sink):
    ctl = make_controller(sink)
    ctl.handle_result(ok(rtt=42.0))
    state = ctl.state_for("a.example")
    assert state.last_rtt_ms == 42.0
    assert state.success_count == 1
    ctl.handle_result(err(kind=RecoverableNetworkError.CONNECTION_TIMED_OUT))
    assert state.last_rtt_ms is None
    assert state.last_error is RecoverableNetworkError.CONNECTION_TIMED_OUT
    assert state.failure_count == 1


def test_alert_message_is_truncated():
    message = format_alert("x" * 2000, REFUSED)
    assert len(message) == MAX_ALERT_MESSAGE_LEN
    assert message.endswith("...")


def test_thread_drains_queue_before_stopping(sink):
    ctl = make_controller(sink, threshold=3)
    ctl.start()
    for _ in range(10):
        ctl.results.enqueue(err())
    ctl.stop(timeout=5)
    assert not ctl.is_alive()
    assert ctl.processed == 10
    assert len(sink.events) == 1
    assert ctl.results.length == 0


def test_results_from_many_producers(sink):
    names = [f"site{i}.example" for i in range(4)]
    ctl = make_controller(sink, threshold=5, names=names)
    ctl.start()

    def produce(name):
        for _ in range(50):
            ctl.results.enqueue(err(name))

    threads = [threading.Thread(target=produce, args=(n,)) for n in names]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    ctl.stop(timeout=5)

    assert ctl.processed == 200
    assert sorted(e.site_name for e in sink.events) == names
    for n in names:
        assert ctl.state_for(n).consecutive_failures == 50


def test_stop_without_start_leaves_queue_untouched(sink):
    ctl = make_controller(sink)
    ctl.stop()
    assert ctl.results.length == 0
    assert ctl.results.peek() is None


def test_stop_twice_does_not_leave_a_stop_marker(sink):
    ctl = make_controller(sink)
    ctl.start()
    ctl.stop(timeout=5)
    ctl.stop(timeout=5)
    assert not ctl.is_alive()
    assert ctl.results.length == 0
