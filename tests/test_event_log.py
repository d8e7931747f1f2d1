"""Tests for the bounded event feed."""

from lanedefense.utils.event_log import EventLog, SimEvent


def _ev(tick, category="fire"):
    return SimEvent(tick=tick, category=category, message=f"{category}@{tick}")


class TestEventLog:
    def test_since_tick(self):
        log = EventLog()
        log.extend([_ev(1), _ev(2), _ev(3)])
        assert [e.tick for e in log.since_tick(2)] == [2, 3]

    def test_category_filter(self):
        log = EventLog()
        log.extend([_ev(1, "spawned"), _ev(1, "fire"), _ev(2, "killed")])
        picked = log.since_tick(0, categories=["spawned", "killed"])
        assert [e.category for e in picked] == ["spawned", "killed"]

    def test_bounded_but_totals_keep_counting(self):
        log = EventLog(maxlen=3)
        for t in range(5):
            log.append(_ev(t))
        assert len(log) == 3
        assert [e.tick for e in log.latest(10)] == [2, 3, 4]
        assert log.totals() == {"fire": 5}

    def test_latest(self):
        log = EventLog()
        log.extend(_ev(t) for t in range(10))
        assert [e.tick for e in log.latest(2)] == [8, 9]
        assert log.latest(0) == []

    def test_clear(self):
        log = EventLog()
        log.append(_ev(1))
        log.clear()
        assert len(log) == 0
        assert log.totals() == {}
