"""
Tests for the year / impact filter.
"""

from stormimpact.filters import filter_events


class TestFilterEvents:

    def test_survivors_satisfy_both_conditions(self, make_event):
        events = [
            make_event(year=1995, fatalities=3),
            make_event(year=1996, injuries=1),
            make_event(year=2010, prop=1.0),
            make_event(year=2010, crop=0.5),
            make_event(year=2011),
        ]
        out = filter_events(events, 1996)
        assert [e.event_id for e in out.kept] == [events[1].event_id, events[2].event_id, events[3].event_id]
        for e in out.kept:
            assert e.year >= 1996
            assert e.fatalities or e.injuries or e.property_damage_magnitude or e.crop_damage_magnitude

    def test_counts_each_drop_reason(self, make_event):
        events = [
            make_event(year=None, fatalities=2),
            make_event(year=1990, fatalities=2),
            make_event(year=2000),
            make_event(year=2000, fatalities=1),
        ]
        out = filter_events(events, 1996)
        assert len(out.kept) == 1
        assert out.dropped_undated == 1
        assert out.dropped_early == 1
        assert out.dropped_no_impact == 1
        assert out.dropped == 3

    def test_undated_drop_is_logged(self, make_event, caplog):
        with caplog.at_level("WARNING"):
            filter_events([make_event(year=None, injuries=4)], 1996)
        assert "without a parseable begin date" in caplog.text

    def test_does_not_modify_input(self, make_event):
        events = [make_event(year=1990, fatalities=1), make_event(year=2000, fatalities=1)]
        before = list(events)
        filter_events(events, 1996)
        assert events == before
