"""Tests for play-count reporting."""

import pytest

from kgic.domain.playback.reporter import PlayCountReporter


class TestPlayCountReporter:
    @pytest.mark.anyio
    async def test_reports_each_new_track(self, reporter, sender):
        """Test every track change sends one increment."""
        assert reporter.report_play(1) is True
        assert reporter.report_play(2) is True
        await reporter.drain()
        assert sender.sent == [1, 2]

    @pytest.mark.anyio
    async def test_repeat_is_not_reported(self, reporter, sender):
        """Test the same track becoming current twice counts once."""
        reporter.report_play("abc")
        assert reporter.report_play("abc") is False
        await reporter.drain()
        assert sender.sent == ["abc"]

    @pytest.mark.anyio
    async def test_optimistic_count(self, reporter):
        """Test the local counter bumps from the seeded server count."""
        reporter.seed(5, 10)
        reporter.report_play(5)
        assert reporter.count_for(5) == 11
        assert reporter.count_for(6) == 0
        await reporter.drain()

    @pytest.mark.anyio
    async def test_failures_are_swallowed(self):
        """Test a failing sender never raises to the caller."""

        async def failing(track_id):
            raise ConnectionError("offline")

        reporter = PlayCountReporter(failing)
        assert reporter.report_play(1) is True
        await reporter.drain()
        assert reporter.count_for(1) == 1

    def test_without_event_loop(self, sender):
        """Test reporting outside an event loop is a no-op send."""
        reporter = PlayCountReporter(sender)
        assert reporter.report_play(1) is False
        assert sender.sent == []
