"""
Unit tests for playback helpers.
"""

import pytest

from slotbid.core.auction import Segment
from slotbid.core.playback import clamp_position, format_duration


@pytest.fixture
def segment():
    return Segment("alice", 600, 900)


class TestClampPosition:

    def test_inside_segment_unchanged(self, segment):
        assert clamp_position(segment, 750.5) == 750.5

    def test_before_segment_jumps_to_start(self, segment):
        assert clamp_position(segment, 10) == 600

    def test_end_loops_to_start(self, segment):
        assert clamp_position(segment, 900) == 600
        assert clamp_position(segment, 1200) == 600

    def test_whole_artifact_access(self):
        assert clamp_position(None, 1234.0) == 1234.0
        assert clamp_position(None, -3) == 0.0

    def test_segment_contains(self, segment):
        assert segment.contains(600)
        assert not segment.contains(900)
        assert segment.duration == 300


class TestFormatDuration:

    @pytest.mark.parametrize("seconds,expected", [
        (0, "0:00"),
        (59, "0:59"),
        (61, "1:01"),
        (1862, "31:02"),
        (3600, "60:00"),
        (-5, "0:00"),
    ])
    def test_format(self, seconds, expected):
        assert format_duration(seconds) == expected
