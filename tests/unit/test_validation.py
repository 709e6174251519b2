"""
Unit tests for input validation.
"""

import pytest

from slotbid.utils.validation import (
    validate_integer,
    validate_amount,
    validate_duration,
    validate_identity,
    validate_timestamp,
    validate_bid_data,
    validate_listing_data,
    MAX_IDENTITY_LENGTH,
)


def listing(**overrides):
    data = {"creator": "creator", "title": "Session", "starting_price": 0, "max_winners": 1}
    data.update(overrides)
    return data


class TestScalars:

    def test_integer_bounds(self):
        assert validate_integer(5, "x", 1, 10) == (True, "")
        assert not validate_integer(0, "x", 1, 10)[0]
        assert not validate_integer(11, "x", 1, 10)[0]

    def test_integer_type(self):
        valid, err = validate_integer("5", "x")
        assert not valid
        assert "must be int" in err

    def test_bool_is_not_an_amount(self):
        assert not validate_amount(True)[0]

    def test_amount_positive(self):
        assert validate_amount(1)[0]
        assert not validate_amount(0)[0]

    def test_duration(self):
        assert validate_duration(3600)[0]
        assert not validate_duration(0)[0]

    @pytest.mark.parametrize("value", ["alice", "ユーザーX", "a b"])
    def test_identity_ok(self, value):
        assert validate_identity(value)[0]

    @pytest.mark.parametrize("value", ["", " alice", "alice ", None, "x" * (MAX_IDENTITY_LENGTH + 1)])
    def test_identity_rejected(self, value):
        assert not validate_identity(value)[0]


class TestComposite:

    def test_bid_data(self):
        assert validate_bid_data("alice", 100) == (True, "")
        assert not validate_bid_data("", 100)[0]
        assert not validate_bid_data("alice", 0)[0]

    def test_listing_ok(self):
        assert validate_listing_data(listing(description="", total_duration=3600)) == (True, "")

    def test_listing_not_dict(self):
        assert not validate_listing_data(["creator"])[0]

    def test_listing_missing_field(self):
        data = listing()
        del data["title"]

        valid, err = validate_listing_data(data)

        assert not valid
        assert "title" in err

    @pytest.mark.parametrize("overrides", [
        {"starting_price": -1},
        {"max_winners": 0},
        {"total_duration": 0},
        {"description": 5},
        {"work_starts_at": 20.0, "work_ends_at": 10.0},
        {"ends_at": "tomorrow"},
        {"ends_at": float("inf")},
        {"work_starts_at": True},
        {"work_ends_at": "5"},
    ])
    def test_listing_rejected(self, overrides):
        assert not validate_listing_data(listing(**overrides))[0]

    def test_listing_schedule_ok(self):
        assert validate_listing_data(listing(ends_at=1500, work_starts_at=1600.5, work_ends_at=1700)) == (True, "")


class TestTimestamps:

    @pytest.mark.parametrize("value", [None, 0, 1700000000, 1700000000.25])
    def test_accepted(self, value):
        assert validate_timestamp(value, "ends_at") == (True, "")

    @pytest.mark.parametrize("value", ["tomorrow", True, float("nan"), float("-inf"), [1]])
    def test_rejected(self, value):
        valid, err = validate_timestamp(value, "ends_at")

        assert not valid
        assert "ends_at" in err
