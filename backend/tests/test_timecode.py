"""Tests for the cue timestamp codec."""

import pytest

from services.captions.errors import FormatError, ValidationError
from services.captions.timecode import decode, encode, to_milliseconds


class TestEncode:
    """Seconds -> HH:MM:SS.mmm."""

    def test_zero(self):
        assert encode(0) == "00:00:00.000"
        assert encode(0.0) == "00:00:00.000"

    def test_basic_conversion(self):
        assert encode(3661.123) == "01:01:01.123"
        assert encode(0.5) == "00:00:00.500"
        assert encode(14.0) == "00:00:14.000"

    def test_truncates_sub_millisecond_remainder(self):
        assert encode(1.0019) == "00:00:01.001"
        assert encode(59.9999) == "00:00:59.999"
        assert encode(1.001) == "00:00:01.001"

    def test_hours_are_unbounded(self):
        assert encode(100 * 3600) == "100:00:00.000"
        assert encode(49 * 3600 + 5.25) == "49:00:05.250"

    def test_srt_separator(self):
        assert encode(3661.123, separator=",") == "01:01:01,123"

    @pytest.mark.parametrize("value", [-1, -0.001, float("nan"), float("inf")])
    def test_rejects_invalid_input(self, value):
        with pytest.raises(ValidationError):
            encode(value)

    def test_rejects_non_numeric(self):
        with pytest.raises(ValidationError):
            encode("12")  # type: ignore[arg-type]


class TestDecode:
    """HH:MM:SS.mmm -> seconds."""

    def test_basic_conversion(self):
        assert decode("01:01:01.123") == 3661.123
        assert decode("00:00:00.000") == 0.0
        assert decode("00:00:02.800") == 2.8

    def test_hours_field_has_no_bound(self):
        assert decode("25:00:00.000") == 90000.0
        assert decode("100:00:00.000") == 360000.0

    @pytest.mark.parametrize("value", ["00:60:00.000", "00:00:60.000", "25:61:00.000"])
    def test_rejects_minutes_or_seconds_out_of_range(self, value):
        with pytest.raises(FormatError):
            decode(value)

    @pytest.mark.parametrize(
        "value",
        [
            "1:00:00.000",
            "00:0:00.000",
            "00:00:0.000",
            "00:00:00.00",
            "00:00:00.0000",
            "00:00:00,000",
            "00.00.00.000",
            "aa:00:00.000",
            " 00:00:00.000",
            "00:00:00.000 ",
            "00:00.000",
            "",
        ],
    )
    def test_rejects_malformed_timestamps(self, value):
        with pytest.raises(FormatError):
            decode(value)

    def test_rejects_non_string(self):
        with pytest.raises(FormatError):
            decode(12.0)  # type: ignore[arg-type]


class TestRoundTrip:
    """decode(encode(x)) equals x truncated to milliseconds."""

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [
            (0.0, 0.0),
            (0.5, 0.5),
            (1.001, 1.001),
            (2.8, 2.8),
            (12345.6789, 12345.678),
            (3599.999, 3599.999),
            (359999.999, 359999.999),
        ],
    )
    def test_round_trip(self, seconds, expected):
        assert decode(encode(seconds)) == expected

    def test_to_milliseconds_truncates(self):
        assert to_milliseconds(2.8) == 2800
        assert to_milliseconds(0.0009) == 0
        assert to_milliseconds(7) == 7000
