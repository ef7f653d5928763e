import datetime
from typing import Annotated

import pytest
import pytz

from marshalcat import Duration, OmitEmpty, Schema, Timestamp, dumps, zero
from marshalcat.types import ZERO_TIME


class TestTimestamp:
    def test_unset_is_zero(self):
        ts = Timestamp()
        assert ts.is_zero()
        assert ts.marshal_json() == ('"0001-01-01T00:00:00Z"', zero)
        assert dumps(ts) == '"0001-01-01T00:00:00Z"'
        assert str(ts) == "0001-01-01T00:00:00Z"

    def test_zero_time_is_zero(self):
        assert Timestamp(ZERO_TIME).is_zero()
        assert Timestamp(datetime.datetime(1, 1, 1)).is_zero()

    def test_naive_datetimes_are_utc(self):
        ts = Timestamp(datetime.datetime(2020, 1, 2, 3, 4, 5))
        assert not ts.is_zero()
        assert ts.dt.tzinfo is pytz.utc
        assert dumps(ts) == '"2020-01-02T03:04:05Z"'

    def test_aware_datetimes_are_converted(self):
        dt = datetime.datetime(2020, 1, 2, 5, 4, 5, tzinfo=pytz.FixedOffset(120))
        assert dumps(Timestamp(dt)) == '"2020-01-02T03:04:05Z"'

    def test_microseconds(self):
        dt = datetime.datetime(2020, 1, 2, 3, 4, 5, 120)
        assert dumps(Timestamp(dt)) == '"2020-01-02T03:04:05.000120Z"'

    def test_parse(self):
        ts = Timestamp.parse("2020-01-02T03:04:05+02:00")
        assert str(ts) == "2020-01-02T01:04:05Z"

    def test_parse_failure(self):
        with pytest.raises(ValueError):
            Timestamp.parse("definitely not a date")

    def test_before_zero_time_in_utc_is_zero(self):
        ts = Timestamp.parse("0001-01-01T00:30:00+01:00")
        assert ts.is_zero()
        assert ts.dt == ZERO_TIME
        assert dumps(ts) == '"0001-01-01T00:00:00Z"'

    def test_past_max_time_in_utc_fails(self):
        with pytest.raises(ValueError, match="out of range"):
            Timestamp.parse("9999-12-31T23:30:00-01:00")

    def test_as_record_field(self):
        class Event(Schema):
            name: str
            starts_at: Annotated[Timestamp, OmitEmpty()] = Timestamp()
            ends_at: Timestamp = Timestamp()

        assert Event(name="e").dumps() == (
            '{"name":"e","ends_at":"0001-01-01T00:00:00Z"}'
        )
        start = Timestamp(datetime.datetime(2020, 1, 1))
        assert Event(name="e", starts_at=start).dumps() == (
            '{"name":"e","starts_at":"2020-01-01T00:00:00Z",'
            '"ends_at":"0001-01-01T00:00:00Z"}'
        )

    def test_in_arrays(self):
        assert dumps([Timestamp()]) == '["0001-01-01T00:00:00Z"]'


class TestDuration:
    def test_zero(self):
        assert Duration().is_zero()
        assert Duration().marshal_json() == ("0", zero)
        assert dumps(Duration(0)) == "0"

    def test_whole_seconds(self):
        assert dumps(Duration(datetime.timedelta(minutes=1, seconds=30))) == "90"

    def test_fractional_seconds(self):
        assert dumps(Duration(1.5)) == "1.5"

    def test_negative(self):
        assert dumps(Duration(-2)) == "-2"

    def test_as_record_field(self):
        class Job(Schema):
            timeout: Annotated[Duration, OmitEmpty()]
            retries: int

        assert Job(timeout=Duration(), retries=0).dumps() == '{"retries":0}'
        assert Job(timeout=Duration(5), retries=0).dumps() == (
            '{"timeout":5,"retries":0}'
        )
