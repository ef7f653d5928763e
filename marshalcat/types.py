"""
Value types that know their own zero state. Each has a `marshal_json` hook
that returns `zero` alongside the encoded zero value, so record fields with
`omit_empty` drop them, while everywhere else the zero value is written out.
"""
import datetime
from typing import Optional, Tuple, Union

import attr
import pytz
from dateutil import parser

from marshalcat.consts import ZERO, zero
from marshalcat.encoder import quote

ZERO_TIME = datetime.datetime(1, 1, 1, tzinfo=pytz.utc)


def _to_utc(dt: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        # naive datetimes are taken to be UTC already
        return pytz.utc.localize(dt)
    try:
        return dt.astimezone(pytz.utc)
    except OverflowError:
        if dt.year == 1:
            # falls before the zero time once in UTC
            return ZERO_TIME
        raise ValueError(f"{dt.isoformat()} is out of range in UTC")


def format_rfc3339(dt: datetime.datetime) -> str:
    text = dt.astimezone(pytz.utc).replace(tzinfo=None).isoformat()
    return text + "Z"


@attr.frozen
class Timestamp:
    """A point in time which may be unset.

    Unset timestamps and timestamps equal to 0001-01-01T00:00:00Z are both
    zero. Times that fall before 0001-01-01T00:00:00Z in UTC are clamped to
    it, so they are zero as well. A zero timestamp still encodes as
    "0001-01-01T00:00:00Z".
    """

    dt: Optional[datetime.datetime] = attr.ib(default=None, converter=_to_utc)

    @classmethod
    def parse(cls, text: str) -> "Timestamp":
        """Parse a timestamp from text. Raises ValueError if that fails."""
        return cls(parser.parse(text))

    def is_zero(self) -> bool:
        return self.dt is None or self.dt == ZERO_TIME

    def marshal_json(self) -> Tuple[str, Optional[ZERO]]:
        if self.is_zero():
            return quote(format_rfc3339(ZERO_TIME)), zero
        return quote(format_rfc3339(self.dt)), None

    def __str__(self) -> str:
        return format_rfc3339(self.dt or ZERO_TIME)


def _to_timedelta(value: Union[datetime.timedelta, int, float]) -> datetime.timedelta:
    if isinstance(value, datetime.timedelta):
        return value
    return datetime.timedelta(seconds=value)


@attr.frozen
class Duration:
    """A length of time, encoded as a number of seconds."""

    td: datetime.timedelta = attr.ib(
        factory=datetime.timedelta, converter=_to_timedelta
    )

    def is_zero(self) -> bool:
        return not self.td

    def marshal_json(self) -> Tuple[str, Optional[ZERO]]:
        if self.is_zero():
            return "0", zero

        seconds = self.td.total_seconds()
        if seconds.is_integer():
            return str(int(seconds)), None
        return repr(seconds), None
