"""Fuzzy date arguments for the ``date`` command."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from coinjar.grammar import RELATIVE_DAYS

_OFFSET_RE = re.compile(r"^[+-]?\d+$")
_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d")


@dataclass(frozen=True)
class DateArg:
    """A parsed date argument: an absolute date, a day offset or a relative word.

    Attributes:
        day: Absolute date, if given
        offset: Days to move from the current context date
        relative: One of "today", "yesterday" or "tomorrow"
    """

    day: date | None = None
    offset: int | None = None
    relative: str | None = None

    @classmethod
    def parse(cls, text: str) -> DateArg:
        """Parse "+N", "-N", "N", "YYYY-MM-DD", "YYYY/MM/DD" or a relative word.

        Raises:
            ValueError: If the text is none of these
        """
        text = text.strip()
        if _OFFSET_RE.match(text):
            return cls(offset=int(text))
        if text in RELATIVE_DAYS:
            return cls(relative=text)
        for fmt in _DATE_FORMATS:
            try:
                return cls(day=datetime.strptime(text, fmt).date())
            except ValueError:
                continue
        msg = f"Invalid date: {text!r}"
        raise ValueError(msg)

    def apply(self, current: date, today: date) -> date:
        """Resolve against the current context date and the reference date."""
        if self.day is not None:
            return self.day
        if self.relative is not None:
            return today + timedelta(days=RELATIVE_DAYS[self.relative])
        return current + timedelta(days=self.offset or 0)

    def __str__(self) -> str:
        if self.day is not None:
            return self.day.isoformat()
        if self.relative is not None:
            return self.relative
        return f"{self.offset:+d}"
