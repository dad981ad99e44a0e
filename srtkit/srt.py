"""Reading, merging, shifting and rescaling SubRip (.srt) subtitle files."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Callable, Iterator

_RESOLUTION = timedelta(microseconds=1)
_DAY = timedelta(days=1)
_EPOCH_DATETIME = datetime(1970, 1, 1)

_TIME_RE = re.compile(r"(\d+):(\d+):(\d+)(?:[,.](\d*))?", re.ASCII)
_PERIOD_RE = re.compile(
    r"(\d\d:\d\d:\d\d,\d*)\s*-->\s*(\d\d:\d\d:\d\d,\d*)", re.ASCII
)
_ATOI_RE = re.compile(r"\s*([+-]?\d+)", re.ASCII)
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")

_TAGS = (("<i>", "</i>"), ("<b>", "</b>"), ("<u>", "</u>"))


class SrtError(Exception):
    """Raised when subtitle content or a lookup is invalid."""


@dataclass
class SrtOptions:
    """Settings for reading and writing subtitles."""

    condense: bool = False
    verbose: bool = False
    bom: str = ""
    newline: str = ""


def to_time(text: str) -> timedelta:
    """Parse 'H:MM:SS[,fff]' into an offset from the epoch."""
    match = _TIME_RE.fullmatch(text.strip())
    if match is None:
        raise SrtError(f"invalid time '{text}'")
    hours, minutes, seconds, fraction = match.groups()
    micros = int((fraction or "")[:6].ljust(6, "0"))
    return timedelta(
        hours=int(hours), minutes=int(minutes), seconds=int(seconds), microseconds=micros
    )


def _total_milliseconds(t: timedelta) -> int:
    micros = t // _RESOLUTION
    ms = abs(micros) // 1000
    return ms if micros >= 0 else -ms


def format_time(t: timedelta) -> str:
    """Format a time of day as 'HH:MM:SS,mmm', rounded to the millisecond."""
    of_day = (t + timedelta(microseconds=500)) % _DAY
    micros = of_day // _RESOLUTION
    seconds, micros = divmod(micros, 1_000_000)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d},{micros // 1000:03d}"


def scale_time(t: timedelta, factor: float) -> timedelta:
    """Multiply a time by a factor at millisecond precision, truncating."""
    return timedelta(milliseconds=int(_total_milliseconds(t) * factor))


def _simple_time(t: timedelta) -> str:
    moment = _EPOCH_DATETIME + t
    out = moment.strftime("%Y-%b-%d %H:%M:%S")
    if moment.microsecond:
        out += f".{moment.microsecond:06d}"
    return out


@dataclass(frozen=True)
class Period:
    """A half-open time span [begin, end)."""

    begin: timedelta
    end: timedelta

    @property
    def last(self) -> timedelta:
        return self.end - _RESOLUTION

    def is_null(self) -> bool:
        return self.end <= self.begin

    def contains(self, point: timedelta) -> bool:
        return self.begin <= point <= self.last

    def length(self) -> timedelta:
        return self.end - self.begin

    def intersects(self, other: Period) -> bool:
        return (
            self.contains(other.begin)
            or other.contains(self.begin)
            or (other.begin < self.begin and other.last >= self.begin)
        )

    def intersection(self, other: Period) -> Period:
        return Period(max(self.begin, other.begin), min(self.end, other.end))

    def shifted(self, delta: timedelta) -> Period:
        return Period(self.begin + delta, self.end + delta)

    def __lt__(self, other: Period) -> bool:
        return self.last < other.begin

    def __str__(self) -> str:
        return f"[{_simple_time(self.begin)}/{_simple_time(self.last)}]"


@dataclass
class Item:
    """One subtitle entry."""

    sn: int
    period: Period
    text: str

    def __str__(self) -> str:
        return f"{{{self.sn}, {self.period}, {self.text}}}"


def _atoi(text: str) -> int:
    match = _ATOI_RE.match(text)
    return int(match.group(1)) if match else 0


def _split_lines(content: str) -> tuple[list[str], str | None]:
    if "\r\n" in content:
        newline: str | None = "\r\n"
    elif "\r" in content:
        newline = "\r"
    elif "\n" in content:
        newline = "\n"
    else:
        newline = None
    lines = _LINE_BREAK_RE.split(content)
    if lines and lines[-1] == "":
        lines.pop()
    return lines, newline


def _is_ascii_alpha(ch: str) -> bool:
    return ch.isascii() and ch.isalpha()


class Srt:
    """A subtitle document: an ordered list of items plus output settings."""

    def __init__(self, path, options: SrtOptions | None = None) -> None:
        with open(path, encoding="utf-8", errors="surrogateescape", newline="") as fh:
            content = fh.read()
        self._load(content, options)

    @classmethod
    def from_text(cls, text: str, options: SrtOptions | None = None) -> Srt:
        """Build a document from subtitle text already in memory."""
        srt = cls.__new__(cls)
        srt._load(text, options)
        return srt

    def _load(self, content: str, options: SrtOptions | None) -> None:
        self.options = replace(options) if options is not None else SrtOptions()
        self._items: list[Item] = []
        self._sn_read: set[int] = set()

        lines, detected = _split_lines(content)
        if not self.options.newline:
            self.options.newline = detected or "\n"
        self._extract_bom(lines)

        head = 0
        while (tail := self._item_tail(lines, head)) > head:
            if self.options.verbose:
                print(f"[info] Block: Line {head + 1} to {tail + 1}", file=sys.stderr)
            self._read_block(lines[head:tail])
            head = tail

    def _extract_bom(self, lines: list[str]) -> None:
        if not lines:
            return
        first = lines[0]
        pos = next((i for i, ch in enumerate(first) if ch.isascii()), len(first))
        self.options.bom = first[:pos]
        lines[0] = first[pos:]

    @staticmethod
    def _item_tail(lines: list[str], head: int) -> int:
        has_period = False
        for pos in range(head, len(lines)):
            line = lines[pos]
            if not line:
                return pos + 1
            if _PERIOD_RE.fullmatch(line):
                if has_period:
                    return pos - 1
                has_period = True
        return len(lines)

    def _append_text(self, text: str, line: str) -> str:
        if not line:
            return text
        if not text:
            return line
        if not self.options.condense:
            return text + self.options.newline + line

        start = 0
        for opening, closing in _TAGS:
            if text.endswith(closing) and line.startswith(opening):
                text = text[: -len(closing)]
                start = len(opening)
                break
        if (
            len(text) >= 2
            and text[-1] == "-"
            and _is_ascii_alpha(text[-2])
            and _is_ascii_alpha(line[0])
        ):
            text = text[:-1]
        else:
            text += " "
        return text + line[start:]

    def _read_block(self, block: list[str]) -> None:
        if len(block) < 2:
            return
        sn_line, period_line, *text_lines = block
        sn = _atoi(sn_line)
        if sn <= 0:
            print(f"[warning] invalid sn '{sn}' from content '{sn_line}'", file=sys.stderr)
        if sn in self._sn_read:
            print(f"[warning] duplicated sn '{sn_line}'", file=sys.stderr)
        self._sn_read.add(sn)

        match = _PERIOD_RE.search(period_line)
        if match is None:
            raise SrtError(f"bad period format: sn '{sn}' has [{period_line}]")
        period = Period(to_time(match.group(1)), to_time(match.group(2)))

        text = ""
        for line in text_lines:
            text = self._append_text(text, line)
        self._items.append(Item(sn, period, text))

    @staticmethod
    def _add_item(items: list[Item], period: Period, text: str, allow_crop: bool = True) -> None:
        sn = len(items) + 1
        if not items:
            items.append(Item(sn, period, text))
            return
        current = items[-1].period.end
        if current <= period.begin:
            items.append(Item(sn, period, text))
        elif current < period.end and allow_crop:
            items.append(Item(sn, Period(current, period.end), text))

    def _clone(self) -> Srt:
        other = self.__class__.__new__(self.__class__)
        other.options = replace(self.options)
        other._items = [replace(item) for item in self._items]
        other._sn_read = set(self._sn_read)
        return other

    def __iadd__(self, other: Srt) -> Srt:
        merged: list[Item] = []
        left, right = self._items, other._items
        i = j = 0
        while i < len(left) and j < len(right):
            a, b = left[i], right[j]
            if a.period.intersects(b.period):
                inter = a.period.intersection(b.period)
                self._add_item(merged, inter, a.text + self.options.newline + b.text)
                if a.period.end == inter.end:
                    i += 1
                if b.period.end == inter.end:
                    j += 1
            elif a.period < b.period:
                self._add_item(merged, a.period, a.text, allow_crop=False)
                i += 1
            else:
                self._add_item(merged, b.period, b.text, allow_crop=False)
                j += 1
        self._items = merged
        return self

    def __add__(self, other: Srt) -> Srt:
        result = self._clone()
        result += other
        return result

    def __getitem__(self, sn: int) -> Item:
        start = sn - 1 if 0 <= sn - 1 < len(self._items) else 0
        for item in self._items[start:] + self._items[:start]:
            if item.sn == sn:
                return item
        raise SrtError(f"the SN '{sn}' of srt does not exist")

    def __iter__(self) -> Iterator[Item]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def offset(self, delta: timedelta) -> Srt:
        for item in self._items:
            item.period = item.period.shifted(delta)
        return self

    def scale(self, factor: float) -> Srt:
        for item in self._items:
            item.period = Period(
                scale_time(item.period.begin, factor), scale_time(item.period.end, factor)
            )
        return self

    def filter(self, predicate: Callable[[Item], bool]) -> Srt:
        self._items = [item for item in self._items if predicate(item)]
        return self

    def render(self) -> str:
        nl = self.options.newline
        parts = [self.options.bom]
        for number, item in enumerate(self._items, start=1):
            parts.append(
                f"{number}{nl}"
                f"{format_time(item.period.begin)} --> {format_time(item.period.end)}{nl}"
                f"{item.text}{nl}{nl}"
            )
        return "".join(parts)

    def __str__(self) -> str:
        return self.render()