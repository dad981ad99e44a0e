"""Command-line front end: merge, offset and sync subtitle files."""

from __future__ import annotations

import re
import sys
import time
from datetime import timedelta
from typing import Sequence

from .srt import Srt, SrtError, SrtOptions, to_time

_TIME_PATTERN = r"\d+:[012345]?\d:[012345]?\d(,\d{3})?"
_SPEC_TIME_RE = re.compile(_TIME_PATTERN, re.ASCII)
_OFFSET_TIME_RE = re.compile(r"[+-]" + _TIME_PATTERN, re.ASCII)
_SYNC_SN_RE = re.compile(r"-\d+", re.ASCII)

_NEWLINES = {"u": "\n", "w": "\r\n", "m": "\r"}
_MIN_ITEM_LENGTH = timedelta(milliseconds=100)


class ArgError(Exception):
    """Raised when the command line is malformed."""


def help_text() -> str:
    """Return the usage message."""
    return "\n".join(
        [
            "USAGE",
            " srt [options] [command] [arguments]",
            "",
            "OPTIONS",
            "  -c",
            "    condense multile lines to one line.",
            "  -f=[uwm]",
            "    the newline of output: unix, windows, or mac",
            "  -v",
            "    verbose to print debug message",
            "",
            "COMMANDS",
            "  merge  Merge multiple N srt files. N >= 1",
            "    merge <file 1>...<file N>.",
            "",
            "  offset  Offset a relative time.",
            "    offset +/-<time> <file>",
            "      <time> = 'HH:mm:ss,fff'",
            "    offset -<n> <time> <file>",
            "      <n> is srt sn. The form is like above, but using specified time.",
            "",
            "  sync  Synchonize to the specified time(s).",
            "    sync -<n1> <time1> -<n2> <time2> <file>.",
            "      <n1>, <n2> is srt sn. if <time> prefix '+' or '-', it is a offset, "
            "otherwise a specified time.",
            "",
        ]
    )


def parse_options(args: Sequence[str]) -> tuple[SrtOptions, list[str]]:
    """Pull the options out of the arguments; return them and what is left."""
    options = SrtOptions()
    rest: list[str] = []
    for arg in args:
        if arg == "-c":
            options.condense = True
        elif arg == "-v":
            options.verbose = True
        elif arg.startswith("-f="):
            newline = _NEWLINES.get(arg[3:4])
            if newline is None:
                raise ArgError("invalid new line format")
            options.newline = newline
        else:
            rest.append(arg)
    return options, rest


def parse_sync_sn(arg: str) -> int:
    """Parse a '-<n>' item number."""
    if not _SYNC_SN_RE.fullmatch(arg):
        raise ArgError("invalid item idx")
    return abs(int(arg))


def parse_spec_time(text: str) -> timedelta:
    """Parse an absolute 'H:MM:SS[,fff]' time."""
    if not _SPEC_TIME_RE.fullmatch(text):
        raise ArgError("invalid item time")
    return to_time(text)


def parse_offset_time(text: str) -> timedelta:
    """Parse a signed '+H:MM:SS[,fff]' or '-H:MM:SS[,fff]' duration."""
    if not _OFFSET_TIME_RE.fullmatch(text):
        print(f"str: [{text}]", file=sys.stderr)
        raise ArgError("time format error")
    magnitude = to_time(text[1:])
    return -magnitude if text[0] == "-" else magnitude


def _milliseconds(delta: timedelta) -> int:
    micros = delta // timedelta(microseconds=1)
    ms = abs(micros) // 1000
    return ms if micros >= 0 else -ms


def get_scale(
    org_time1: timedelta, org_time2: timedelta, time1: timedelta, time2: timedelta
) -> float:
    """Ratio of the new span to the original span, at millisecond precision."""
    org_span = _milliseconds(org_time2 - org_time1)
    span = _milliseconds(time2 - time1)
    if org_span == 0:
        raise ArgError("invalid sync span")
    return span / org_span


def _is_offset_time(text: str) -> bool:
    return text[:1] in ("+", "-")


def parse_time(arg: str, srt: Srt, sn: int) -> timedelta:
    """Resolve a sync target: an offset from item `sn` or an absolute time."""
    if _is_offset_time(arg):
        return srt[sn].period.begin + parse_offset_time(arg)
    return parse_spec_time(arg)


def sync_srt(srt: Srt, sn1: int, time1: timedelta, sn2: int, time2: timedelta) -> Srt:
    """Rescale and shift so that items sn1 and sn2 start at time1 and time2."""
    factor = get_scale(srt[sn1].period.begin, srt[sn2].period.begin, time1, time2)
    srt.scale(factor)
    srt.offset(time1 - srt[sn1].period.begin)
    return srt


def _emit(srt: Srt) -> None:
    sys.stdout.write(srt.render())
    sys.stdout.flush()


def merge_command(options: SrtOptions, args: Sequence[str]) -> Srt:
    """Merge the given files and print the result."""
    if not args:
        raise ArgError("no file to merge")
    print(f"merge {len(args)} files...", file=sys.stderr)

    first, *others = args
    merged = Srt(first, options)
    for path in others:
        merged += Srt(path, options)

    merged.filter(lambda item: item.period.length() >= _MIN_ITEM_LENGTH)
    _emit(merged)
    return merged


def offset_command(options: SrtOptions, args: Sequence[str]) -> Srt:
    """Shift a file by an offset, or so that one item starts at a given time."""
    if len(args) not in (2, 3):
        raise ArgError("bad argument")

    *params, path = args
    srt = Srt(path, options)
    if len(params) == 1:
        delta = parse_offset_time(params[0])
    else:
        sn_arg, time_arg = params
        delta = parse_spec_time(time_arg) - srt[parse_sync_sn(sn_arg)].period.begin

    srt.offset(delta)
    _emit(srt)
    return srt


def sync_command(options: SrtOptions, args: Sequence[str]) -> Srt:
    """Synchronise a file to two reference points."""
    if len(args) != 5:
        raise ArgError("bad sync arguments")

    sn1_arg, time1_arg, sn2_arg, time2_arg, path = args
    srt = Srt(path, options)

    sn1 = parse_sync_sn(sn1_arg)
    time1 = parse_time(time1_arg, srt, sn1)
    sn2 = parse_sync_sn(sn2_arg)
    time2 = parse_time(time2_arg, srt, sn2)

    sync_srt(srt, sn1, time1, sn2, time2)
    _emit(srt)
    return srt


_COMMANDS = {
    "merge": merge_command,
    "offset": offset_command,
    "sync": sync_command,
}


def dispatch(argv: Sequence[str]) -> Srt:
    """Run the command named in the arguments (program name excluded)."""
    if not argv:
        raise ArgError("no command")
    options, args = parse_options(argv)
    if not args:
        raise ArgError("no command")
    command, *rest = args
    handler = _COMMANDS.get(command)
    if handler is None:
        raise ArgError(f"no command '{command}'")
    return handler(options, rest)


def main(argv: Sequence[str] | None = None) -> int:
    """Command entry point; errors are reported on stderr."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        start = time.perf_counter()
        dispatch(argv)
        elapsed = time.perf_counter() - start
        print(f"done in {elapsed} seconds.", file=sys.stderr)
    except ArgError as exc:
        print(f"arguments error: {exc}", file=sys.stderr)
        print(help_text(), file=sys.stderr)
    except (SrtError, OSError, ValueError) as exc:
        print(f"system error: {exc}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())