# srtkit

Command-line tools and a small library for working with SubRip (`.srt`)
subtitle files. You can:

- **merge** several subtitle files into one. Overlapping cues share a
  single entry.
- **offset** every cue by a fixed amount of time, or move the whole file so
  that one cue starts at a given time.
- **sync** a file to two reference points. This stretches and shifts the file
  to correct both drift and delay.

The result is always written to standard output, and cues are numbered again
from 1. Warnings, messages and the elapsed time go to standard error. Input
files are read as UTF-8. Leading non-ASCII bytes on the first line, such as a
byte-order mark, are kept and written back out.

## Installation

```
pip install .
```

This installs the `srt` command. You can also run it as `python -m srtkit.cli`.

## Usage

```
srt [options] [command] [arguments]
```

### Options

Options can appear anywhere on the command line.

| Option     | Meaning                                                                     |
|------------|-----------------------------------------------------------------------------|
| `-c`       | Condense each cue's text onto one line                                      |
| `-f=[uwm]` | Newline style of the output: `u` unix, `w` windows, `m` mac                 |
| `-v`       | Verbose: report the line range of each block as it is read                  |

With `-c`, the lines of a cue are joined with spaces. A word hyphenated across
a line break is joined without its hyphen. A closing `</i>`, `</b>` or `</u>`
tag at the end of one line is dropped, along with the matching opening tag at
the start of the next line.

Without `-f`, the output uses the same newline style as the input.

Times are written as `H:mm:ss,fff`. The `,fff` milliseconds part is optional.

### merge

```
srt merge first.srt second.srt > merged.srt
```

This merges one or more files. Where cues overlap, the shared span becomes one
cue holding both texts, one above the other. A cue that does not overlap
another cue is kept as long as it starts no earlier than the end of the
previous output cue. Cues shorter than 100 ms are dropped from the result.

### offset

To shift every cue by a relative time:

```
srt offset +00:00:02,500 movie.srt > shifted.srt
srt offset -00:00:01,000 movie.srt > shifted.srt
```

To shift the file so that cue number `n` starts at a given time:

```
srt offset -12 00:01:30,000 movie.srt > shifted.srt
```

### sync

```
srt sync -1 00:00:05,000 -850 01:42:10,300 movie.srt > synced.srt
```

This makes cue 1 start at `00:00:05,000` and cue 850 start at `01:42:10,300`.
All other times are scaled linearly to match. A time that starts with `+` or
`-` is an offset from that cue's current start:

```
srt sync -1 +00:00:02,000 -850 -00:00:01,500 movie.srt > synced.srt
```

### Errors

If the arguments are wrong, `srt` prints `arguments error: ...` followed by the
usage text. Unreadable files or malformed subtitles produce
`system error: ...`. In every case the exit status is 0.

## Library use

```python
from datetime import timedelta
from srtkit.srt import Srt, SrtOptions

subs = Srt("movie.srt", SrtOptions())
subs.offset(timedelta(seconds=2))
print(subs[1])          # the cue with serial number 1, as {sn, period, text}
print(subs.render())    # the whole document as SRT text
```

- `Srt.from_text(text, options)` builds the same object from a string.
- `a + b` and `a += b` merge two documents as `srt merge` does, but without
  dropping short cues.
- `scale(factor)` multiplies every time by `factor`.
- `offset(delta)` shifts every time by `delta`.
- `filter(predicate)` keeps only the cues for which `predicate(item)` is true.

Iterate over an `Srt` to get its `Item`s. Each `Item` has `sn`, `text` and a
`Period` with `begin` and `end`, both `timedelta`s from midnight.

Helper functions in `srtkit.srt`:

- `to_time` parses a time.
- `format_time` formats a time as `HH:MM:SS,mmm`, rounded to the millisecond.
- `scale_time` scales one time.

`srtkit.cli` provides `dispatch(argv)`, which runs a command and returns the
resulting `Srt`. It also provides the parsing helpers that the commands use.

## Limitations

Results go only to standard output. Files are never rewritten in place. Times
past 24 hours wrap around when they are written out.