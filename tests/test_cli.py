from datetime import timedelta

import pytest

from srtkit.cli import (
    ArgError,
    dispatch,
    get_scale,
    help_text,
    main,
    merge_command,
    offset_command,
    parse_offset_time,
    parse_options,
    parse_spec_time,
    parse_sync_sn,
    parse_time,
    sync_command,
    sync_srt,
)
from srtkit.srt import Srt, SrtOptions, format_time, to_time

THREE_ITEMS = (
    "1\n00:00:01,000 --> 00:00:01,500\nOne\n\n"
    "2\n00:00:02,000 --> 00:00:02,500\nTwo\n\n"
    "3\n00:00:03,000 --> 00:00:03,500\nThree\n\n"
)


def _write(tmp_path, name, content):
    path = tmp_path / name
    path.write_bytes(content.encode("utf-8"))
    return str(path)


def test_help_text_lists_commands():
    text = help_text()
    assert text.startswith("USAGE")
    for command in ("merge", "offset", "sync"):
        assert f"  {command}  " in text


def test_parse_options_extracts_flags():
    options, rest = parse_options(["-c", "merge", "-f=m", "-v", "a.srt"])
    assert options.condense is True
    assert options.verbose is True
    assert options.newline == "\r"
    assert rest == ["merge", "a.srt"]


@pytest.mark.parametrize("flag,newline", [("-f=u", "\n"), ("-f=w", "\r\n"), ("-f=m", "\r")])
def test_parse_options_newlines(flag, newline):
    options, rest = parse_options([flag, "sync"])
    assert options.newline == newline
    assert rest == ["sync"]


def test_parse_options_defaults():
    options, rest = parse_options(["offset", "+0:00:01", "x.srt"])
    assert options == SrtOptions()
    assert rest == ["offset", "+0:00:01", "x.srt"]


def test_parse_options_bad_newline():
    with pytest.raises(ArgError, match="invalid new line format"):
        parse_options(["-f=x", "merge"])


def test_parse_sync_sn():
    assert parse_sync_sn("-12") == 12
    for bad in ("12", "+3", "-a", "-"):
        with pytest.raises(ArgError, match="invalid item idx"):
            parse_sync_sn(bad)


def test_parse_spec_time():
    assert parse_spec_time("00:01:02,345") == to_time("00:01:02,345")
    assert parse_spec_time("1:2:3") == to_time("1:02:03")
    with pytest.raises(ArgError, match="invalid item time"):
        parse_spec_time("00:61:00,000")
    with pytest.raises(ArgError):
        parse_spec_time("+00:00:01,000")


def test_parse_offset_time_sign():
    positive = parse_offset_time("+00:00:01,500")
    negative = parse_offset_time("-00:00:01,500")
    assert positive == to_time("00:00:01,500")
    assert negative == -positive
    with pytest.raises(ArgError, match="time format error"):
        parse_offset_time("00:00:01,500")


def test_get_scale():
    t1, t2 = to_time("00:00:01,000"), to_time("00:00:03,000")
    assert get_scale(t1, t2, t1, t2) == 1.0
    assert get_scale(t1, t2, t2, t1) == -1.0
    with pytest.raises(ArgError, match="invalid sync span"):
        get_scale(t1, t1, t1, t2)


def test_parse_time_offset_and_absolute():
    srt = Srt.from_text(THREE_ITEMS)
    assert parse_time("+00:00:01,000", srt, 2) == srt[2].period.begin + to_time("00:00:01,000")
    assert parse_time("00:00:07,000", srt, 2) == to_time("00:00:07,000")


def test_sync_srt_hits_targets():
    srt = Srt.from_text(THREE_ITEMS)
    target1, target3 = to_time("00:00:10,000"), to_time("00:00:14,000")
    sync_srt(srt, 1, target1, 3, target3)
    assert srt[1].period.begin == target1
    assert srt[3].period.begin == target3
    assert srt[2].period.begin == to_time("00:00:12,000")


def test_offset_command_relative(tmp_path, capsys):
    path = _write(tmp_path, "a.srt", THREE_ITEMS)
    original = Srt(path)
    result = offset_command(SrtOptions(), ["+00:00:01,500", path])
    delta = parse_offset_time("+00:00:01,500")
    for before, after in zip(original, result):
        assert after.period.begin == before.period.begin + delta
        assert after.period.end == before.period.end + delta
    assert capsys.readouterr().out == result.render()


def test_offset_command_to_item_time(tmp_path, capsys):
    path = _write(tmp_path, "a.srt", THREE_ITEMS)
    result = offset_command(SrtOptions(), ["-2", "00:00:05,000", path])
    assert result[2].period.begin == to_time("00:00:05,000")
    out = capsys.readouterr().out
    assert format_time(to_time("00:00:05,000")) in out


def test_offset_command_bad_arg_count(tmp_path):
    path = _write(tmp_path, "a.srt", THREE_ITEMS)
    with pytest.raises(ArgError, match="bad argument"):
        offset_command(SrtOptions(), [path])


def test_sync_command(tmp_path, capsys):
    path = _write(tmp_path, "a.srt", THREE_ITEMS)
    result = sync_command(SrtOptions(), ["-1", "00:00:10,000", "-3", "+00:00:11,000", path])
    assert result[1].period.begin == to_time("00:00:10,000")
    assert result[3].period.begin == to_time("00:00:03,000") + to_time("00:00:11,000")
    assert capsys.readouterr().out == result.render()


def test_sync_command_bad_arg_count(tmp_path):
    path = _write(tmp_path, "a.srt", THREE_ITEMS)
    with pytest.raises(ArgError, match="bad sync arguments"):
        sync_command(SrtOptions(), ["-1", "00:00:10,000", path])


def test_merge_command_overlap(tmp_path, capsys):
    a = _write(tmp_path, "a.srt", "1\n00:00:01,000 --> 00:00:03,000\nHello\n\n")
    b = _write(tmp_path, "b.srt", "1\n00:00:02,000 --> 00:00:04,000\nWorld\n\n")
    merged = merge_command(SrtOptions(), [a, b])
    items = list(merged)
    assert len(items) == 1
    assert items[0].text == "Hello\nWorld"
    assert items[0].period.begin == to_time("00:00:02,000")
    assert items[0].period.end == to_time("00:00:03,000")
    assert capsys.readouterr().out == merged.render()


def test_merge_command_drops_short_items(tmp_path, capsys):
    a = _write(
        tmp_path,
        "a.srt",
        "1\n00:00:01,000 --> 00:00:01,050\nshort\n\n2\n00:00:02,000 --> 00:00:03,000\nlong\n\n",
    )
    b = _write(tmp_path, "b.srt", "1\n00:00:02,000 --> 00:00:03,000\nother\n\n")
    merged = merge_command(SrtOptions(), [a, b])
    assert [item.text for item in merged] == ["long\nother"]
    assert all(item.period.length() >= timedelta(milliseconds=100) for item in merged)
    capsys.readouterr()


def test_merge_command_needs_files():
    with pytest.raises(ArgError, match="no file to merge"):
        merge_command(SrtOptions(), [])


def test_dispatch_applies_newline_option(tmp_path, capsys):
    path = _write(tmp_path, "a.srt", THREE_ITEMS)
    result = dispatch(["-f=w", "offset", "+00:00:00,000", path])
    out = capsys.readouterr().out
    assert result.options.newline == "\r\n"
    assert "\r\n" in out
    assert len(result) == 3


def test_dispatch_errors():
    with pytest.raises(ArgError, match="no command"):
        dispatch([])
    with pytest.raises(ArgError, match="no command 'bogus'"):
        dispatch(["bogus"])


def test_main_reports_argument_error(capsys):
    assert main(["bogus"]) == 0
    err = capsys.readouterr().err
    assert "arguments error: no command 'bogus'" in err
    assert "USAGE" in err


def test_main_reports_missing_file(tmp_path, capsys):
    missing = str(tmp_path / "missing.srt")
    assert main(["offset", "+00:00:01,000", missing]) == 0
    assert "system error" in capsys.readouterr().err


def test_main_success_reports_done(tmp_path, capsys):
    path = _write(tmp_path, "a.srt", THREE_ITEMS)
    assert main(["offset", "+00:00:00,000", path]) == 0
    captured = capsys.readouterr()
    assert "done in" in captured.err
    assert captured.out == Srt(path).render()