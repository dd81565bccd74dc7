import io

import pytest

from xvutils.ulib import atoi, gets, memcmp, strcmp


def test_atoi_leading_digits():
    assert atoi("123abc") == 123
    assert atoi(b"42") == 42


def test_atoi_no_digits_or_sign():
    assert atoi("abc") == 0
    assert atoi("-5") == 0
    assert atoi("") == 0


def test_strcmp_equal():
    assert strcmp("hi\n", "hi\n") == 0


def test_strcmp_difference_of_bytes():
    assert strcmp("a", "c") == ord("a") - ord("c")
    assert strcmp("c", "a") > 0


def test_strcmp_prefix():
    assert strcmp("abc", "ab") == ord("c")
    assert strcmp("ab", "abc") < 0


def test_strcmp_stops_at_nul():
    assert strcmp("ab\0zz", "ab") == 0


def test_strcmp_unsigned_bytes():
    assert strcmp(b"\xff", b"\x01") > 0


def test_memcmp():
    assert memcmp(b"abcX", b"abcY", 3) == 0
    assert memcmp(b"abcX", b"abcY", 4) == ord("X") - ord("Y")
    assert memcmp(b"\xff", b"\x01", 1) > 0


def test_memcmp_does_not_stop_at_nul():
    assert memcmp(b"\0a", b"\0b", 2) < 0


def test_memcmp_short_buffer():
    with pytest.raises(ValueError):
        memcmp(b"ab", b"abc", 3)


def test_gets_reads_one_line():
    stream = io.StringIO("hello\nworld\n")
    assert gets(stream, 100) == "hello\n"
    assert gets(stream, 100) == "world\n"
    assert gets(stream, 100) == ""


def test_gets_respects_max_len():
    stream = io.StringIO("abcdef\n")
    line = gets(stream, 4)
    assert line == "abc"
    assert stream.read() == "def\n"


def test_gets_stops_at_carriage_return():
    assert gets(io.StringIO("ab\rcd"), 100) == "ab\r"


def test_gets_binary_stream():
    stream = io.BytesIO(b"ls\nrest")
    assert gets(stream, 100) == b"ls\n"
    assert gets(io.BytesIO(b""), 100) == b""