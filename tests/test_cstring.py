import io

import pytest

from xvkit.cstring import (
    atoi,
    gets,
    memcmp,
    memmove,
    memset,
    safestrcpy,
    strchr,
    strcmp,
    strlen,
    strncmp,
    strncpy,
)


def test_strlen_stops_at_nul():
    assert strlen(b"abc\0def") == len(b"abc")
    assert strlen(b"") == 0
    assert strlen("hello") == len("hello")


def test_strcmp_equal_and_ordering():
    assert strcmp(b"abc", b"abc") == 0
    assert strcmp(b"abc", b"abd") < 0
    assert strcmp(b"abd", b"abc") > 0
    assert strcmp(b"ab", b"abc") < 0
    assert strcmp(b"abc\0x", b"abc\0y") == 0


def test_strcmp_is_unsigned():
    assert strcmp(b"\xff", b"\x01") > 0


def test_strncmp_limits_comparison():
    assert strncmp(b"abcd", b"abce", 3) == 0
    assert strncmp(b"abcd", b"abce", 4) < 0
    assert strncmp(b"x", b"y", 0) == 0


def test_strncpy_pads_with_nul():
    result = strncpy(b"hi", 5)
    assert len(result) == 5
    assert result[:2] == b"hi"
    assert set(result[2:]) == {0}


def test_strncpy_truncates_without_terminator():
    assert strncpy(b"hello", 3) == b"hello"[:3]
    assert strncpy(b"hello", 0) == b""


def test_safestrcpy_always_terminates():
    result = safestrcpy(b"hello", 3)
    assert len(result) == 3
    assert result[-1] == 0
    assert result[:-1] == b"hello"[:2]
    assert safestrcpy(b"hi", 10) == b"hi\0"
    assert safestrcpy(b"hi", 0) == b""


def test_strchr_finds_before_nul():
    assert strchr(b"abc", "c") == b"abc".index(b"c")
    assert strchr(b"abc", ord("a")) == 0
    assert strchr(b"ab\0c", "c") is None
    assert strchr(b"abc", 0) is None


def test_memcmp():
    assert memcmp(b"abcx", b"abcy", 3) == 0
    assert memcmp(b"abcx", b"abcy", 4) < 0
    with pytest.raises(ValueError):
        memcmp(b"ab", b"abc", 3)


def test_memmove_handles_overlap():
    buf = bytearray(b"abcdef")
    assert memmove(buf, 2, 0, 4) == bytearray(b"ababcd")
    buf = bytearray(b"abcdef")
    memmove(buf, 0, 2, 4)
    assert buf[:4] == bytearray(b"cdef")


def test_memmove_out_of_range():
    with pytest.raises(IndexError):
        memmove(bytearray(4), 2, 0, 4)


def test_memset_uses_low_byte():
    buf = bytearray(8)
    memset(buf, 0x141, 4)
    assert buf[:4] == bytearray(b"AAAA")
    assert set(buf[4:]) == {0}
    with pytest.raises(IndexError):
        memset(bytearray(2), 0, 3)


def test_atoi():
    assert atoi(b"123abc") == 123
    assert atoi("42") == 42
    assert atoi("") == 0
    assert atoi("-5") == 0


def test_gets_reads_lines():
    stream = io.BytesIO(b"line1\nline2")
    assert gets(stream, 100) == b"line1\n"
    assert gets(stream, 100) == b"line2"
    assert gets(stream, 100) == b""


def test_gets_respects_limit_and_cr():
    assert gets(io.BytesIO(b"abcdef"), 4) == b"abc"
    assert gets(io.BytesIO(b"ab\rcd"), 100) == b"ab\r"