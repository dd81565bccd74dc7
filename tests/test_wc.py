import io

import pytest

from xvutils.wc import Counts, count, main, wc


def test_count_example():
    assert count(b"hello world\n") == Counts(1, 2, 12)


def test_count_empty():
    assert count(b"") == Counts()


def test_count_str_matches_bytes():
    text = "one two\nthree\n"
    assert count(text) == count(text.encode())


def test_nul_separates_words():
    assert count(b"a\0b").words == count(b"a b").words


def test_form_feed_is_not_a_separator():
    assert count(b"a\fb").words == count(b"ab").words


@pytest.mark.parametrize(
    "data",
    [b"", b"x", b"  a  b\tc\r\n\n", b"\v\v", b"no newline at end"],
)
def test_count_invariants(data):
    result = count(data)
    assert result.chars == len(data)
    assert result.lines == data.count(b"\n")
    assert result.words == len(data.replace(b"\0", b" ").split())


def test_wc_report_line():
    out = io.StringIO()
    data = b"ab cd\nef\n"
    counts = wc(io.BytesIO(data), "name", out)
    assert counts == count(data)
    assert out.getvalue() == f"{counts.lines} {counts.words} {counts.chars} name\n"


def test_main_files(tmp_path, capsys):
    path = tmp_path / "f"
    data = b"x y z\n"
    path.write_bytes(data)
    assert main([str(path)]) == 0
    c = count(data)
    assert capsys.readouterr().out == f"{c.lines} {c.words} {c.chars} {path}\n"


def test_main_missing(tmp_path, capsys):
    missing = tmp_path / "missing"
    assert main([str(missing)]) == 1
    assert capsys.readouterr().out == f"wc: cannot open {missing}\n"