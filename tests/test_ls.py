import io
import os

from xvutils.ls import DIRSIZ, PATH_BUF, fmtname, ls, main
from xvutils.params import FileType


def test_fmtname_pads_last_component():
    result = fmtname("a/b/hello")
    assert result == "hello" + " " * (DIRSIZ - len("hello"))
    assert len(result) == DIRSIZ


def test_fmtname_without_slash():
    assert fmtname("cat").rstrip() == "cat"


def test_fmtname_long_name_unpadded():
    name = "x" * (DIRSIZ + 3)
    assert fmtname("dir/" + name) == name


def test_fmtname_exact_width():
    name = "y" * DIRSIZ
    assert fmtname(name) == name


def test_ls_file(tmp_path):
    path = tmp_path / "f"
    path.write_bytes(b"hello")
    out, err = io.StringIO(), io.StringIO()
    ls(str(path), out, err)
    ino = os.stat(path).st_ino
    assert out.getvalue() == f"{fmtname(str(path))} {int(FileType.FILE)} {ino} 5\n"
    assert err.getvalue() == ""


def test_ls_directory(tmp_path):
    (tmp_path / "f").write_bytes(b"abc")
    (tmp_path / "sub").mkdir()
    out, err = io.StringIO(), io.StringIO()
    ls(str(tmp_path), out, err)
    lines = out.getvalue().splitlines()
    assert len(lines) == 4
    assert lines[0].startswith(fmtname("."))
    ino = os.stat(tmp_path / "f").st_ino
    assert f"{fmtname('f')} {int(FileType.FILE)} {ino} 3" in lines
    assert any(line.startswith(fmtname("sub") + f" {int(FileType.DIR)} ") for line in lines)


def test_ls_missing(tmp_path):
    missing = tmp_path / "nope"
    out, err = io.StringIO(), io.StringIO()
    ls(str(missing), out, err)
    assert err.getvalue() == f"ls: cannot open {missing}\n"
    assert out.getvalue() == ""


def test_ls_path_too_long(tmp_path):
    path = tmp_path
    while len(str(path)) + 1 + DIRSIZ + 1 <= PATH_BUF:
        path = path / ("d" * 100)
        path.mkdir()
    out, err = io.StringIO(), io.StringIO()
    ls(str(path), out, err)
    assert out.getvalue() == "ls: path too long\n"


def test_main_lists_current_directory(tmp_path, monkeypatch, capsys):
    (tmp_path / "only").write_bytes(b"")
    monkeypatch.chdir(tmp_path)
    assert main([]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert any(line.startswith(fmtname("only")) for line in lines)