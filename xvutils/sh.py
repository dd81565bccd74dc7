"""Parser for the shell's command language.

The language has words, ``<``, ``>`` and ``>>`` redirections, ``|`` pipes,
``;`` sequences, ``&`` background jobs and ``( )`` groups.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Union

from xvutils.params import OpenFlag

WHITESPACE = " \t\r\n\v"
SYMBOLS = "<|>&;()"
MAXARGS = 10


class ShellSyntaxError(ValueError):
    """The command line could not be parsed."""


@dataclass
class ExecCmd:
    """Run a program with arguments."""

    argv: list[str] = field(default_factory=list)


@dataclass
class RedirCmd:
    """Run a command with one file descriptor redirected to a file."""

    cmd: "Command"
    file: str
    mode: OpenFlag
    fd: int


@dataclass
class PipeCmd:
    """Connect the output of one command to the input of another."""

    left: "Command"
    right: "Command"


@dataclass
class ListCmd:
    """Run one command, wait for it, then run another."""

    left: "Command"
    right: "Command"


@dataclass
class BackCmd:
    """Run a command without waiting for it."""

    cmd: "Command"


Command = Union[ExecCmd, RedirCmd, PipeCmd, ListCmd, BackCmd]


class _Scanner:
    def __init__(self, line: str):
        self.line = line
        self.pos = 0
        self.end = len(line)

    def skip_space(self) -> None:
        while self.pos < self.end and self.line[self.pos] in WHITESPACE:
            self.pos += 1

    def peek(self, toks: str) -> bool:
        self.skip_space()
        return self.pos < self.end and self.line[self.pos] in toks

    def next(self) -> tuple[str, str]:
        """The next token as (kind, text); kind is empty at the end."""
        self.skip_space()
        start = self.pos
        if start >= self.end:
            kind = ""
        else:
            c = self.line[start]
            if c in "|();&<":
                kind = c
                self.pos += 1
            elif c == ">":
                self.pos += 1
                if self.pos < self.end and self.line[self.pos] == ">":
                    kind = "+"
                    self.pos += 1
                else:
                    kind = ">"
            else:
                kind = "a"
                while (
                    self.pos < self.end
                    and self.line[self.pos] not in WHITESPACE
                    and self.line[self.pos] not in SYMBOLS
                ):
                    self.pos += 1
        text = self.line[start : self.pos]
        self.skip_space()
        return kind, text


def tokens(line: str) -> Iterator[tuple[str, str]]:
    """Yield the tokens of ``line`` as (kind, text) pairs.

    The kind is ``"a"`` for a word, ``"+"`` for ``>>`` and the symbol itself
    otherwise.
    """
    scanner = _Scanner(line)
    while True:
        kind, text = scanner.next()
        if not kind:
            return
        yield kind, text


class Parser:
    """Recursive-descent parser for one command line."""

    def __init__(self, line: str):
        self._scan = _Scanner(line)

    def parse(self) -> Command:
        """Parse the whole line, which must hold nothing after the command."""
        cmd = self._parse_line()
        self._scan.peek("")
        if self._scan.pos != self._scan.end:
            raise ShellSyntaxError(f"leftovers: {self._scan.line[self._scan.pos:]}")
        return cmd

    def _parse_line(self) -> Command:
        cmd = self._parse_pipe()
        while self._scan.peek("&"):
            self._scan.next()
            cmd = BackCmd(cmd)
        if self._scan.peek(";"):
            self._scan.next()
            cmd = ListCmd(cmd, self._parse_line())
        return cmd

    def _parse_pipe(self) -> Command:
        cmd = self._parse_exec()
        if self._scan.peek("|"):
            self._scan.next()
            cmd = PipeCmd(cmd, self._parse_pipe())
        return cmd

    def _parse_redirs(self, cmd: Command) -> Command:
        while self._scan.peek("<>"):
            kind, _ = self._scan.next()
            file_kind, file = self._scan.next()
            if file_kind != "a":
                raise ShellSyntaxError("missing file for redirection")
            if kind == "<":
                cmd = RedirCmd(cmd, file, OpenFlag.RDONLY, 0)
            elif kind == ">":
                cmd = RedirCmd(cmd, file, OpenFlag.WRONLY | OpenFlag.CREATE | OpenFlag.TRUNC, 1)
            else:
                cmd = RedirCmd(cmd, file, OpenFlag.WRONLY | OpenFlag.CREATE, 1)
        return cmd

    def _parse_block(self) -> Command:
        if not self._scan.peek("("):
            raise ShellSyntaxError("parseblock")
        self._scan.next()
        cmd = self._parse_line()
        if not self._scan.peek(")"):
            raise ShellSyntaxError("syntax - missing )")
        self._scan.next()
        return self._parse_redirs(cmd)

    def _parse_exec(self) -> Command:
        if self._scan.peek("("):
            return self._parse_block()
        exec_cmd = ExecCmd()
        ret = self._parse_redirs(exec_cmd)
        while not self._scan.peek("|)&;"):
            kind, text = self._scan.next()
            if not kind:
                break
            if kind != "a":
                raise ShellSyntaxError("syntax")
            exec_cmd.argv.append(text)
            if len(exec_cmd.argv) >= MAXARGS:
                raise ShellSyntaxError("too many args")
            ret = self._parse_redirs(ret)
        return ret


def parse_command(line: str) -> Command:
    """Parse one command line."""
    return Parser(line).parse()