"""Command-line tokenizer and parser for the shell's command language."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from xvkit.layout import OpenFlag

WHITESPACE = " \t\r\n\v"
SYMBOLS = "<|>&;()"
MAXARGS = 10

_SINGLE = "|();&<"


class ShellSyntaxError(ValueError):
    """Raised when a command line cannot be parsed."""


@dataclass(frozen=True)
class Token:
    """A lexical token: kind is 'a' for a word, '+' for '>>', else the symbol."""

    kind: str
    text: str


@dataclass(frozen=True)
class ExecCmd:
    """Run a program with arguments; argv[0] names the program."""

    argv: tuple[str, ...] = ()


@dataclass(frozen=True)
class RedirCmd:
    """Run cmd with descriptor fd reopened on file."""

    cmd: "Command"
    file: str
    mode: OpenFlag
    fd: int


@dataclass(frozen=True)
class PipeCmd:
    """Connect the output of left to the input of right."""

    left: "Command"
    right: "Command"


@dataclass(frozen=True)
class ListCmd:
    """Run left, wait for it, then run right."""

    left: "Command"
    right: "Command"


@dataclass(frozen=True)
class BackCmd:
    """Run cmd without waiting for it."""

    cmd: "Command"


Command = Union[ExecCmd, RedirCmd, PipeCmd, ListCmd, BackCmd]


class _Scanner:
    def __init__(self, line: str) -> None:
        end = line.find("\0")
        self.text = line if end < 0 else line[:end]
        self.pos = 0

    def _skip(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos] in WHITESPACE:
            self.pos += 1

    def peek(self, toks: str) -> bool:
        self._skip()
        return self.pos < len(self.text) and self.text[self.pos] in toks

    def rest(self) -> str:
        self._skip()
        return self.text[self.pos:]

    def next(self) -> Token | None:
        self._skip()
        if self.pos >= len(self.text):
            return None
        start = self.pos
        ch = self.text[self.pos]
        if ch in _SINGLE:
            kind = ch
            self.pos += 1
        elif ch == ">":
            self.pos += 1
            kind = ">"
            if self.pos < len(self.text) and self.text[self.pos] == ">":
                kind = "+"
                self.pos += 1
        else:
            kind = "a"
            while (
                self.pos < len(self.text)
                and self.text[self.pos] not in WHITESPACE
                and self.text[self.pos] not in SYMBOLS
            ):
                self.pos += 1
        token = Token(kind, self.text[start:self.pos])
        self._skip()
        return token


def tokenize(line: str) -> list[Token]:
    """Split a command line into tokens."""
    scanner = _Scanner(line)
    tokens = []
    while (token := scanner.next()) is not None:
        tokens.append(token)
    return tokens


class _Parser:
    def __init__(self, line: str) -> None:
        self.scanner = _Scanner(line)

    def line(self) -> Command:
        cmd = self.pipe()
        while self.scanner.peek("&"):
            self.scanner.next()
            cmd = BackCmd(cmd)
        if self.scanner.peek(";"):
            self.scanner.next()
            cmd = ListCmd(cmd, self.line())
        return cmd

    def pipe(self) -> Command:
        cmd = self.exec()
        if self.scanner.peek("|"):
            self.scanner.next()
            cmd = PipeCmd(cmd, self.pipe())
        return cmd

    def redirs(self) -> list[tuple[str, OpenFlag, int]]:
        found = []
        while self.scanner.peek("<>"):
            op = self.scanner.next()
            target = self.scanner.next()
            if target is None or target.kind != "a":
                raise ShellSyntaxError("missing file for redirection")
            if op.kind == "<":
                found.append((target.text, OpenFlag.RDONLY, 0))
            else:
                found.append((target.text, OpenFlag.WRONLY | OpenFlag.CREATE, 1))
        return found

    @staticmethod
    def _wrap(cmd: Command, redirs: list[tuple[str, OpenFlag, int]]) -> Command:
        for file, mode, fd in redirs:
            cmd = RedirCmd(cmd, file, mode, fd)
        return cmd

    def block(self) -> Command:
        if not self.scanner.peek("("):
            raise ShellSyntaxError("parseblock")
        self.scanner.next()
        cmd = self.line()
        if not self.scanner.peek(")"):
            raise ShellSyntaxError("syntax - missing )")
        self.scanner.next()
        return self._wrap(cmd, self.redirs())

    def exec(self) -> Command:
        if self.scanner.peek("("):
            return self.block()
        argv: list[str] = []
        redirs = self.redirs()
        while not self.scanner.peek("|)&;"):
            token = self.scanner.next()
            if token is None:
                break
            if token.kind != "a":
                raise ShellSyntaxError("syntax")
            argv.append(token.text)
            if len(argv) >= MAXARGS:
                raise ShellSyntaxError("too many args")
            redirs.extend(self.redirs())
        return self._wrap(ExecCmd(tuple(argv)), redirs)


def parse_command(line: str) -> Command:
    """Parse a full command line into a command tree."""
    parser = _Parser(line)
    cmd = parser.line()
    rest = parser.scanner.rest()
    if rest:
        raise ShellSyntaxError(f"leftovers: {rest}")
    return cmd