"""Interactive command shell over a Hive drive session."""

from __future__ import annotations

import getopt
import os
import sys
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any, TextIO

from .config import ConfigError, load_config
from .session import CommandError, HiveError, Session

__all__ = ["Command", "Shell", "split_args", "read_commands", "main"]

_PROMPT = "# "

_USAGE = """\
hivecmd, a CLI application to demonstrate use of hive apis.
Usage: hivecmd [OPTION]...

First run options:
  -c, --config=CONFIG_FILE      Set config file path.

Debugging options:
      --debug                   Wait for debugger attach after start.
"""


@dataclass(frozen=True)
class Command:
    """A shell command: its name, what it runs and how it is used."""

    name: str
    handler: Callable[[Sequence[str]], None]
    usage: str


def split_args(line: str) -> list[str]:
    """Split a command line into its whitespace-separated words."""
    return line.split()


def read_commands(
    stream: TextIO, prompt: Callable[[], None] | None = None
) -> Iterator[str]:
    """Yield trimmed, non-empty command lines read from *stream*.

    Characters that are not printable are dropped. A line ending with
    nothing on it calls *prompt* again. A final line without a line
    ending is discarded.
    """
    buffer: list[str] = []
    while True:
        ch = stream.read(1)
        if not ch:
            return
        if ch in ("\n", "\r"):
            line = "".join(buffer).strip()
            buffer.clear()
            if line:
                yield line
            elif prompt is not None:
                prompt()
        elif ch.isprintable():
            buffer.append(ch)


class Shell:
    """Dispatches command lines to a :class:`Session`."""

    def __init__(self, session: Session, out: TextIO | None = None) -> None:
        self.session = session
        self._out = out if out is not None else sys.stdout
        self.stopped = False
        s = session
        table = (
            Command("help", self.help, "help [cmd]"),
            Command("client_open", s.client_open, "client_open type"),
            Command("client_close", s.client_close, "client_close"),
            Command("login", s.login, "login"),
            Command("logout", s.logout, "logout"),
            Command("client_info", s.client_info, "client_info"),
            Command("drive_info", s.drive_info, "drive_info"),
            Command("file_info", s.file_info, "file_info path"),
            Command("ls", s.ls, "ls path"),
            Command("mkdir", s.mkdir, "mkdir directory"),
            Command("mv", s.mv, "mv source target"),
            Command("cp", s.cp, "cp source target"),
            Command("rm", s.rm, "rm path"),
            Command("fopen", s.fopen, "fopen path mode"),
            Command("fclose", s.fclose, "fclose"),
            Command("fseek", s.fseek, "fseek offset whence(set, cur, end)"),
            Command("fread", s.fread, "fread size"),
            Command("fwrite", s.fwrite, "fwrite data"),
            Command("fcommit", s.fcommit, "fcommit"),
            Command("fdiscard", s.fdiscard, "fdiscard"),
            Command("exit", self._exit, "exit"),
        )
        self.commands: dict[str, Command] = {c.name: c for c in table}

    def _say(self, text: str) -> None:
        print(text, file=self._out)

    def _prompt(self) -> None:
        self._out.write(_PROMPT)
        self._out.flush()

    def _exit(self, args: Sequence[str]) -> None:
        self.stopped = True

    def help(self, args: Sequence[str]) -> None:
        """List all commands, or show the usage of the command ``args[0]``."""
        if not args:
            self._say("available commands list:")
            self._say("  " + "".join(f"{name} " for name in self.commands))
            return
        command = self.commands.get(args[0])
        if command is None:
            self._say(f"unknown command: {args[0]}\n")
        else:
            self._say(f"usage: {command.usage}")

    def execute(self, line: str) -> None:
        """Run one command line, printing any error it reports."""
        words = split_args(line)
        if not words:
            return
        command = self.commands.get(words[0])
        if command is None:
            self._say(f"unknown command: {words[0]}")
            return
        try:
            command.handler(words[1:])
        except CommandError as exc:
            self._say(str(exc))

    def run(self, lines: Iterable[str]) -> None:
        """Prompt for and run each line until the lines end or ``exit`` is given."""
        self._prompt()
        for line in lines:
            self.execute(line)
            if self.stopped:
                break
            self._prompt()


def _no_backend(options: dict[str, Any]) -> Any:
    raise HiveError(f"no storage backend for drive type {options['drive_type']!r}")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the interactive shell; returns the process exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        opts, _ = getopt.gnu_getopt(args, "c:t:s:h?", ["config=", "debug", "help"])
    except getopt.GetoptError:
        sys.stdout.write(_USAGE + "\n")
        return -1

    path = ""
    wait_for_attach = False
    for opt, value in opts:
        if opt in ("-c", "--config"):
            path = value
        elif opt == "--debug":
            wait_for_attach = True
        else:
            sys.stdout.write(_USAGE + "\n")
            return -1

    if wait_for_attach:
        print(f"Wait for debugger attaching, process id is: {os.getpid()}.")
        print("After debugger attached, press any key to continue......")
        sys.stdin.readline()

    if not path:
        path = os.path.realpath(sys.argv[0]) + ".conf"

    try:
        os.stat(path)
    except OSError:
        print(f"config file ({path}) not exist.", file=sys.stderr)
        return -1

    try:
        config = load_config(path)
    except ConfigError as exc:
        print(exc, file=sys.stderr)
        print("loading configure failed !", file=sys.stderr)
        return -1

    try:
        os.mkdir(config.persistent_location, 0o700)
    except FileExistsError:
        pass
    except OSError:
        print(
            f"failed to create directory {config.persistent_location}",
            file=sys.stderr,
        )
        return -1

    out = sys.stdout
    with Session(config, _no_backend, out) as session:
        shell = Shell(session, out)
        try:
            shell.run(read_commands(sys.stdin, shell._prompt))
        except KeyboardInterrupt:
            return -1
    return 0